from .base import Base
from .models import collection, image, user, saved_image

__all__ = ["Base", "collection", "image", "user", "saved_image"]
