from pathlib import Path
from typing import List, Tuple

import humanfriendly
from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()


def parse_box(value: str) -> Tuple[int, int]:
    width, _, height = value.lower().partition("x")
    return int(width), int(height or width)


class Config(BaseModel):
    # Database
    DATABASE_URL: str

    # JWT
    JWT_SECRET: str
    JWT_ALG: str
    ACCESS_TTL_MIN: int

    # Uploads
    ALLOWED_MIME_TYPES: List[str]
    ALLOWED_EXTENSIONS: List[str]
    MAX_FILE_SIZE: int
    STORAGE_PATH: Path
    PUBLIC_URL_PREFIX: str

    # Transcoding
    MAX_IMAGE_DIMENSION: int
    IMAGE_QUALITY: int
    THUMBNAIL_SMALL: Tuple[int, int]
    THUMBNAIL_MEDIUM: Tuple[int, int]
    THUMBNAIL_LARGE: Tuple[int, int]
    THUMBNAIL_SMALL_QUALITY: int
    THUMBNAIL_MEDIUM_QUALITY: int
    THUMBNAIL_LARGE_QUALITY: int

    # Remote fetch
    FETCH_TIMEOUT: float
    FETCH_USER_AGENT: str

    # Recommendations
    RECOMMENDATION_DEFAULT_LIMIT: int
    RECOMMENDATION_MAX_LIMIT: int

    # FastAPI
    FASTAPI_HOST: str
    FASTAPI_PORT: int
    LOG_LEVEL: str

    # Async I/O
    MAX_CONCURRENT_IO: int


config = Config(
    DATABASE_URL=os.environ["DATABASE_URL"],

    JWT_SECRET=os.environ["JWT_SECRET"],
    JWT_ALG=os.getenv("JWT_ALG", "HS256"),
    ACCESS_TTL_MIN=int(os.getenv("ACCESS_TTL_MIN", "15")),

    ALLOWED_MIME_TYPES=os.getenv("ALLOWED_MIME_TYPES", "image/jpeg,image/png,image/webp,image/gif").split(","),
    ALLOWED_EXTENSIONS=os.getenv("ALLOWED_EXTENSIONS", ".jpg,.jpeg,.png,.webp,.gif").split(","),
    MAX_FILE_SIZE=humanfriendly.parse_size(os.getenv("MAX_FILE_SIZE", "10MiB")),
    STORAGE_PATH=Path(os.getenv("STORAGE_PATH", "uploads")),
    PUBLIC_URL_PREFIX=os.getenv("PUBLIC_URL_PREFIX", "/uploads").rstrip("/"),

    MAX_IMAGE_DIMENSION=int(os.getenv("MAX_IMAGE_DIMENSION", "2560")),
    IMAGE_QUALITY=int(os.getenv("IMAGE_QUALITY", "85")),
    THUMBNAIL_SMALL=parse_box(os.getenv("THUMBNAIL_SMALL", "150x150")),
    THUMBNAIL_MEDIUM=parse_box(os.getenv("THUMBNAIL_MEDIUM", "400x400")),
    THUMBNAIL_LARGE=parse_box(os.getenv("THUMBNAIL_LARGE", "800x800")),
    THUMBNAIL_SMALL_QUALITY=int(os.getenv("THUMBNAIL_SMALL_QUALITY", "80")),
    THUMBNAIL_MEDIUM_QUALITY=int(os.getenv("THUMBNAIL_MEDIUM_QUALITY", "85")),
    THUMBNAIL_LARGE_QUALITY=int(os.getenv("THUMBNAIL_LARGE_QUALITY", "85")),

    FETCH_TIMEOUT=float(os.getenv("FETCH_TIMEOUT", "30")),
    FETCH_USER_AGENT=os.getenv("FETCH_USER_AGENT", "SnapBoard/1.0"),

    RECOMMENDATION_DEFAULT_LIMIT=int(os.getenv("RECOMMENDATION_DEFAULT_LIMIT", "12")),
    RECOMMENDATION_MAX_LIMIT=int(os.getenv("RECOMMENDATION_MAX_LIMIT", "50")),

    FASTAPI_HOST=os.getenv("FASTAPI_HOST", "0.0.0.0"),
    FASTAPI_PORT=int(os.getenv("FASTAPI_PORT", "8000")),
    LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),

    MAX_CONCURRENT_IO=int(os.getenv("MAX_CONCURRENT_IO", "16")),
)

__all__ = ["config"]
