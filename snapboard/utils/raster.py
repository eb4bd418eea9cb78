import io
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from snapboard.errors import ValidationFailure

EXTENSION_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".webp": "WEBP",
    ".gif": "GIF",
}

DEFAULT_EXTENSION = ".jpg"

RESAMPLE = Image.Resampling.LANCZOS


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into an upright RGB or RGBA image.

    Raises ``ValidationFailure`` for anything Pillow cannot read.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            upright = ImageOps.exif_transpose(img)
            return upright.convert("RGBA" if _has_alpha(upright) else "RGB")

    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise ValidationFailure("The file is not a supported image.") from e

    except (OSError, SyntaxError, ValueError) as e:
        raise ValidationFailure(f"Failed to read image: {e}. The file may be corrupted.") from e


def fit_inside(image: Image.Image, box: Tuple[int, int]) -> Image.Image:
    """Shrink to fit ``box`` keeping the aspect ratio; never upscales."""
    resized = image.copy()
    resized.thumbnail(box, RESAMPLE)
    return resized


def fit_cover(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Scale and center-crop to exactly ``size``."""
    return ImageOps.fit(image, size, method=RESAMPLE, centering=(0.5, 0.5))


def limit_dimensions(image: Image.Image, max_dimension: int) -> Image.Image:
    if image.width > max_dimension or image.height > max_dimension:
        return fit_inside(image, (max_dimension, max_dimension))

    return image


def encode_image(image: Image.Image, image_format: str, quality: int) -> bytes:
    buffer = io.BytesIO()

    if image_format == "JPEG":
        image.convert("RGB").save(buffer, format="JPEG", quality=quality, optimize=True)
    elif image_format == "WEBP":
        image.save(buffer, format="WEBP", quality=quality)
    elif image_format == "PNG":
        image.save(buffer, format="PNG", optimize=True)
    else:
        image.save(buffer, format=image_format)

    return buffer.getvalue()


def mime_type_for(image_format: str) -> str:
    return Image.MIME.get(image_format, "application/octet-stream")
