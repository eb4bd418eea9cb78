import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image

from snapboard.config import config
from snapboard.errors import SnapBoardError, StorageFailure
from snapboard.utils import raster, storage
from snapboard.utils.files import write_file_bytes, delete_files, file_size, image_dimensions

logger = logging.getLogger(__name__)


@dataclass
class TranscodedImage:
    stored_filename: str
    primary_path: Path
    thumbnail_paths: Dict[str, Path]
    width: int
    height: int
    size_bytes: int
    mime_type: str

    @property
    def paths(self) -> List[Path]:
        return [self.primary_path, *self.thumbnail_paths.values()]


def stored_extension(original_filename: Optional[str]) -> str:
    suffix = Path(original_filename or "").suffix.lower()
    if suffix in raster.EXTENSION_FORMATS and suffix in config.ALLOWED_EXTENSIONS:
        return suffix

    return raster.DEFAULT_EXTENSION


def generate_stored_filename(original_filename: Optional[str]) -> str:
    timestamp = int(time.time() * 1000)
    return f"{timestamp}-{secrets.token_hex(8)}{stored_extension(original_filename)}"


def thumbnail_specs() -> Dict[str, Tuple[Tuple[int, int], int]]:
    return {
        "small": (config.THUMBNAIL_SMALL, config.THUMBNAIL_SMALL_QUALITY),
        "medium": (config.THUMBNAIL_MEDIUM, config.THUMBNAIL_MEDIUM_QUALITY),
        "large": (config.THUMBNAIL_LARGE, config.THUMBNAIL_LARGE_QUALITY),
    }


def _render_primary(image: Image.Image, image_format: str) -> Tuple[Image.Image, bytes]:
    primary = raster.limit_dimensions(image, config.MAX_IMAGE_DIMENSION)
    return primary, raster.encode_image(primary, image_format, config.IMAGE_QUALITY)


def _render_thumbnail(image: Image.Image, size: str, image_format: str) -> bytes:
    box, quality = thumbnail_specs()[size]
    if size == "small":
        thumbnail = raster.fit_cover(image, box)
    else:
        thumbnail = raster.fit_inside(image, box)

    return raster.encode_image(thumbnail, image_format, quality)


class TranscodeService:
    @staticmethod
    async def transcode(data: bytes, original_filename: Optional[str]) -> TranscodedImage:
        """Store a freshly encoded primary raster plus small/medium/large thumbnails.

        Decode failures raise ``ValidationFailure`` before anything touches the
        disk. If any later step fails, every file of this attempt is removed
        before the error propagates.
        """
        stored_filename = generate_stored_filename(original_filename)
        image_format = raster.EXTENSION_FORMATS[Path(stored_filename).suffix]

        image = await asyncio.to_thread(raster.decode_image, data)

        primary_path = storage.image_path(stored_filename)
        thumbnail_paths = storage.thumbnail_paths(stored_filename)

        try:
            primary, primary_bytes = await asyncio.to_thread(_render_primary, image, image_format)
            await write_file_bytes(primary_bytes, primary_path)

            for size, path in thumbnail_paths.items():
                thumbnail_bytes = await asyncio.to_thread(_render_thumbnail, primary, size, image_format)
                await write_file_bytes(thumbnail_bytes, path)

            width, height = await image_dimensions(primary_path)
            size_bytes = await file_size(primary_path)

        except SnapBoardError:
            await delete_files(storage.asset_paths(stored_filename))
            raise

        except Exception as e:
            logger.warning("Transcoding %s failed, removing partial files: %s", stored_filename, e)
            await delete_files(storage.asset_paths(stored_filename))
            raise StorageFailure("Failed to store the processed image.") from e

        logger.info("Stored %s (%dx%d, %d bytes)", stored_filename, width, height, size_bytes)

        return TranscodedImage(
            stored_filename=stored_filename,
            primary_path=primary_path,
            thumbnail_paths=thumbnail_paths,
            width=width,
            height=height,
            size_bytes=size_bytes,
            mime_type=raster.mime_type_for(image_format),
        )
