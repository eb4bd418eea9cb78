from pathlib import Path
from typing import Dict, List

from snapboard.config import config

IMAGES_DIR = "images"
THUMBNAILS_DIR = "thumbnails"
THUMBNAIL_SIZES = ("small", "medium", "large")


def images_root() -> Path:
    return config.STORAGE_PATH / IMAGES_DIR


def thumbnails_root() -> Path:
    return config.STORAGE_PATH / THUMBNAILS_DIR


def image_path(stored_filename: str) -> Path:
    return images_root() / stored_filename


def thumbnail_path(size: str, stored_filename: str) -> Path:
    return thumbnails_root() / size / stored_filename


def thumbnail_paths(stored_filename: str) -> Dict[str, Path]:
    return {size: thumbnail_path(size, stored_filename) for size in THUMBNAIL_SIZES}


def asset_paths(stored_filename: str) -> List[Path]:
    """Primary raster followed by every thumbnail variant."""
    return [image_path(stored_filename), *thumbnail_paths(stored_filename).values()]


def image_url(stored_filename: str) -> str:
    return f"{config.PUBLIC_URL_PREFIX}/{IMAGES_DIR}/{stored_filename}"


def thumbnail_urls(stored_filename: str) -> Dict[str, str]:
    return {
        size: f"{config.PUBLIC_URL_PREFIX}/{THUMBNAILS_DIR}/{size}/{stored_filename}"
        for size in THUMBNAIL_SIZES
    }


def ensure_storage_dirs() -> None:
    images_root().mkdir(parents=True, exist_ok=True)
    for size in THUMBNAIL_SIZES:
        (thumbnails_root() / size).mkdir(parents=True, exist_ok=True)
