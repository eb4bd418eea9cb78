import asyncio
import logging
from pathlib import Path
from typing import Tuple, List

import aiofiles
import aiofiles.os
from PIL import Image
from fastapi import UploadFile

from snapboard.config import config
from snapboard.errors import PayloadTooLarge

logger = logging.getLogger(__name__)

SEM = asyncio.Semaphore(config.MAX_CONCURRENT_IO)
CHUNK_SIZE = 1024 * 1024


async def read_upload_file(file: UploadFile, max_file_size: int) -> bytes:
    data = bytearray()
    while chunk := await file.read(CHUNK_SIZE):
        data.extend(chunk)
        if len(data) > max_file_size:
            raise PayloadTooLarge(
                f"File '{file.filename}' exceeds the maximum size of {max_file_size} bytes."
            )

    return bytes(data)


async def write_file_bytes(data: bytes, path: Path) -> None:
    async with SEM:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)


async def delete_file(path: Path) -> bool:
    async with SEM:
        try:
            await aiofiles.os.remove(path)
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.warning("Failed to delete %s: %s", path, e)
            return False


async def delete_files(paths: List[Path]) -> List[bool]:
    return await asyncio.gather(*(delete_file(p) for p in paths))


async def file_size(path: Path) -> int:
    async with SEM:
        stat = await aiofiles.os.stat(path)
        return stat.st_size


def _image_dimensions(path: Path) -> Tuple[int, int]:
    with Image.open(path) as img:
        return img.size


async def image_dimensions(path: Path) -> Tuple[int, int]:
    async with SEM:
        return await asyncio.to_thread(_image_dimensions, path)

