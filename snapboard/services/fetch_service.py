import asyncio
import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import ClassVar, Optional

import httpx

from snapboard.config import config
from snapboard.errors import UpstreamFetchFailure, ValidationFailure

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "downloaded-image.jpg"
DEFAULT_MIME_TYPE = "image/jpeg"


class ResponseTooLarge(Exception):
    pass


@dataclass
class FetchedImage:
    content: bytes
    mime_type: str
    suggested_filename: str


def suggested_filename(url: httpx.URL) -> str:
    return PurePosixPath(url.path).name or DEFAULT_FILENAME


def response_mime_type(response: httpx.Response) -> str:
    content_type = response.headers.get("content-type", "")
    return content_type.split(";")[0].strip().lower() or DEFAULT_MIME_TYPE


def redacted_url(url: httpx.URL) -> str:
    """Render ``url`` without any user:password part, for logs."""
    if not url.userinfo:
        return str(url)

    return f"{url.scheme}://{url.netloc.decode('ascii')}{url.raw_path.decode('ascii')}"


def parse_image_url(url: str) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ValidationFailure("Invalid image URL.") from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValidationFailure("Invalid image URL.")

    return parsed


class RemoteFetcher:
    _instance: ClassVar[Optional["RemoteFetcher"]] = None

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    @classmethod
    def get_instance(cls) -> "RemoteFetcher":
        if cls._instance is None:
            cls._instance = cls()

        return cls._instance

    async def fetch(self, url: str, max_size: Optional[int] = None) -> FetchedImage:
        """Download an image with a hard timeout and a byte ceiling.

        Every network, status or size problem surfaces as the same
        ``UpstreamFetchFailure``; the real cause is only logged.
        """
        parsed = parse_image_url(url)
        max_size = config.MAX_FILE_SIZE if max_size is None else max_size

        try:
            async with asyncio.timeout(config.FETCH_TIMEOUT):
                async with httpx.AsyncClient(
                        transport=self.transport,
                        timeout=config.FETCH_TIMEOUT,
                        follow_redirects=True,
                        headers={"User-Agent": config.FETCH_USER_AGENT},
                ) as client:
                    async with client.stream("GET", parsed) as response:
                        response.raise_for_status()

                        declared = response.headers.get("content-length", "")
                        if declared.isdigit() and int(declared) > max_size:
                            raise ResponseTooLarge(f"declared length {declared} exceeds {max_size}")

                        data = bytearray()
                        async for chunk in response.aiter_bytes():
                            data.extend(chunk)
                            if len(data) > max_size:
                                raise ResponseTooLarge(f"body exceeds {max_size} bytes")

                        mime_type = response_mime_type(response)

        except (httpx.HTTPError, ResponseTooLarge, TimeoutError) as e:
            detail = f"status {e.response.status_code}" if isinstance(e, httpx.HTTPStatusError) else e
            logger.warning("Fetching %s failed: %s: %s", redacted_url(parsed), e.__class__.__name__, detail)
            raise UpstreamFetchFailure() from e

        logger.info("Fetched %s (%d bytes, %s)", redacted_url(parsed), len(data), mime_type)

        return FetchedImage(
            content=bytes(data),
            mime_type=mime_type,
            suggested_filename=suggested_filename(parsed),
        )
