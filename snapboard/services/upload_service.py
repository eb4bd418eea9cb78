import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from snapboard.config import config
from snapboard.db.collection import find_collection
from snapboard.db.image import find_image, find_image_by_filename
from snapboard.db.models.collection import Collection
from snapboard.db.models.image import Image, ORIGINAL_FILENAME_MAX_LENGTH, ORIGINAL_URL_MAX_LENGTH
from snapboard.db.models.saved_image import SavedImage
from snapboard.db.user import find_user
from snapboard.errors import Forbidden, NotFound, PayloadTooLarge, StorageFailure, ValidationFailure
from snapboard.schemas import AssetResponse, asset_response
from snapboard.services.fetch_service import RemoteFetcher, parse_image_url
from snapboard.services.file_service import FileService
from snapboard.services.transcode_service import TranscodeService, TranscodedImage
from snapboard.utils.tags import parse_tags

logger = logging.getLogger(__name__)


@dataclass
class UploadMeta:
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[str] = None
    collection_id: Optional[uuid.UUID] = None


class UploadService:
    @staticmethod
    async def resolve_collection(
            db: AsyncSession,
            collection_id: Optional[uuid.UUID],
            owner_id: uuid.UUID
    ) -> Optional[Collection]:
        if collection_id is None:
            return None

        collection = await find_collection(db, collection_id)
        if collection is None:
            raise NotFound("Collection not found.")

        if collection.owner_id != owner_id:
            raise Forbidden("You cannot add images to this collection.")

        return collection

    @staticmethod
    def validate_content(content: bytes) -> None:
        if not content:
            raise ValidationFailure("The uploaded file is empty.")

        if len(content) > config.MAX_FILE_SIZE:
            raise PayloadTooLarge(f"File exceeds the maximum size of {config.MAX_FILE_SIZE} bytes.")

    @staticmethod
    def validate_mime_type(mime_type: str) -> None:
        if mime_type not in config.ALLOWED_MIME_TYPES:
            raise ValidationFailure(
                f"Unsupported image type '{mime_type}'. Allowed: {', '.join(config.ALLOWED_MIME_TYPES)}."
            )

    @classmethod
    async def ingest_file(
            cls,
            db: AsyncSession,
            content: bytes,
            original_filename: Optional[str],
            meta: UploadMeta,
            owner_id: uuid.UUID,
    ) -> AssetResponse:
        owner = await find_user(db, owner_id)
        if owner is None:
            raise NotFound("User not found.")

        collection = await cls.resolve_collection(db, meta.collection_id, owner_id)
        tags = parse_tags(meta.tags)
        cls.validate_content(content)

        transcoded = await TranscodeService.transcode(content, original_filename)
        image = await cls._persist(db, transcoded, meta, tags, owner_id, collection, original_filename)

        return asset_response(image, owner, collection)

    @classmethod
    async def ingest_from_url(
            cls,
            db: AsyncSession,
            fetcher: RemoteFetcher,
            url: str,
            meta: UploadMeta,
            owner_id: uuid.UUID,
    ) -> AssetResponse:
        if len(url) > ORIGINAL_URL_MAX_LENGTH:
            raise ValidationFailure(f"Image URL exceeds {ORIGINAL_URL_MAX_LENGTH} characters.")
        parse_image_url(url)

        owner = await find_user(db, owner_id)
        if owner is None:
            raise NotFound("User not found.")

        collection = await cls.resolve_collection(db, meta.collection_id, owner_id)
        tags = parse_tags(meta.tags)

        fetched = await fetcher.fetch(url)
        cls.validate_mime_type(fetched.mime_type)
        cls.validate_content(fetched.content)

        transcoded = await TranscodeService.transcode(fetched.content, fetched.suggested_filename)
        image = await cls._persist(
            db, transcoded, meta, tags, owner_id, collection, fetched.suggested_filename, original_url=url
        )

        return asset_response(image, owner, collection)

    @staticmethod
    async def _persist(
            db: AsyncSession,
            transcoded: TranscodedImage,
            meta: UploadMeta,
            tags: List[str],
            owner_id: uuid.UUID,
            collection: Optional[Collection],
            original_filename: Optional[str],
            original_url: Optional[str] = None,
    ) -> Image:
        image = Image(
            id=uuid.uuid4(),
            owner_id=owner_id,
            collection_id=collection.id if collection else None,
            stored_filename=transcoded.stored_filename,
            original_filename=original_filename[:ORIGINAL_FILENAME_MAX_LENGTH] if original_filename else None,
            original_url=original_url,
            title=meta.title or None,
            description=meta.description or None,
            tags=tags,
            width=transcoded.width,
            height=transcoded.height,
            size_bytes=transcoded.size_bytes,
            mime_type=transcoded.mime_type,
        )

        try:
            db.add(image)
            await db.commit()

        except Exception as e:
            await db.rollback()
            logger.warning("Saving image %s failed, removing its files", transcoded.stored_filename)
            await FileService.remove_asset_files(transcoded.stored_filename)
            raise StorageFailure("Failed to save the image.") from e

        await db.refresh(image)

        logger.info("Ingested image %s as %s for user %s", image.id, image.stored_filename, owner_id)
        return image

    @staticmethod
    async def _delete(db: AsyncSession, image: Image, user_id: uuid.UUID) -> None:
        if image.owner_id != user_id:
            raise Forbidden("You cannot delete this image.")

        image_id = image.id
        stored_filename = image.stored_filename

        await db.execute(sa.delete(SavedImage).where(SavedImage.image_id == image.id))
        await db.delete(image)
        await db.commit()

        await FileService.remove_asset_files(stored_filename)
        logger.info("Deleted image %s (%s)", image_id, stored_filename)

    @classmethod
    async def delete_asset(cls, db: AsyncSession, image_id: uuid.UUID, user_id: uuid.UUID) -> None:
        image = await find_image(db, image_id)
        if image is None:
            raise NotFound("Image not found.")

        await cls._delete(db, image, user_id)

    @classmethod
    async def delete_by_filename(cls, db: AsyncSession, stored_filename: str, user_id: uuid.UUID) -> None:
        image = await find_image_by_filename(db, stored_filename)
        if image is None:
            raise NotFound("File not found.")

        await cls._delete(db, image, user_id)
