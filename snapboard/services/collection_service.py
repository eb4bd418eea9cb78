import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from snapboard.db.collection import find_collection, find_saved_image
from snapboard.db.image import find_image
from snapboard.db.models.collection import Collection
from snapboard.db.models.saved_image import SavedImage
from snapboard.errors import Conflict, Forbidden, NotFound
from snapboard.services.upload_service import UploadService

logger = logging.getLogger(__name__)

ALREADY_SAVED = "already_saved"
UPLOADED_HERE = "uploaded_here"


class CollectionService:
    @staticmethod
    async def get_owned_collection(db: AsyncSession, collection_id: uuid.UUID, user_id: uuid.UUID) -> Collection:
        collection = await find_collection(db, collection_id)
        if collection is None:
            raise NotFound("Collection not found.")

        if collection.owner_id != user_id:
            raise Forbidden("You do not have access to this collection.")

        return collection

    @classmethod
    async def save_image(
            cls,
            db: AsyncSession,
            collection_id: uuid.UUID,
            image_id: uuid.UUID,
            user_id: uuid.UUID
    ) -> SavedImage:
        await cls.get_owned_collection(db, collection_id, user_id)

        image = await find_image(db, image_id)
        if image is None:
            raise NotFound("Image not found.")

        if await find_saved_image(db, collection_id, image_id) is not None:
            raise Conflict("Image is already saved to this collection.", reason=ALREADY_SAVED)

        if image.collection_id == collection_id:
            raise Conflict("Image was uploaded directly to this collection.", reason=UPLOADED_HERE)

        saved = SavedImage(id=uuid.uuid4(), collection_id=collection_id, image_id=image_id)
        try:
            db.add(saved)
            await db.commit()

        except IntegrityError as e:
            await db.rollback()
            raise Conflict("Image is already saved to this collection.", reason=ALREADY_SAVED) from e

        await db.refresh(saved)
        logger.info("Saved image %s to collection %s", image_id, collection_id)
        return saved

    @classmethod
    async def remove_image(
            cls,
            db: AsyncSession,
            collection_id: uuid.UUID,
            image_id: uuid.UUID,
            user_id: uuid.UUID
    ) -> None:
        """Unsave a referenced image, or delete an image uploaded to the collection.

        A save reference takes precedence when both exist for the pair.
        """
        await cls.get_owned_collection(db, collection_id, user_id)

        saved = await find_saved_image(db, collection_id, image_id)
        if saved is not None:
            await db.delete(saved)
            await db.commit()
            logger.info("Removed saved image %s from collection %s", image_id, collection_id)
            return

        image = await find_image(db, image_id)
        if image is None or image.collection_id != collection_id:
            raise NotFound("Image not found in this collection.")

        await UploadService.delete_asset(db, image_id, user_id)
