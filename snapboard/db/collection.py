import uuid
from typing import Dict, Iterable, Optional, Set

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from snapboard.db.models.collection import Collection
from snapboard.db.models.saved_image import SavedImage


async def find_collection(db: AsyncSession, collection_id: uuid.UUID) -> Optional[Collection]:
    return await db.scalar(sa.select(Collection).where(Collection.id == collection_id))


async def find_collections(db: AsyncSession, collection_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Collection]:
    ids = {id_ for id_ in collection_ids if id_ is not None}
    if not ids:
        return {}

    collections = await db.scalars(sa.select(Collection).where(Collection.id.in_(ids)))
    return {collection.id: collection for collection in collections}


async def find_saved_image(
        db: AsyncSession,
        collection_id: uuid.UUID,
        image_id: uuid.UUID
) -> Optional[SavedImage]:
    return await db.scalar(
        sa.select(SavedImage).where(
            SavedImage.collection_id == collection_id,
            SavedImage.image_id == image_id
        )
    )


async def find_saved_image_ids(
        db: AsyncSession,
        owner_id: uuid.UUID,
        image_ids: Iterable[uuid.UUID]
) -> Set[uuid.UUID]:
    """Subset of ``image_ids`` saved to any collection owned by ``owner_id``."""
    ids = set(image_ids)
    if not ids:
        return set()

    result = await db.scalars(
        sa.select(SavedImage.image_id)
        .join(Collection, SavedImage.collection_id == Collection.id)
        .where(
            Collection.owner_id == owner_id,
            SavedImage.image_id.in_(ids)
        )
    )
    return set(result)
