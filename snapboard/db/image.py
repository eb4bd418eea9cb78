import uuid
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from snapboard.db.models.image import Image


async def find_image(db: AsyncSession, image_id: uuid.UUID) -> Optional[Image]:
    return await db.scalar(sa.select(Image).where(Image.id == image_id))


async def find_image_by_filename(db: AsyncSession, stored_filename: str) -> Optional[Image]:
    return await db.scalar(sa.select(Image).where(Image.stored_filename == stored_filename))


async def find_images_except(db: AsyncSession, image_id: uuid.UUID) -> List[Image]:
    result = await db.scalars(
        sa.select(Image)
        .where(Image.id != image_id)
        .order_by(Image.created_at.desc())
    )
    return list(result)
