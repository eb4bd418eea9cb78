import uuid
from typing import Dict, Iterable, Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from snapboard.db.models.user import User


async def find_user(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
    return await db.scalar(sa.select(User).where(User.id == user_id))


async def find_users(db: AsyncSession, user_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, User]:
    ids = set(user_ids)
    if not ids:
        return {}

    users = await db.scalars(sa.select(User).where(User.id.in_(ids)))
    return {user.id: user for user in users}
