import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi import status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from snapboard.config import config
from snapboard.db.collection import find_collection, find_saved_image_ids
from snapboard.db.image import find_image
from snapboard.db.models.image import TITLE_MAX_LENGTH, DESCRIPTION_MAX_LENGTH
from snapboard.db.models.user import User
from snapboard.db.session import get_db
from snapboard.db.user import find_user
from snapboard.errors import Forbidden, NotFound
from snapboard.schemas import AssetResponse, RecommendationsResponse, asset_response
from snapboard.services.auth_service import AuthService
from snapboard.services.recommendation_service import RecommendationService
from snapboard.services.upload_service import UploadService
from snapboard.utils.tags import normalize_tags

router = APIRouter(prefix="/images", tags=["images"])


class ImageUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    tags: Optional[List[str]] = None


async def load_asset_response(db: AsyncSession, image_id: uuid.UUID, user: User) -> AssetResponse:
    image = await find_image(db, image_id)
    if image is None:
        raise NotFound("Image not found.")

    owner = await find_user(db, image.owner_id)
    collection = await find_collection(db, image.collection_id) if image.collection_id else None
    saved = await find_saved_image_ids(db, user.id, [image.id])

    return asset_response(image, owner, collection, is_saved=image.id in saved)


@router.get("/{image_id}/recommendations", response_model=RecommendationsResponse)
async def get_recommendations(
    image_id: uuid.UUID,
    limit: int = Query(config.RECOMMENDATION_DEFAULT_LIMIT, ge=1, le=config.RECOMMENDATION_MAX_LIMIT),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    return await RecommendationService.recommend(db, image_id, limit, user.id)


@router.get("/{image_id}", response_model=AssetResponse)
async def get_image(
    image_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    return await load_asset_response(db, image_id, user)


@router.patch("/{image_id}", response_model=AssetResponse)
async def update_image(
    image_id: uuid.UUID,
    image_update: ImageUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    image = await find_image(db, image_id)
    if image is None:
        raise NotFound("Image not found.")

    if image.owner_id != user.id:
        raise Forbidden("You cannot edit this image.")

    if image_update.title is not None:
        image.title = image_update.title or None
    if image_update.description is not None:
        image.description = image_update.description or None
    if image_update.tags is not None:
        image.tags = normalize_tags(image_update.tags)

    await db.commit()
    return await load_asset_response(db, image_id, user)


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    image_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    await UploadService.delete_asset(db, image_id, user.id)
