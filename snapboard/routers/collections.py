import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from snapboard.db.models.user import User
from snapboard.db.session import get_db
from snapboard.schemas import SavedImageResponse, saved_image_response
from snapboard.services.auth_service import AuthService
from snapboard.services.collection_service import CollectionService

router = APIRouter(prefix="/collections", tags=["collections"])


@router.post(
    "/{collection_id}/images/{image_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=SavedImageResponse,
)
async def save_image(
    collection_id: uuid.UUID,
    image_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    saved = await CollectionService.save_image(db, collection_id, image_id, user.id)
    return saved_image_response(saved)


@router.delete("/{collection_id}/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_image(
    collection_id: uuid.UUID,
    image_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    await CollectionService.remove_image(db, collection_id, image_id, user.id)
