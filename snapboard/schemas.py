import datetime as dt
import uuid
from typing import List, Optional

from pydantic import BaseModel

from snapboard.db.models.collection import Collection
from snapboard.db.models.image import Image
from snapboard.db.models.saved_image import SavedImage
from snapboard.db.models.user import User
from snapboard.utils import storage


class ThumbnailUrls(BaseModel):
    small: str
    medium: str
    large: str


class OwnerSummary(BaseModel):
    id: uuid.UUID
    username: str
    avatar: Optional[str] = None


class CollectionSummary(BaseModel):
    id: uuid.UUID
    title: str


class AssetResponse(BaseModel):
    id: uuid.UUID
    url: str
    thumbnails: ThumbnailUrls
    title: Optional[str] = None
    description: Optional[str] = None
    tags: List[str]
    width: int
    height: int
    size: int
    mime_type: str
    owner: Optional[OwnerSummary] = None
    collection: Optional[CollectionSummary] = None
    original_url: Optional[str] = None
    is_saved: bool = False
    created_at: dt.datetime


class RankedAssetResponse(AssetResponse):
    score: int
    matched_tags: List[str]


class SourceSummary(BaseModel):
    id: uuid.UUID
    title: Optional[str] = None
    tags: List[str]


class RecommendationsResponse(BaseModel):
    items: List[RankedAssetResponse]
    source: SourceSummary
    total_matches: int


class SavedImageResponse(BaseModel):
    id: uuid.UUID
    collection_id: uuid.UUID
    image_id: uuid.UUID
    saved_at: dt.datetime


def owner_summary(user: Optional[User]) -> Optional[OwnerSummary]:
    if user is None:
        return None

    return OwnerSummary(id=user.id, username=user.username, avatar=user.avatar)


def collection_summary(collection: Optional[Collection]) -> Optional[CollectionSummary]:
    if collection is None:
        return None

    return CollectionSummary(id=collection.id, title=collection.title)


def asset_response(
        image: Image,
        owner: Optional[User],
        collection: Optional[Collection],
        is_saved: bool = False,
) -> AssetResponse:
    return AssetResponse(
        id=image.id,
        url=storage.image_url(image.stored_filename),
        thumbnails=ThumbnailUrls(**storage.thumbnail_urls(image.stored_filename)),
        title=image.title,
        description=image.description,
        tags=list(image.tags or []),
        width=image.width,
        height=image.height,
        size=image.size_bytes,
        mime_type=image.mime_type,
        owner=owner_summary(owner),
        collection=collection_summary(collection),
        original_url=image.original_url,
        is_saved=is_saved,
        created_at=image.created_at,
    )


def ranked_asset_response(
        image: Image,
        owner: Optional[User],
        collection: Optional[Collection],
        score: int,
        matched_tags: List[str],
        is_saved: bool = False,
) -> RankedAssetResponse:
    base = asset_response(image, owner, collection, is_saved=is_saved)
    return RankedAssetResponse(**base.model_dump(), score=score, matched_tags=matched_tags)


def source_summary(image: Image) -> SourceSummary:
    return SourceSummary(id=image.id, title=image.title, tags=list(image.tags or []))


def saved_image_response(saved: SavedImage) -> SavedImageResponse:
    return SavedImageResponse(
        id=saved.id,
        collection_id=saved.collection_id,
        image_id=saved.image_id,
        saved_at=saved.saved_at,
    )
