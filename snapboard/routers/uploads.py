import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, UploadFile, File, Form, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from snapboard.config import config
from snapboard.db.models.image import TITLE_MAX_LENGTH, DESCRIPTION_MAX_LENGTH, ORIGINAL_URL_MAX_LENGTH
from snapboard.db.models.user import User
from snapboard.db.session import get_db
from snapboard.errors import ValidationFailure
from snapboard.schemas import AssetResponse
from snapboard.services.auth_service import AuthService
from snapboard.services.fetch_service import RemoteFetcher
from snapboard.services.upload_service import UploadService, UploadMeta
from snapboard.utils.files import read_upload_file

router = APIRouter(prefix="/upload", tags=["upload"])


class UrlUploadIn(BaseModel):
    url: str = Field(..., min_length=1, max_length=ORIGINAL_URL_MAX_LENGTH)
    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    tags: Optional[str] = None
    collection_id: Optional[uuid.UUID] = None


def validate_upload(file: UploadFile) -> None:
    if not file.filename:
        raise ValidationFailure("No file was provided.")

    if file.content_type not in config.ALLOWED_MIME_TYPES:
        raise ValidationFailure(
            f"File '{file.filename}' has unsupported type '{file.content_type}'. "
            f"Allowed: {', '.join(config.ALLOWED_MIME_TYPES)}."
        )

    suffix = Path(file.filename).suffix.lower()
    if suffix not in config.ALLOWED_EXTENSIONS:
        raise ValidationFailure(
            f"File '{file.filename}' has unsupported extension '{suffix}'. "
            f"Allowed: {', '.join(config.ALLOWED_EXTENSIONS)}."
        )


@router.post("/file", status_code=status.HTTP_201_CREATED, response_model=AssetResponse)
async def upload_file(
        file: UploadFile = File(...),
        title: Optional[str] = Form(None, max_length=TITLE_MAX_LENGTH),
        description: Optional[str] = Form(None, max_length=DESCRIPTION_MAX_LENGTH),
        tags: Optional[str] = Form(None),
        collection_id: Optional[uuid.UUID] = Form(None),
        db: AsyncSession = Depends(get_db),
        user: User = Depends(AuthService.get_current_user),
):
    validate_upload(file)
    content = await read_upload_file(file, config.MAX_FILE_SIZE)

    return await UploadService.ingest_file(
        db,
        content,
        file.filename,
        UploadMeta(title=title, description=description, tags=tags, collection_id=collection_id),
        user.id,
    )


@router.post("/url", status_code=status.HTTP_201_CREATED, response_model=AssetResponse)
async def upload_from_url(
        body: UrlUploadIn,
        db: AsyncSession = Depends(get_db),
        user: User = Depends(AuthService.get_current_user),
        fetcher: RemoteFetcher = Depends(RemoteFetcher.get_instance),
):
    return await UploadService.ingest_from_url(
        db,
        fetcher,
        body.url,
        UploadMeta(
            title=body.title,
            description=body.description,
            tags=body.tags,
            collection_id=body.collection_id,
        ),
        user.id,
    )


@router.delete("/{filename}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_upload(
        filename: str,
        db: AsyncSession = Depends(get_db),
        user: User = Depends(AuthService.get_current_user),
):
    await UploadService.delete_by_filename(db, filename, user.id)
