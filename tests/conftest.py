"""Shared fixtures.

Environment variables are set before any ``snapboard`` import because the
config module reads them at import time. Each test gets its own in-memory
SQLite database and a temporary storage directory.
"""
import datetime as dt
import io
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MAX_FILE_SIZE", "2MiB")

import httpx
import pytest
from PIL import Image as PILImage
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from snapboard.config import config
from snapboard.db import Base
from snapboard.db.models.collection import Collection
from snapboard.db.models.image import Image
from snapboard.db.models.user import User
from snapboard.db.session import get_db
from snapboard.services.auth_service import AuthService


def make_image_bytes(size=(64, 48), image_format="JPEG", color=(200, 30, 30)) -> bytes:
    mode = "RGBA" if image_format in ("PNG", "WEBP") and len(color) == 4 else "RGB"
    img = PILImage.new(mode, size, color=color)
    buf = io.BytesIO()
    img.save(buf, format=image_format)
    return buf.getvalue()


@pytest.fixture
def storage(tmp_path, monkeypatch):
    root = tmp_path / "uploads"
    monkeypatch.setattr(config, "STORAGE_PATH", root)
    return root


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine):
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db):
    async def _make_user(username: str = "alice") -> User:
        user = User(id=uuid.uuid4(), username=username, email=f"{username}@example.com")
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def make_collection(db):
    async def _make_collection(owner: User, title: str = "Board") -> Collection:
        collection = Collection(id=uuid.uuid4(), owner_id=owner.id, title=title)
        db.add(collection)
        await db.commit()
        return collection

    return _make_collection


@pytest.fixture
def make_image(db):
    """Insert an image record without files, for lookup and ranking tests."""
    counter = {"n": 0}

    async def _make_image(
            owner: User,
            title=None,
            tags=(),
            collection: Collection = None,
            created_at: dt.datetime = None,
    ) -> Image:
        counter["n"] += 1
        image = Image(
            id=uuid.uuid4(),
            owner_id=owner.id,
            collection_id=collection.id if collection else None,
            stored_filename=f"1700000000000-{counter['n']:016x}.jpg",
            title=title,
            tags=list(tags),
            width=10,
            height=10,
            size_bytes=100,
            mime_type="image/jpeg",
            created_at=created_at or dt.datetime(2024, 1, 1) + dt.timedelta(minutes=counter["n"]),
        )
        db.add(image)
        await db.commit()
        return image

    return _make_image


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {AuthService.mint_access(str(user.id))}"}

    return _auth_headers


@pytest.fixture
async def client(db, storage):
    from main import app

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
