import uuid
import sqlalchemy as sa

from snapboard.db.base import Base

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000
TAG_MAX_LENGTH = 64
ORIGINAL_FILENAME_MAX_LENGTH = 256
ORIGINAL_URL_MAX_LENGTH = 2048

# Native text[] on PostgreSQL, JSON list elsewhere.
TagList = sa.ARRAY(sa.String(TAG_MAX_LENGTH)).with_variant(sa.JSON(), "sqlite")


class Image(Base):
    __tablename__ = "images"

    id = sa.Column(sa.UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    owner_id = sa.Column(
        sa.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    collection_id = sa.Column(
        sa.UUID(as_uuid=True),
        sa.ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    stored_filename = sa.Column(sa.String(64), nullable=False, unique=True)  # {timestamp}-{hex}.{ext}
    original_filename = sa.Column(sa.String(ORIGINAL_FILENAME_MAX_LENGTH), nullable=True)
    original_url = sa.Column(sa.String(ORIGINAL_URL_MAX_LENGTH), nullable=True)

    title = sa.Column(sa.String(TITLE_MAX_LENGTH), nullable=True)
    description = sa.Column(sa.Text, nullable=True)
    tags = sa.Column(TagList, nullable=False, default=list)

    width = sa.Column(sa.Integer, nullable=False)
    height = sa.Column(sa.Integer, nullable=False)
    size_bytes = sa.Column(sa.BigInteger, nullable=False)
    mime_type = sa.Column(sa.String(50), nullable=False)

    created_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
