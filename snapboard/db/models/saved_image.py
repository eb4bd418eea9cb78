import uuid
import sqlalchemy as sa

from snapboard.db.base import Base


class SavedImage(Base):
    __tablename__ = "saved_images"
    __table_args__ = (
        sa.UniqueConstraint("collection_id", "image_id", name="uq_saved_images_collection_image"),
    )

    id = sa.Column(sa.UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    collection_id = sa.Column(
        sa.UUID(as_uuid=True),
        sa.ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    image_id = sa.Column(
        sa.UUID(as_uuid=True),
        sa.ForeignKey("images.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    saved_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
