import uuid
import sqlalchemy as sa

from snapboard.db.base import Base


class Collection(Base):
    __tablename__ = "collections"

    id = sa.Column(sa.UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = sa.Column(
        sa.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title = sa.Column(sa.String(100), nullable=False)
    description = sa.Column(sa.Text, nullable=True)
    is_private = sa.Column(sa.Boolean, nullable=False, default=False, server_default=sa.false())

    created_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
