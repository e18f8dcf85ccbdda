# app/marks/models.py
from datetime import datetime, timezone

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Integer,
    DateTime,
    func,
    ForeignKey,
    UniqueConstraint,
)
from app.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Mark(Base):
    """
    Marca (like, favorite, bookmark, love, haha...) de un usuario sobre un post.

    - type es texto libre en la DB: el vocabulario se valida en el servicio.
    - unique declarado sobre (user_id, post_id, type).
    - re-marcar solo toca updated_at (y post_id, ver repository.upsert_mark).
    """
    __tablename__ = "marks"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", "type", name="uq_marks_user_post_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
