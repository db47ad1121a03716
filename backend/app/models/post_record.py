"""SQLAlchemy ORM model for the local ``posts`` table."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base


class PostRecord(Base):
    """Local mirror of the hosted posts table."""

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
        Index("ix_posts_platform", "platform"),
        CheckConstraint(
            "likes >= 0 AND comments >= 0 AND shares >= 0",
            name="ck_posts_counts_non_negative",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    platform: Mapped[str | None] = mapped_column(String(100), nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    likes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    comments: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    shares: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def to_row(self) -> dict[str, object]:
        """Raw row in the same shape the hosted table returns."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "platform": self.platform,
            "content_type": self.content_type,
            "likes": self.likes,
            "comments": self.comments,
            "shares": self.shares,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
