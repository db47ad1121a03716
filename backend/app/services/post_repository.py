"""Repository for the local ``posts`` table.

All methods operate on a caller-supplied SQLAlchemy ``Session`` so that
transaction boundaries remain under the caller's control.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from backend.app.models.post import PostCreate
from backend.app.models.post_record import PostRecord

logger = logging.getLogger(__name__)


class DatabaseLockedError(Exception):
    """Raised when the database is locked by another process (retryable)."""


# Seeded into an empty table so a fresh install has something to chart.
SAMPLE_POSTS: tuple[dict[str, object], ...] = (
    {
        "title": "Welcome to Your Social Dashboard!",
        "content": "Track your social media performance and get insights to grow your audience.",
        "platform": "LinkedIn",
        "content_type": "static",
        "likes": 156, "comments": 28, "shares": 12, "age_hours": 0,
    },
    {
        "title": "How to Increase Engagement",
        "content": "Proven strategies to boost your social media engagement and reach more people.",
        "platform": "Instagram",
        "content_type": "reels",
        "likes": 234, "comments": 42, "shares": 18, "age_hours": 24,
    },
    {
        "title": "Insights in Action",
        "content": "How data analysis turns into actionable content recommendations.",
        "platform": "Twitter",
        "content_type": "carousel",
        "likes": 189, "comments": 35, "shares": 15, "age_hours": 48,
    },
    {
        "title": "Content Strategy Tips",
        "content": "Create content that resonates with your audience and drives interactions.",
        "platform": "Facebook",
        "content_type": "video",
        "likes": 201, "comments": 39, "shares": 21, "age_hours": 72,
    },
    {
        "title": "Growing Your Online Presence",
        "content": "Essential tips for building a strong presence and an engaged community.",
        "platform": "LinkedIn",
        "content_type": "carousel",
        "likes": 178, "comments": 31, "shares": 14, "age_hours": 96,
    },
)


def _handle_operational_error(exc: OperationalError, operation: str) -> None:
    """Check for database-locked errors and raise a categorized exception."""
    msg = str(exc).lower()
    if "locked" in msg or "busy" in msg:
        logger.warning(
            "db_write_failed: operation=%s reason=database_locked (retryable)",
            operation,
        )
        raise DatabaseLockedError(
            f"Database is locked during '{operation}'. "
            f"Another process may be writing. Please retry."
        ) from exc
    raise exc


def list_posts(db: Session) -> list[PostRecord]:
    """Return every post, oldest first (ties by id)."""
    return list(
        db.query(PostRecord)
        .order_by(PostRecord.created_at.asc(), PostRecord.id.asc())
        .all()
    )


def count_posts(db: Session) -> int:
    return db.query(func.count(PostRecord.id)).scalar() or 0


def create_post(db: Session, data: PostCreate, *, now: datetime | None = None) -> PostRecord:
    """Insert a post and flush to obtain an id."""
    stamp = now or datetime.now(UTC)
    record = PostRecord(
        title=data.title,
        content=data.content,
        platform=data.platform,
        content_type=data.content_type,
        likes=data.likes,
        comments=data.comments,
        shares=data.shares,
        created_at=data.created_at or stamp,
        updated_at=stamp,
    )
    db.add(record)
    try:
        db.flush()
    except OperationalError as exc:
        _handle_operational_error(exc, "create_post")
    logger.info(
        "post_created: id=%d platform=%s title_len=%d",
        record.id,
        record.platform,
        len(data.title),
    )
    return record


def seed_sample_posts(db: Session, *, now: datetime | None = None) -> int:
    """Insert :data:`SAMPLE_POSTS` when the table is empty.  Returns rows added."""
    if count_posts(db) > 0:
        return 0
    stamp = now or datetime.now(UTC)
    for sample in SAMPLE_POSTS:
        fields = {k: v for k, v in sample.items() if k != "age_hours"}
        created = stamp - timedelta(hours=int(sample["age_hours"]))  # type: ignore[arg-type]
        db.add(PostRecord(**fields, created_at=created, updated_at=stamp))
    try:
        db.flush()
    except OperationalError as exc:
        _handle_operational_error(exc, "seed_sample_posts")
    logger.info("sample_posts_seeded: count=%d", len(SAMPLE_POSTS))
    return len(SAMPLE_POSTS)


def change_token(db: Session) -> str:
    """Cheap fingerprint that changes whenever a row is added, removed, or edited."""
    count, max_id, max_updated = db.query(
        func.count(PostRecord.id),
        func.max(PostRecord.id),
        func.max(PostRecord.updated_at),
    ).one()
    return f"{count}:{max_id}:{max_updated}"
