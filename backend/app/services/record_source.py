"""Record sources that supply post rows to the scoring pipeline.

Sources
-------
- **SqlRecordSource** — local SQLite ``posts`` table via SQLAlchemy.
- **SupabaseRecordSource** — hosted table via ``supabase-py`` (requires
  ``SUPABASE_URL`` and ``SUPABASE_KEY``).

``list_posts()`` never raises.  It returns :class:`FetchSuccess` (possibly
with zero posts) or :class:`FetchFailure`, so "the table is empty" and
"the fetch failed" stay distinguishable.  Each fetch gets one retry with
backoff on transient errors.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field
from sqlalchemy.orm import sessionmaker

from backend.app.core.errors import is_retryable_exception, normalize_source_error
from backend.app.core.logging import (
    EVENT_SOURCE_FETCH_START,
    EVENT_SOURCE_FETCH_SUCCESS,
    log_event,
)
from backend.app.core.retry import RetryPolicy, SleepFn, call_with_retry
from backend.app.core.settings import settings
from backend.app.models.post import Post, PostCreate
from backend.app.services import post_repository

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class FetchSuccess(BaseModel):
    status: Literal["success"] = "success"
    posts: list[Post] = Field(default_factory=list)
    latency_ms: int = 0


class FetchFailure(BaseModel):
    status: Literal["error"] = "error"
    error_category: str
    user_message: str
    retryable: bool = False


FetchResult = FetchSuccess | FetchFailure
"""Discriminated union returned by every record source."""


class SourceWriteError(Exception):
    """Raised when a post cannot be written to the record source."""


# ---------------------------------------------------------------------------
# Source protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class RecordSource(Protocol):
    """Minimal interface every record source must satisfy."""

    @property
    def source_name(self) -> str: ...

    def list_posts(self) -> FetchResult:
        """Fetch every post.  Never raises."""
        ...

    def add_post(self, data: PostCreate) -> Post:
        """Persist a new post and return it normalised."""
        ...

    def change_token(self) -> str | None:
        """Opaque token that differs whenever the table changes; None if unknown."""
        ...


def _fingerprint(rows: list[dict[str, Any]]) -> str:
    payload = json.dumps(rows, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def _fetch(
    source_name: str,
    fetch_rows: Any,
    *,
    policy: RetryPolicy,
    sleep_fn: SleepFn | None,
) -> FetchResult:
    """Shared fetch path: retry, normalise rows, convert errors to a result."""
    log_event(logger, "info", EVENT_SOURCE_FETCH_START, source=source_name)
    start = time.monotonic()
    try:
        rows = call_with_retry(
            fetch_rows,
            operation=f"{source_name}.list_posts",
            policy=policy,
            is_retryable=is_retryable_exception,
            sleep_fn=sleep_fn,
        )
    except Exception as exc:
        error = normalize_source_error(exc, source=source_name, operation="list_posts")
        return FetchFailure(
            error_category=error.error_category,
            user_message=error.user_message,
            retryable=error.retryable,
        )

    posts = [Post.from_record(row) for row in rows or [] if isinstance(row, dict)]
    latency_ms = int((time.monotonic() - start) * 1000)
    log_event(
        logger, "info", EVENT_SOURCE_FETCH_SUCCESS,
        source=source_name, count=len(posts), latency_ms=latency_ms,
    )
    return FetchSuccess(posts=posts, latency_ms=latency_ms)


# ---------------------------------------------------------------------------
# SQLite source
# ---------------------------------------------------------------------------


class SqlRecordSource:
    """Reads the local ``posts`` table through the SQLAlchemy session factory."""

    source_name: str = "sqlite"

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        policy: RetryPolicy | None = None,
        sleep_fn: SleepFn | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._policy = policy or RetryPolicy(
            base_delay_seconds=settings.source_retry_backoff_seconds,
        )
        self._sleep_fn = sleep_fn

    def _rows(self) -> list[dict[str, Any]]:
        db = self._session_factory()
        try:
            return [record.to_row() for record in post_repository.list_posts(db)]
        finally:
            db.close()

    def list_posts(self) -> FetchResult:
        return _fetch(self.source_name, self._rows, policy=self._policy, sleep_fn=self._sleep_fn)

    def add_post(self, data: PostCreate) -> Post:
        db = self._session_factory()
        try:
            record = post_repository.create_post(db, data)
            db.commit()
            return Post.from_record(record.to_row())
        except Exception as exc:
            db.rollback()
            raise SourceWriteError(f"Could not save post: {exc}") from exc
        finally:
            db.close()

    def seed_if_empty(self) -> int:
        db = self._session_factory()
        try:
            added = post_repository.seed_sample_posts(db)
            db.commit()
            return added
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def change_token(self) -> str | None:
        db = self._session_factory()
        try:
            return post_repository.change_token(db)
        finally:
            db.close()


# ---------------------------------------------------------------------------
# Supabase source
# ---------------------------------------------------------------------------


class SupabaseRecordSource:
    """Reads a hosted Supabase table via the ``supabase`` SDK."""

    source_name: str = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        *,
        table: str = "posts",
        timeout_seconds: int = 10,
        policy: RetryPolicy | None = None,
        sleep_fn: SleepFn | None = None,
        client: Any | None = None,
    ) -> None:
        if client is None:
            from supabase import ClientOptions, create_client

            client = create_client(
                url,
                key,
                options=ClientOptions(postgrest_client_timeout=timeout_seconds),
            )
        self._client = client
        self._table = table
        self._policy = policy or RetryPolicy(
            base_delay_seconds=settings.source_retry_backoff_seconds,
        )
        self._sleep_fn = sleep_fn

    def _rows(self) -> list[dict[str, Any]]:
        response = (
            self._client.table(self._table)
            .select("*")
            .order("created_at", desc=False)
            .execute()
        )
        return list(response.data or [])

    def list_posts(self) -> FetchResult:
        return _fetch(self.source_name, self._rows, policy=self._policy, sleep_fn=self._sleep_fn)

    def add_post(self, data: PostCreate) -> Post:
        row = data.model_dump(mode="json", exclude_none=True)
        try:
            response = self._client.table(self._table).insert(row).execute()
        except Exception as exc:
            raise SourceWriteError(f"Could not save post: {exc}") from exc
        inserted = (response.data or [row])[0]
        return Post.from_record(inserted)

    def change_token(self) -> str | None:
        try:
            return _fingerprint(self._rows())
        except Exception as exc:
            logger.warning("change_token_failed: source=%s error=%s", self.source_name, type(exc).__name__)
            return None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def get_record_source() -> RecordSource:
    """Return the configured record source.

    Falls back to the SQLite mirror when ``record_source=supabase`` is set
    without credentials.
    """
    if settings.record_source == "supabase":
        if settings.is_supabase_configured:
            logger.info("Record source: Supabase table=%s", settings.supabase_table)
            return SupabaseRecordSource(
                settings.supabase_url,  # type: ignore[arg-type]
                settings.supabase_key,  # type: ignore[arg-type]
                table=settings.supabase_table,
                timeout_seconds=settings.source_timeout_seconds,
            )
        logger.warning("Supabase selected but not configured; using SQLite mirror")

    from backend.app.db.session import SessionLocal

    logger.info("Record source: SQLite path=%s", settings.app_db_path)
    return SqlRecordSource(SessionLocal)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class SourceStatus(BaseModel):
    """Live connection check for the system status page."""

    source: str
    status: Literal["connected", "disconnected"]
    post_count: int = 0
    latency_ms: int = 0
    error_category: str | None = None
    error_message: str | None = None
    checked_at: datetime
    configured: dict[str, bool] = Field(default_factory=dict)


def check_source(source: RecordSource) -> SourceStatus:
    """Run one live fetch against *source* and report the outcome."""
    result = source.list_posts()
    configured = {
        "supabase": settings.is_supabase_configured,
        "llm": settings.is_llm_configured,
        "youtube": settings.is_youtube_configured,
        "login": settings.is_login_configured,
    }
    checked_at = datetime.now(timezone.utc)
    if isinstance(result, FetchFailure):
        return SourceStatus(
            source=source.source_name,
            status="disconnected",
            error_category=result.error_category,
            error_message=result.user_message,
            checked_at=checked_at,
            configured=configured,
        )
    return SourceStatus(
        source=source.source_name,
        status="connected",
        post_count=len(result.posts),
        latency_ms=result.latency_ms,
        checked_at=checked_at,
        configured=configured,
    )
