"""Import a YouTube channel's latest videos as posts.

The YouTube Data API v3 is queried in two steps: ``search`` for the newest
video ids on the channel, then ``videos`` for their snippet and statistics.
Each video becomes a ``YouTube`` / ``video`` post written through
:meth:`RecordSource.add_post`, so the usual change notification and
recompute apply.

YouTube exposes no share count, so shares are stored as 0.  Videos whose
title already exists as a YouTube post are skipped; repeated syncs do not
duplicate posts.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from backend.app.core.errors import http_status_of, is_retryable_exception
from backend.app.core.logging import (
    EVENT_YOUTUBE_SYNC_FAILED,
    EVENT_YOUTUBE_SYNC_START,
    EVENT_YOUTUBE_SYNC_SUCCESS,
    log_event,
)
from backend.app.core.retry import RetryPolicy, SleepFn, call_with_retry
from backend.app.core.settings import settings
from backend.app.models.post import PostCreate, coerce_count, parse_timestamp
from backend.app.services.record_source import FetchFailure, RecordSource, SourceWriteError

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
YOUTUBE_PLATFORM = "YouTube"
YOUTUBE_CONTENT_TYPE = "video"
API_KEY_HEADER = "X-goog-api-key"
UNTITLED_VIDEO = "Untitled video"
YOUTUBE_NOT_CONFIGURED_MESSAGE = (
    "YouTube sync is not configured. Set YOUTUBE_API_KEY and YOUTUBE_CHANNEL_ID."
)

_TITLE_MAX_CHARS = 500
_CONTENT_MAX_CHARS = 20_000


class YouTubeSyncError(Exception):
    """Sync failure with a safe user-facing message.

    ``inserted`` counts posts written before the failure.
    """

    def __init__(
        self,
        user_message: str,
        *,
        error_category: str,
        http_status: int = 502,
        inserted: int = 0,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.error_category = error_category
        self.http_status = http_status
        self.inserted = inserted


class YouTubeSyncResult(BaseModel):
    channel_id: str
    fetched: int = 0
    inserted: int = 0
    skipped: int = 0


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


class YouTubeClient:
    """Minimal YouTube Data API v3 client over ``httpx``.

    Every request gets the configured timeout and one retry on transient
    failures.  The API key is sent in the ``X-goog-api-key`` header so it
    never appears in request URLs or ``httpx`` logs.
    """

    def __init__(
        self,
        api_key: str,
        *,
        timeout_seconds: float = 10,
        policy: RetryPolicy | None = None,
        sleep_fn: SleepFn | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._http = http_client or httpx.Client(base_url=YOUTUBE_API_BASE, timeout=timeout_seconds)
        self._policy = policy or RetryPolicy(
            base_delay_seconds=settings.source_retry_backoff_seconds,
        )
        self._sleep_fn = sleep_fn

    def close(self) -> None:
        self._http.close()

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        def _do_get() -> dict[str, Any]:
            response = self._http.get(
                path, params=params, headers={API_KEY_HEADER: self._api_key}
            )
            response.raise_for_status()
            return response.json()

        return call_with_retry(
            _do_get,
            operation=f"youtube.{path}",
            policy=self._policy,
            is_retryable=is_retryable_exception,
            sleep_fn=self._sleep_fn,
        )

    def latest_video_ids(self, channel_id: str, max_results: int) -> list[str]:
        """Newest video ids on *channel_id*, most recent first."""
        data = self._get(
            "search",
            {
                "part": "snippet",
                "channelId": channel_id,
                "maxResults": max_results,
                "order": "date",
                "type": "video",
            },
        )
        ids: list[str] = []
        for item in data.get("items") or []:
            ident = item.get("id")
            video_id = ident.get("videoId") if isinstance(ident, dict) else None
            if video_id:
                ids.append(video_id)
        return ids

    def videos(self, video_ids: list[str]) -> list[dict[str, Any]]:
        """Snippet and statistics for each id; an empty id list makes no request."""
        if not video_ids:
            return []
        data = self._get("videos", {"part": "statistics,snippet", "id": ",".join(video_ids)})
        return [item for item in data.get("items") or [] if isinstance(item, dict)]


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


def video_to_post(item: dict[str, Any]) -> PostCreate:
    """Map one ``videos`` resource onto a new post."""
    snippet = item.get("snippet") or {}
    stats = item.get("statistics") or {}
    title = str(snippet.get("title") or "").strip() or UNTITLED_VIDEO
    description = str(snippet.get("description") or "").strip()
    published = snippet.get("publishedAt")
    return PostCreate(
        title=title[:_TITLE_MAX_CHARS],
        content=description[:_CONTENT_MAX_CHARS] or None,
        platform=YOUTUBE_PLATFORM,
        content_type=YOUTUBE_CONTENT_TYPE,
        likes=coerce_count(stats.get("likeCount")),
        comments=coerce_count(stats.get("commentCount")),
        shares=0,
        created_at=parse_timestamp(published) if isinstance(published, str) else None,
    )


def _api_error(exc: Exception) -> YouTubeSyncError:
    status = http_status_of(exc)
    if isinstance(exc, httpx.TimeoutException):
        error = YouTubeSyncError(
            "YouTube did not respond in time. Please try again.",
            error_category="timeout",
            http_status=504,
        )
    elif status in (400, 401, 403):
        error = YouTubeSyncError(
            "YouTube rejected the request. Check YOUTUBE_API_KEY and the daily quota.",
            error_category="auth",
        )
    elif isinstance(exc, httpx.TransportError):
        error = YouTubeSyncError(
            "Could not connect to YouTube. Please try again.",
            error_category="network",
            http_status=503,
        )
    else:
        error = YouTubeSyncError(
            "YouTube returned an unexpected response. Please try again later.",
            error_category="source",
        )
    log_event(
        logger, "error", EVENT_YOUTUBE_SYNC_FAILED,
        error_category=error.error_category,
        status=status,
        error_type=type(exc).__name__,
    )
    return error


def _existing_titles(source: RecordSource) -> set[str]:
    result = source.list_posts()
    if isinstance(result, FetchFailure):
        log_event(
            logger, "error", EVENT_YOUTUBE_SYNC_FAILED,
            error_category=result.error_category,
            stage="read_existing",
        )
        raise YouTubeSyncError(
            result.user_message,
            error_category=result.error_category,
            http_status=503,
        )
    return {
        post.title
        for post in result.posts
        if post.title and post.platform.lower() == YOUTUBE_PLATFORM.lower()
    }


# ---------------------------------------------------------------------------
# Sync
# ---------------------------------------------------------------------------


def sync_youtube_channel(
    source: RecordSource,
    client: YouTubeClient,
    *,
    channel_id: str,
    max_results: int = 10,
) -> YouTubeSyncResult:
    """Fetch the channel's latest videos and add the new ones to *source*.

    Raises :class:`YouTubeSyncError` when the record source cannot be read,
    the YouTube API fails, or a write fails.
    """
    log_event(
        logger, "info", EVENT_YOUTUBE_SYNC_START,
        source=source.source_name,
        channel_id=channel_id,
        max_results=max_results,
    )
    existing = _existing_titles(source)

    try:
        videos = client.videos(client.latest_video_ids(channel_id, max_results))
    except (httpx.HTTPError, ValueError) as exc:
        raise _api_error(exc) from exc

    inserted = skipped = 0
    for item in videos:
        post = video_to_post(item)
        if post.title in existing:
            skipped += 1
            continue
        try:
            source.add_post(post)
        except SourceWriteError as exc:
            log_event(
                logger, "error", EVENT_YOUTUBE_SYNC_FAILED,
                error_category="db",
                stage="write",
                inserted=inserted,
            )
            raise YouTubeSyncError(
                "Could not save the synced videos. Please try again.",
                error_category="db",
                http_status=503,
                inserted=inserted,
            ) from exc
        existing.add(post.title)
        inserted += 1

    log_event(
        logger, "info", EVENT_YOUTUBE_SYNC_SUCCESS,
        channel_id=channel_id,
        fetched=len(videos),
        inserted=inserted,
        skipped=skipped,
    )
    return YouTubeSyncResult(
        channel_id=channel_id,
        fetched=len(videos),
        inserted=inserted,
        skipped=skipped,
    )
