"""/api/v1/sources — record source diagnostics and YouTube sync."""

from collections.abc import Iterator

from fastapi import APIRouter, Depends, HTTPException

from backend.app.core.scheduler import ChangeNotifier
from backend.app.core.settings import settings
from backend.app.services.dashboard import (
    DashboardService,
    get_change_notifier,
    get_dashboard_service,
)
from backend.app.services.record_source import SourceStatus, check_source
from backend.app.services.youtube_sync import (
    YOUTUBE_NOT_CONFIGURED_MESSAGE,
    YouTubeClient,
    YouTubeSyncError,
    YouTubeSyncResult,
    sync_youtube_channel,
)

router = APIRouter()


def get_youtube_client() -> Iterator[YouTubeClient | None]:
    """Yield a client when an API key is configured, closing it afterwards."""
    if not settings.youtube_api_key:
        yield None
        return
    client = YouTubeClient(
        settings.youtube_api_key,
        timeout_seconds=settings.source_timeout_seconds,
    )
    try:
        yield client
    finally:
        client.close()


@router.get("/api/v1/sources/status", response_model=SourceStatus)
def source_status(
    service: DashboardService = Depends(get_dashboard_service),
) -> SourceStatus:
    """Live connection test; does not touch the cached snapshot."""
    return check_source(service.source)


@router.post("/api/v1/sources/youtube/sync", response_model=YouTubeSyncResult)
def youtube_sync(
    service: DashboardService = Depends(get_dashboard_service),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    client: YouTubeClient | None = Depends(get_youtube_client),
) -> YouTubeSyncResult:
    """Import the configured channel's latest videos as posts."""
    if client is None or not settings.youtube_channel_id:
        raise HTTPException(status_code=400, detail=YOUTUBE_NOT_CONFIGURED_MESSAGE)

    try:
        result = sync_youtube_channel(
            service.source,
            client,
            channel_id=settings.youtube_channel_id,
            max_results=settings.youtube_max_results,
        )
    except YouTubeSyncError as exc:
        if exc.inserted:
            notifier.notify("youtube_sync")
        raise HTTPException(status_code=exc.http_status, detail=exc.user_message) from exc

    if result.inserted:
        notifier.notify("youtube_sync")
    return result
