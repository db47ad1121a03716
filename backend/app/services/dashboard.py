"""Dashboard pipeline: fetch, score, aggregate, generate insights.

Every refresh takes a generation number when it starts.  The computed
snapshot is applied only if no newer refresh has been applied in the
meantime, so a slow fetch can never overwrite fresher data.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

from backend.app.core.logging import (
    EVENT_DASHBOARD_REFRESH_DISCARDED,
    EVENT_DASHBOARD_REFRESHED,
    log_event,
)
from backend.app.core.scheduler import ChangeNotifier
from backend.app.core.settings import settings
from backend.app.models.analytics import DashboardSnapshot
from backend.app.services.aggregate_stats import build_aggregates
from backend.app.services.engagement_scoring import score_posts
from backend.app.services.insights import generate_insights
from backend.app.services.record_source import FetchFailure, RecordSource, get_record_source

logger = logging.getLogger(__name__)


class DashboardService:
    """Owns the latest :class:`DashboardSnapshot` for one record source."""

    def __init__(
        self,
        source: RecordSource,
        *,
        tiebreak_spread: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.source = source
        self._tiebreak_spread = tiebreak_spread
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = threading.Lock()
        self._next_generation = 0
        self._snapshot: DashboardSnapshot | None = None

    def _start_generation(self) -> int:
        with self._lock:
            self._next_generation += 1
            return self._next_generation

    def compute(self, generation: int = 0) -> DashboardSnapshot:
        """Run the pipeline once without touching the stored snapshot."""
        result = self.source.list_posts()
        refreshed_at = self._clock()
        if isinstance(result, FetchFailure):
            return DashboardSnapshot(
                status="disconnected",
                error_message=result.user_message,
                error_category=result.error_category,
                refreshed_at=refreshed_at,
                generation=generation,
            )

        scored = score_posts(result.posts, tiebreak_spread=self._tiebreak_spread)
        aggregates = build_aggregates(scored)
        return DashboardSnapshot(
            status="connected",
            posts=scored,
            aggregates=aggregates,
            insights=generate_insights(aggregates),
            refreshed_at=refreshed_at,
            generation=generation,
        )

    def apply(self, snapshot: DashboardSnapshot) -> bool:
        """Store *snapshot* unless a newer one is already applied."""
        with self._lock:
            current = self._snapshot
            if current is not None and snapshot.generation <= current.generation:
                log_event(
                    logger, "info", EVENT_DASHBOARD_REFRESH_DISCARDED,
                    generation=snapshot.generation,
                    applied_generation=current.generation,
                )
                return False
            self._snapshot = snapshot
        return True

    def refresh(self, reason: str = "manual") -> DashboardSnapshot:
        """Recompute everything and return the snapshot now in effect."""
        generation = self._start_generation()
        snapshot = self.compute(generation)
        if self.apply(snapshot):
            log_event(
                logger, "info", EVENT_DASHBOARD_REFRESHED,
                reason=reason,
                generation=generation,
                status=snapshot.status,
                posts=len(snapshot.posts),
                insights=len(snapshot.insights),
            )
        return self.snapshot()

    def snapshot(self) -> DashboardSnapshot:
        """Latest applied snapshot; the first call triggers a refresh."""
        with self._lock:
            current = self._snapshot
        if current is None:
            return self.refresh("initial")
        return current

    def attach(self, notifier: ChangeNotifier) -> Callable[[], None]:
        """Refresh on every change signal; returns the unsubscribe function."""
        return notifier.subscribe(lambda reason: self.refresh(reason))


# ---------------------------------------------------------------------------
# Process-wide instances
# ---------------------------------------------------------------------------

_service: DashboardService | None = None
_notifier: ChangeNotifier | None = None
_instances_lock = threading.Lock()


def get_change_notifier() -> ChangeNotifier:
    global _notifier  # noqa: PLW0603
    with _instances_lock:
        if _notifier is None:
            _notifier = ChangeNotifier()
        return _notifier


def get_dashboard_service() -> DashboardService:
    """Return the process-wide service, wired to the change notifier."""
    global _service  # noqa: PLW0603
    notifier = get_change_notifier()
    with _instances_lock:
        if _service is None:
            spread = settings.score_tiebreak_spread if settings.score_tiebreak_enabled else None
            _service = DashboardService(get_record_source(), tiebreak_spread=spread)
            _service.attach(notifier)
        return _service


def reset_dashboard_service() -> None:
    """Drop the process-wide instances (used at shutdown and in tests)."""
    global _service, _notifier  # noqa: PLW0603
    with _instances_lock:
        _service = None
        _notifier = None
