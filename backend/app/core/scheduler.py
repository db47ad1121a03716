"""Lightweight repeating-job scheduler and change notification.

:class:`RepeatingJob` runs a callable at a fixed interval in a daemon
thread.  Exceptions in the job are logged but never propagate, so the app
keeps running.

:class:`ChangeNotifier` fans a "records changed" signal out to subscribers.
:class:`ChangeWatcher` polls a record source's change token on a
``RepeatingJob`` and notifies when the token moves.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from backend.app.core.logging import EVENT_CHANGE_DETECTED, log_event

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], None]


class RepeatingJob:
    """Execute *func* every *interval_seconds* in a background daemon thread."""

    def __init__(self, func: Callable[[], None], interval_seconds: float) -> None:
        self._func = func
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._timer: threading.Timer | None = None

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._stop_event.is_set()

    def _run(self) -> None:
        if self._stop_event.is_set():
            return
        try:
            self._func()
        except Exception:
            logger.exception("repeating_job_error: job=%s", _job_name(self._func))
        # Schedule next run regardless of success/failure
        self._schedule()

    def _schedule(self) -> None:
        if self._stop_event.is_set():
            return
        self._timer = threading.Timer(self._interval, self._run)
        self._timer.daemon = True
        self._timer.start()

    def start(self) -> None:
        """Start the repeating job (first execution after one interval)."""
        logger.info(
            "repeating_job_started: job=%s interval=%ss",
            _job_name(self._func),
            self._interval,
        )
        self._stop_event.clear()
        self._schedule()

    def stop(self) -> None:
        """Signal the job to stop and cancel any pending timer."""
        self._stop_event.set()
        if self._timer is not None:
            self._timer.cancel()
        logger.info("repeating_job_stopped: job=%s", _job_name(self._func))


def _job_name(func: Callable[..., object]) -> str:
    return getattr(func, "__name__", type(func).__name__)


class ChangeNotifier:
    """Thread-safe fan-out of change signals.

    A failing subscriber is logged and skipped; the others still run.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[ChangeCallback] = []

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def notify(self, reason: str) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(reason)
            except Exception:
                logger.exception("change_subscriber_error: reason=%s", reason)


class ChangeWatcher:
    """Polls *token_fn* and notifies when the returned token changes.

    A ``None`` token (source unreachable) is ignored and does not reset the
    last known token.
    """

    def __init__(
        self,
        token_fn: Callable[[], str | None],
        notifier: ChangeNotifier,
        *,
        interval_seconds: float = 30,
    ) -> None:
        self._token_fn = token_fn
        self._notifier = notifier
        self._interval = interval_seconds
        self._last_token: str | None = None
        self._job: RepeatingJob | None = None

    def check(self) -> bool:
        """Poll once; return True if a change was signalled."""
        token = self._token_fn()
        if token is None:
            return False
        if self._last_token is None:
            self._last_token = token
            return False
        if token == self._last_token:
            return False
        self._last_token = token
        log_event(logger, "info", EVENT_CHANGE_DETECTED, reason="poll")
        self._notifier.notify("change")
        return True

    def start(self) -> None:
        if self._job is not None:
            self._job.stop()
        self._last_token = self._token_fn()
        self._job = RepeatingJob(self.check, self._interval)
        self._job.start()

    def stop(self) -> None:
        if self._job is not None:
            self._job.stop()
            self._job = None
