"""Bounded retry with exponential backoff for network boundaries.

Both the record source and the Q&A forwarder make at most one retry
(``max_attempts=2``).  Backoff is deterministic: ``base * 2**(attempt-1)``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from backend.app.core.logging import EVENT_SOURCE_RETRY, log_event

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy.  ``max_attempts`` counts the initial attempt."""

    max_attempts: int = 2
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 5.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must be >= 0")
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")

    def delay_for(self, failure_attempt: int) -> float:
        exponent = max(0, failure_attempt - 1)
        return min(self.max_delay_seconds, self.base_delay_seconds * (2**exponent))


def call_with_retry(
    fn: Callable[[], T],
    *,
    operation: str,
    policy: RetryPolicy | None = None,
    is_retryable: Callable[[BaseException], bool] = lambda _exc: True,
    retry_if_result: Callable[[T], bool] | None = None,
    sleep_fn: SleepFn | None = None,
) -> T:
    """Call ``fn()``; on a retryable failure back off and try again.

    A failure is either an exception accepted by *is_retryable* or a
    returned value accepted by *retry_if_result* (for callers that report
    errors as results).  The last exception is re-raised, or the last
    result returned, once attempts are exhausted.
    """
    cfg = policy or RetryPolicy()
    sleeper = sleep_fn or time.sleep

    for attempt in range(1, cfg.max_attempts + 1):
        try:
            result = fn()
        except Exception as exc:
            if attempt >= cfg.max_attempts or not is_retryable(exc):
                raise
            error_type = type(exc).__name__
        else:
            if retry_if_result is None or attempt >= cfg.max_attempts or not retry_if_result(result):
                return result
            error_type = getattr(result, "error_category", type(result).__name__)
        delay = cfg.delay_for(attempt)
        log_event(
            logger, "warning", EVENT_SOURCE_RETRY,
            operation=operation,
            failure_attempt=attempt,
            delay_seconds=delay,
            error_type=error_type,
        )
        if delay > 0:
            sleeper(delay)

    raise RuntimeError(f"Retry loop exited unexpectedly for operation={operation}")
