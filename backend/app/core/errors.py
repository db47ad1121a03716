"""Centralized error normalization for user-facing messages.

Every error surfaced to the UI must pass through this module to ensure:
- Consistent structure (user_message, error_category, retryable)
- No stack traces or secrets in user-facing output
- Detailed info logged for debugging
"""

import logging
from dataclasses import dataclass

import httpx

from backend.app.core.logging import EVENT_DB_WRITE_FAILED, EVENT_SOURCE_FETCH_FAILED, log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedError:
    """Standardized error representation for API responses."""

    user_message: str
    error_category: str
    retryable: bool
    http_status: int = 500


_AUTH_STATUSES = frozenset({401, 403})
# PostgREST codes for JWT problems, disabled anonymous access and denied privileges.
_AUTH_ERROR_CODES = frozenset({"PGRST301", "PGRST302", "42501"})
_AUTH_MESSAGES = ("jwt", "invalid api key", "permission denied")


def http_status_of(exc: BaseException) -> int | None:
    """Return the HTTP status carried by an httpx or postgrest exception, if any.

    postgrest's ``APIError`` stores the status as a string ``code`` when the
    response body is not JSON.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, str) and value.isdigit():
            value = int(value)
        if isinstance(value, int) and not isinstance(value, bool) and 100 <= value <= 599:
            return value
    return None


def _is_auth_error(exc: BaseException) -> bool:
    if http_status_of(exc) in _AUTH_STATUSES:
        return True
    if str(getattr(exc, "code", "") or "").upper() in _AUTH_ERROR_CODES:
        return True
    msg = str(exc).lower()
    return any(marker in msg for marker in _AUTH_MESSAGES)


def is_retryable_exception(exc: BaseException) -> bool:
    """Return True for transient transport failures worth a second attempt."""
    if isinstance(exc, (TimeoutError, ConnectionError, httpx.TimeoutException, httpx.NetworkError)):
        return True
    status = http_status_of(exc)
    if status is not None:
        return status >= 500 or status == 429
    msg = str(exc).lower()
    return "timed out" in msg or "timeout" in msg or "locked" in msg or "busy" in msg


def normalize_source_error(
    exc: Exception,
    *,
    source: str,
    operation: str,
) -> NormalizedError:
    """Normalize a record-source failure (SourceUnavailable) into a status banner message."""
    exc_msg = str(exc).lower()

    if isinstance(exc, (TimeoutError, httpx.TimeoutException)) or "timed out" in exc_msg:
        error = NormalizedError(
            user_message="The data source did not respond in time. Showing no data.",
            error_category="timeout",
            retryable=True,
            http_status=504,
        )
    elif _is_auth_error(exc):
        error = NormalizedError(
            user_message=(
                "The data source rejected our credentials. "
                "Check SUPABASE_URL and SUPABASE_KEY."
            ),
            error_category="auth",
            retryable=False,
            http_status=502,
        )
    elif isinstance(exc, (ConnectionError, httpx.NetworkError)):
        error = NormalizedError(
            user_message="Could not connect to the data source. Showing no data.",
            error_category="network",
            retryable=True,
            http_status=503,
        )
    else:
        error = NormalizedError(
            user_message="The data source is unavailable. Showing no data.",
            error_category="source",
            retryable=True,
            http_status=503,
        )

    log_event(
        logger, "error", EVENT_SOURCE_FETCH_FAILED,
        source=source,
        operation=operation,
        error_category=error.error_category,
        retryable=error.retryable,
        detail=f"{type(exc).__name__}: {exc}",
    )
    return error


def normalize_db_error(
    exc: Exception,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    """Normalize a database error into a user-friendly message."""
    exc_msg = str(exc).lower()

    if "locked" in exc_msg or "busy" in exc_msg:
        error = NormalizedError(
            user_message=(
                "The database is temporarily busy. Please try again in a moment."
            ),
            error_category="db",
            retryable=True,
            http_status=503,
        )
    elif "readonly" in exc_msg or "read-only" in exc_msg or "permission" in exc_msg:
        error = NormalizedError(
            user_message=(
                "A database permission error occurred. "
                "Check APP_DB_PATH points to a writable location."
            ),
            error_category="db",
            retryable=False,
            http_status=500,
        )
    else:
        error = NormalizedError(
            user_message="A database error occurred. Please try again.",
            error_category="db",
            retryable=True,
            http_status=500,
        )

    log_event(
        logger, "error", EVENT_DB_WRITE_FAILED,
        operation=operation,
        error_category=error.error_category,
        retryable=error.retryable,
        correlation_id=correlation_id or "N/A",
        detail=str(exc),
    )
    return error


def normalize_unknown_error(
    exc: Exception,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    """Normalize an unexpected error into a safe generic message."""
    log_event(
        logger, "exception", "unknown_error",
        operation=operation,
        error_category="unknown",
        correlation_id=correlation_id or "N/A",
        detail=f"{type(exc).__name__}: {exc}",
    )
    return NormalizedError(
        user_message="An unexpected error occurred. Please try again.",
        error_category="unknown",
        retryable=False,
        http_status=500,
    )
