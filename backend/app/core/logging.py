"""Structured logging baseline and event taxonomy.

Event taxonomy (minimum set)::

    app_start                   — application process starting
    config_loaded               — settings resolved successfully
    db_initialized              — engine created, DB path resolved
    db_migration_started        — alembic upgrade beginning
    db_migration_succeeded      — alembic upgrade completed
    db_migration_failed         — alembic upgrade error (with traceback)
    db_write_failed             — repository write error
    source_fetch_start          — record source fetch initiated
    source_fetch_success        — record source returned rows
    source_fetch_failed         — record source fetch failed after retries
    source_retry                — record source / LLM call being retried
    change_detected             — change notification emitted
    dashboard_refreshed         — fetch + compute pipeline finished
    dashboard_refresh_discarded — an older refresh finished after a newer one
    prompt_assembled            — Q&A prompt built (lengths only)
    llm_call_start              — LLM provider call initiated
    llm_call_success            — LLM call returned an answer
    llm_call_failure            — LLM call failed
    report_exported             — HTML report rendered
    youtube_sync_start          — channel video import initiated
    youtube_sync_success        — videos fetched and written (counts only)
    youtube_sync_failed         — YouTube API or write error

Rules:
    - Never log API keys or secrets.
    - Log record IDs and content *lengths*, not raw content (questions included).

Usage::

    from backend.app.core.logging import log_event
    log_event(logger, "warning", "source_fetch_failed",
              source="supabase", error_category="timeout")
"""

import logging
import sys

# Canonical event names for grep-ability and observability.
EVENT_APP_START = "app_start"
EVENT_CONFIG_LOADED = "config_loaded"
EVENT_DB_INITIALIZED = "db_initialized"
EVENT_DB_MIGRATION_STARTED = "db_migration_started"
EVENT_DB_MIGRATION_SUCCEEDED = "db_migration_succeeded"
EVENT_DB_MIGRATION_FAILED = "db_migration_failed"
EVENT_DB_WRITE_FAILED = "db_write_failed"
EVENT_SOURCE_FETCH_START = "source_fetch_start"
EVENT_SOURCE_FETCH_SUCCESS = "source_fetch_success"
EVENT_SOURCE_FETCH_FAILED = "source_fetch_failed"
EVENT_SOURCE_RETRY = "source_retry"
EVENT_CHANGE_DETECTED = "change_detected"
EVENT_DASHBOARD_REFRESHED = "dashboard_refreshed"
EVENT_DASHBOARD_REFRESH_DISCARDED = "dashboard_refresh_discarded"
EVENT_PROMPT_ASSEMBLED = "prompt_assembled"
EVENT_LLM_CALL_START = "llm_call_start"
EVENT_LLM_CALL_SUCCESS = "llm_call_success"
EVENT_LLM_CALL_FAILURE = "llm_call_failure"
EVENT_REPORT_EXPORTED = "report_exported"
EVENT_YOUTUBE_SYNC_START = "youtube_sync_start"
EVENT_YOUTUBE_SYNC_SUCCESS = "youtube_sync_success"
EVENT_YOUTUBE_SYNC_FAILED = "youtube_sync_failed"


_HANDLER_ATTR = "_social_pulse"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logger with a simple structured format.

    Safe to call multiple times — only adds the handler once and
    restores it if Alembic's ``fileConfig()`` removes it.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Check if our handler is already attached
    for h in root.handlers:
        if getattr(h, _HANDLER_ATTR, False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def log_event(
    logger: logging.Logger,
    level: str,
    event_name: str,
    **kwargs: object,
) -> None:
    """Emit a structured log line with consistent ``event_name: key=value`` format.

    Parameters
    ----------
    logger:
        The logger instance (provides the component via ``logger.name``).
    level:
        Log level name — ``"info"``, ``"warning"``, ``"error"``, or ``"exception"``.
    event_name:
        Canonical event name (e.g. ``"source_fetch_failed"``).
    **kwargs:
        Arbitrary key-value pairs appended as ``key=value``.
    """
    parts = " ".join(f"{k}={v}" for k, v in kwargs.items())
    message = f"{event_name}: {parts}" if parts else event_name
    log_fn = getattr(logger, level, logger.info)
    log_fn(message)
