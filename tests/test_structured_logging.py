"""Tests for the structured logging baseline and event taxonomy.

Covers:
  - Logs include event_name and component
  - correlation_id included consistently in LLM calls
  - Secrets do not appear in output
  - Only lengths/ids logged, not content
  - db_write_failed includes error_category
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
from backend.app.core.logging import (
    EVENT_APP_START,
    EVENT_CHANGE_DETECTED,
    EVENT_CONFIG_LOADED,
    EVENT_DASHBOARD_REFRESH_DISCARDED,
    EVENT_DASHBOARD_REFRESHED,
    EVENT_DB_INITIALIZED,
    EVENT_DB_MIGRATION_FAILED,
    EVENT_DB_MIGRATION_STARTED,
    EVENT_DB_MIGRATION_SUCCEEDED,
    EVENT_DB_WRITE_FAILED,
    EVENT_LLM_CALL_FAILURE,
    EVENT_LLM_CALL_START,
    EVENT_LLM_CALL_SUCCESS,
    EVENT_PROMPT_ASSEMBLED,
    EVENT_REPORT_EXPORTED,
    EVENT_SOURCE_FETCH_FAILED,
    EVENT_SOURCE_FETCH_START,
    EVENT_SOURCE_FETCH_SUCCESS,
    EVENT_SOURCE_RETRY,
    log_event,
    setup_logging,
)
from backend.app.models.llm import LLMSuccess
from backend.app.models.post import Post

# ---------------------------------------------------------------------------
# Event name and component
# ---------------------------------------------------------------------------


class TestLogEventFormat:
    def test_log_event_emits_event_name(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        test_logger = logging.getLogger("test.component")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "test_event", key="value")
        assert "test_event: key=value" in caplog.text

    def test_log_event_includes_kwargs(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        test_logger = logging.getLogger("test.component")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "my_event", foo="bar", count=42)
        assert "foo=bar" in caplog.text
        assert "count=42" in caplog.text

    def test_log_event_without_kwargs(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        test_logger = logging.getLogger("test.component")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "bare_event")
        assert caplog.records[-1].getMessage() == "bare_event"

    def test_log_event_component_in_record(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        test_logger = logging.getLogger("backend.app.services.dashboard")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "test_event")
        assert any(
            r.name == "backend.app.services.dashboard" for r in caplog.records
        )

    def test_log_event_warning_level(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        test_logger = logging.getLogger("test.warn")
        with caplog.at_level(logging.WARNING):
            log_event(test_logger, "warning", "warn_event", detail="x")
        assert "warn_event" in caplog.text
        assert caplog.records[0].levelname == "WARNING"

    def test_log_event_error_level(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        test_logger = logging.getLogger("test.err")
        with caplog.at_level(logging.ERROR):
            log_event(test_logger, "error", "error_event")
        assert caplog.records[0].levelname == "ERROR"


class TestSetupLogging:
    def test_handler_added_once(self) -> None:
        setup_logging()
        setup_logging()
        ours = [h for h in logging.getLogger().handlers if getattr(h, "_social_pulse", False)]
        assert len(ours) == 1


# ---------------------------------------------------------------------------
# correlation_id in LLM calls
# ---------------------------------------------------------------------------


class TestCorrelationId:
    def test_forwarder_logs_correlation_id(self) -> None:
        """ask() logs correlation_id in llm_call_start and the result event."""
        from backend.app.services.qa_forwarder import ask

        mock_provider = MagicMock()
        mock_provider.provider_name = "mock"
        mock_provider.call.return_value = LLMSuccess(
            answer_text="answer",
            model_id="mock-v1",
            request_id="req-123",
            latency_ms=10,
        )

        with patch("backend.app.services.qa_forwarder.logger") as mock_logger:
            ask("How are we doing?", {}, [], provider=mock_provider)

        call_text = " ".join(str(c) for c in mock_logger.method_calls)
        assert call_text.count("correlation_id=") >= 2


# ---------------------------------------------------------------------------
# Secrets never logged
# ---------------------------------------------------------------------------


class TestNoSecretsInLogs:
    def test_safe_dump_masks_keys(self) -> None:
        from backend.app.core.settings import Settings

        s = Settings(
            anthropic_api_key="sk-ant-TOPSECRET",
            openai_api_key="sk-ALSOSECRET",
            supabase_key="sb-SECRETKEY",
            dashboard_password="hunter2-SECRET",
            _env_file=None,  # type: ignore[call-arg]
        )
        dump_str = str(s.safe_dump())
        assert "TOPSECRET" not in dump_str
        assert "ALSOSECRET" not in dump_str
        assert "SECRETKEY" not in dump_str
        assert "hunter2" not in dump_str

    def test_log_event_with_plain_values(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        test_logger = logging.getLogger("test.secrets")
        with caplog.at_level(logging.INFO):
            log_event(
                test_logger, "info", "config_loaded",
                db_path="/data/app.db", debug=False,
            )
        assert "sk-" not in caplog.text


# ---------------------------------------------------------------------------
# Lengths and ids, not content
# ---------------------------------------------------------------------------


class TestContentNotLogged:
    def test_repository_logs_lengths_not_content(self) -> None:
        """create_post logs title_len, not the title."""
        from datetime import UTC, datetime

        from backend.app.models.post import PostCreate
        from backend.app.services.post_repository import create_post

        mock_db = MagicMock()

        with patch("backend.app.services.post_repository.logger") as mock_logger:
            create_post(
                mock_db,
                PostCreate(title="Our secret product roadmap for next year"),
                now=datetime.now(UTC),
            )

        call_text = " ".join(str(c) for c in mock_logger.method_calls)
        assert "title_len=" in call_text
        assert "secret product roadmap" not in call_text

    def test_prompt_builder_logs_length(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        from backend.app.services.prompt_builder import build_qa_prompt

        with caplog.at_level(logging.INFO):
            build_qa_prompt(
                "Is our confidential launch plan working?",
                {"total_posts": 1},
                [Post(id=1, title="Internal teaser")],
            )
        assert "prompt_assembled" in caplog.text
        assert "length=" in caplog.text
        assert "confidential launch plan" not in caplog.text
        assert "Internal teaser" not in caplog.text


# ---------------------------------------------------------------------------
# db_write_failed includes error_category
# ---------------------------------------------------------------------------


class TestDbWriteFailedCategory:
    def test_log_event_with_error_category(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        test_logger = logging.getLogger("test.db")
        with caplog.at_level(logging.ERROR):
            log_event(
                test_logger, "error", "db_write_failed",
                operation="create_post", error_category="db",
            )
        assert "db_write_failed" in caplog.text
        assert "error_category=db" in caplog.text
        assert "operation=create_post" in caplog.text


# ---------------------------------------------------------------------------
# Event taxonomy completeness
# ---------------------------------------------------------------------------


class TestEventTaxonomy:
    def test_all_events_defined(self) -> None:
        assert EVENT_APP_START == "app_start"
        assert EVENT_CONFIG_LOADED == "config_loaded"
        assert EVENT_DB_INITIALIZED == "db_initialized"
        assert EVENT_DB_MIGRATION_STARTED == "db_migration_started"
        assert EVENT_DB_MIGRATION_SUCCEEDED == "db_migration_succeeded"
        assert EVENT_DB_MIGRATION_FAILED == "db_migration_failed"
        assert EVENT_DB_WRITE_FAILED == "db_write_failed"
        assert EVENT_SOURCE_FETCH_START == "source_fetch_start"
        assert EVENT_SOURCE_FETCH_SUCCESS == "source_fetch_success"
        assert EVENT_SOURCE_FETCH_FAILED == "source_fetch_failed"
        assert EVENT_SOURCE_RETRY == "source_retry"
        assert EVENT_CHANGE_DETECTED == "change_detected"
        assert EVENT_DASHBOARD_REFRESHED == "dashboard_refreshed"
        assert EVENT_DASHBOARD_REFRESH_DISCARDED == "dashboard_refresh_discarded"
        assert EVENT_PROMPT_ASSEMBLED == "prompt_assembled"
        assert EVENT_LLM_CALL_START == "llm_call_start"
        assert EVENT_LLM_CALL_SUCCESS == "llm_call_success"
        assert EVENT_LLM_CALL_FAILURE == "llm_call_failure"
        assert EVENT_REPORT_EXPORTED == "report_exported"
