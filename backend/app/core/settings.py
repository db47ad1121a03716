"""Application settings loaded from environment / .env file.

Config precedence (highest to lowest):
    1. Environment variables
    2. ``.env`` file in project root
    3. Defaults defined in this module

Secrets (API keys, Supabase key, YouTube key, dashboard password) are never exposed in
``repr()``, ``str()``, or logs.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root is three levels up from this file (backend/app/core/settings.py)
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_DEFAULT_DB_PATH = str(_PROJECT_ROOT / "data" / "app.db")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_host: str = "127.0.0.1"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Local SQLite mirror — override via APP_DB_PATH env var
    app_db_path: str = _DEFAULT_DB_PATH

    @property
    def database_url(self) -> str:
        """SQLite connection URL derived from ``app_db_path``."""
        return f"sqlite:///{self.app_db_path}"

    # Record source
    record_source: Literal["sqlite", "supabase"] = "sqlite"
    supabase_url: str | None = None
    supabase_key: str | None = Field(default=None, repr=False)
    supabase_table: str = "posts"
    source_timeout_seconds: int = Field(default=10, ge=1)
    source_retry_backoff_seconds: float = Field(default=0.5, ge=0)
    seed_sample_posts: bool = True

    # Change notification polling
    change_poll_enabled: bool = False
    change_poll_interval_seconds: int = Field(default=30, ge=1)

    # Scoring
    score_tiebreak_enabled: bool = False
    score_tiebreak_spread: float = Field(default=2.0, ge=0)

    # LLM provider keys (at most one should be set)
    anthropic_api_key: str | None = Field(default=None, repr=False)
    openai_api_key: str | None = Field(default=None, repr=False)
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    llm_timeout_seconds: int = Field(default=10, ge=1)

    # YouTube channel sync
    youtube_api_key: str | None = Field(default=None, repr=False)
    youtube_channel_id: str | None = None
    youtube_max_results: int = Field(default=10, ge=1, le=50)

    # Dashboard login
    dashboard_user_email: str | None = None
    dashboard_password: str | None = Field(default=None, repr=False)

    @property
    def is_llm_configured(self) -> bool:
        """Return True if at least one LLM API key is set."""
        return bool(self.anthropic_api_key or self.openai_api_key)

    @property
    def is_supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def is_login_configured(self) -> bool:
        return bool(self.dashboard_user_email and self.dashboard_password)

    @property
    def is_youtube_configured(self) -> bool:
        return bool(self.youtube_api_key and self.youtube_channel_id)

    @model_validator(mode="after")
    def _validate_db_path(self) -> "Settings":
        """Ensure the DB path parent directory exists or can be created."""
        parent = Path(self.app_db_path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = (
                f"Cannot create database directory '{parent}': {exc}. "
                f"Set APP_DB_PATH to a writable location."
            )
            raise ValueError(msg) from exc
        return self

    def safe_dump(self) -> dict[str, object]:
        """Return settings dict with secrets masked — safe for logging."""
        return {
            "api_host": self.api_host,
            "api_port": self.api_port,
            "debug": self.debug,
            "log_level": self.log_level,
            "app_db_path": self.app_db_path,
            "record_source": self.record_source,
            "supabase_table": self.supabase_table,
            "is_supabase_configured": self.is_supabase_configured,
            "source_timeout_seconds": self.source_timeout_seconds,
            "change_poll_enabled": self.change_poll_enabled,
            "score_tiebreak_enabled": self.score_tiebreak_enabled,
            "llm_timeout_seconds": self.llm_timeout_seconds,
            "is_llm_configured": self.is_llm_configured,
            "is_login_configured": self.is_login_configured,
            "is_youtube_configured": self.is_youtube_configured,
            "youtube_channel_id": self.youtube_channel_id,
        }


settings = Settings()
