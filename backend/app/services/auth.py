"""Dashboard session context and credential check.

A session is either authenticated (with the user's email) or anonymous.
Credentials are compared in constant time against the configured
``DASHBOARD_USER_EMAIL`` / ``DASHBOARD_PASSWORD``.
"""

from __future__ import annotations

import hmac
import logging
from enum import StrEnum

from pydantic import BaseModel

from backend.app.core.settings import settings

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    authenticated = "authenticated"
    anonymous = "anonymous"


class SessionContext(BaseModel):
    """Who is looking at the dashboard."""

    model_config = {"frozen": True}

    state: SessionState = SessionState.anonymous
    user_email: str | None = None

    @classmethod
    def authenticated(cls, user_email: str) -> SessionContext:
        return cls(state=SessionState.authenticated, user_email=user_email)

    @classmethod
    def anonymous(cls) -> SessionContext:
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.authenticated


def _matches(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def authenticate(
    email: str,
    password: str,
    *,
    expected_email: str | None = None,
    expected_password: str | None = None,
) -> SessionContext:
    """Return an authenticated context on a credential match, else anonymous.

    With no configured credentials every attempt is rejected.
    """
    want_email = expected_email if expected_email is not None else settings.dashboard_user_email
    want_password = (
        expected_password if expected_password is not None else settings.dashboard_password
    )
    if not want_email or not want_password:
        logger.warning("login_rejected: reason=not_configured")
        return SessionContext.anonymous()

    normalized = email.strip().lower()
    # Both comparisons always run.
    email_ok = _matches(normalized, want_email.strip().lower())
    password_ok = _matches(password, want_password)
    if email_ok and password_ok:
        logger.info("login_succeeded: email_length=%d", len(normalized))
        return SessionContext.authenticated(normalized)

    logger.info("login_rejected: reason=bad_credentials")
    return SessionContext.anonymous()
