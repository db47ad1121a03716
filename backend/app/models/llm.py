"""Pydantic models for analytics Q&A requests and results."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

MAX_QUESTION_CHARS = 2_000


class ErrorCategory(StrEnum):
    """Categorised LLM failure reasons."""

    auth = "auth"
    rate_limit = "rate_limit"
    network = "network"
    timeout = "timeout"
    provider = "provider"
    parsing = "parsing"
    not_configured = "not_configured"
    validation = "validation"
    unknown = "unknown"


class AskRequest(BaseModel):
    """Incoming analytics question."""

    question: str = Field(..., min_length=1, max_length=MAX_QUESTION_CHARS)

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question must not be blank")
        return v


class LLMSuccess(BaseModel):
    """Successful LLM answer."""

    status: Literal["success"] = "success"
    answer_text: str
    model_id: str | None = None
    request_id: str | None = None
    latency_ms: int = 0


class LLMFailure(BaseModel):
    """Failed LLM call."""

    status: Literal["error"] = "error"
    error_category: ErrorCategory
    user_message: str
    retryable: bool = False
    details: str | None = None


LLMResult = LLMSuccess | LLMFailure
"""Discriminated union returned by the LLM providers."""


class AskResponse(BaseModel):
    """API response envelope for an analytics question."""

    result: LLMSuccess | LLMFailure = Field(..., discriminator="status")
    prompt_metadata: dict[str, object] | None = None
