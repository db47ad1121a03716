"""Analytics Q&A forwarder with a provider-agnostic interface.

Providers
---------
- **MockProvider** — deterministic stub for tests and when no key is configured.
- **AnthropicProvider** — uses the ``anthropic`` SDK (requires ``ANTHROPIC_API_KEY``).
- **OpenAIProvider** — uses the ``openai`` SDK (requires ``OPENAI_API_KEY``).
  ``OPENAI_BASE_URL`` points it at any OpenAI-compatible endpoint such as Groq.

The module exposes :func:`get_provider` (factory) and :func:`ask` (builds
the prompt, calls the provider with one retry on transient failures, and
returns a standardised :class:`LLMResult`).
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Protocol, runtime_checkable

from backend.app.core.logging import (
    EVENT_LLM_CALL_FAILURE,
    EVENT_LLM_CALL_START,
    EVENT_LLM_CALL_SUCCESS,
    log_event,
)
from backend.app.core.retry import RetryPolicy, SleepFn, call_with_retry
from backend.app.core.settings import settings
from backend.app.models.llm import ErrorCategory, LLMFailure, LLMResult, LLMSuccess
from backend.app.models.post import Post
from backend.app.services.prompt_builder import SYSTEM_PROMPT, build_qa_prompt

logger = logging.getLogger(__name__)

FORWARDER_FAILURE_MESSAGE = (
    "Could not reach the analytics assistant. Please try again in a moment."
)
MAX_ANSWER_TOKENS = 1024


# ---------------------------------------------------------------------------
# Provider protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class LLMProvider(Protocol):
    """Minimal interface every LLM provider must satisfy."""

    @property
    def provider_name(self) -> str: ...

    def call(self, system_prompt: str, prompt_text: str, timeout_seconds: int) -> LLMResult:
        """Send the prompts to the LLM and return a standardised result."""
        ...


# ---------------------------------------------------------------------------
# Mock provider (tests + unconfigured fallback)
# ---------------------------------------------------------------------------


class MockProvider:
    """Returns a canned answer.  Used in tests and when no API key is set."""

    provider_name: str = "mock"

    def call(self, system_prompt: str, prompt_text: str, timeout_seconds: int) -> LLMResult:
        return LLMSuccess(
            answer_text=(
                "This is a mock answer. Configure an LLM API key to get real "
                "analysis of your engagement data."
            ),
            model_id="mock-v1",
            request_id=str(uuid.uuid4()),
            latency_ms=0,
        )


# ---------------------------------------------------------------------------
# Anthropic provider
# ---------------------------------------------------------------------------


class AnthropicProvider:
    """Calls the Anthropic Messages API via the ``anthropic`` SDK."""

    provider_name: str = "anthropic"

    def __init__(self, api_key: str, *, model: str | None = None) -> None:
        import anthropic

        self._client = anthropic.Anthropic(api_key=api_key)
        self._model = model or settings.anthropic_model

    def call(self, system_prompt: str, prompt_text: str, timeout_seconds: int) -> LLMResult:
        import anthropic

        request_id = str(uuid.uuid4())
        start = time.monotonic()

        try:
            response = self._client.messages.create(
                model=self._model,
                max_tokens=MAX_ANSWER_TOKENS,
                system=system_prompt,
                messages=[{"role": "user", "content": prompt_text}],
                timeout=float(timeout_seconds),
            )
        except anthropic.AuthenticationError:
            return LLMFailure(
                error_category=ErrorCategory.auth,
                user_message="Anthropic API key is invalid or expired.",
                retryable=False,
                details=request_id,
            )
        except anthropic.RateLimitError:
            return LLMFailure(
                error_category=ErrorCategory.rate_limit,
                user_message="Anthropic rate limit reached. Please wait and retry.",
                retryable=True,
                details=request_id,
            )
        except anthropic.APITimeoutError:
            return LLMFailure(
                error_category=ErrorCategory.timeout,
                user_message="Request to Anthropic timed out.",
                retryable=True,
                details=request_id,
            )
        except anthropic.APIConnectionError:
            return LLMFailure(
                error_category=ErrorCategory.network,
                user_message="Could not connect to Anthropic API.",
                retryable=True,
                details=request_id,
            )
        except anthropic.APIStatusError as exc:
            return LLMFailure(
                error_category=ErrorCategory.provider,
                user_message=f"Anthropic API error (HTTP {exc.status_code}).",
                retryable=exc.status_code >= 500,
                details=request_id,
            )
        except Exception as exc:
            return LLMFailure(
                error_category=ErrorCategory.unknown,
                user_message="Unexpected error calling Anthropic.",
                retryable=False,
                details=f"{request_id}: {type(exc).__name__}",
            )

        latency_ms = int((time.monotonic() - start) * 1000)

        try:
            text_block = next(
                (b for b in response.content if b.type == "text"),
                None,
            )
            answer_text = (text_block.text if text_block else "").strip()
        except Exception:
            return LLMFailure(
                error_category=ErrorCategory.parsing,
                user_message="Failed to parse Anthropic response.",
                retryable=False,
                details=request_id,
            )

        if not answer_text:
            return LLMFailure(
                error_category=ErrorCategory.parsing,
                user_message="No answer generated: model returned empty text.",
                retryable=False,
                details=request_id,
            )

        return LLMSuccess(
            answer_text=answer_text,
            model_id=response.model,
            request_id=request_id,
            latency_ms=latency_ms,
        )


# ---------------------------------------------------------------------------
# OpenAI-compatible provider
# ---------------------------------------------------------------------------


class OpenAIProvider:
    """Calls a Chat Completions endpoint via the ``openai`` SDK."""

    provider_name: str = "openai"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        model: str | None = None,
    ) -> None:
        import openai

        self._client = openai.OpenAI(api_key=api_key, base_url=base_url)
        self._model = model or settings.openai_model

    def call(self, system_prompt: str, prompt_text: str, timeout_seconds: int) -> LLMResult:
        import openai

        request_id = str(uuid.uuid4())
        start = time.monotonic()

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt_text},
                ],
                max_tokens=MAX_ANSWER_TOKENS,
                timeout=float(timeout_seconds),
            )
        except openai.AuthenticationError:
            return LLMFailure(
                error_category=ErrorCategory.auth,
                user_message="OpenAI API key is invalid or expired.",
                retryable=False,
                details=request_id,
            )
        except openai.RateLimitError:
            return LLMFailure(
                error_category=ErrorCategory.rate_limit,
                user_message="OpenAI rate limit reached. Please wait and retry.",
                retryable=True,
                details=request_id,
            )
        except openai.APITimeoutError:
            return LLMFailure(
                error_category=ErrorCategory.timeout,
                user_message="Request to OpenAI timed out.",
                retryable=True,
                details=request_id,
            )
        except openai.APIConnectionError:
            return LLMFailure(
                error_category=ErrorCategory.network,
                user_message="Could not connect to OpenAI API.",
                retryable=True,
                details=request_id,
            )
        except openai.APIStatusError as exc:
            return LLMFailure(
                error_category=ErrorCategory.provider,
                user_message=f"OpenAI API error (HTTP {exc.status_code}).",
                retryable=exc.status_code >= 500,
                details=request_id,
            )
        except Exception as exc:
            return LLMFailure(
                error_category=ErrorCategory.unknown,
                user_message="Unexpected error calling OpenAI.",
                retryable=False,
                details=f"{request_id}: {type(exc).__name__}",
            )

        latency_ms = int((time.monotonic() - start) * 1000)

        try:
            choice = response.choices[0] if response.choices else None
            answer_text = (choice.message.content if choice and choice.message else "").strip()
        except Exception:
            return LLMFailure(
                error_category=ErrorCategory.parsing,
                user_message="Failed to parse OpenAI response.",
                retryable=False,
                details=request_id,
            )

        if not answer_text:
            return LLMFailure(
                error_category=ErrorCategory.parsing,
                user_message="No answer generated: model returned empty text.",
                retryable=False,
                details=request_id,
            )

        return LLMSuccess(
            answer_text=answer_text,
            model_id=response.model,
            request_id=request_id,
            latency_ms=latency_ms,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def get_provider(
    *,
    anthropic_key: str | None = None,
    openai_key: str | None = None,
) -> LLMProvider:
    """Return the best available provider based on configured API keys.

    Resolution order: Anthropic > OpenAI-compatible > Mock.
    """
    ak = anthropic_key if anthropic_key is not None else settings.anthropic_api_key
    ok = openai_key if openai_key is not None else settings.openai_api_key

    if ak:
        logger.info("LLM provider: Anthropic")
        return AnthropicProvider(api_key=ak)
    if ok:
        logger.info("LLM provider: OpenAI-compatible base_url=%s", settings.openai_base_url or "default")
        return OpenAIProvider(api_key=ok, base_url=settings.openai_base_url)
    logger.warning("No LLM API key configured, using MockProvider")
    return MockProvider()


# ---------------------------------------------------------------------------
# High-level orchestrator
# ---------------------------------------------------------------------------


def ask(
    question: str,
    summary: dict[str, object],
    recent_posts: list[Post],
    *,
    provider: LLMProvider | None = None,
    policy: RetryPolicy | None = None,
    sleep_fn: SleepFn | None = None,
) -> tuple[LLMResult, dict[str, object]]:
    """Build prompt, call LLM, return ``(result, prompt_metadata)``.

    A retryable failure is retried per *policy* (one retry by default).
    If *provider* is ``None`` the default provider is resolved via
    :func:`get_provider`.
    """
    correlation_id = str(uuid.uuid4())

    prompt_text, prompt_metadata = build_qa_prompt(question, summary, recent_posts)

    if provider is None:
        provider = get_provider()

    # Never log question text or secrets: lengths and ids only.
    log_event(
        logger, "info", EVENT_LLM_CALL_START,
        correlation_id=correlation_id,
        provider=provider.provider_name,
        question_length=len(question),
        prompt_length=len(prompt_text),
    )

    timeout = settings.llm_timeout_seconds
    attempts = 0

    def _call() -> LLMResult:
        nonlocal attempts
        attempts += 1
        return provider.call(SYSTEM_PROMPT, prompt_text, timeout)

    result = call_with_retry(
        _call,
        operation=f"llm_call:{correlation_id}",
        policy=policy,
        is_retryable=lambda _exc: False,
        retry_if_result=lambda r: isinstance(r, LLMFailure) and r.retryable,
        sleep_fn=sleep_fn,
    )

    prompt_metadata["attempts"] = attempts

    if isinstance(result, LLMSuccess):
        log_event(
            logger, "info", EVENT_LLM_CALL_SUCCESS,
            correlation_id=correlation_id,
            model_id=result.model_id,
            latency_ms=result.latency_ms,
            attempts=attempts,
        )
    else:
        log_event(
            logger, "warning", EVENT_LLM_CALL_FAILURE,
            correlation_id=correlation_id,
            error_category=result.error_category,
            retryable=result.retryable,
            attempts=attempts,
        )

    return result, prompt_metadata
