"""Generation client: ordered model fallback with bounded, backed-off retries."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

from quizgen.errors import GenerationError
from quizgen.llm.providers import CompletionProvider
from quizgen.llm.retry import RetryConfig, RetryState
from quizgen.telemetry import emit_generation_attempt

LOGGER = logging.getLogger(__name__)

DEFAULT_MODELS: tuple[str, ...] = ("gemini-2.0-flash", "gemini-1.5-flash")
EMPTY_RESPONSE_MESSAGE = "AI returned an empty response"

SleepFunc = Callable[[float], Awaitable[None]]


def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise asyncio.CancelledError("generation cancelled by caller")


class GenerationClient:
    """Send a prompt to the first model that answers.

    Models are tried strictly one after another in the configured order;
    two calls are never in flight at the same time.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        models: Sequence[str] = DEFAULT_MODELS,
        *,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        if not models:
            raise ValueError("at least one model must be configured")
        self._provider = provider
        self._models = tuple(models)
        self._retry_config = RetryConfig(max_retries=max_retries, initial_delay_seconds=initial_delay)
        self._sleep = sleep

    @property
    def provider(self) -> CompletionProvider:
        return self._provider

    @property
    def models(self) -> tuple[str, ...]:
        return self._models

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry_config

    async def generate(self, prompt: str, *, cancel_event: Optional[asyncio.Event] = None) -> str:
        """Return the raw text of the first successful completion.

        Raises:
            GenerationError: when every model and attempt has failed; the last
                observed error is propagated (wrapped when it is not already a
                :class:`GenerationError`).
        """

        state = RetryState(models=self._models, config=self._retry_config)

        while not state.exhausted:
            model = state.current_model
            attempt = state.attempt
            _check_cancelled(cancel_event)

            started = time.perf_counter()
            try:
                text = await self._provider.complete(model, prompt)
                if not text or not text.strip():
                    raise GenerationError(EMPTY_RESPONSE_MESSAGE)
            except Exception as error:
                delay = state.record_failure(error)
                emit_generation_attempt(
                    model=model,
                    attempt=attempt + 1,
                    max_retries=self._retry_config.max_retries,
                    duration_ms=(time.perf_counter() - started) * 1000.0,
                    outcome="overloaded" if delay is not None else "failed",
                    delay_seconds=delay,
                    error=error,
                )
                if delay is None:
                    LOGGER.warning("Model %s failed with a non-retryable error: %s", model, error)
                    continue
                LOGGER.info(
                    "Model %s overloaded (attempt %s/%s); waiting %.1fs",
                    model,
                    attempt + 1,
                    self._retry_config.max_retries,
                    delay,
                )
                _check_cancelled(cancel_event)
                await self._sleep(delay)
                continue

            emit_generation_attempt(
                model=model,
                attempt=attempt + 1,
                max_retries=self._retry_config.max_retries,
                duration_ms=(time.perf_counter() - started) * 1000.0,
                outcome="success",
            )
            LOGGER.info("Model %s produced %s characters", model, len(text))
            return text

        last_error = state.last_error
        if isinstance(last_error, GenerationError):
            raise last_error
        raise GenerationError(
            f"all models failed; last error: {last_error}"
        ) from last_error


__all__ = ["DEFAULT_MODELS", "EMPTY_RESPONSE_MESSAGE", "GenerationClient"]
