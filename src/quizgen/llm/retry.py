"""Retry state machine for model fallback with exponential backoff.

The generation client walks an ordered list of models. Each model gets up to
``max_retries`` attempts; only overload errors are retried (after a delay of
``initial_delay * 2 ** attempt`` seconds), anything else moves on to the next
model immediately.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from quizgen.errors import ModelOverloadedError

OVERLOAD_MARKER = "overloaded"


def is_overload_error(error: BaseException) -> bool:
    """Return ``True`` for transient upstream errors eligible for retry."""

    if isinstance(error, ModelOverloadedError):
        return True
    return OVERLOAD_MARKER in str(error).lower()


@dataclass
class RetryConfig:
    """Configuration for retry logic.

    Attributes:
        max_retries: Attempts per model (including the first one)
        initial_delay_seconds: Delay before the first retry of a model
        exponential_base: Growth factor applied per attempt
    """

    max_retries: int = 3
    initial_delay_seconds: float = 1.0
    exponential_base: float = 2.0

    def delay_for(self, attempt: int) -> float:
        return self.initial_delay_seconds * (self.exponential_base ** attempt)


@dataclass
class RetryState:
    """Position of the client in the ``models x attempts`` grid."""

    models: Sequence[str]
    config: RetryConfig = field(default_factory=RetryConfig)
    model_index: int = 0
    attempt: int = 0
    last_error: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if not self.models:
            raise ValueError("at least one model must be configured")
        if self.config.max_retries < 1:
            raise ValueError("max_retries must be a positive integer")

    @property
    def exhausted(self) -> bool:
        return self.model_index >= len(self.models)

    @property
    def current_model(self) -> str:
        if self.exhausted:
            raise IndexError("all models have been exhausted")
        return self.models[self.model_index]

    def record_failure(self, error: BaseException) -> Optional[float]:
        """Advance past a failed attempt.

        Returns the backoff delay for an overload error, or ``None`` when the
        error is terminal for the current model. An overload on the last
        attempt still yields a delay before the next model is tried.
        """

        self.last_error = error
        if not is_overload_error(error):
            self._next_model()
            return None

        delay = self.config.delay_for(self.attempt)
        self.attempt += 1
        if self.attempt >= self.config.max_retries:
            self._next_model()
        return delay

    def _next_model(self) -> None:
        self.model_index += 1
        self.attempt = 0


__all__ = ["OVERLOAD_MARKER", "RetryConfig", "RetryState", "is_overload_error"]
