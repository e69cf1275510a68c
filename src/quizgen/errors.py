"""Classified errors surfaced by the quiz generation pipeline."""
from __future__ import annotations

__all__ = [
    "ExtractionError",
    "GenerationError",
    "ModelOverloadedError",
    "NetworkError",
    "ParseError",
    "QuizGenerationError",
    "ValidationError",
]


class QuizGenerationError(RuntimeError):
    """Base exception for every failure that reaches the caller of a run.

    ``message`` is the technical description used in logs, ``user_message``
    is the human readable text suggesting a remedy.
    """

    kind = "error"
    default_user_message = "Failed to generate the quiz. Please try again."

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.user_message = user_message or self.default_user_message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.user_message}


class ExtractionError(QuizGenerationError):
    """Raised when no usable text can be read from the document."""

    kind = "extraction"
    default_user_message = "The document could not be read. Please try a different PDF."

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(
            message,
            user_message=user_message or f"The document could not be read: {message}",
        )


class NetworkError(QuizGenerationError):
    """Raised when the remote document cannot be downloaded."""

    kind = "network"
    default_user_message = (
        "The document could not be downloaded from its URL. "
        "Try uploading the file directly instead."
    )


class GenerationError(QuizGenerationError):
    """Raised when the generative model fails to produce a response."""

    kind = "generation"
    default_user_message = "The AI service could not generate questions. Please try again later."


class ModelOverloadedError(GenerationError):
    """Transient upstream failure that is eligible for backoff and retry."""

    default_user_message = "The AI service is overloaded right now. Please try again in a moment."


class ParseError(QuizGenerationError):
    """Raised when the model output cannot be repaired into a JSON array."""

    kind = "parse"
    default_user_message = "The AI returned an invalid JSON format. Please try again."


class ValidationError(QuizGenerationError):
    """Raised when normalisation leaves no usable question."""

    kind = "validation"
    default_user_message = "No valid questions were generated. Please try again."
