"""Generation client and the completion providers it talks to."""

from .client import DEFAULT_MODELS, GenerationClient
from .providers import CompletionProvider, HttpCompletionProvider, MockCompletionProvider
from .retry import RetryConfig, RetryState, is_overload_error

__all__ = [
    "CompletionProvider",
    "DEFAULT_MODELS",
    "GenerationClient",
    "HttpCompletionProvider",
    "MockCompletionProvider",
    "RetryConfig",
    "RetryState",
    "is_overload_error",
]
