"""Environment driven settings for the quiz generation service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from quizgen.extract import DEFAULT_CORS_PROXY
from quizgen.llm.client import DEFAULT_MODELS
from quizgen.prompt_builder import DEFAULT_MAX_DOCUMENT_CHARS

LOGGER = logging.getLogger(__name__)

_PROVIDERS = {"http", "mock"}


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    if not items:
        LOGGER.warning("%s is empty; using default %s", name, ", ".join(default))
        return default
    return items


@dataclass(slots=True)
class Settings:
    """Configuration injected into the pipeline factories."""

    api_key: Optional[str] = None
    endpoint_url: str = ""
    models: tuple[str, ...] = field(default_factory=lambda: DEFAULT_MODELS)
    provider: str = "http"
    max_retries: int = 3
    initial_retry_delay_ms: int = 1000
    request_timeout: float = 30.0
    download_timeout: float = 30.0
    cors_proxy: Optional[str] = DEFAULT_CORS_PROXY
    max_document_chars: int = DEFAULT_MAX_DOCUMENT_CHARS
    analyze_delay_ms: int = 0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        provider = (_env_str("QUIZGEN_PROVIDER", "http") or "http").lower()
        if provider not in _PROVIDERS:
            LOGGER.warning("Unknown QUIZGEN_PROVIDER %s; falling back to http", provider)
            provider = "http"

        max_retries = _env_int("QUIZGEN_MAX_RETRIES", 3)
        if max_retries < 1:
            LOGGER.warning("QUIZGEN_MAX_RETRIES must be positive; using 1")
            max_retries = 1

        return cls(
            api_key=_env_str("QUIZGEN_API_KEY"),
            endpoint_url=_env_str("QUIZGEN_ENDPOINT_URL", "") or "",
            models=_env_list("QUIZGEN_MODELS", DEFAULT_MODELS),
            provider=provider,
            max_retries=max_retries,
            initial_retry_delay_ms=_env_int("QUIZGEN_INITIAL_RETRY_DELAY_MS", 1000),
            request_timeout=_env_float("QUIZGEN_REQUEST_TIMEOUT", 30.0),
            download_timeout=_env_float("QUIZGEN_DOWNLOAD_TIMEOUT", 30.0),
            cors_proxy=_env_str("QUIZGEN_CORS_PROXY", DEFAULT_CORS_PROXY),
            max_document_chars=_env_int("QUIZGEN_MAX_DOCUMENT_CHARS", DEFAULT_MAX_DOCUMENT_CHARS),
            analyze_delay_ms=_env_int("QUIZGEN_ANALYZE_DELAY_MS", 0),
            log_level=_env_str("QUIZGEN_LOG_LEVEL", "INFO") or "INFO",
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return settings read once from the environment."""

    return Settings.from_env()


__all__ = ["Settings", "get_settings"]
