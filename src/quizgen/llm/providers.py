"""Completion providers reached by the generation client."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from http import HTTPStatus
from typing import Any, Iterable, List, Optional, Union

import httpx

from quizgen.errors import GenerationError, ModelOverloadedError

LOGGER = logging.getLogger(__name__)

ERROR_BODY_MAX_CHARS = 500
DEFAULT_REQUEST_TIMEOUT = 30.0

CONFIGURATION_ERROR_MESSAGE = (
    "The AI service rejected the request because of a configuration problem. "
    "Please contact support."
)
_OVERLOAD_STATUSES = {
    HTTPStatus.TOO_MANY_REQUESTS,
    HTTPStatus.SERVICE_UNAVAILABLE,
    529,
}
_AUTH_STATUSES = {HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN}


class CompletionProvider(ABC):
    """Abstract interface for text completion services."""

    @abstractmethod
    async def complete(self, model: str, prompt: str) -> str:
        """Return the text produced by ``model`` for ``prompt``."""


def _read_error_body(response: httpx.Response) -> str:
    try:
        return response.text[:ERROR_BODY_MAX_CHARS]
    except Exception:
        return ""


class HttpCompletionProvider(CompletionProvider):
    """Provider speaking the ``{model, prompt} -> {text}`` JSON protocol over HTTPS."""

    def __init__(
        self,
        endpoint_url: str,
        api_key: Optional[str],
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def complete(self, model: str, prompt: str) -> str:
        if not self._endpoint_url:
            raise GenerationError(
                "generation endpoint URL is not configured",
                user_message=CONFIGURATION_ERROR_MESSAGE,
            )

        payload = {"model": model, "prompt": prompt}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._endpoint_url, json=payload, headers=self._headers())
        except httpx.TimeoutException as error:
            raise GenerationError(f"{model}: request timed out") from error
        except httpx.TransportError as error:
            raise GenerationError(f"{model}: service unavailable ({error})") from error

        if response.is_success:
            return self._extract_text(response)

        body = _read_error_body(response)
        status = response.status_code
        if status in _OVERLOAD_STATUSES or "overloaded" in body.lower():
            raise ModelOverloadedError(f"{model} is overloaded (HTTP {status}): {body}")
        if status in _AUTH_STATUSES:
            raise GenerationError(
                f"{model}: credential rejected (HTTP {status})",
                user_message=CONFIGURATION_ERROR_MESSAGE,
            )
        raise GenerationError(f"{model}: HTTP {status}: {body}")

    @staticmethod
    def _extract_text(response: httpx.Response) -> str:
        try:
            data: Any = response.json()
        except ValueError as error:
            raise GenerationError("generation service returned a non-JSON body") from error
        if not isinstance(data, dict):
            return ""
        text = data.get("text")
        return text if isinstance(text, str) else ""


MockResponse = Union[str, BaseException]


class MockCompletionProvider(CompletionProvider):
    """Deterministic provider used for tests and offline development.

    ``responses`` are consumed in order; an exception instance is raised
    instead of returned. When the queue is exhausted ``default`` is returned.
    """

    def __init__(self, responses: Iterable[MockResponse] = (), *, default: str = "[]") -> None:
        self._responses: List[MockResponse] = list(responses)
        self._default = default
        self.calls: List[tuple[str, str]] = []

    async def complete(self, model: str, prompt: str) -> str:
        self.calls.append((model, prompt))
        if not self._responses:
            return self._default
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


__all__ = [
    "CONFIGURATION_ERROR_MESSAGE",
    "CompletionProvider",
    "HttpCompletionProvider",
    "MockCompletionProvider",
]
