"""Utilities for turning a document source into plain text."""
from __future__ import annotations

import asyncio
import io
import logging
import re
from typing import List, Optional
from urllib.parse import quote

import httpx
from pdfminer.high_level import extract_pages
from pdfminer.layout import LTTextContainer
from pdfminer.pdfparser import PDFSyntaxError
from pdfminer.psparser import PSException
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from quizgen.errors import ExtractionError, NetworkError
from quizgen.models import BinarySource, DocumentSource, RemoteSource
from quizgen.telemetry import emit_fetch_event, traced_duration

LOGGER = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
DEFAULT_DOWNLOAD_TIMEOUT = 30.0
DEFAULT_CORS_PROXY = "https://api.allorigins.win/raw?url={url}"

NO_TEXT_MESSAGE = (
    "No text could be extracted from this PDF; it is likely image-based or password-protected."
)
CORS_GUIDANCE_MESSAGE = (
    "The document could not be fetched from its URL, most likely because the host blocks "
    "cross-origin downloads. Please upload the PDF directly instead of using a URL."
)
_HTTP_STATUS_MESSAGES = {
    400: "The document URL is invalid. Please check the link and try again.",
    403: (
        "Access to the document was denied. Make sure the link is public "
        "or upload the file directly."
    ),
    404: "The document could not be found at this URL. It may have been moved or deleted.",
}

_WHITESPACE_RE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _ensure_readable(data: bytes) -> None:
    try:
        reader = PdfReader(io.BytesIO(data))
    except (PdfReadError, ValueError, OSError) as error:
        raise ExtractionError(f"the file is not a readable PDF ({error})") from error

    if reader.is_encrypted:
        try:
            unlocked = reader.decrypt("")
        except Exception as error:  # pragma: no cover - depends on crypto backend
            raise ExtractionError(NO_TEXT_MESSAGE) from error
        if not unlocked:
            raise ExtractionError(NO_TEXT_MESSAGE)


def extract_page_texts(data: bytes) -> List[str]:
    """Return the text of each page in order, text runs joined with single spaces."""

    _ensure_readable(data)
    pages: List[str] = []
    try:
        for page_layout in extract_pages(io.BytesIO(data)):
            runs = [
                element.get_text()
                for element in page_layout
                if isinstance(element, LTTextContainer)
            ]
            pages.append(_collapse(" ".join(runs)))
    except (PDFSyntaxError, PSException) as error:
        raise ExtractionError(f"the PDF structure is damaged ({error})") from error
    return pages


def extract_pdf_text(data: bytes) -> str:
    """Extract the text of a PDF document held in memory.

    Pages are joined with a newline. No OCR is attempted: a document without
    a text layer is reported as an :class:`ExtractionError` instead of an empty
    success.
    """

    if not data:
        raise ExtractionError("the document is empty")

    text = "\n".join(extract_page_texts(data))
    if not text.strip():
        raise ExtractionError(NO_TEXT_MESSAGE)
    LOGGER.info("Extracted %s characters from PDF", len(text))
    return text


def has_pdf_signature(data: bytes) -> bool:
    return data[: len(PDF_MAGIC)] == PDF_MAGIC


class DocumentExtractor:
    """Resolve a :data:`DocumentSource` into extracted text.

    Remote documents are downloaded with a single relay-proxy fallback when
    the direct request fails at the transport level.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
        cors_proxy: Optional[str] = DEFAULT_CORS_PROXY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._cors_proxy = cors_proxy
        self._transport = transport

    async def extract(
        self,
        source: DocumentSource,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        if isinstance(source, BinarySource):
            with traced_duration("extract.pdf", logger=LOGGER, filename=source.filename):
                return extract_pdf_text(source.data)
        if isinstance(source, RemoteSource):
            data = await self.fetch(source.url, cancel_event=cancel_event)
            with traced_duration("extract.pdf", logger=LOGGER, url=source.url):
                return extract_pdf_text(data)
        raise ExtractionError(f"unsupported document source: {type(source).__name__}")

    async def fetch(self, url: str, *, cancel_event: asyncio.Event | None = None) -> bytes:
        """Download a remote PDF and verify its signature before returning it."""

        if not url or not url.strip():
            raise NetworkError("empty document URL", user_message=_HTTP_STATUS_MESSAGES[400])

        async with self._client() as client:
            try:
                response = await self._get(client, url, via_proxy=False, cancel_event=cancel_event)
            except httpx.InvalidURL as error:
                emit_fetch_event(url=url, via_proxy=False, error=str(error))
                raise NetworkError(
                    f"invalid document URL: {error}", user_message=_HTTP_STATUS_MESSAGES[400]
                ) from error
            except httpx.TransportError as error:
                emit_fetch_event(url=url, via_proxy=False, error=str(error))
                if not self._cors_proxy:
                    raise NetworkError(
                        f"direct download failed: {error}", user_message=CORS_GUIDANCE_MESSAGE
                    ) from error
                LOGGER.warning("Direct download of %s failed (%s); retrying via relay proxy", url, error)
                proxied = self._cors_proxy.format(url=quote(url, safe=""))
                try:
                    response = await self._get(client, proxied, via_proxy=True, cancel_event=cancel_event)
                except httpx.TransportError as proxy_error:
                    emit_fetch_event(url=url, via_proxy=True, error=str(proxy_error))
                    raise NetworkError(
                        f"download failed directly and via proxy: {proxy_error}",
                        user_message=CORS_GUIDANCE_MESSAGE,
                    ) from proxy_error

        data = response.content
        if not data:
            raise ExtractionError("the downloaded document is empty")
        if not has_pdf_signature(data):
            raise ExtractionError("the downloaded file is not a PDF document")
        return data

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        via_proxy: bool,
        cancel_event: asyncio.Event | None,
    ) -> httpx.Response:
        if cancel_event is not None and cancel_event.is_set():
            raise asyncio.CancelledError("document download cancelled")

        response = await client.get(url, headers={"Accept": "application/pdf"})
        emit_fetch_event(
            url=url,
            via_proxy=via_proxy,
            status_code=response.status_code,
            size_bytes=len(response.content),
        )
        if response.is_success:
            return response

        status = response.status_code
        message = _HTTP_STATUS_MESSAGES.get(
            status, f"Failed to download the document (HTTP {status}). Please try again later."
        )
        raise NetworkError(f"HTTP {status} while downloading {url}", user_message=message)


__all__ = [
    "CORS_GUIDANCE_MESSAGE",
    "DEFAULT_CORS_PROXY",
    "DocumentExtractor",
    "NO_TEXT_MESSAGE",
    "PDF_MAGIC",
    "extract_page_texts",
    "extract_pdf_text",
    "has_pdf_signature",
]
