import asyncio

import httpx
import pytest

from quizgen import extract
from quizgen.errors import ExtractionError, NetworkError
from quizgen.extract import CORS_GUIDANCE_MESSAGE, DocumentExtractor, has_pdf_signature
from quizgen.models import BinarySource, RemoteSource

DOC_URL = "https://files.example.com/course/notes.pdf"
PROXY = "https://relay.example.com/raw?url={url}"


def _extractor(handler, *, cors_proxy: str | None = PROXY) -> DocumentExtractor:
    return DocumentExtractor(cors_proxy=cors_proxy, transport=httpx.MockTransport(handler))


def test_extract_pdf_text_joins_pages_with_newlines(pdf_factory) -> None:
    data = pdf_factory(["First   page text", "Second page text"])

    text = extract.extract_pdf_text(data)

    first, second = text.split("\n")
    assert "First" in first and "page text" in first
    assert "Second" in second
    assert "  " not in first


def test_binary_source_is_extracted(paris_pdf: bytes) -> None:
    extractor = DocumentExtractor()
    text = asyncio.run(extractor.extract(BinarySource(data=paris_pdf, filename="paris.pdf")))
    assert "capital of France" in text


def test_image_only_pdf_is_an_extraction_error(pdf_factory) -> None:
    with pytest.raises(ExtractionError) as excinfo:
        extract.extract_pdf_text(pdf_factory([""]))
    assert "image-based or password-protected" in str(excinfo.value)


@pytest.mark.parametrize("data", [b"", b"not a pdf at all", b"%PDF-1.4\ngarbage without structure"])
def test_unreadable_bytes_are_extraction_errors(data: bytes) -> None:
    with pytest.raises(ExtractionError):
        extract.extract_pdf_text(data)


def test_remote_fetch_sends_pdf_accept_header(paris_pdf: bytes) -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["accept"] = request.headers.get("accept", "")
        seen["url"] = str(request.url)
        return httpx.Response(200, content=paris_pdf)

    text = asyncio.run(_extractor(handler).extract(RemoteSource(url=DOC_URL)))

    assert "Paris" in text
    assert seen == {"accept": "application/pdf", "url": DOC_URL}


def test_signature_gate_rejects_non_pdf_without_decoding(monkeypatch: pytest.MonkeyPatch) -> None:
    decode_calls: list[bytes] = []
    monkeypatch.setattr(extract, "extract_pdf_text", lambda data: decode_calls.append(data) or "text")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>login required</html>")

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(_extractor(handler).extract(RemoteSource(url=DOC_URL)))

    assert "not a PDF" in str(excinfo.value)
    assert decode_calls == []


def test_empty_download_is_an_extraction_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"")

    with pytest.raises(ExtractionError):
        asyncio.run(_extractor(handler).fetch(DOC_URL))


@pytest.mark.parametrize(
    ("status", "fragment"),
    [(400, "invalid"), (403, "denied"), (404, "could not be found"), (500, "HTTP 500")],
)
def test_http_status_maps_to_network_error(status: int, fragment: str) -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(status)

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(_extractor(handler).fetch(DOC_URL))

    assert fragment in excinfo.value.user_message
    assert calls == [DOC_URL]


def test_transport_failure_falls_back_to_proxy_once(paris_pdf: bytes) -> None:
    calls: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        if request.url.host == "files.example.com":
            raise httpx.ConnectError("blocked", request=request)
        return httpx.Response(200, content=paris_pdf)

    data = asyncio.run(_extractor(handler).fetch(DOC_URL))

    assert has_pdf_signature(data)
    assert len(calls) == 2
    assert calls[1].host == "relay.example.com"
    assert calls[1].params["url"] == DOC_URL


def test_proxy_failure_surfaces_cors_guidance() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(_extractor(handler).fetch(DOC_URL))

    assert excinfo.value.user_message == CORS_GUIDANCE_MESSAGE
    assert len(calls) == 2


def test_without_proxy_transport_failure_is_immediate() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(NetworkError):
        asyncio.run(_extractor(handler, cors_proxy=None).fetch(DOC_URL))
    assert len(calls) == 1


def test_cancelled_run_never_touches_the_network() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, content=b"%PDF-1.4")

    cancel = asyncio.Event()
    cancel.set()
    with pytest.raises(asyncio.CancelledError):
        asyncio.run(_extractor(handler).fetch(DOC_URL, cancel_event=cancel))
    assert calls == []


def test_malformed_url_is_a_network_error() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, content=b"%PDF-1.4")

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(_extractor(handler).extract(RemoteSource(url="https://files.example.com/bad\x07name.pdf")))

    assert "invalid" in excinfo.value.user_message
    assert calls == []
