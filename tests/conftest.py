"""Shared fixtures: in-test PDF builder and scripted completion providers."""
from __future__ import annotations

from typing import Callable, List, Sequence

import pytest

from quizgen.extract import DocumentExtractor
from quizgen.llm import GenerationClient, MockCompletionProvider
from quizgen.pipeline import QuizPipeline


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages: Sequence[str]) -> bytes:
    """Build a small but well-formed PDF with one line of Helvetica text per page.

    An empty string produces a page without any text layer, which is how an
    image-only scan looks to a text extractor.
    """

    page_count = len(pages)
    objects: List[bytes] = []
    kids = " ".join(f"{4 + 2 * index} 0 R" for index in range(page_count))
    objects.append(b"<< /Type /Catalog /Pages 2 0 R >>")
    objects.append(f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode("latin-1"))
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    for index, text in enumerate(pages):
        content_ref = 5 + 2 * index
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Contents {content_ref} 0 R /Resources << /Font << /F1 3 0 R >> >> >>"
            ).encode("latin-1")
        )
        stream = (
            f"BT /F1 12 Tf 72 720 Td ({_escape_pdf_text(text)}) Tj ET".encode("latin-1")
            if text
            else b""
        )
        objects.append(
            b"<< /Length " + str(len(stream)).encode("ascii") + b" >>\nstream\n" + stream + b"\nendstream"
        )

    output = bytearray(b"%PDF-1.4\n")
    offsets: List[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(output))
        output += f"{number} 0 obj\n".encode("ascii") + body + b"\nendobj\n"

    xref_offset = len(output)
    output += f"xref\n0 {len(objects) + 1}\n".encode("ascii")
    output += b"0000000000 65535 f \n"
    for offset in offsets:
        output += f"{offset:010d} 00000 n \n".encode("ascii")
    output += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n"
    ).encode("ascii")
    return bytes(output)


@pytest.fixture
def pdf_factory() -> Callable[[Sequence[str]], bytes]:
    return build_pdf


@pytest.fixture
def paris_pdf() -> bytes:
    return build_pdf(["Paris is the capital of France."])


FENCED_PARIS_RESPONSE = (
    "```json\n"
    '[{"id":"q1","text":"What is the capital of France?","options":'
    '[{"id":"a","text":"Paris","isCorrect":true},{"id":"b","text":"Lyon","isCorrect":false}],'
    '"explanation":"Paris is stated directly in the text."}]\n'
    "```"
)


@pytest.fixture
def fenced_response() -> str:
    return FENCED_PARIS_RESPONSE


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_pipeline(sleep_recorder: SleepRecorder) -> Callable[..., QuizPipeline]:
    def factory(*responses: object, models: Sequence[str] = ("model-a", "model-b")) -> QuizPipeline:
        provider = MockCompletionProvider(responses)
        client = GenerationClient(provider, models, sleep=sleep_recorder)
        return QuizPipeline(DocumentExtractor(cors_proxy=None), client)

    return factory
