"""Utilities for constructing the quiz generation prompt."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from quizgen.models import QuestionType, QuizConfig

LOGGER = logging.getLogger(__name__)

_TEMPLATE_PATH = Path(__file__).resolve().parent / "prompts" / "quiz.txt"

DEFAULT_MAX_DOCUMENT_CHARS = 120_000
TRUNCATION_MARKER = "[... document truncated ...]"

QUESTION_TYPE_PHRASES = {
    QuestionType.MULTIPLE_CHOICE: "multiple choice questions with 4 options each",
    QuestionType.TRUE_FALSE: "true/false questions",
    QuestionType.SHORT_ANSWER: "short answer questions",
}


def _load_template(path: Path) -> str:
    """Read and trim the contents of a template file."""
    return path.read_text(encoding="utf-8").strip()


_TEMPLATE = _load_template(_TEMPLATE_PATH)


def describe_question_types(question_types: Iterable[QuestionType]) -> str:
    return ", ".join(QUESTION_TYPE_PHRASES.get(kind, str(kind)) for kind in question_types)


def truncate_document(text: str, max_chars: Optional[int]) -> str:
    """Cut ``text`` to at most ``max_chars`` characters on a page or word boundary.

    ``None`` or a non-positive limit disables truncation.
    """

    if not max_chars or max_chars <= 0 or len(text) <= max_chars:
        return text

    head = text[:max_chars]
    cut = head.rfind("\n")
    if cut <= 0:
        cut = head.rfind(" ")
    if cut > 0:
        head = head[:cut]
    LOGGER.warning(
        "Document text truncated from %s to %s characters to fit the model context",
        len(text),
        len(head),
    )
    return f"{head.rstrip()}\n{TRUNCATION_MARKER}"


def build_prompt(
    config: QuizConfig,
    text: str,
    *,
    max_document_chars: Optional[int] = None,
) -> str:
    """Compose the instruction sent to the generative model."""

    if text is None:
        raise ValueError("text must not be None")

    document = truncate_document(text, max_document_chars)
    return _TEMPLATE.format(
        title=config.title,
        course=config.course or "General",
        question_count=config.question_count,
        difficulty=config.difficulty_level.value,
        question_types=describe_question_types(config.question_types),
        document=document,
    )


__all__ = [
    "DEFAULT_MAX_DOCUMENT_CHARS",
    "QUESTION_TYPE_PHRASES",
    "TRUNCATION_MARKER",
    "build_prompt",
    "describe_question_types",
    "truncate_document",
]
