"""Validation and normalisation of parsed model output into questions."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from quizgen.errors import ValidationError
from quizgen.models import Option, Question

LOGGER = logging.getLogger(__name__)

NO_EXPLANATION = "No explanation provided"
NO_VALID_QUESTIONS_MESSAGE = "No valid questions were generated. Please try again."

_FALSE_STRINGS = {"", "false", "0", "no", "off", "none", "null"}


def _as_text(value: Any) -> Optional[str]:
    """Return a stripped string for scalar values, ``None`` when absent."""

    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    text = str(value).strip()
    return text or None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _normalize_options(raw_options: Any, parent_id: str) -> List[Option]:
    if not isinstance(raw_options, list):
        return []

    options: List[Option] = []
    for index, raw in enumerate(raw_options):
        placeholder_id = f"{parent_id}_{index}"
        placeholder_text = f"Option {index + 1}"
        if not isinstance(raw, dict):
            options.append(Option(id=placeholder_id, text=placeholder_text, is_correct=False))
            continue
        options.append(
            Option(
                id=_as_text(raw.get("id")) or placeholder_id,
                text=_as_text(raw.get("text")) or placeholder_text,
                is_correct=_as_bool(raw.get("isCorrect")),
            )
        )
    return options


def _keep_first_correct(question: Question) -> None:
    seen_correct = False
    for option in question.options:
        if not option.is_correct:
            continue
        if seen_correct:
            option.is_correct = False
            LOGGER.info(
                "Question %s has several correct options; keeping the first one", question.id
            )
        seen_correct = True


def normalize_question(raw: Any, index: int) -> Optional[Question]:
    """Repair one parsed element, or return ``None`` when it must be dropped."""

    if not isinstance(raw, dict):
        LOGGER.warning("Question %s is not a valid object, skipping", index)
        return None

    raw_id = _as_text(raw.get("id"))
    options = _normalize_options(raw.get("options"), raw_id or str(index))
    if not options:
        LOGGER.warning("Dropping question %s: no options", index)
        return None

    question = Question(
        id=raw_id or f"q_{index + 1}",
        text=_as_text(raw.get("text")) or f"Question {index + 1}",
        options=options,
        explanation=_as_text(raw.get("explanation")) or NO_EXPLANATION,
    )
    _keep_first_correct(question)
    return question


def normalize_questions(raw_items: Iterable[Any]) -> List[Question]:
    """Convert parsed JSON elements into well-formed :class:`Question` records.

    Elements that are not objects or have no options are dropped individually.
    Missing fields get positional placeholders such as ``Question <n>``.

    Raises:
        ValidationError: when no question survives.
    """

    items = list(raw_items)
    questions: List[Question] = []
    for index, raw in enumerate(items):
        question = normalize_question(raw, index)
        if question is not None:
            questions.append(question)

    if not questions:
        raise ValidationError(
            f"none of the {len(items)} generated elements is a usable question",
            user_message=NO_VALID_QUESTIONS_MESSAGE,
        )

    dropped = len(items) - len(questions)
    if dropped:
        LOGGER.info("Kept %s of %s generated questions", len(questions), len(items))
    return questions


__all__ = ["NO_EXPLANATION", "NO_VALID_QUESTIONS_MESSAGE", "normalize_question", "normalize_questions"]
