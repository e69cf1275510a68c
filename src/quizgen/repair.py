"""Best-effort repair of model output into a JSON array.

Valid JSON is parsed as is. The repair depth is fixed: one pass of regex
fixes, one parse, one targeted correction, one final parse. Anything still broken is reported as a
:class:`ParseError`.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List

from quizgen.errors import ParseError

LOGGER = logging.getLogger(__name__)

INVALID_FORMAT_MESSAGE = "The AI returned an invalid JSON format. Please try again."
NOT_AN_ARRAY_MESSAGE = "Expected an array of questions but got something else."

_CODE_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)

# Applied in order, only to text that failed to parse.
_SYNTAX_REPAIRS: tuple[tuple[re.Pattern[str], str], ...] = (
    # {"id": "a": "text"} -> {"id": "a", "text": "text"}
    (re.compile(r'("id":\s*"[^"]*"):\s*([^,}]+)'), r'\1, "text": \2'),
    # trailing commas
    (re.compile(r",(\s*[}\]])"), r"\1"),
    # missing comma between objects
    (re.compile(r"}(\s*){"), r"},\1{"),
    # missing comma between arrays
    (re.compile(r"\](\s*)\["), r"],\1["),
)

_ID_COLON_RE = re.compile(r'"id":\s*"([^"]*)":\s*"([^"]*)"')


def strip_code_fence(text: str) -> str:
    match = _CODE_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def slice_array(text: str) -> str:
    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def extract_array_text(raw: str) -> str:
    """Strip a surrounding code fence and cut ``raw`` down to its outer array."""

    return slice_array(strip_code_fence(raw.strip()))


def apply_syntax_repairs(text: str) -> str:
    for pattern, replacement in _SYNTAX_REPAIRS:
        text = pattern.sub(replacement, text)
    return text


def repair_json_text(raw: str) -> str:
    """Apply fence stripping, array slicing and the regex repairs to ``raw``."""

    return apply_syntax_repairs(extract_array_text(raw))


def repair_and_parse(raw: Any) -> List[Any]:
    """Turn an arbitrary model response into a parsed JSON array.

    Raises:
        ParseError: for empty input, output that stays invalid after the
            bounded repair sequence, or JSON that is not an array.
    """

    if raw is None:
        raise ParseError("no text provided to parse")
    if not isinstance(raw, str):
        raise ParseError(f"expected string but got {type(raw).__name__}")
    if not raw.strip():
        raise ParseError("empty text provided to parse")

    text = extract_array_text(raw)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as first_error:
        LOGGER.warning("JSON parsing failed (%s); applying syntax repairs", first_error)
        text = apply_syntax_repairs(text)
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as second_error:
            LOGGER.warning("Repaired JSON still invalid (%s); attempting targeted cleanup", second_error)
            parsed = _parse_after_id_fix(text)

    if not isinstance(parsed, list):
        raise ParseError(
            f"expected a JSON array but got {type(parsed).__name__}",
            user_message=NOT_AN_ARRAY_MESSAGE,
        )
    return parsed


def _parse_after_id_fix(text: str) -> Any:
    text = _ID_COLON_RE.sub(r'"id": "\1", "text": "\2"', text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as error:
        LOGGER.warning("Final parsing attempt failed: %s", error)
        raise ParseError(
            f"unable to parse AI response as JSON: {error.msg} "
            f"(line {error.lineno}, column {error.colno})",
            user_message=INVALID_FORMAT_MESSAGE,
        ) from error


__all__ = [
    "INVALID_FORMAT_MESSAGE",
    "NOT_AN_ARRAY_MESSAGE",
    "apply_syntax_repairs",
    "extract_array_text",
    "repair_and_parse",
    "repair_json_text",
    "slice_array",
    "strip_code_fence",
]
