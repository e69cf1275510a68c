"""Default quiz title and course derived from a document name."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List
from urllib.parse import unquote, urlparse

DEFAULT_TITLE = "PDF Quiz"
DEFAULT_COURSE = "General"

_SEPARATORS_RE = re.compile(r"[_\-\s]+")
_PDF_SUFFIX_RE = re.compile(r"\.pdf$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ConfigSuggestion:
    title: str
    course: str


def _words(stem: str) -> List[str]:
    return [word for word in _SEPARATORS_RE.split(stem) if word]


def _title_from(words: List[str]) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in words)


def suggest_from_filename(filename: str) -> ConfigSuggestion:
    """``intro_to_databases.pdf`` -> title ``Intro To Databases``, course ``intro to``."""

    words = _words(_PDF_SUFFIX_RE.sub("", filename or "").strip())
    if not words:
        return ConfigSuggestion(DEFAULT_TITLE, DEFAULT_COURSE)
    course = " ".join(words[:2]) if len(words) > 1 else words[0]
    return ConfigSuggestion(_title_from(words) or DEFAULT_TITLE, course or DEFAULT_COURSE)


def suggest_from_url(url: str) -> ConfigSuggestion:
    """Use the last path segment of ``url``; the course is its first word."""

    path = urlparse(url or "").path
    last = unquote(path.rstrip("/").rsplit("/", 1)[-1]) if path else ""
    words = _words(_PDF_SUFFIX_RE.sub("", last))
    if not words:
        return ConfigSuggestion(DEFAULT_TITLE, DEFAULT_COURSE)
    course = words[0] if len(words) > 1 else DEFAULT_COURSE
    return ConfigSuggestion(_title_from(words), course)


__all__ = ["ConfigSuggestion", "suggest_from_filename", "suggest_from_url"]
