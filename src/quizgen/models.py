"""Data models shared by the quiz generation pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 50


@dataclass(frozen=True, slots=True)
class BinarySource:
    """A document supplied as raw bytes (e.g. a direct upload)."""

    data: bytes
    filename: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RemoteSource:
    """A document referenced by URL and downloaded during extraction."""

    url: str


DocumentSource = Union[BinarySource, RemoteSource]


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MIXED = "mixed"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    SHORT_ANSWER = "short-answer"


class QuizConfig(BaseModel):
    """Quiz parameters chosen by the user before generation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field("PDF Quiz", description="Title shown for the generated quiz.")
    course: str = Field("General", description="Course the quiz belongs to.")
    question_count: int = Field(10, alias="questionCount")
    difficulty_level: Difficulty = Field(Difficulty.MEDIUM, alias="difficultyLevel")
    question_types: List[QuestionType] = Field(
        default_factory=lambda: [QuestionType.MULTIPLE_CHOICE],
        alias="questionTypes",
    )

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "PDF Quiz"
        return value.strip() if isinstance(value, str) else value

    @field_validator("course", mode="before")
    @classmethod
    def _default_course(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "General"
        return value.strip() if isinstance(value, str) else value

    @field_validator("question_count")
    @classmethod
    def _clamp_question_count(cls, value: int) -> int:
        return max(MIN_QUESTION_COUNT, min(MAX_QUESTION_COUNT, value))

    @field_validator("question_types")
    @classmethod
    def _require_question_types(cls, value: List[QuestionType]) -> List[QuestionType]:
        unique = list(dict.fromkeys(value))
        if not unique:
            raise ValueError("at least one question type must be selected")
        return unique


class Stage(str, Enum):
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    FORMATTING = "formatting"


@dataclass(frozen=True, slots=True)
class ProcessingStage:
    """Progress marker emitted by the pipeline at every stage transition."""

    stage: Stage
    message: str
    progress: int

    def to_dict(self) -> dict[str, Any]:
        return {"stage": self.stage.value, "message": self.message, "progress": self.progress}


PROCESSING_STAGES: dict[Stage, ProcessingStage] = {
    Stage.EXTRACTING: ProcessingStage(Stage.EXTRACTING, "Extracting text from PDF...", 25),
    Stage.ANALYZING: ProcessingStage(Stage.ANALYZING, "Analyzing document content...", 50),
    Stage.GENERATING: ProcessingStage(Stage.GENERATING, "Generating quiz questions...", 75),
    Stage.FORMATTING: ProcessingStage(Stage.FORMATTING, "Formatting and validating...", 100),
}


@dataclass(slots=True)
class Option:
    id: str
    text: str
    is_correct: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "isCorrect": self.is_correct}


@dataclass(slots=True)
class Question:
    """A validated question; the only record handed back to callers."""

    id: str
    text: str
    options: List[Option] = field(default_factory=list)
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "options": [option.to_dict() for option in self.options],
            "explanation": self.explanation,
        }


__all__ = [
    "BinarySource",
    "Difficulty",
    "DocumentSource",
    "MAX_QUESTION_COUNT",
    "MIN_QUESTION_COUNT",
    "Option",
    "PROCESSING_STAGES",
    "ProcessingStage",
    "Question",
    "QuestionType",
    "QuizConfig",
    "RemoteSource",
    "Stage",
]
