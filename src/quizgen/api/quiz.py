"""API router exposing the quiz generation endpoints."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pydantic import BaseModel, Field
from pydantic import ValidationError as ConfigValidationError

from quizgen.errors import (
    ExtractionError,
    GenerationError,
    NetworkError,
    ParseError,
    QuizGenerationError,
    ValidationError,
)
from quizgen.models import BinarySource, DocumentSource, ProcessingStage, QuizConfig, RemoteSource
from quizgen.pipeline import QuizPipeline, build_pipeline
from quizgen.settings import get_settings
from quizgen.suggest import suggest_from_filename, suggest_from_url

router = APIRouter(prefix="/quizzes", tags=["quizzes"])

_ERROR_STATUS: dict[type[QuizGenerationError], int] = {
    ExtractionError: 422,
    NetworkError: 400,
    GenerationError: 503,
    ParseError: 502,
    ValidationError: 422,
}


class OptionPayload(BaseModel):
    id: str
    text: str
    isCorrect: bool


class QuestionPayload(BaseModel):
    id: str
    text: str
    options: list[OptionPayload]
    explanation: str


class StagePayload(BaseModel):
    stage: str
    message: str
    progress: int = Field(..., ge=0, le=100)


class GenerateQuizResponse(BaseModel):
    """Response body returned from the generate endpoint."""

    title: str
    course: str
    questions: list[QuestionPayload]
    stages: list[StagePayload]


class SuggestionResponse(BaseModel):
    title: str
    course: str


@lru_cache(maxsize=1)
def get_pipeline() -> QuizPipeline:
    """Return the process-wide pipeline built from settings."""

    return build_pipeline(get_settings())


def _status_for(error: QuizGenerationError) -> int:
    for error_type, status in _ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 500


def _parse_config(raw: str) -> QuizConfig:
    try:
        return QuizConfig.model_validate_json(raw)
    except ConfigValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in exc.errors()
        )
        raise HTTPException(
            status_code=422,
            detail={"kind": "config", "message": messages or "Invalid quiz configuration"},
        ) from exc


async def _resolve_source(file: Optional[UploadFile], pdf_url: Optional[str]) -> DocumentSource:
    url = (pdf_url or "").strip()
    if (file is None) == (not url):
        raise HTTPException(
            status_code=400,
            detail={"kind": "request", "message": "Provide either a PDF file or a PDF URL, not both."},
        )
    if file is not None:
        return BinarySource(data=await file.read(), filename=file.filename)
    return RemoteSource(url=url)


@router.post("/generate", response_model=GenerateQuizResponse)
async def generate_quiz(
    config: str = Form(..., description="Quiz configuration as a JSON object."),
    file: Optional[UploadFile] = File(None),
    pdf_url: Optional[str] = Form(None),
    pipeline: QuizPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    """Generate quiz questions from an uploaded PDF or a PDF URL."""

    quiz_config = _parse_config(config)
    source = await _resolve_source(file, pdf_url)

    stages: list[ProcessingStage] = []
    try:
        questions = await pipeline.run(source, quiz_config, on_progress=stages.append)
    except QuizGenerationError as exc:
        raise HTTPException(status_code=_status_for(exc), detail=exc.to_dict()) from exc

    return {
        "title": quiz_config.title,
        "course": quiz_config.course,
        "questions": [question.to_dict() for question in questions],
        "stages": [stage.to_dict() for stage in stages],
    }


@router.get("/suggest", response_model=SuggestionResponse)
def suggest_config(
    name: Optional[str] = Query(None, description="Uploaded file name."),
    url: Optional[str] = Query(None, description="Document URL."),
) -> SuggestionResponse:
    """Suggest a quiz title and course for a document."""

    suggestion = suggest_from_filename(name) if name else suggest_from_url(url or "")
    return SuggestionResponse(title=suggestion.title, course=suggestion.course)
