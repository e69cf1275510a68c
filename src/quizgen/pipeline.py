"""High level quiz generation pipeline entry point."""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Callable, List, Optional

from quizgen.errors import (
    ExtractionError,
    GenerationError,
    ParseError,
    QuizGenerationError,
)
from quizgen.extract import DocumentExtractor
from quizgen.llm import GenerationClient, HttpCompletionProvider, MockCompletionProvider
from quizgen.models import PROCESSING_STAGES, DocumentSource, ProcessingStage, Question, QuizConfig, Stage
from quizgen.normalize import normalize_questions
from quizgen.prompt_builder import DEFAULT_MAX_DOCUMENT_CHARS, build_prompt
from quizgen.repair import repair_and_parse
from quizgen.settings import Settings
from quizgen.telemetry import emit_exception, emit_stage_event

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[ProcessingStage], None]

_STAGE_ERRORS: dict[Stage, type[QuizGenerationError]] = {
    Stage.EXTRACTING: ExtractionError,
    Stage.ANALYZING: ExtractionError,
    Stage.GENERATING: GenerationError,
    Stage.FORMATTING: ParseError,
}


class QuizPipeline:
    """Pipeline orchestrating extraction, generation, repair and validation.

    Stages run strictly one after another. The first failure stops the run
    and is raised as a single :class:`QuizGenerationError`.
    """

    def __init__(
        self,
        extractor: DocumentExtractor,
        client: GenerationClient,
        *,
        analyze_delay: float = 0.0,
        max_document_chars: Optional[int] = DEFAULT_MAX_DOCUMENT_CHARS,
    ) -> None:
        self.extractor = extractor
        self.client = client
        self.analyze_delay = analyze_delay
        self.max_document_chars = max_document_chars

    async def run(
        self,
        source: DocumentSource,
        config: QuizConfig,
        *,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[Question]:
        """Generate validated questions for ``source`` using ``config``."""

        run_id = str(uuid.uuid4())
        started = time.perf_counter()
        LOGGER.info(
            "Starting quiz run %s (%s questions, %s)",
            run_id,
            config.question_count,
            config.difficulty_level.value,
        )

        stage = Stage.EXTRACTING
        try:
            self._emit(run_id, stage, on_progress)
            text = await self.extractor.extract(source, cancel_event=cancel_event)

            stage = Stage.ANALYZING
            self._emit(run_id, stage, on_progress)
            if self.analyze_delay > 0:
                self._check_cancelled(cancel_event)
                await asyncio.sleep(self.analyze_delay)

            stage = Stage.GENERATING
            self._emit(run_id, stage, on_progress)
            prompt = build_prompt(config, text, max_document_chars=self.max_document_chars)
            raw = await self.client.generate(prompt, cancel_event=cancel_event)

            stage = Stage.FORMATTING
            self._emit(run_id, stage, on_progress)
            questions = normalize_questions(repair_and_parse(raw))
        except QuizGenerationError as error:
            emit_exception(module=__name__, error=error, run_id=run_id, suggestion=error.user_message)
            raise
        except Exception as error:
            classified = _STAGE_ERRORS[stage](f"unexpected failure while {stage.value}: {error}")
            emit_exception(module=__name__, error=error, run_id=run_id)
            raise classified from error

        LOGGER.info(
            "Quiz run %s produced %s questions in %.3fs",
            run_id,
            len(questions),
            time.perf_counter() - started,
        )
        return questions

    @staticmethod
    def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise asyncio.CancelledError("quiz generation cancelled by caller")

    @staticmethod
    def _emit(run_id: str, stage: Stage, on_progress: Optional[ProgressCallback]) -> None:
        marker = PROCESSING_STAGES[stage]
        emit_stage_event(run_id=run_id, stage=stage.value, progress=marker.progress, message=marker.message)
        if on_progress is not None:
            on_progress(marker)


def build_pipeline(settings: Settings) -> QuizPipeline:
    """Wire a :class:`QuizPipeline` from application settings."""

    if settings.provider == "mock":
        LOGGER.warning("QUIZGEN_PROVIDER=mock; generation uses canned responses only.")
        provider = MockCompletionProvider()
    else:
        if not settings.api_key:
            LOGGER.warning("QUIZGEN_API_KEY is not configured; generation requests will be rejected.")
        provider = HttpCompletionProvider(
            settings.endpoint_url,
            settings.api_key,
            timeout=settings.request_timeout,
        )

    client = GenerationClient(
        provider,
        settings.models,
        max_retries=settings.max_retries,
        initial_delay=settings.initial_retry_delay_ms / 1000.0,
    )
    extractor = DocumentExtractor(timeout=settings.download_timeout, cors_proxy=settings.cors_proxy)
    return QuizPipeline(
        extractor,
        client,
        analyze_delay=settings.analyze_delay_ms / 1000.0,
        max_document_chars=settings.max_document_chars or None,
    )


__all__ = ["ProgressCallback", "QuizPipeline", "build_pipeline"]
