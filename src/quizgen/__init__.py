"""Document-to-quiz generation pipeline."""

from quizgen.errors import (
    ExtractionError,
    GenerationError,
    ModelOverloadedError,
    NetworkError,
    ParseError,
    QuizGenerationError,
    ValidationError,
)
from quizgen.models import (
    BinarySource,
    Difficulty,
    DocumentSource,
    Option,
    ProcessingStage,
    Question,
    QuestionType,
    QuizConfig,
    RemoteSource,
    Stage,
)
from quizgen.pipeline import QuizPipeline, build_pipeline

__all__ = [
    "BinarySource",
    "Difficulty",
    "DocumentSource",
    "ExtractionError",
    "GenerationError",
    "ModelOverloadedError",
    "NetworkError",
    "Option",
    "ParseError",
    "ProcessingStage",
    "Question",
    "QuestionType",
    "QuizConfig",
    "QuizGenerationError",
    "QuizPipeline",
    "RemoteSource",
    "Stage",
    "ValidationError",
    "build_pipeline",
]
