import logging
from typing import Any

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from quizgen.api.quiz import router as quiz_router
from quizgen.logging_config import configure_logging
from quizgen.settings import get_settings

configure_logging(get_settings().log_level)

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Quiz Generator API")
app.include_router(quiz_router)


@app.get("/", response_class=PlainTextResponse)
def read_root() -> str:
    """Healthcheck endpoint for the service."""
    return "ok"


@app.get("/healthz")
def healthcheck() -> dict[str, Any]:
    """Expose the generation backend configuration (never the credential)."""

    settings = get_settings()
    return {
        "status": "ok",
        "provider": settings.provider,
        "models": list(settings.models),
        "credential_configured": bool(settings.api_key),
        "endpoint_configured": bool(settings.endpoint_url),
    }
