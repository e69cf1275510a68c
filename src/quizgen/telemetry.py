"""Structured lifecycle logging for the quiz generation pipeline."""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from quizgen.logging_config import AUDIT_LOGGER_NAME

LOGGER = logging.getLogger("quizgen.telemetry")
AUDIT_LOGGER = logging.getLogger(AUDIT_LOGGER_NAME)


def _format_exception(error: BaseException) -> str:
    return "".join(traceback.format_exception(error.__class__, error, error.__traceback__))


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    run_id: str | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Emit a structured log event with the agreed-upon schema."""

    logger = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": logger.name}
    if run_id:
        event["run_id"] = run_id
    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 3)
    if details is not None:
        event["details"] = details
    event.update(payload)

    exc_info = None
    if exc is not None:
        if isinstance(exc, BaseException):
            event["exc"] = _format_exception(exc)
            exc_info = (exc.__class__, exc, exc.__traceback__)
        else:
            event["exc"] = str(exc)

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(event, exc_info=exc_info)


def emit_stage_event(*, run_id: str, stage: str, progress: int, message: str) -> None:
    log_event(
        LOGGER,
        "pipeline.stage",
        run_id=run_id,
        details={"stage": stage, "progress": progress, "message": message},
    )


def emit_fetch_event(
    *,
    url: str,
    via_proxy: bool,
    status_code: int | None = None,
    size_bytes: int | None = None,
    error: str | None = None,
) -> None:
    details: dict[str, Any] = {"url": url, "via_proxy": via_proxy}
    if status_code is not None:
        details["status_code"] = status_code
    if size_bytes is not None:
        details["size_bytes"] = size_bytes
    if error:
        details["error"] = error
    log_event(LOGGER, "extract.fetch", level="warning" if error else "info", details=details)


def emit_generation_attempt(
    *,
    model: str,
    attempt: int,
    max_retries: int,
    duration_ms: float,
    outcome: str,
    delay_seconds: float | None = None,
    error: BaseException | None = None,
) -> None:
    """Append one provider call to the generation audit log."""

    details: dict[str, Any] = {
        "model": model,
        "attempt": attempt,
        "max_retries": max_retries,
        "outcome": outcome,
    }
    if delay_seconds is not None:
        details["delay_seconds"] = delay_seconds
    if error is not None:
        details["error_type"] = type(error).__name__
        details["error"] = str(error)
    log_event(
        AUDIT_LOGGER,
        "generation.attempt",
        level="info" if outcome == "success" else "warning",
        duration_ms=duration_ms,
        details=details,
    )


def emit_exception(
    *,
    module: str,
    error: BaseException,
    run_id: str | None = None,
    suggestion: str | None = None,
) -> None:
    details = {"module": module}
    if suggestion:
        details["suggestion"] = suggestion
    log_event(
        LOGGER,
        "exception",
        level="error",
        run_id=run_id,
        details=details,
        exc=error,
    )


@contextmanager
def traced_duration(step: str, *, logger: Optional[logging.Logger] = None, **fields: Any) -> Iterator[None]:
    start = time.perf_counter()
    log_event(logger or LOGGER, f"{step}.start", details=fields)
    try:
        yield
    except Exception as error:
        log_event(logger or LOGGER, f"{step}.error", level="warning", details=fields, exc=str(error))
        raise
    finally:
        end = time.perf_counter()
        log_event(
            logger or LOGGER,
            f"{step}.complete",
            duration_ms=(end - start) * 1000.0,
            details=fields,
        )
