"""Mapping of the exception hierarchy to JSON error responses."""

import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from media_autowriter.config.settings import settings
from media_autowriter.utils.exceptions import (
    AutowriterException,
    DuplicateExhaustedError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from media_autowriter.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["error_body", "setup_error_handlers"]


def _details(exc: Exception) -> Any:
    if isinstance(exc, ValidationError):
        return {"fields": exc.fields}
    if isinstance(exc, NotFoundError):
        return {"entity": exc.entity, "id": exc.entity_id}
    if isinstance(exc, ProviderError):
        return {"provider": exc.provider, "statusCode": exc.status_code, "body": exc.body}
    if isinstance(exc, DuplicateExhaustedError):
        return {"attempts": exc.attempts, "rejectedThemes": exc.rejected_themes}
    return None


def error_body(exc: Exception) -> Dict[str, Any]:
    """``{"error", "details", "type"}`` plus ``"stack"`` outside production."""
    body: Dict[str, Any] = {
        "error": str(exc),
        "details": _details(exc),
        "type": type(exc).__name__,
    }
    if not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def autowriter_exception_handler(request: Request, exc: AutowriterException) -> JSONResponse:
    log = logger.warning if exc.http_status < 500 else logger.error
    log(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
        status_code=exc.http_status,
    )
    return JSONResponse(status_code=exc.http_status, content=error_body(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("request_crashed", path=request.url.path, error=str(exc), exc_info=True)
    return JSONResponse(status_code=500, content=error_body(exc))


def setup_error_handlers(app: FastAPI) -> None:
    """Register JSON error handlers on the app."""
    app.add_exception_handler(AutowriterException, autowriter_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
