"""FastAPI exception handlers.

Every failure is answered with HTTP 400 and an ``{"error": message}`` body.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import (
    HTTPException as StarletteHTTPException,
    RequestValidationError,
)

from estrategia_enem.core.exceptions import EnemError, QuotaExceededError
from estrategia_enem.core.logging_config import get_logger
from estrategia_enem.core.plan_limits import plan_limit_error
from estrategia_enem.core.response import error_response, validation_error_response

logger = get_logger("core.error_handlers")

QUOTA_METRICS = {
    "chat": "daily_chat_questions",
    "essay": "monthly_essay_corrections",
}


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers to ``app``."""

    @app.exception_handler(QuotaExceededError)
    async def quota_exception_handler(request: Request, exc: QuotaExceededError):
        logger.info(
            f"Quota exceeded: {exc.activity} {exc.used}/{exc.limit}",
            extra={"path": request.url.path, "activity": exc.activity},
        )
        return plan_limit_error(
            message=exc.message,
            activity=exc.activity,
            current_plan=exc.plan,
            metric=QUOTA_METRICS.get(exc.activity, exc.activity),
            limit=exc.limit,
            used=exc.used,
        )

    @app.exception_handler(EnemError)
    async def enem_exception_handler(request: Request, exc: EnemError):
        logger.warning(
            f"{type(exc).__name__}: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )
        return error_response(exc.message, error_code=exc.error_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        msg = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        logger.warning(
            f"HTTP Exception: {exc.status_code} - {msg}",
            extra={
                "status_code": exc.status_code,
                "path": request.url.path,
                "method": request.method,
            },
        )
        # Routing errors keep their status; handlers never raise these themselves
        return error_response(msg, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error_count = len(exc.errors())
        logger.warning(
            f"Validation Error: {error_count} field(s) failed validation",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error_count": error_count,
            },
        )
        return validation_error_response(exc.errors())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(
            "Erro inesperado. Tente novamente.",
            error_code="INTERNAL_ERROR",
            include_traceback=True,
        )
