# estrategia_enem/core/response.py
from typing import Any, Optional, Dict
from pydantic import BaseModel
from fastapi.responses import JSONResponse, Response
from fastapi.encoders import jsonable_encoder
import traceback
from estrategia_enem.core.config import settings


class ErrorResponseModel(BaseModel):
    """Error payload returned by every handler on failure"""
    error: str
    error_code: Optional[str] = None
    data: Optional[Any] = None
    # Only include debug info in development
    debug_info: Optional[Dict[str, Any]] = None


def success_response(data: Any, status_code: int = 200) -> JSONResponse:
    """Return the handler payload as-is; callers expect bare JSON objects."""
    return JSONResponse(status_code=status_code, content=jsonable_encoder(data))


def error_response(
    msg: str,
    data: Any = None,
    status_code: int = 400,
    error_code: Optional[str] = None,
    include_traceback: bool = False,
) -> JSONResponse:
    """Build the ``{"error": msg}`` failure payload.

    Extra fields are only added when present, so the minimal shape stays
    ``{"error": "..."}`` for plain failures.
    """
    debug_info = None
    if include_traceback and settings.DEBUG:
        debug_info = {
            "traceback": traceback.format_exc(),
            "environment": settings.ENVIRONMENT,
        }

    payload = ErrorResponseModel(
        error=msg,
        error_code=error_code,
        data=data,
        debug_info=debug_info,
    ).model_dump(exclude_none=True)

    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def validation_error_response(
    errors: list[Dict[str, Any]],
    status_code: int = 400,
) -> JSONResponse:
    """Collapse pydantic validation errors into a single readable message"""
    messages = []
    fields = []
    for err in errors:
        loc = err.get("loc", [])
        field = ".".join(str(x) for x in loc if x != "body")
        if field:
            fields.append(field)
        messages.append(f"{field}: {err.get('msg', 'Validation error')}" if field else err.get("msg", "Validation error"))

    return error_response(
        msg="; ".join(messages) or "Invalid request parameters",
        data={"fields": fields} if fields else None,
        status_code=status_code,
        error_code="VALIDATION_ERROR",
    )


def preflight_response() -> Response:
    """Answer a CORS preflight that reached a route handler directly."""
    return Response(
        status_code=200,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": ", ".join(settings.ALLOWED_HEADERS),
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        },
    )
