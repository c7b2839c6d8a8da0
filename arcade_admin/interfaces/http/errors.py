"""Map errors onto the ``{success: false, message, code?}`` envelope."""

from __future__ import annotations

import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from arcade_admin.core.errors import AppError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    *,
    code: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message}
    if code:
        body["code"] = code
    if extra:
        body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def _describe_validation(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        return error_response(exc.status_code, exc.message, code=exc.code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(
            status.HTTP_400_BAD_REQUEST, _describe_validation(exc), code="VALIDATION"
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        extra = None
        if request.app.state.settings.expose_stack_traces:
            extra = {"stack": "".join(traceback.format_exception(exc))}
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", code="INTERNAL", extra=extra
        )


__all__ = ["error_response", "register_exception_handlers"]
