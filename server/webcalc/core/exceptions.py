from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from webcalc.core.context import get_request_id

logger = logging.getLogger("webcalc.errors")


class AppError(Exception):
    status_code: int = 500
    error_type: str = "APP_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


def build_error_payload(exc: AppError) -> dict[str, Any]:
    error: dict[str, Any] = {
        "type": exc.error_type,
        "message": exc.message,
    }
    if exc.details:
        error["details"] = exc.details
    trace_id = get_request_id()
    if trace_id:
        error["traceId"] = trace_id
    return {"error": error}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "request.failed",
            extra={"path": request.url.path, "error_type": exc.error_type, "status_code": exc.status_code},
        )
        return JSONResponse(status_code=exc.status_code, content=build_error_payload(exc))
