"""API middleware and error handlers: CORS, request logging, error bodies.

``register_error_handlers`` converts :class:`PipelineFailure` subclasses
into JSON :class:`ErrorResponse` bodies with the status code each class
declares, and any other :class:`LecternError` into a 500.  Stack traces are
logged server-side only.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import LecternError, PipelineFailure
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; origins default to ``["*"]`` for development."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id and log method, path, status and duration of every request."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex[:12]
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            response.headers["X-Request-Id"] = request_id
            return response
        finally:
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")


async def pipeline_failure_handler(request: Request, exc: PipelineFailure) -> JSONResponse:
    _logger.warning(
        "pipeline_failure",
        kind=exc.kind,
        message=exc.message,
        details=exc.details,
        path=str(request.url.path),
    )
    body = ErrorResponse(error=exc.message, details=exc.details, kind=exc.kind)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


async def application_error_handler(request: Request, exc: LecternError) -> JSONResponse:
    _logger.error(
        "application_error",
        error_type=type(exc).__name__,
        message=exc.message,
        provider=exc.provider_name,
        path=str(request.url.path),
        exc_info=exc,
    )
    body = ErrorResponse(error="Internal server error", details=type(exc).__name__)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


def register_error_handlers(app: FastAPI) -> None:
    """Attach the Lectern exception handlers to *app*."""
    app.add_exception_handler(PipelineFailure, pipeline_failure_handler)
    app.add_exception_handler(LecternError, application_error_handler)
