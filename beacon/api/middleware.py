"""API middleware and exception handlers."""

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.config import settings
from ..core.exceptions import BeaconException

logger = logging.getLogger(__name__)

_IS_PRODUCTION = settings.ENVIRONMENT == "production"


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Add request timing and log slow requests."""

    def __init__(self, app, slow_threshold: float | None = None):
        super().__init__(app)
        self._slow_threshold = (
            settings.SLOW_REQUEST_THRESHOLD if slow_threshold is None else slow_threshold
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        if process_time > self._slow_threshold:
            logger.warning(
                "Slow request: %s %s took %.2fs",
                request.method,
                request.url.path,
                process_time,
            )

        return response


def exception_handler(request: Request, exc: BeaconException) -> JSONResponse:
    """Handle custom Beacon exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "BeaconException: %s - %s (status=%d) for %s %s",
        exc.error_code,
        exc.detail,
        exc.status_code,
        request.method,
        request.url.path,
    )

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as client errors (400)."""
    logger.warning(
        "Request validation failed for %s %s: %d error(s)",
        request.method,
        request.url.path,
        len(exc.errors()),
    )

    fields = [
        ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        or "request"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "detail": f"Invalid request: {', '.join(fields)}",
            "status_code": 400,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        "Unhandled exception for %s %s: %s", request.method, request.url.path, str(exc)
    )

    detail = "Internal Server Error" if _IS_PRODUCTION else str(exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "detail": detail,
            "status_code": 500,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BeaconException, exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
