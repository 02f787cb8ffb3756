"""Error Handlers: map exceptions escaping the routes to JSON error bodies.

Invariants:
    - FieldReportError -> its own http_status and to_response() body
    - RequestValidationError -> 400 VALIDATION_ERROR with per-field details
    - Anything else -> 500 INTERNAL_ERROR; internals never reach the client

Design Decisions:
    - Log level follows the error's severity: capacity and backend outages are
      CRITICAL and log as errors, client mistakes log as warnings
    - Storage context (project, keys) travels into the log record as extras
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from fieldreport.core.errors import FieldReportError, ErrorSeverity

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.WARNING,
    ErrorSeverity.CRITICAL: logging.ERROR,
}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FieldReportError, handle_field_report_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_field_report_error(request: Request, exc: FieldReportError):
    logger.log(
        _LOG_LEVELS.get(exc.severity, logging.ERROR),
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "project_id": exc.context.project_id,
            "logical_key": exc.context.logical_key,
            "physical_key": exc.context.physical_key,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Rejected request body: {len(exc.errors())} invalid field(s)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=validation_error_body(exc),
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.url.path}",
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def validation_error_body(exc: RequestValidationError) -> dict:
    """Per-field validation details: dotted location, message, error type."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
