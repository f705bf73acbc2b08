"""
Exception Handlers.

Convert exceptions into the standard error envelope:

    {"success": false, "data": null,
     "error": {"code": ..., "message": ..., "details": ...},
     "metadata": {"timestamp": ..., "request_id": ...}}

ApplicationError subclasses carry their own code and status. Request
validation failures become VAL_REQUEST_INVALID (422) with one entry per
offending field. Anything else is a 500 whose message never leaks
internals; with features.api_detailed_errors on, the exception type is
added to the details.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from snack.backend.core.config import get_app_config
from snack.backend.core.exceptions import ApplicationError
from snack.backend.core.logging import get_logger
from snack.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

HTTP_STATUS_CODES = {
    404: "RES_NOT_FOUND",
    405: "RES_METHOD_NOT_ALLOWED",
}


def _get_request_id(request: Request) -> str | None:
    # Only the middleware-validated id; a raw header could be unsafe to echo
    return getattr(request.state, "request_id", None)


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details or None),
        metadata=ResponseMetadata(request_id=_get_request_id(request)),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Server error" if exc.status_code >= 500 else "Client error",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return error_response(request, exc.status_code, exc.code, exc.message, exc.details, exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(loc) for loc in err.get("loc", [])),
            "message": err.get("msg", "Validation error"),
            "type": err.get("type", "unknown"),
        }
        for err in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "fields": [e["field"] for e in errors],
        },
    )
    return error_response(
        request,
        422,
        "VAL_REQUEST_INVALID",
        "Request validation failed",
        {"validation_errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Routing errors (unknown path, wrong method) in the envelope.

    Structured details, such as the readiness check report, are
    returned unchanged.
    """
    if not isinstance(exc.detail, str):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    code = HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(request, exc.status_code, code, exc.detail, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
    )
    details = None
    if get_app_config().features.api_detailed_errors:
        details = {"exception_type": type(exc).__name__}
    return error_response(request, 500, "SYS_INTERNAL_ERROR", "An unexpected error occurred", details)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
