"""
HTTP Middleware.

RequestContextMiddleware gives every request an ID, a frontend label,
and a timer, and binds them into structlog's context for the duration
of the request.

ExtensionCorsMiddleware answers the browser extension's preflights and
adds wildcard CORS headers to every response under the extension prefix.
"""

import re
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from snack.backend.core.logging import get_logger

logger = get_logger(__name__)

# Valid frontend identifiers (X-Frontend-ID header)
KNOWN_FRONTENDS = {"web", "mobile", "extension", "cli", "internal"}

# Client-supplied request IDs are echoed back, so only accept plain tokens
_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(request: Request) -> str:
    supplied = request.headers.get("X-Request-ID")
    if supplied and _REQUEST_ID.match(supplied):
        return supplied
    return str(uuid.uuid4())


def resolve_frontend(request: Request) -> str:
    frontend = request.headers.get("X-Frontend-ID", "").lower()
    return frontend if frontend in KNOWN_FRONTENDS else "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Request ID, frontend, and timing for every request.

    Sets request.state.request_id / frontend / start_time and the
    X-Request-ID and X-Response-Time ("12ms") response headers.
    """

    def __init__(self, app: ASGIApp, log_requests: bool = False) -> None:
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request)
        frontend = resolve_frontend(request)
        started = time.perf_counter()

        request.state.request_id = request_id
        request.state.frontend = frontend
        request.state.start_time = started

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            method=request.method,
            path=request.url.path,
        )
        logger.debug(
            "Request started",
            extra={
                "client_host": request.client.host if request.client else None,
                "user_agent": request.headers.get("User-Agent"),
            },
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={"duration_ms": _elapsed_ms(started), "error_type": type(exc).__name__},
            )
            raise
        else:
            duration_ms = _elapsed_ms(started)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            log = logger.info if self.log_requests else logger.debug
            log("Request completed", extra={"status_code": response.status_code, "duration_ms": duration_ms})
            return response
        finally:
            structlog.contextvars.clear_contextvars()


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class ExtensionCorsMiddleware(BaseHTTPMiddleware):
    """
    Wildcard CORS for the browser extension surface.

    Only paths under path_prefix are affected. Those endpoints authenticate
    with bearer tokens, never cookies.
    """

    def __init__(
        self,
        app: ASGIApp,
        path_prefix: str,
        allow_methods: list[str],
        allow_headers: list[str],
    ) -> None:
        super().__init__(app)
        self.path_prefix = path_prefix
        self.cors_headers = {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": ", ".join(allow_methods),
            "Access-Control-Allow-Headers": ", ".join(allow_headers),
        }

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        if request.method == "OPTIONS":
            return Response(status_code=204, headers=self.cors_headers)

        response = await call_next(request)
        response.headers.update(self.cors_headers)
        return response
