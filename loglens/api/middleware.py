"""FastAPI middleware for LogLens API.

This module provides middleware for:
- Request ID tracking (also bound into the structlog context)
- Request/response logging
- CORS headers
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to each request.

    A client-supplied X-Request-ID is kept, otherwise a UUID is generated.
    The ID is stored in request.state.request_id, echoed in the response
    header and bound to structlog's context variables for the duration of
    the request, so query and stream logs carry it too.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its log group (when present), status and timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        path = request.url.path

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "request_completed",
            method=request.method,
            path=path,
            source=request.path_params.get("source"),
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
            client=request.client.host if request.client else None,
        )

        return response


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Allow browser dashboards to call the API from any origin."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = f"Content-Type, {REQUEST_ID_HEADER}"

        return response
