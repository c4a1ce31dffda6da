"""FastAPI application factory and configuration."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from loglens import __version__
from loglens.api.exceptions import LogLensAPIException
from loglens.api.middleware import (
    CORSHeadersMiddleware,
    LoggingMiddleware,
    RequestIDMiddleware,
)
from loglens.api.routers import health_router, query_router, stream_router
from loglens.config import get_settings
from loglens.exceptions import LogLensError, get_http_status
from loglens.logging_config import setup_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Configures logging on startup and records the selected transport.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    settings = get_settings()
    setup_logging()
    logger.info(
        "application_starting",
        host=settings.loglens_host,
        port=settings.loglens_port,
        version=__version__,
        transport="mock" if settings.mock_mode else "cloudwatch",
        region=settings.aws_region,
    )

    yield

    logger.info("application_shutting_down")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """

    app = FastAPI(
        title="LogLens API",
        description="SQL-shaped queries against CloudWatch Logs",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(CORSHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(query_router)
    app.include_router(stream_router)

    logger.info("application_created", title=app.title, version=app.version)
    return app


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(LogLensError)
    async def loglens_error_handler(
        request: Request,
        exc: LogLensError,
    ) -> JSONResponse:
        """Map domain errors to status codes with a structured body."""
        request_id = getattr(request.state, "request_id", "unknown")
        status_code = get_http_status(exc)
        logger.warning(
            "domain_error",
            path=request.url.path,
            status_code=status_code,
            error_type=type(exc).__name__,
            error_message=exc.message,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=status_code,
            content={**exc.to_dict(), "request_id": request_id},
        )

    @app.exception_handler(LogLensAPIException)
    async def loglens_api_exception_handler(
        request: Request,
        exc: LogLensAPIException,
    ) -> JSONResponse:
        """Handle LogLensAPIException and all subclasses."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning(
            "api_exception",
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": request_id,
            },
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unexpected_error",
            path=request.url.path,
            error=str(exc),
            request_id=request_id,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )


app = create_app()
