"""LogLens API routers package.

This package contains all API route handlers organized by domain.
"""

from loglens.api.routers.health import router as health_router
from loglens.api.routers.query import router as query_router
from loglens.api.routers.stream import router as stream_router

__all__ = [
    "health_router",
    "query_router",
    "stream_router",
]
