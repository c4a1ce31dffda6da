"""LogLens REST API module.

This module provides the FastAPI application and related components
for the LogLens REST API.
"""

from loglens.api.app import app, create_app
from loglens.api.dependencies import (
    AppSettings,
    Transport,
    get_app_settings,
    get_log_transport,
)
from loglens.api.exceptions import (
    BadRequestException,
    LogLensAPIException,
    ServiceUnavailableException,
)
from loglens.api.middleware import (
    CORSHeadersMiddleware,
    LoggingMiddleware,
    RequestIDMiddleware,
)

__all__ = [
    "app",
    "create_app",
    "get_app_settings",
    "get_log_transport",
    "AppSettings",
    "Transport",
    "LogLensAPIException",
    "BadRequestException",
    "ServiceUnavailableException",
    "RequestIDMiddleware",
    "LoggingMiddleware",
    "CORSHeadersMiddleware",
]
