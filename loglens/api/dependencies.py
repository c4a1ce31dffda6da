"""FastAPI dependencies for LogLens API.

Routers receive settings and the log transport through these dependencies so
tests can swap them with ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from loglens.api.exceptions import ServiceUnavailableException
from loglens.config import Settings, get_settings
from loglens.transport import LogTransport, transport_from_settings


def get_app_settings() -> Settings:
    """Return the process-wide settings instance."""
    return get_settings()


AppSettings = Annotated[Settings, Depends(get_app_settings)]


def get_log_transport(settings: AppSettings) -> LogTransport:
    """Create the transport selected by settings.

    Raises:
        ServiceUnavailableException: If the transport cannot be created
            (for example an unknown AWS profile)
    """
    try:
        return transport_from_settings(settings)
    except Exception as e:
        raise ServiceUnavailableException(f"Log backend unavailable: {e}") from e


Transport = Annotated[LogTransport, Depends(get_log_transport)]
