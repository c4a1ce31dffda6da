"""Log backend transports for LogLens.

This module provides the transport abstraction with support for:
- CloudWatch Logs (filter_log_events, Logs Insights queries)
- An in-memory mock for demos and tests

Usage:
    transport = get_transport("cloudwatch", {"region": "eu-west-1"})
    events = await transport.filter_events("/aws/lambda/api", None, 0, 1000, 50)
"""

from loglens.exceptions import ConfigurationError
from loglens.transport.base import LogTransport, MockTransport

__all__ = [
    "LogTransport",
    "MockTransport",
    "get_transport",
    "transport_from_settings",
]


def get_transport(
    transport_type: str,
    config: dict[str, str] | None = None,
) -> LogTransport:
    """Create a transport instance.

    Args:
        transport_type: Type of transport ("cloudwatch", "mock")
        config: Transport-specific configuration dictionary

    Returns:
        Configured LogTransport instance

    Raises:
        ConfigurationError: If transport_type is unknown

    Examples:
        CloudWatch transport:
        >>> transport = get_transport("cloudwatch", {
        ...     "region": "us-east-1",
        ...     "profile": "observability",
        ... })

        Mock transport (for demos and testing):
        >>> transport = get_transport("mock")
    """
    config = config or {}

    if transport_type == "cloudwatch":
        from loglens.transport.cloudwatch import CloudWatchLogsTransport

        return CloudWatchLogsTransport(
            region=config.get("region", "us-east-1"),
            profile=config.get("profile"),
            endpoint_url=config.get("endpoint_url"),
        )

    elif transport_type == "mock":
        return MockTransport()

    else:
        raise ConfigurationError(
            f"Unknown transport: {transport_type}. "
            f"Supported transports: cloudwatch, mock"
        )


def transport_from_settings(settings, mock: bool | None = None) -> LogTransport:
    """Create the transport selected by settings.

    Args:
        settings: Settings instance
        mock: Overrides settings.mock_mode when not None

    Returns:
        Configured LogTransport instance
    """
    use_mock = settings.mock_mode if mock is None else mock
    if use_mock:
        return get_transport("mock")

    config = {"region": settings.aws_region}
    if settings.aws_profile:
        config["profile"] = settings.aws_profile
    if settings.aws_endpoint_url:
        config["endpoint_url"] = settings.aws_endpoint_url
    return get_transport("cloudwatch", config)
