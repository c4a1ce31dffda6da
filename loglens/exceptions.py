"""Custom exceptions for LogLens."""

from typing import Any


class LogLensError(Exception):
    """Base exception for all LogLens errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(LogLensError):
    """Configuration-related errors."""

    pass


class TimeError(LogLensError):
    """Base class for time window errors."""

    pass


class InvalidTimestampError(TimeError):
    """A custom range bound could not be parsed."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid timestamp: {value!r}", value=value)


class InvertedRangeError(TimeError):
    """Custom range starts after it ends."""

    def __init__(self, start: str, end: str) -> None:
        super().__init__(
            f"Start time {start} is after end time {end}",
            start=start,
            end=end,
        )


class TransportError(LogLensError):
    """The log backend call failed."""

    def __init__(self, operation: str, details: str) -> None:
        super().__init__(
            f"{operation} failed: {details}",
            operation=operation,
            details=details,
        )


class FetchError(LogLensError):
    """Stream mode errors."""

    pass


class UpstreamError(FetchError):
    """The backend rejected or failed a filtered fetch."""

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message, source=source)


class QueryError(LogLensError):
    """Query mode errors."""

    pass


class InvalidTimeRangeError(QueryError):
    """The time selector of a query could not be resolved."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Invalid time range: {details}", details=details)


class SubmitFailedError(QueryError):
    """The backend did not accept the query."""

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(message, query=query)


class PollFailedError(QueryError):
    """A status poll for a submitted job failed."""

    def __init__(self, message: str, job_id: str) -> None:
        super().__init__(message, job_id=job_id)


class JobFailedError(QueryError):
    """The job reached a terminal status other than Complete."""

    def __init__(self, status: str, job_id: str | None = None) -> None:
        super().__init__(f"Query job ended with status {status}", status=status, job_id=job_id)
        self.status = status


class QueryTimeoutError(QueryError):
    """Query did not complete before the caller's deadline."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Query timeout after {timeout_seconds}s", timeout_seconds=timeout_seconds)


class QueryCancelledError(QueryError):
    """Polling was abandoned by the caller; the remote job may still run."""

    def __init__(self, job_id: str | None = None) -> None:
        super().__init__("Query polling cancelled", job_id=job_id)


def get_http_status(error: Exception) -> int:
    """Map exception to HTTP status code."""
    status_map = {
        InvalidTimestampError: 400,
        InvertedRangeError: 400,
        InvalidTimeRangeError: 400,
        JobFailedError: 422,
        QueryCancelledError: 409,
        QueryTimeoutError: 504,
        UpstreamError: 502,
        SubmitFailedError: 502,
        PollFailedError: 502,
        TransportError: 502,
        ConfigurationError: 500,
    }

    for exc_type, status in status_map.items():
        if isinstance(error, exc_type):
            return status

    return 500
