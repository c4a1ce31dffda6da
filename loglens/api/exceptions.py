"""FastAPI exception hierarchy for LogLens API.

Domain errors (LogLensError) are mapped to status codes by the application's
exception handler. The classes here cover request problems detected by the
routers themselves.
"""

from fastapi import HTTPException, status


class LogLensAPIException(HTTPException):
    """Base API exception for LogLens.

    All custom API exceptions should inherit from this class.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: dict | None = None,
    ):
        """Initialize API exception.

        Args:
            status_code: HTTP status code
            detail: Error message detail
            headers: Optional HTTP headers
        """
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class BadRequestException(LogLensAPIException):
    """Bad request (400).

    Raised when request is malformed or invalid.
    """

    def __init__(self, detail: str = "Bad request"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class ServiceUnavailableException(LogLensAPIException):
    """Service unavailable (503).

    Raised when the log backend transport cannot be created.
    """

    def __init__(self, detail: str = "Service temporarily unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
        )
