"""Exceptions raised by the cached HTTP communication layer."""

from typing import Optional

from src.utils.exceptions import CommunicationError


class RequestFailedError(CommunicationError):
    """Raised when an outbound HTTP request fails.

    Covers both transport failures (connection refused, timeout, ...) and
    responses with a non-success status code. Failed requests are never cached.
    """

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        uri: Optional[str] = None,
        status_code: Optional[int] = None
    ):
        self.method = method
        self.uri = uri
        self.status_code = status_code
        super().__init__(
            message,
            error_code="REQUEST_FAILED",
            details={
                "method": method,
                "uri": uri,
                "status_code": status_code
            }
        )
