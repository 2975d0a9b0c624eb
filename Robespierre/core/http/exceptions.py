"""
Exception classes for the REST client.
"""

from typing import Optional


class HttpError(Exception):
    """Base exception for REST failures."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        """
        Args:
            message: Error message
            status: HTTP status code, when a response was received
            url: Requested URL
        """
        self.status = status
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        if self.status is not None:
            return f"[{self.status}] {super().__str__()}"
        return super().__str__()


class RequestError(HttpError):
    """Raised when the request never produced a response (DNS, TLS, reset...)."""
    pass


class DecodeError(HttpError):
    """Raised when a response body is not the JSON the endpoint promises."""
    pass


class NotFound(HttpError):
    """Raised on 404 responses."""
    pass
