"""
Exception classes for the events connection.
"""

from Robespierre.core.models.events import EventDecodeError


class EventsError(Exception):
    """Base exception for events connection failures."""
    pass


class AuthError(EventsError):
    """Raised when the server rejects the authentication frame."""

    def __init__(self, message: str):
        self.reason = message
        super().__init__(f"error while authenticating: {message}")


class ConnectionClosedError(EventsError):
    """Raised when the socket closes while the connection is in use."""

    def __init__(self, message: str = "websocket closed"):
        super().__init__(message)


__all__ = ['EventsError', 'AuthError', 'ConnectionClosedError', 'EventDecodeError']
