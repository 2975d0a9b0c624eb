"""
Events WebSocket: connection loop, raw handler interface and typing sessions.
"""

from .connection import Connection, RawEventHandler
from .exceptions import AuthError, ConnectionClosedError, EventDecodeError, EventsError
from .typing_sessions import (
    ConnectionMessage,
    ConnectionMessageKind,
    ConnectionMessenger,
    TypingSession,
    TypingSessionManager,
)

__all__ = [
    'Connection',
    'RawEventHandler',
    'EventsError',
    'AuthError',
    'ConnectionClosedError',
    'EventDecodeError',
    'ConnectionMessage',
    'ConnectionMessageKind',
    'ConnectionMessenger',
    'TypingSession',
    'TypingSessionManager',
]
