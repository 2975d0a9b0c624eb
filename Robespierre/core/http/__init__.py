from .client import Authentication, HttpClient, SessionManager
from .exceptions import DecodeError, HttpError, NotFound, RequestError

__all__ = [
    'Authentication',
    'HttpClient',
    'SessionManager',
    'HttpError',
    'RequestError',
    'DecodeError',
    'NotFound',
]
