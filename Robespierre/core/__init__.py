from .cache import Cache, CacheConfig
from .context import Context
from .events import Connection
from .http import Authentication, HttpClient

__all__ = ['Cache', 'CacheConfig', 'Context', 'Connection', 'Authentication', 'HttpClient']
