"""
Entity cache and the event-to-cache synchronisation step.
"""

from .cache import Cache, CacheConfig
from .lock import RwLock
from .sync import commit_to_cache

__all__ = ['Cache', 'CacheConfig', 'RwLock', 'commit_to_cache']
