"""Memo cache for solved boards.

Redis, in-memory and file backends store the move string found for a board,
keyed by the board's text encoding, so repeated boards skip the search.
"""

from .cache_manager import CacheManager, MemoCache, create_cache_manager
from .redis_cache import RedisCache, MockRedisCache
from .file_cache import FileCache

__all__ = [
    'CacheManager',
    'MemoCache',
    'create_cache_manager',
    'RedisCache',
    'MockRedisCache',
    'FileCache'
]
