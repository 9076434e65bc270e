"""Main cache manager that coordinates the memo cache backends."""

import logging
from typing import Any, Dict, Optional, Protocol, Union

from omegaconf import DictConfig, OmegaConf

from .file_cache import FileCache
from .redis_cache import MockRedisCache, RedisCache

logger = logging.getLogger(__name__)


class MemoCache(Protocol):
    """Board text -> move string store. Failures surface as misses."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        ...


class CacheManager:
    """Chains the enabled backends: Redis (or its in-memory stand-in) first, then files."""

    def __init__(self, config: DictConfig):
        """Initialize cache manager with configuration.

        Args:
            config: Cache configuration (``redis`` and ``file_cache`` sections)
        """
        self.config = config

        self.redis_cache: Optional[Union[RedisCache, MockRedisCache]] = None
        self.file_cache: Optional[FileCache] = None

        self._init_redis_cache()
        self._init_file_cache()

        logger.info("Cache manager initialized")

    def _init_redis_cache(self) -> None:
        """Initialize the Redis backend if enabled."""
        redis_config = self.config.get('redis', {})

        if not redis_config.get('enabled', False):
            logger.info("Redis cache disabled")
            return

        if redis_config.get('backend', 'redis') == 'memory':
            self.redis_cache = MockRedisCache()
            return

        self.redis_cache = RedisCache(
            host=redis_config.get('host', 'localhost'),
            port=redis_config.get('port', 6379),
            db=redis_config.get('db', 0),
            password=redis_config.get('password'),
            connection_timeout=redis_config.get('connection_timeout', 5.0),
            default_ttl=redis_config.get('ttl', 86400),
            key_prefix=redis_config.get('key_prefix', ''),
            retry_interval=redis_config.get('retry_interval', 30.0)
        )

        # An unreachable server is not fatal: lookups miss until a reconnect succeeds
        if self.redis_cache.connect():
            logger.info("Redis cache initialized successfully")
        else:
            logger.warning("Redis connection failed, boards will be solved fresh")

    def _init_file_cache(self) -> None:
        """Initialize the file backend if enabled."""
        file_config = self.config.get('file_cache', {})

        if not file_config.get('enabled', False):
            logger.info("File cache disabled")
            return

        try:
            self.file_cache = FileCache(
                cache_dir=file_config.get('cache_dir', '.cache/slide_solver'),
                max_cache_size=file_config.get('max_cache_size', 0.1),
                default_ttl=file_config.get('cache_ttl', 0),
                compression=file_config.get('compression', False)
            )
        except OSError as e:
            logger.error(f"Failed to initialize file cache: {e}")
            self.file_cache = None

    def _backends(self, cache_type: str):
        if cache_type in ('auto', 'redis') and self.redis_cache:
            yield self.redis_cache
        if cache_type in ('auto', 'file') and self.file_cache:
            yield self.file_cache

    @property
    def enabled(self) -> bool:
        """True when at least one backend is configured."""
        return self.redis_cache is not None or self.file_cache is not None

    def get(self, key: str, cache_type: str = 'auto') -> Optional[str]:
        """Get value from cache.

        Args:
            key: Cache key
            cache_type: Cache type ('redis', 'file', 'auto')

        Returns:
            Cached value or None if not found
        """
        for backend in self._backends(cache_type):
            value = backend.get(key)
            if value is not None:
                return value
        return None

    def set(self, key: str, value: str, cache_type: str = 'auto', ttl: Optional[int] = None) -> bool:
        """Set value in every selected backend.

        Returns:
            True if at least one backend stored the value
        """
        success = False
        for backend in self._backends(cache_type):
            success = backend.set(key, value, ttl) or success
        return success

    def delete(self, key: str, cache_type: str = 'auto') -> bool:
        success = False
        for backend in self._backends(cache_type):
            success = backend.delete(key) or success
        return success

    def exists(self, key: str, cache_type: str = 'auto') -> bool:
        return any(backend.exists(key) for backend in self._backends(cache_type))

    def clear(self, cache_type: str = 'auto') -> int:
        """Clear cache entries.

        Returns:
            Number of entries cleared
        """
        return sum(backend.clear() for backend in self._backends(cache_type))

    # Board-level helpers

    def get_moves(self, board_text: str) -> Optional[str]:
        """Cached move string for a board, keyed by its original text encoding."""
        moves = self.get(board_text)
        if moves is not None:
            logger.debug(f"Memo hit for {board_text}: {moves!r}")
        return moves

    def set_moves(self, board_text: str, moves: str) -> bool:
        """Remember the move string found for a board."""
        return self.set(board_text, moves)

    def get_stats(self) -> Dict[str, Any]:
        """Get combined cache statistics."""
        stats: Dict[str, Any] = {
            'redis_enabled': self.redis_cache is not None,
            'file_enabled': self.file_cache is not None,
        }

        total_hits = 0
        total_requests = 0

        if self.redis_cache:
            redis_stats = self.redis_cache.get_stats()
            stats['redis'] = redis_stats
            total_hits += redis_stats['hits']
            total_requests += redis_stats['hits'] + redis_stats['misses']

        if self.file_cache:
            file_stats = self.file_cache.get_stats()
            stats['file'] = file_stats
            total_hits += file_stats['hits']
            total_requests += file_stats['hits'] + file_stats['misses']

        stats['combined'] = {
            'total_hits': total_hits,
            'total_requests': total_requests,
            'hit_rate': total_hits / max(total_requests, 1)
        }
        return stats

    def reset_stats(self) -> None:
        """Reset all cache statistics."""
        for backend in self._backends('auto'):
            backend.reset_stats()

        logger.info("All cache statistics reset")

    def close(self) -> None:
        """Close all cache connections."""
        if self.redis_cache:
            self.redis_cache.disconnect()

        logger.info("Cache manager closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_cache_manager(config: Optional[DictConfig] = None) -> CacheManager:
    """Factory function to create cache manager.

    Args:
        config: Cache configuration (uses an in-memory backend if None)

    Returns:
        Configured CacheManager instance
    """
    if config is None:
        config = OmegaConf.create({
            'redis': {
                'enabled': True,
                'backend': 'memory'
            },
            'file_cache': {
                'enabled': False
            }
        })

    return CacheManager(config)
