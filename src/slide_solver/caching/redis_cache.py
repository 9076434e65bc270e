"""Redis-based memo cache for solved boards."""

import logging
import threading
import time
from typing import Any, Dict, Optional

import redis

logger = logging.getLogger(__name__)


class RedisCache:
    """Redis-backed board -> move string cache.

    Every failure is logged and reported as a miss (``get``) or ``False``
    (``set``); nothing is raised to the caller. Connection pooling is left to
    redis-py, so one instance can be shared between threads.
    """

    def __init__(self,
                 host: str = "localhost",
                 port: int = 6379,
                 db: int = 0,
                 password: Optional[str] = None,
                 connection_timeout: float = 5.0,
                 default_ttl: int = 86400,  # 24 hours
                 key_prefix: str = "",
                 retry_interval: float = 30.0):
        """Initialize Redis cache.

        Args:
            host: Redis server host
            port: Redis server port
            db: Redis database number
            password: Redis password (if required)
            connection_timeout: Connection timeout in seconds
            default_ttl: Default time-to-live in seconds (0 keeps keys forever)
            key_prefix: Prefix prepended to every board key
            retry_interval: Seconds to wait before reconnecting after a failure
        """
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self.connection_timeout = connection_timeout
        self.default_ttl = default_ttl
        self.key_prefix = key_prefix
        self.retry_interval = retry_interval
        self._retry_after = 0.0

        self.client: Optional[redis.Redis] = None
        self.connected = False

        # Statistics
        self.hits = 0
        self.misses = 0
        self.errors = 0

        logger.info(f"Redis cache initialized: {host}:{port}/{db}")

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def connect(self) -> bool:
        """Connect to Redis server.

        Returns:
            True if connection successful
        """
        try:
            self.client = redis.Redis(
                host=self.host,
                port=self.port,
                db=self.db,
                password=self.password,
                socket_timeout=self.connection_timeout,
                socket_connect_timeout=self.connection_timeout,
                decode_responses=True
            )

            # Test connection
            self.client.ping()
            self.connected = True

            logger.info(f"Connected to Redis server: {self.host}:{self.port}")
            return True

        except redis.RedisError as e:
            logger.warning(f"Failed to connect to Redis: {e}")
            self._mark_unavailable()
            return False

    def _mark_unavailable(self) -> None:
        self.connected = False
        self._retry_after = time.monotonic() + self.retry_interval

    def _ensure_connected(self) -> bool:
        if self.connected:
            return True
        if time.monotonic() < self._retry_after:
            return False
        return self.connect()

    def disconnect(self) -> None:
        """Disconnect from Redis server."""
        if self.client:
            try:
                self.client.close()
            except redis.RedisError as e:
                logger.warning(f"Error disconnecting from Redis: {e}")

        self.connected = False
        self.client = None
        logger.info("Disconnected from Redis server")

    def is_connected(self) -> bool:
        """Check if connected to Redis server."""
        if not self.connected or not self.client:
            return False

        try:
            self.client.ping()
            return True
        except redis.RedisError:
            self.connected = False
            return False

    def get(self, key: str) -> Optional[str]:
        """Get the cached move string for a board.

        Args:
            key: Board text encoding

        Returns:
            Cached move string or None if not found or unreachable
        """
        if not self._ensure_connected():
            self.errors += 1
            return None

        try:
            value = self.client.get(self._key(key))
        except redis.RedisError as e:
            logger.warning(f"Cache get error for key '{key}': {e}")
            self.errors += 1
            self._mark_unavailable()
            return None

        if value is None:
            self.misses += 1
            return None

        self.hits += 1
        logger.debug(f"Cache hit: {key}")
        return value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """Store the move string for a board.

        Args:
            key: Board text encoding
            value: Move string
            ttl: Time-to-live in seconds (uses default if None)

        Returns:
            True if successful
        """
        if not self._ensure_connected():
            self.errors += 1
            return False

        ttl = self.default_ttl if ttl is None else ttl
        try:
            if ttl > 0:
                success = self.client.setex(self._key(key), ttl, value)
            else:
                success = self.client.set(self._key(key), value)
        except redis.RedisError as e:
            logger.warning(f"Cache set error for key '{key}': {e}")
            self.errors += 1
            self._mark_unavailable()
            return False

        if success:
            logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
        return bool(success)

    def delete(self, key: str) -> bool:
        """Delete a board from the cache."""
        if not self._ensure_connected():
            return False

        try:
            return self.client.delete(self._key(key)) > 0
        except redis.RedisError as e:
            logger.warning(f"Cache delete error for key '{key}': {e}")
            self.errors += 1
            return False

    def exists(self, key: str) -> bool:
        """Check if a board is cached."""
        if not self._ensure_connected():
            return False

        try:
            return bool(self.client.exists(self._key(key)))
        except redis.RedisError as e:
            logger.warning(f"Cache exists error for key '{key}': {e}")
            self.errors += 1
            return False

    def clear(self) -> int:
        """Delete every key under this cache's prefix.

        Returns:
            Number of keys deleted
        """
        if not self._ensure_connected():
            return 0

        try:
            keys = list(self.client.scan_iter(match=f"{self.key_prefix}*"))
            if not keys:
                return 0
            deleted = self.client.delete(*keys)
        except redis.RedisError as e:
            logger.warning(f"Cache clear error: {e}")
            self.errors += 1
            return 0

        logger.info(f"Cleared {deleted} Redis keys")
        return deleted

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            'hits': self.hits,
            'misses': self.misses,
            'errors': self.errors,
            'hit_rate': self.hits / max(self.hits + self.misses, 1),
            'connected': self.connected,
            'host': self.host,
            'port': self.port,
            'db': self.db
        }

    def reset_stats(self) -> None:
        """Reset cache statistics."""
        self.hits = 0
        self.misses = 0
        self.errors = 0

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


class MockRedisCache:
    """In-process stand-in for Redis, used for tests and single runs."""

    def __init__(self, *args, **kwargs):
        self.data: Dict[str, str] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.errors = 0
        self.connected = True

        logger.info("Mock Redis cache initialized")

    def connect(self) -> bool:
        return True

    def disconnect(self) -> None:
        pass

    def is_connected(self) -> bool:
        return True

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            if key in self.data:
                self.hits += 1
                return self.data[key]
            self.misses += 1
            return None

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        with self._lock:
            self.data[key] = value
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self.data.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self.data

    def clear(self) -> int:
        with self._lock:
            count = len(self.data)
            self.data.clear()
        return count

    def get_stats(self) -> Dict[str, Any]:
        return {
            'hits': self.hits,
            'misses': self.misses,
            'errors': self.errors,
            'hit_rate': self.hits / max(self.hits + self.misses, 1),
            'connected': True,
            'mock': True
        }

    def reset_stats(self) -> None:
        self.hits = 0
        self.misses = 0
        self.errors = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass
