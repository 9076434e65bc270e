"""File-based memo cache for solved boards."""

import gzip
import hashlib
import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class FileCache:
    """One JSON record per board under a cache directory."""

    def __init__(self,
                 cache_dir: Union[str, Path] = ".cache/slide_solver",
                 max_cache_size: float = 0.1,  # GB
                 default_ttl: int = 0,  # keep forever
                 compression: bool = False):
        """Initialize file cache.

        Args:
            cache_dir: Directory to store cache files
            max_cache_size: Maximum cache size in GB
            default_ttl: Default time-to-live in seconds (0 disables expiry)
            compression: Whether to gzip cache files
        """
        self.cache_dir = Path(cache_dir)
        self.max_cache_size = max_cache_size * 1024 * 1024 * 1024  # Convert to bytes
        self.default_ttl = default_ttl
        self.compression = compression
        self._lock = threading.Lock()

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        # Running total of bytes on disk, rescanned only during cleanup
        self.current_size = self.get_cache_size()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.errors = 0

        logger.info(f"File cache initialized: {self.cache_dir} "
                    f"(max_size: {max_cache_size:.2f}GB, compression: {compression})")

    def _get_cache_path(self, key: str) -> Path:
        """Get cache file path for key.

        Keys are hashed to safe file names and spread over subdirectories
        named after the first two hex digits of the hash.
        """
        key_hash = hashlib.sha256(key.encode()).hexdigest()
        subdir = self.cache_dir / key_hash[:2]
        ext = ".json.gz" if self.compression else ".json"
        return subdir / f"{key_hash}{ext}"

    def _is_expired(self, cache_path: Path, ttl: Optional[int] = None) -> bool:
        if not cache_path.exists():
            return True

        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            return False  # No expiration

        file_age = time.time() - cache_path.stat().st_mtime
        return file_age > ttl

    def _read(self, cache_path: Path) -> Dict[str, Any]:
        if self.compression:
            with gzip.open(cache_path, 'rt', encoding='utf-8') as f:
                return json.load(f)
        with open(cache_path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write(self, cache_path: Path, record: Dict[str, Any]) -> None:
        if self.compression:
            with gzip.open(cache_path, 'wt', encoding='utf-8') as f:
                json.dump(record, f)
        else:
            with open(cache_path, 'w', encoding='utf-8') as f:
                json.dump(record, f)

    def get(self, key: str, ttl: Optional[int] = None) -> Optional[str]:
        """Get the cached move string for a board.

        Args:
            key: Board text encoding
            ttl: Time-to-live in seconds (uses default if None)

        Returns:
            Cached move string or None if not found/expired/unreadable
        """
        try:
            cache_path = self._get_cache_path(key)

            if self._is_expired(cache_path, ttl):
                self.misses += 1
                return None

            record = self._read(cache_path)
            if record.get('key') != key:
                # sha256 collision or foreign file
                self.misses += 1
                return None

            self.hits += 1
            logger.debug(f"File cache hit: {key}")
            return record['value']

        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"File cache get error for key '{key}': {e}")
            self.errors += 1
            return None

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """Store the move string for a board.

        Args:
            key: Board text encoding
            value: Move string
            ttl: Unused, expiry is checked on read

        Returns:
            True if successful
        """
        try:
            cache_path = self._get_cache_path(key)
            with self._lock:
                cache_path.parent.mkdir(parents=True, exist_ok=True)
                old_size = cache_path.stat().st_size if cache_path.exists() else 0
                self._write(cache_path, {
                    'key': key,
                    'value': value,
                    'created_at': time.time(),
                })
                self.current_size += cache_path.stat().st_size - old_size

            logger.debug(f"File cache set: {key}")
            self._cleanup_if_needed()
            return True

        except OSError as e:
            logger.warning(f"File cache set error for key '{key}': {e}")
            self.errors += 1
            return False

    def delete(self, key: str) -> bool:
        """Delete a board from the cache."""
        try:
            cache_path = self._get_cache_path(key)
            with self._lock:
                if not cache_path.exists():
                    return False
                file_size = cache_path.stat().st_size
                cache_path.unlink()
                self.current_size = max(self.current_size - file_size, 0)
            logger.debug(f"File cache delete: {key}")
            return True

        except OSError as e:
            logger.warning(f"File cache delete error for key '{key}': {e}")
            self.errors += 1
            return False

    def exists(self, key: str, ttl: Optional[int] = None) -> bool:
        """Check if a board is cached and not expired."""
        try:
            return not self._is_expired(self._get_cache_path(key), ttl)
        except OSError as e:
            logger.warning(f"File cache exists error for key '{key}': {e}")
            self.errors += 1
            return False

    def clear(self) -> int:
        """Remove every cache file.

        Returns:
            Number of files deleted
        """
        deleted_count = 0
        try:
            for item in self.cache_dir.rglob("*.json*"):
                if item.is_file():
                    item.unlink()
                    deleted_count += 1

            for item in self.cache_dir.iterdir():
                if item.is_dir() and not any(item.iterdir()):
                    item.rmdir()

            self.current_size = 0

        except OSError as e:
            logger.error(f"File cache clear error: {e}")
            self.errors += 1
            self.current_size = self.get_cache_size()

        logger.info(f"Cleared {deleted_count} cache files")
        return deleted_count

    def get_cache_size(self) -> int:
        """Get current cache size in bytes."""
        try:
            return sum(item.stat().st_size for item in self.cache_dir.rglob("*.json*") if item.is_file())
        except OSError as e:
            logger.warning(f"Error calculating cache size: {e}")
            return 0

    def _cleanup_if_needed(self) -> None:
        """Remove the oldest files once the cache exceeds its size limit."""
        if self.current_size <= self.max_cache_size:
            return

        with self._lock:
            self._cleanup()

    def _cleanup(self) -> None:
        cache_files = []
        for item in self.cache_dir.rglob("*.json*"):
            try:
                stat = item.stat()
            except OSError:
                continue
            cache_files.append((item, stat.st_mtime, stat.st_size))

        current_size = sum(file_size for _, _, file_size in cache_files)
        if current_size <= self.max_cache_size:
            self.current_size = current_size
            return

        logger.info(f"Cache size ({current_size / 1024 / 1024:.1f}MB) exceeds limit "
                    f"({self.max_cache_size / 1024 / 1024:.1f}MB), cleaning up...")

        # Oldest first, down to 80% of the limit
        cache_files.sort(key=lambda x: x[1])
        bytes_to_remove = current_size - int(self.max_cache_size * 0.8)
        bytes_removed = 0
        files_removed = 0

        for cache_path, _, file_size in cache_files:
            if bytes_removed >= bytes_to_remove:
                break
            try:
                cache_path.unlink()
            except OSError as e:
                logger.warning(f"Error removing cache file {cache_path}: {e}")
                continue
            bytes_removed += file_size
            files_removed += 1

        self.current_size = current_size - bytes_removed

        logger.info(f"Cache cleanup completed: removed {files_removed} files "
                    f"({bytes_removed / 1024 / 1024:.1f}MB)")

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        file_count = sum(1 for item in self.cache_dir.rglob("*.json*") if item.is_file())
        cache_size = self.get_cache_size()

        return {
            'hits': self.hits,
            'misses': self.misses,
            'errors': self.errors,
            'hit_rate': self.hits / max(self.hits + self.misses, 1),
            'cache_dir': str(self.cache_dir),
            'cache_size_bytes': cache_size,
            'max_cache_size_mb': self.max_cache_size / 1024 / 1024,
            'file_count': file_count,
            'compression': self.compression
        }

    def reset_stats(self) -> None:
        """Reset cache statistics."""
        self.hits = 0
        self.misses = 0
        self.errors = 0
