"""Configuration validation for the sliding puzzle solver."""

import logging
from typing import List

from omegaconf import DictConfig

logger = logging.getLogger(__name__)

ENGINES = ('sequential', 'parallel')
CACHE_BACKENDS = ('redis', 'memory')


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails."""
    pass


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: DictConfig) -> None:
    """Validate the complete configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        validate_solver_config(config.get('solver', {}))
        validate_search_config(config.get('search', {}))
        validate_batch_config(config.get('batch', {}))
        validate_system_config(config.get('system', {}))
        validate_logging_config(config.get('logging', {}))
    except (AttributeError, TypeError) as e:
        raise ConfigValidationError(f"Configuration validation failed: {e}") from e

    logger.info("Configuration validation passed")


def validate_solver_config(solver_config: DictConfig) -> None:
    """Validate solver configuration section."""
    if not solver_config:
        return

    engine = solver_config.get('engine', 'sequential')
    if engine not in ENGINES:
        raise ConfigValidationError(
            f"solver.engine must be one of {', '.join(ENGINES)}, got {engine}"
        )


def validate_search_config(search_config: DictConfig) -> None:
    """Validate search configuration section.

    Args:
        search_config: Search configuration section
    """
    if not search_config:
        return

    astar_config = search_config.get('astar', {})
    if astar_config:
        threshold = astar_config.get('heuristic_threshold')
        if threshold is not None and (not _is_number(threshold) or threshold <= 0):
            raise ConfigValidationError(
                f"astar.heuristic_threshold must be positive number or null, got {threshold}"
            )

        max_iterations = astar_config.get('max_iterations', 1_000_000)
        if not _is_int(max_iterations) or max_iterations < 1:
            raise ConfigValidationError(
                f"astar.max_iterations must be positive integer, got {max_iterations}"
            )

        max_time = astar_config.get('max_computation_time')
        if max_time is not None and (not _is_number(max_time) or max_time <= 0):
            raise ConfigValidationError(
                f"astar.max_computation_time must be positive number or null, got {max_time}"
            )

    parallel_config = search_config.get('parallel', {})
    if parallel_config:
        num_workers = parallel_config.get('num_workers', 24)
        if not _is_int(num_workers) or num_workers < 1:
            raise ConfigValidationError(
                f"parallel.num_workers must be positive integer, got {num_workers}"
            )


def validate_batch_config(batch_config: DictConfig) -> None:
    """Validate batch configuration section."""
    if not batch_config:
        return

    header_lines = batch_config.get('header_lines', 2)
    if not _is_int(header_lines) or header_lines < 0:
        raise ConfigValidationError(
            f"batch.header_lines must be non-negative integer, got {header_lines}"
        )

    threads = batch_config.get('threads', 4)
    if not _is_int(threads) or threads < 1:
        raise ConfigValidationError(
            f"batch.threads must be positive integer, got {threads}"
        )


def validate_system_config(system_config: DictConfig) -> None:
    """Validate system configuration section.

    Args:
        system_config: System configuration section
    """
    if not system_config:
        return

    caching_config = system_config.get('caching', {})
    if not caching_config:
        return

    redis_config = caching_config.get('redis', {})
    if redis_config and redis_config.get('enabled', False):
        backend = redis_config.get('backend', 'redis')
        if backend not in CACHE_BACKENDS:
            raise ConfigValidationError(
                f"caching.redis.backend must be one of {', '.join(CACHE_BACKENDS)}, got {backend}"
            )

        port = redis_config.get('port', 6379)
        if not _is_int(port) or not 1 <= port <= 65535:
            raise ConfigValidationError(
                f"caching.redis.port must be integer between 1 and 65535, got {port}"
            )

        ttl = redis_config.get('ttl', 0)
        if not _is_int(ttl) or ttl < 0:
            raise ConfigValidationError(
                f"caching.redis.ttl must be non-negative integer, got {ttl}"
            )

    file_cache_config = caching_config.get('file_cache', {})
    if file_cache_config:
        max_size = file_cache_config.get('max_cache_size', 0.1)
        if not _is_number(max_size) or max_size <= 0:
            raise ConfigValidationError(
                f"caching.file_cache.max_cache_size must be positive number, got {max_size}"
            )


def validate_logging_config(logging_config: DictConfig) -> None:
    if not logging_config:
        return

    level = logging_config.get('level', 'WARNING')
    if logging.getLevelName(str(level).upper()) not in (
            logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL):
        raise ConfigValidationError(f"logging.level is not a valid level name, got {level}")


def check_config_consistency(config: DictConfig) -> List[str]:
    """Check configuration consistency and return issues.

    Args:
        config: Configuration to check

    Returns:
        List of consistency issues (warnings, not errors)
    """
    issues = []

    engine = config.get('solver', {}).get('engine', 'sequential')
    num_workers = config.get('search', {}).get('parallel', {}).get('num_workers', 24)
    if engine == 'parallel' and num_workers == 1:
        issues.append("parallel engine with a single worker behaves like the sequential engine")

    batch_threads = config.get('batch', {}).get('threads', 4)
    if engine == 'parallel' and batch_threads * num_workers > 256:
        issues.append(
            f"batch.threads ({batch_threads}) x parallel.num_workers ({num_workers}) "
            f"starts more than 256 search threads"
        )

    redis_config = config.get('system', {}).get('caching', {}).get('redis', {})
    if not config.get('solver', {}).get('use_cache', True) and redis_config.get('enabled', False):
        issues.append("solver.use_cache is false, the configured cache backends are never consulted")

    return issues
