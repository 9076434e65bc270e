"""Configuration management for the sliding puzzle solver.

This module provides Hydra-based configuration management with hierarchical
parameter groups and runtime override capabilities.
"""

from .config_manager import (
    ConfigContext, ConfigManager, default_config_dir, get_config, get_parameter, load_config
)
from .validators import ConfigValidationError, check_config_consistency, validate_config

__all__ = [
    'ConfigManager',
    'ConfigContext',
    'default_config_dir',
    'load_config',
    'get_config',
    'get_parameter',
    'validate_config',
    'check_config_consistency',
    'ConfigValidationError'
]
