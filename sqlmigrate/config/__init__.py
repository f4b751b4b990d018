"""
Configuration management module for sqlmigrate.
"""

from .exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from .manager import ConfigLoader, ConfigManager, ConfigValidator
from .settings import Settings

__all__ = [
    # Main classes
    "ConfigLoader",
    "ConfigManager",
    "ConfigValidator",
    "Settings",
    # Exceptions
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigValidationError",
]
