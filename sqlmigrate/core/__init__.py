"""
Core module for sqlmigrate.

This module contains the exception hierarchy that every other
sub-package builds on.
"""

from .exceptions import BaseMigrateException, ConfigurationError, ValidationError

__all__ = [
    "BaseMigrateException",
    "ConfigurationError",
    "ValidationError",
]
