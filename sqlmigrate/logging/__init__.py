"""
Logging framework for sqlmigrate.
"""

from .manager import LogFormatter, LoggingManager, configure_logging, get_logger

__all__ = [
    "LogFormatter",
    "LoggingManager",
    "configure_logging",
    "get_logger",
]
