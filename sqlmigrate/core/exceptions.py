"""
Custom exceptions for sqlmigrate.

This module defines the base exception hierarchy shared by the database,
migration and configuration layers, promoting clear error handling and
debugging.
"""

import time
from typing import Any, Dict, Optional


class BaseMigrateException(Exception):
    """Base exception class with enhanced error context."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the exception with context and cause tracking.

        Args:
            message: Error message
            context: Additional context information
            cause: Root cause exception if this is a wrapped exception
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.cause = cause
        self.timestamp = time.time()

    def __str__(self) -> str:
        """Return a detailed string representation of the exception."""
        parts = [self.message]

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "timestamp": self.timestamp,
        }


class ConfigurationError(BaseMigrateException):
    """Exception raised when there's a configuration error."""

    def __init__(
        self,
        message: str,
        config_key: str = "Unknown",
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            context: Additional context information
            cause: Root cause exception
        """
        enhanced_context = {"config_key": config_key}
        if context:
            enhanced_context.update(context)

        super().__init__(message, enhanced_context, cause)
        self.config_key = config_key


class ValidationError(BaseMigrateException):
    """Exception raised when migration definitions fail validation."""

    def __init__(
        self,
        message: str,
        migration_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            migration_id: Identifier of the offending migration, if any
            context: Additional context information
            cause: Root cause exception
        """
        enhanced_context: Dict[str, Any] = {}
        if migration_id is not None:
            enhanced_context["migration_id"] = migration_id
        if context:
            enhanced_context.update(context)

        super().__init__(message, enhanced_context, cause)
        self.migration_id = migration_id
