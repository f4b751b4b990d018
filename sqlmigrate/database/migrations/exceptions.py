"""
Migration exceptions.

Every failure the migration manager can report is a distinct class so that
callers can dispatch on type instead of inspecting messages.
"""

from typing import Any, Dict, Optional

from ...core.exceptions import BaseMigrateException, ValidationError


class MigrationError(BaseMigrateException):
    """Base exception for migration errors."""
    pass


class MigrationValidationError(ValidationError, MigrationError):
    """Base exception for invalid migration definitions."""
    pass


class NoMigrationDefinedError(MigrationError):
    """Exception raised when neither migrations nor an initializer are defined."""

    def __init__(self, message: str = "No migration defined") -> None:
        super().__init__(message)


class ReservedIDError(MigrationValidationError):
    """Exception raised when a migration uses a reserved identifier."""

    def __init__(self, migration_id: str) -> None:
        super().__init__(f'Reserved migration ID: "{migration_id}"', migration_id)


class DuplicatedIDError(MigrationValidationError):
    """Exception raised when more than one migration has the same identifier."""

    def __init__(self, migration_id: str) -> None:
        super().__init__(f'Duplicated migration ID: "{migration_id}"', migration_id)


class MissingIDError(MigrationValidationError):
    """Exception raised when a migration has an empty identifier."""

    def __init__(self, message: str = "Missing ID in migration") -> None:
        super().__init__(message)


class MigrationIDDoesNotExistError(MigrationValidationError):
    """Exception raised when targeting an identifier that is not in the catalog."""

    def __init__(self, migration_id: Optional[str]) -> None:
        super().__init__(
            f'Tried to migrate to an ID that doesn\'t exist: "{migration_id}"',
            migration_id,
        )


class NoRunMigrationError(MigrationError):
    """Exception raised when rolling back and no applied migration was found."""

    def __init__(self, message: str = "Could not find last run migration") -> None:
        super().__init__(message)


class RollbackImpossibleError(MigrationError):
    """Exception raised when rolling back a migration without a rollback function."""

    def __init__(self, migration_id: str) -> None:
        super().__init__(
            "It's impossible to rollback this migration",
            context={"migration_id": migration_id},
        )
        self.migration_id = migration_id


class PersistenceError(MigrationError):
    """Exception raised when reading or writing the migration history fails."""

    def __init__(
        self,
        message: str,
        statement: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            statement: SQL statement that failed
            context: Additional context information
            cause: Underlying driver exception
        """
        enhanced_context: Dict[str, Any] = {}
        if statement is not None:
            enhanced_context["statement"] = statement
        if context:
            enhanced_context.update(context)

        super().__init__(message, enhanced_context, cause)
        self.statement = statement
