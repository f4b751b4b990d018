"""
Database migration system for managing schema changes.
"""

from .base import (
    DEFAULT_OPTIONS,
    INIT_SCHEMA_MIGRATION_ID,
    InitSchemaFunc,
    MigrateFunc,
    Migration,
    MigrationOptions,
    RollbackFunc,
)
from .catalog import MigrationCatalog
from .exceptions import (
    DuplicatedIDError,
    MigrationError,
    MigrationIDDoesNotExistError,
    MigrationValidationError,
    MissingIDError,
    NoMigrationDefinedError,
    NoRunMigrationError,
    PersistenceError,
    ReservedIDError,
    RollbackImpossibleError,
)
from .history import MigrationHistory
from .manager import MigrationManager
from .transaction import TransactionScope

__all__ = [
    "DEFAULT_OPTIONS",
    "INIT_SCHEMA_MIGRATION_ID",
    "DuplicatedIDError",
    "InitSchemaFunc",
    "MigrateFunc",
    "Migration",
    "MigrationCatalog",
    "MigrationError",
    "MigrationHistory",
    "MigrationIDDoesNotExistError",
    "MigrationManager",
    "MigrationOptions",
    "MigrationValidationError",
    "MissingIDError",
    "NoMigrationDefinedError",
    "NoRunMigrationError",
    "PersistenceError",
    "ReservedIDError",
    "RollbackFunc",
    "RollbackImpossibleError",
    "TransactionScope",
]
