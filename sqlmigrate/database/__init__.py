"""
Database package for sqlmigrate.

This package provides:
- SQLAlchemy engine and transaction management
- Dialect helpers for placeholders and table probing
- Schema migrations and version tracking
"""

from .connection import (
    DatabaseError,
    DatabaseManager,
    DatabaseTransaction,
    TransactionError,
    get_database_manager,
    initialize_database_manager,
    shutdown_database_manager,
)
from .dialect import is_missing_table_error, rebind, table_exists
from .migrations import Migration, MigrationManager, MigrationOptions

__all__ = [
    "DatabaseError",
    "DatabaseManager",
    "DatabaseTransaction",
    "Migration",
    "MigrationManager",
    "MigrationOptions",
    "TransactionError",
    "get_database_manager",
    "initialize_database_manager",
    "is_missing_table_error",
    "rebind",
    "shutdown_database_manager",
    "table_exists",
]
