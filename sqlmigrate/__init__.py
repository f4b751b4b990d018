"""
sqlmigrate - versioned, reversible schema migrations over SQLAlchemy.

Example::

    from sqlmigrate import DatabaseManager, Migration, MigrationManager

    db = DatabaseManager("postgresql://localhost/app")
    db.initialize()

    manager = MigrationManager(db, migrations=[
        Migration(
            id="201608301400",
            migrate=lambda tx: tx.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT)"),
            rollback=lambda tx: tx.execute("DROP TABLE people"),
        ),
    ])
    manager.migrate()
"""

from .database import DatabaseManager, DatabaseTransaction
from .database.migrations import (
    DEFAULT_OPTIONS,
    INIT_SCHEMA_MIGRATION_ID,
    DuplicatedIDError,
    Migration,
    MigrationError,
    MigrationIDDoesNotExistError,
    MigrationManager,
    MigrationOptions,
    MissingIDError,
    NoMigrationDefinedError,
    NoRunMigrationError,
    PersistenceError,
    ReservedIDError,
    RollbackImpossibleError,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_OPTIONS",
    "INIT_SCHEMA_MIGRATION_ID",
    "DatabaseManager",
    "DatabaseTransaction",
    "DuplicatedIDError",
    "Migration",
    "MigrationError",
    "MigrationIDDoesNotExistError",
    "MigrationManager",
    "MigrationOptions",
    "MissingIDError",
    "NoMigrationDefinedError",
    "NoRunMigrationError",
    "PersistenceError",
    "ReservedIDError",
    "RollbackImpossibleError",
]
