"""
Migration definitions and options.

A migration is an identified pair of callables: one moving the schema
forward and an optional one undoing it. Both receive the open
``DatabaseTransaction`` of the running operation.
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional

from ..connection import DatabaseTransaction

# Reserved identifier recorded once the initializer has run
INIT_SCHEMA_MIGRATION_ID = "SCHEMA_INIT"

MigrateFunc = Callable[[DatabaseTransaction], None]
RollbackFunc = Callable[[DatabaseTransaction], None]
InitSchemaFunc = Callable[[DatabaseTransaction], None]


@dataclass(frozen=True)
class Migration:
    """
    A single database migration.

    Attributes:
        id: Migration identifier, usually a timestamp like "201601021504"
        migrate: Function executed when applying this migration
        rollback: Function executed when undoing this migration, if any
    """

    id: str
    migrate: MigrateFunc
    rollback: Optional[RollbackFunc] = None

    @property
    def can_rollback(self) -> bool:
        return self.rollback is not None


@dataclass(frozen=True)
class MigrationOptions:
    """Options shared by all migrations of a manager."""

    # Table recording applied migrations
    table_name: str = "migrations"
    # Column holding the migration identifier
    id_column_name: str = "id"
    # Width of the identifier column
    id_column_size: int = 255

    def with_defaults(self) -> "MigrationOptions":
        """Return a copy where every empty field falls back to its default."""
        return replace(
            self,
            table_name=self.table_name or DEFAULT_OPTIONS.table_name,
            id_column_name=self.id_column_name or DEFAULT_OPTIONS.id_column_name,
            id_column_size=self.id_column_size or DEFAULT_OPTIONS.id_column_size,
        )


DEFAULT_OPTIONS = MigrationOptions()
