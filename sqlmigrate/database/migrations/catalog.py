"""
Ordered catalog of migrations.

The catalog keeps the caller's declaration order and performs the checks that
must pass before any transaction is opened.
"""

from typing import Iterator, List, Optional, Sequence

from .base import INIT_SCHEMA_MIGRATION_ID, InitSchemaFunc, Migration
from .exceptions import DuplicatedIDError, MigrationIDDoesNotExistError, ReservedIDError


class MigrationCatalog:
    """Read-only, ordered view over a list of migrations."""

    def __init__(self, migrations: Optional[Sequence[Migration]] = None):
        self._migrations = tuple(migrations or ())

    def __len__(self) -> int:
        return len(self._migrations)

    def __iter__(self) -> Iterator[Migration]:
        return iter(self._migrations)

    def __reversed__(self) -> Iterator[Migration]:
        return reversed(self._migrations)

    def __bool__(self) -> bool:
        return bool(self._migrations)

    def ids(self) -> List[str]:
        """Identifiers in declaration order."""
        return [migration.id for migration in self._migrations]

    def last_id(self) -> Optional[str]:
        """Identifier of the last declared migration, or None if empty."""
        if not self._migrations:
            return None
        return self._migrations[-1].id

    def find(self, migration_id: str) -> Optional[Migration]:
        for migration in self._migrations:
            if migration.id == migration_id:
                return migration
        return None

    def has_migrations(self, initializer: Optional[InitSchemaFunc] = None) -> bool:
        """
        There is something to apply if either an initializer is registered
        or the list of migrations is not empty.
        """
        return initializer is not None or bool(self._migrations)

    def check_reserved_ids(self) -> None:
        """Raise ReservedIDError if any migration uses a reserved identifier."""
        for migration in self._migrations:
            if migration.id == INIT_SCHEMA_MIGRATION_ID:
                raise ReservedIDError(migration.id)

    def check_duplicated_ids(self) -> None:
        """Raise DuplicatedIDError for the first identifier seen twice."""
        seen = set()
        for migration in self._migrations:
            if migration.id in seen:
                raise DuplicatedIDError(migration.id)
            seen.add(migration.id)

    def check_id_exists(self, migration_id: Optional[str]) -> None:
        """Raise MigrationIDDoesNotExistError unless the identifier is declared."""
        if self.find(migration_id) is None:
            raise MigrationIDDoesNotExistError(migration_id)

    def validate(self) -> None:
        """Run every check that does not need the database."""
        self.check_reserved_ids()
        self.check_duplicated_ids()
