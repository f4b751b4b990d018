"""
Persistent record of applied migrations.

One row per applied migration identifier, in a single-column table. All
statements run through the transaction of the current operation.
"""

import logging
from typing import Any, Callable, List

from sqlalchemy.exc import SQLAlchemyError

from ..connection import DatabaseTransaction
from .base import MigrationOptions
from .exceptions import PersistenceError


class MigrationHistory:
    """Reads and writes the migration history table."""

    def __init__(
        self,
        transaction: DatabaseTransaction,
        options: MigrationOptions,
        logger: logging.Logger,
    ):
        self.transaction = transaction
        self.options = options
        self.logger = logger

    @property
    def table_name(self) -> str:
        return self.options.table_name

    @property
    def column_name(self) -> str:
        return self.options.id_column_name

    def _run(self, call: Callable[..., Any], sql: str, *args: Any) -> Any:
        try:
            return call(sql, *args)
        except SQLAlchemyError as e:
            self.logger.error(f"Query failed {sql}: {e}")
            raise PersistenceError(f"Query failed {sql}", statement=sql, cause=e) from e

    def exists(self) -> bool:
        """Whether the history table exists."""
        try:
            return self.transaction.has_table(self.table_name)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Could not check for table {self.table_name}",
                context={"table_name": self.table_name},
                cause=e,
            ) from e

    def ensure_exists(self) -> None:
        """Create the history table if it doesn't exist."""
        if self.exists():
            return

        sql = (
            f"CREATE TABLE {self.table_name} "
            f"({self.column_name} VARCHAR({self.options.id_column_size}) PRIMARY KEY)"
        )
        self.logger.info(f"Creating migration table {sql}")
        self._run(self.transaction.execute, sql)

    def is_applied(self, migration_id: str) -> bool:
        sql = f"SELECT count(0) FROM {self.table_name} WHERE {self.column_name} = ?"
        self.logger.debug(f"Migration {migration_id} - {sql}")

        count = self._run(self.transaction.query_scalar, sql, migration_id)
        return (count or 0) > 0

    def record_applied(self, migration_id: str) -> None:
        sql = f"INSERT INTO {self.table_name} ({self.column_name}) VALUES (?)"
        self.logger.debug(f"Migration {migration_id} - {sql}")

        self._run(self.transaction.execute, sql, migration_id)

    def record_undone(self, migration_id: str) -> None:
        sql = f"DELETE FROM {self.table_name} WHERE {self.column_name} = ?"
        self.logger.debug(f"Migration {migration_id} rollback - {sql}")

        self._run(self.transaction.execute, sql, migration_id)

    def applied_count(self) -> int:
        sql = f"SELECT count(0) FROM {self.table_name}"
        self.logger.debug(f"Counting applied migrations - {sql}")

        return int(self._run(self.transaction.query_scalar, sql) or 0)

    def applied_ids(self) -> List[str]:
        """Every recorded identifier, including the initializer marker."""
        sql = f"SELECT {self.column_name} FROM {self.table_name}"
        return self._run(self.transaction.query_column, sql)
