"""
Database migration manager.

This module decides which migrations to apply or undo, in what order and
inside what transaction, and records the outcome in the migration history.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..connection import DatabaseManager, DatabaseTransaction
from .base import (
    DEFAULT_OPTIONS,
    INIT_SCHEMA_MIGRATION_ID,
    InitSchemaFunc,
    Migration,
    MigrationOptions,
)
from .catalog import MigrationCatalog
from .exceptions import (
    MissingIDError,
    NoMigrationDefinedError,
    NoRunMigrationError,
    RollbackImpossibleError,
)
from .history import MigrationHistory
from .transaction import TransactionScope

# Error text of a PostgreSQL transaction poisoned by an earlier failure
_ABORTED_TRANSACTION_MARKER = "current transaction is aborted"


class MigrationManager:
    """
    Database migration manager.

    Applies and rolls back an ordered list of migrations, tracking applied
    identifiers in a history table so that repeated runs are idempotent.
    Every public operation runs in a single transaction which is committed
    on success and rolled back on any failure.

    Calls on one instance must not overlap.
    """

    def __init__(
        self,
        db: DatabaseManager,
        options: Optional[MigrationOptions] = None,
        migrations: Optional[Sequence[Migration]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize migration manager.

        Args:
            db: Database manager providing transactions
            options: Migration table options; empty fields fall back to defaults
            migrations: Migrations in application order
            logger: Logger instance for migration operations
        """
        self.db = db
        self.options = (options or DEFAULT_OPTIONS).with_defaults()
        self.catalog = MigrationCatalog(migrations)
        self.logger = logger or logging.getLogger("sqlmigrate")
        self._initializer: Optional[InitSchemaFunc] = None
        self._scope = TransactionScope(db, self.logger)

    @classmethod
    def from_settings(
        cls,
        settings: Any,
        migrations: Optional[Sequence[Migration]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "MigrationManager":
        """
        Build a manager and its database connection from ``Settings``.

        Args:
            settings: ``sqlmigrate.config.Settings`` instance
            migrations: Migrations in application order
            logger: Logger instance for migration operations

        Returns:
            Manager bound to an initialized DatabaseManager
        """
        logger = logger or logging.getLogger("sqlmigrate")
        db = DatabaseManager(settings.database_url, logger, echo=settings.echo_sql)
        db.initialize()
        return cls(db, settings.to_options(), migrations, logger)

    def set_logger(self, logger: logging.Logger) -> None:
        """Replace the logger used for migration output."""
        self.logger = logger
        self._scope.logger = logger

    def register_initializer(self, initializer: Optional[InitSchemaFunc]) -> None:
        """
        Set a function run instead of the migrations on a clean database.

        The initializer should create every table and constraint the
        application needs. It only runs while the history table is empty.
        """
        self._initializer = initializer

    def migrate(self) -> None:
        """Apply every migration that did not run yet."""
        if not self.catalog.has_migrations(self._initializer):
            raise NoMigrationDefinedError()

        self._migrate(self.catalog.last_id())

    def migrate_to(self, migration_id: str) -> None:
        """Apply pending migrations up to and including ``migration_id``."""
        self.catalog.check_id_exists(migration_id)
        self._migrate(migration_id)

    def rollback_last(self) -> None:
        """Undo the last applied migration."""
        if not self.catalog:
            raise NoMigrationDefinedError()

        with self._scope as tx:
            history = self._history(tx)
            migration = self._get_last_run_migration(history)
            self._rollback_migration(history, migration)

    def rollback_to(self, migration_id: str) -> None:
        """
        Undo applied migrations declared after ``migration_id``.

        The migration matching ``migration_id`` itself is not rolled back.
        """
        if not self.catalog:
            raise NoMigrationDefinedError()

        self.catalog.check_id_exists(migration_id)

        with self._scope as tx:
            history = self._history(tx)
            for migration in reversed(self.catalog):
                if migration.id == migration_id:
                    break
                if history.is_applied(migration.id):
                    self._rollback_migration(history, migration)

    def rollback_migration(self, migration: Migration) -> None:
        """Undo a single migration regardless of its position."""
        with self._scope as tx:
            self._rollback_migration(self._history(tx), migration)

    def has_table(self, table_name: str) -> bool:
        """Check whether a table exists."""
        with self._scope as tx:
            return tx.has_table(table_name)

    def get_migration_status(self) -> Dict[str, Any]:
        """Get applied and pending migrations without changing anything."""
        with self._scope as tx:
            history = self._history(tx)
            recorded = set(history.applied_ids()) if history.exists() else set()

        applied = [m.id for m in self.catalog if m.id in recorded]
        pending = [m.id for m in self.catalog if m.id not in recorded]

        return {
            "total_migrations": len(self.catalog),
            "initialized": INIT_SCHEMA_MIGRATION_ID in recorded,
            "applied_count": len(applied),
            "pending_count": len(pending),
            "applied_migrations": applied,
            "pending_migrations": pending,
            "last_applied": applied[-1] if applied else None,
            "next_pending": pending[0] if pending else None,
        }

    def get_applied_migrations(self) -> List[str]:
        """Identifiers of declared migrations recorded as applied."""
        return self.get_migration_status()["applied_migrations"]

    def get_pending_migrations(self) -> List[str]:
        """Identifiers of declared migrations not yet applied."""
        return self.get_migration_status()["pending_migrations"]

    def _history(self, tx: DatabaseTransaction) -> MigrationHistory:
        return MigrationHistory(tx, self.options, self.logger)

    def _migrate(self, migration_id: Optional[str]) -> None:
        if not self.catalog.has_migrations(self._initializer):
            raise NoMigrationDefinedError()

        self.catalog.validate()

        with self._scope as tx:
            history = self._history(tx)
            history.ensure_exists()

            if self._initializer is not None and self._can_initialize_schema(history):
                self._run_init_schema(tx, history)
                return

            for migration in self.catalog:
                self._run_migration(tx, history, migration)
                if migration_id and migration.id == migration_id:
                    break

    def _can_initialize_schema(self, history: MigrationHistory) -> bool:
        """
        The schema can be initialised only if it hasn't been initialised yet
        and no other migration has been applied already.
        """
        if history.is_applied(INIT_SCHEMA_MIGRATION_ID):
            return False
        return history.applied_count() == 0

    def _run_init_schema(self, tx: DatabaseTransaction, history: MigrationHistory) -> None:
        self.logger.info("Initializing schema")
        self._initializer(tx)
        history.record_applied(INIT_SCHEMA_MIGRATION_ID)

        for migration in self.catalog:
            self._run_migration(tx, history, migration)

    def _run_migration(
        self,
        tx: DatabaseTransaction,
        history: MigrationHistory,
        migration: Migration,
    ) -> None:
        if not migration.id:
            raise MissingIDError()

        self.logger.info(f"Migration {migration.id} - checking")

        if history.is_applied(migration.id):
            self.logger.info(f"Migration {migration.id} - already ran")
            return

        self.logger.info(f"Migration {migration.id} - starting")

        try:
            migration.migrate(tx)
        except Exception as e:
            self.logger.error(f"Migration {migration.id} - failed - {e}")
            self._compensate(tx, migration)
            raise

        history.record_applied(migration.id)
        self.logger.info(f"Migration {migration.id} - complete")

    def _compensate(self, tx: DatabaseTransaction, migration: Migration) -> None:
        """Best-effort rollback of a migration whose forward step failed."""
        if not migration.can_rollback:
            self.logger.warning(f"Migration {migration.id} - Rollback skipped, no rollback defined")
            return

        try:
            migration.rollback(tx)
        except Exception as e:
            if _ABORTED_TRANSACTION_MARKER in str(e):
                self.logger.warning(
                    f"Migration {migration.id} - Rollback skipped, transaction is aborted"
                )
            else:
                self.logger.error(f"Migration {migration.id} - Rollback failed - {e}")

    def _get_last_run_migration(self, history: MigrationHistory) -> Migration:
        for migration in reversed(self.catalog):
            if history.is_applied(migration.id):
                return migration
        raise NoRunMigrationError()

    def _rollback_migration(self, history: MigrationHistory, migration: Migration) -> None:
        if not migration.can_rollback:
            raise RollbackImpossibleError(migration.id)

        self.logger.info(f"Migration {migration.id} rollback")
        migration.rollback(history.transaction)
        history.record_undone(migration.id)
        self.logger.info(f"Migration {migration.id} rollback - complete")
