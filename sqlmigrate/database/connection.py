"""
Database connection management built on SQLAlchemy.

This module provides the engine lifecycle, transaction handles and the
process-wide database manager used by the migration layer.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.pool import StaticPool

from ..core.exceptions import BaseMigrateException
from .dialect import rebind, table_exists


class DatabaseError(BaseMigrateException):
    """Base exception for database operations."""
    pass


class TransactionError(DatabaseError):
    """Exception raised for transaction-related errors."""
    pass


class DatabaseTransaction:
    """
    A single open transaction on a dedicated connection.

    Statements use ``?`` placeholders; arguments are passed positionally.
    The underlying SQLAlchemy connection is exposed as ``connection`` for
    migrations that prefer SQLAlchemy Core or ORM constructs.
    """

    def __init__(self, connection: Connection, logger: logging.Logger):
        self.connection = connection
        self.logger = logger
        self._transaction = connection.begin()

    @property
    def is_active(self) -> bool:
        """Whether the transaction can still be committed or rolled back."""
        return self._transaction.is_active

    def execute(self, sql: str, *args: Any) -> Any:
        """Execute a statement and return the SQLAlchemy result."""
        statement, params = rebind(sql, args)
        return self.connection.execute(statement, params)

    def query_scalar(self, sql: str, *args: Any) -> Any:
        """Execute a query and return the first column of the first row."""
        return self.execute(sql, *args).scalar()

    def query_column(self, sql: str, *args: Any) -> List[Any]:
        """Execute a query and return the first column of every row."""
        return list(self.execute(sql, *args).scalars())

    def has_table(self, table_name: str) -> bool:
        """Check whether a table exists, as seen by this transaction."""
        return table_exists(self.connection, table_name)

    def commit(self) -> None:
        """Commit the transaction and release the connection."""
        try:
            self._transaction.commit()
        finally:
            self.connection.close()

    def rollback(self) -> None:
        """Roll back the transaction and release the connection."""
        try:
            if self._transaction.is_active:
                self._transaction.rollback()
        finally:
            self.connection.close()


class DatabaseManager:
    """
    Manages the SQLAlchemy engine for a single database.

    Features:
    - Engine creation and disposal
    - Transactional DDL on SQLite through the pysqlite begin recipe
    - Shared in-memory SQLite databases through a static pool
    """

    def __init__(
        self,
        database_url: str,
        logger: Optional[logging.Logger] = None,
        echo: bool = False,
        **engine_kwargs: Any,
    ):
        """
        Initialize the DatabaseManager.

        Args:
            database_url: SQLAlchemy database URL
            logger: Logger instance for database operations
            echo: Whether SQLAlchemy should log every statement
            **engine_kwargs: Extra keyword arguments for ``create_engine``
        """
        self.database_url = database_url
        self.logger = logger or logging.getLogger(__name__)
        self.echo = echo
        self.engine_kwargs = engine_kwargs
        self.engine: Optional[Engine] = None

        self.url = make_url(database_url)

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None

    def initialize(self) -> None:
        """Create the engine."""
        if self.engine is not None:
            return

        self.logger.info(f"Initializing database engine for {self.url.get_backend_name()}")

        kwargs = dict(self.engine_kwargs)
        if self.is_sqlite and self.url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs.setdefault("poolclass", StaticPool)
            kwargs.setdefault("connect_args", {"check_same_thread": False})

        try:
            engine = create_engine(self.database_url, echo=self.echo, **kwargs)
        except Exception as e:
            self.logger.error(f"Failed to initialize database: {e}")
            raise DatabaseError(f"Database initialization failed: {e}", cause=e)

        if self.is_sqlite:
            self._enable_sqlite_transactions(engine)

        self.engine = engine
        self.logger.info("Database engine initialized successfully")

    @staticmethod
    def _enable_sqlite_transactions(engine: Engine) -> None:
        """Let SQLAlchemy, not pysqlite, decide where transactions begin."""

        @event.listens_for(engine, "connect")
        def _disable_driver_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

    def shutdown(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine is not None:
            self.logger.info("Shutting down database engine...")
            self.engine.dispose()
            self.engine = None

    def begin(self) -> DatabaseTransaction:
        """Open a connection and begin a transaction on it."""
        if self.engine is None:
            raise DatabaseError("Database not initialized")

        try:
            connection = self.engine.connect()
        except Exception as e:
            self.logger.error(f"Failed to open database connection: {e}")
            raise TransactionError(f"Could not begin transaction: {e}", cause=e)

        try:
            return DatabaseTransaction(connection, self.logger)
        except Exception as e:
            connection.close()
            raise TransactionError(f"Could not begin transaction: {e}", cause=e)


# Global database manager instance
_database_manager: Optional[DatabaseManager] = None


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    if _database_manager is None:
        raise DatabaseError("Database manager not initialized")

    return _database_manager


def initialize_database_manager(
    database_url: str,
    logger: Optional[logging.Logger] = None,
    **kwargs: Any,
) -> DatabaseManager:
    """Initialize the global database manager."""
    global _database_manager

    if _database_manager is not None:
        _database_manager.shutdown()

    _database_manager = DatabaseManager(database_url, logger, **kwargs)
    _database_manager.initialize()

    return _database_manager


def shutdown_database_manager() -> None:
    """Shutdown the global database manager."""
    global _database_manager

    if _database_manager is not None:
        _database_manager.shutdown()
        _database_manager = None
