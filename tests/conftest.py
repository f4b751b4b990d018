"""
Pytest configuration and shared fixtures for the test suite.

Unit tests run against an in-memory SQLite database, which supports
transactional DDL once the database manager has set up its begin recipe.
"""

import logging
from typing import Callable, List, Tuple

import pytest
from sqlalchemy import inspect, text

from sqlmigrate.database.connection import DatabaseManager
from sqlmigrate.database.migrations.base import Migration


@pytest.fixture
def logger() -> logging.Logger:
    """Logger used by managers under test."""
    return logging.getLogger("sqlmigrate.tests")


@pytest.fixture
def db(logger):
    """Initialized database manager over a private in-memory database."""
    manager = DatabaseManager("sqlite://", logger)
    manager.initialize()
    yield manager
    manager.shutdown()


@pytest.fixture
def has_table(db) -> Callable[[str], bool]:
    """Check table existence outside of any migration transaction."""
    def _has_table(table_name: str) -> bool:
        return inspect(db.engine).has_table(table_name)
    return _has_table


@pytest.fixture
def table_count(db) -> Callable[[str], int]:
    """Count rows of a table outside of any migration transaction."""
    def _table_count(table_name: str) -> int:
        with db.engine.connect() as conn:
            return conn.execute(text(f"SELECT count(0) FROM {table_name}")).scalar()
    return _table_count


@pytest.fixture
def calls() -> List[Tuple[str, str]]:
    """Records (action, migration id) pairs in execution order."""
    return []


@pytest.fixture
def make_migration(calls) -> Callable[..., Migration]:
    """Factory for migrations creating and dropping one table each."""
    def _make_migration(migration_id: str, table_name: str, reversible: bool = True) -> Migration:
        def migrate(tx):
            calls.append(("migrate", migration_id))
            tx.execute(f"CREATE TABLE {table_name} (id INTEGER PRIMARY KEY, name TEXT)")

        def rollback(tx):
            calls.append(("rollback", migration_id))
            tx.execute(f"DROP TABLE IF EXISTS {table_name}")

        return Migration(id=migration_id, migrate=migrate, rollback=rollback if reversible else None)

    return _make_migration


@pytest.fixture
def migrations(make_migration) -> List[Migration]:
    """Two migrations creating ``people`` and ``pets``."""
    return [
        make_migration("201608301400", "people"),
        make_migration("201608301430", "pets"),
    ]


@pytest.fixture
def extended_migrations(migrations, make_migration) -> List[Migration]:
    """The two base migrations plus one creating ``books``."""
    return migrations + [make_migration("201807221927", "books")]
