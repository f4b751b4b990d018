"""
Tests for database connection management and dialect helpers.
"""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from sqlmigrate.database import connection as connection_module
from sqlmigrate.database.connection import (
    DatabaseError,
    DatabaseManager,
    TransactionError,
    get_database_manager,
    initialize_database_manager,
    shutdown_database_manager,
)
from sqlmigrate.database.dialect import is_missing_table_error, rebind


class TestRebind:
    """Test placeholder translation."""

    def test_positional_placeholders(self):
        """Test that placeholders become numbered binds."""
        statement, params = rebind("INSERT INTO t (a, b) VALUES (?, ?)", ("x", 2))

        assert str(statement) == "INSERT INTO t (a, b) VALUES (:p1, :p2)"
        assert params == {"p1": "x", "p2": 2}

    def test_no_placeholders(self):
        """Test a statement without arguments."""
        statement, params = rebind("SELECT count(0) FROM migrations")

        assert str(statement) == "SELECT count(0) FROM migrations"
        assert params == {}

    def test_quoted_question_marks_are_kept(self):
        """Test that literals are not scanned for placeholders."""
        statement, params = rebind("SELECT '?', \"a?\" FROM t WHERE id = ?", ("1",))

        assert str(statement) == "SELECT '?', \"a?\" FROM t WHERE id = :p1"
        assert params == {"p1": "1"}

    def test_colons_are_not_binds(self):
        """Test that literal colons survive translation."""
        statement, params = rebind("SELECT '12:30', ? FROM t", ("x",))

        assert str(statement) == "SELECT '12:30', :p1 FROM t"
        assert params == {"p1": "x"}

    def test_statement_without_arguments_is_not_scanned(self):
        """Test that question marks are kept when no argument is given."""
        statement, params = rebind("SELECT data ? 'key', data ?| array['a'] FROM docs -- nullable?")

        assert str(statement) == "SELECT data ? 'key', data ?| array['a'] FROM docs -- nullable?"
        assert params == {}

    def test_comments_are_skipped(self):
        """Test that comments hide placeholders and quotes."""
        statement, params = rebind(
            "-- don't forget\nINSERT INTO people (name) /* why? */ VALUES (?)", ("ann",)
        )

        assert str(statement) == "-- don't forget\nINSERT INTO people (name) /* why? */ VALUES (:p1)"
        assert params == {"p1": "ann"}

    def test_colons_in_comments_without_arguments(self):
        """Test that colons survive when the statement is passed through."""
        statement, params = rebind("SELECT '12:30' -- at 12:30")

        assert str(statement) == "SELECT '12:30' -- at 12:30"
        assert params == {}

    def test_too_few_arguments(self):
        """Test a placeholder without argument."""
        with pytest.raises(ValueError):
            rebind("SELECT ? , ?", ("x",))

    def test_too_many_arguments(self):
        """Test an argument without placeholder."""
        with pytest.raises(ValueError):
            rebind("SELECT 1", ("x",))


class TestMissingTableError:
    """Test driver error classification."""

    @pytest.mark.parametrize("message", [
        'relation "migrations" does not exist',
        "Table 'app.migrations' doesn't exist",
        "no such table: migrations",
    ])
    def test_missing_table_messages(self, message):
        """Test messages reported by supported engines."""
        assert is_missing_table_error(Exception(message))

    def test_other_errors(self):
        """Test that unrelated errors are not misread."""
        assert not is_missing_table_error(Exception("permission denied for table migrations"))

    def test_wrapped_driver_error(self):
        """Test that the original driver error is inspected."""
        error = OperationalError("SELECT 1", {}, Exception("no such table: t"))

        assert is_missing_table_error(error)


class TestDatabaseTransaction:
    """Test DatabaseTransaction class."""

    def test_query_helpers(self, db):
        """Test scalar and column queries."""
        tx = db.begin()
        try:
            tx.execute("CREATE TABLE people (name TEXT)")
            tx.execute("INSERT INTO people (name) VALUES (?)", "ann")
            tx.execute("INSERT INTO people (name) VALUES (?)", "bob")

            assert tx.query_scalar("SELECT count(0) FROM people") == 2
            assert tx.query_column("SELECT name FROM people ORDER BY name") == ["ann", "bob"]
            assert tx.query_scalar("SELECT 'a:b'") == "a:b"
        finally:
            tx.rollback()

    def test_execute_with_comments(self, db):
        """Test statements carrying comments with question marks and quotes."""
        tx = db.begin()
        try:
            tx.execute("CREATE TABLE people (name TEXT) -- nullable?")
            tx.execute("-- don't forget\nINSERT INTO people (name) VALUES (?)", "ann")

            assert tx.query_column("SELECT name FROM people") == ["ann"]
        finally:
            tx.rollback()

    def test_has_table(self, db):
        """Test the table probe inside a transaction."""
        tx = db.begin()
        try:
            assert not tx.has_table("people")
            tx.execute("CREATE TABLE people (name TEXT)")
            assert tx.has_table("people")
        finally:
            tx.rollback()

    def test_transaction_usable_after_failed_probe(self, db):
        """Test that a missing table does not break the transaction."""
        tx = db.begin()
        try:
            tx.execute("CREATE TABLE people (name TEXT)")
            assert not tx.has_table("pets")

            tx.execute("INSERT INTO people (name) VALUES (?)", "ann")
            assert tx.is_active
            assert tx.query_scalar("SELECT count(0) FROM people") == 1
        finally:
            tx.rollback()

    def test_rollback_discards_ddl(self, db, has_table):
        """Test that schema changes are transactional."""
        tx = db.begin()
        tx.execute("CREATE TABLE people (name TEXT)")
        tx.rollback()

        assert not has_table("people")

    def test_commit_keeps_ddl(self, db, has_table):
        """Test that committed schema changes are visible."""
        tx = db.begin()
        tx.execute("CREATE TABLE people (name TEXT)")
        tx.commit()

        assert has_table("people")
        assert not tx.is_active

    def test_rollback_after_commit(self, db):
        """Test that rolling back a finished transaction is harmless."""
        tx = db.begin()
        tx.commit()

        tx.rollback()


class TestDatabaseManager:
    """Test DatabaseManager class."""

    def test_initialization(self, logger):
        """Test manager state before and after initialize."""
        manager = DatabaseManager("sqlite://", logger)

        assert manager.is_sqlite
        assert not manager.is_initialized

        manager.initialize()
        assert manager.is_initialized

        manager.shutdown()
        assert not manager.is_initialized

    def test_begin_before_initialize(self, logger):
        """Test that an engine is required."""
        manager = DatabaseManager("sqlite://", logger)

        with pytest.raises(DatabaseError, match="Database not initialized"):
            manager.begin()

    def test_begin_connection_failure(self, logger):
        """Test that connection failures are reported as transaction errors."""
        manager = DatabaseManager("sqlite://", logger)
        manager.engine = Mock()
        manager.engine.connect.side_effect = RuntimeError("unreachable")

        with pytest.raises(TransactionError) as exc_info:
            manager.begin()

        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_invalid_engine_arguments(self, logger):
        """Test that engine creation errors are wrapped."""
        manager = DatabaseManager("sqlite://", logger, not_an_option=True)

        with pytest.raises(DatabaseError, match="Database initialization failed"):
            manager.initialize()

    def test_file_database(self, tmp_path, logger):
        """Test a file backed SQLite database."""
        manager = DatabaseManager(f"sqlite:///{tmp_path / 'test.db'}", logger)
        manager.initialize()
        try:
            tx = manager.begin()
            tx.execute("CREATE TABLE people (name TEXT)")
            tx.commit()

            tx = manager.begin()
            assert tx.has_table("people")
            tx.rollback()
        finally:
            manager.shutdown()


class TestGlobalDatabaseManager:
    """Test the process-wide database manager."""

    @pytest.fixture(autouse=True)
    def reset_global(self):
        yield
        shutdown_database_manager()

    def test_get_before_initialize(self):
        """Test that the global manager must be initialized."""
        connection_module._database_manager = None

        with pytest.raises(DatabaseError):
            get_database_manager()

    def test_initialize_and_get(self, logger):
        """Test initializing the global manager."""
        manager = initialize_database_manager("sqlite://", logger)

        assert get_database_manager() is manager
        assert manager.is_initialized

    def test_reinitialize_shuts_down_previous(self, logger):
        """Test replacing the global manager."""
        first = initialize_database_manager("sqlite://", logger)
        second = initialize_database_manager("sqlite://", logger)

        assert not first.is_initialized
        assert get_database_manager() is second

    def test_shutdown(self, logger):
        """Test shutting down the global manager."""
        manager = initialize_database_manager("sqlite://", logger)
        shutdown_database_manager()

        assert not manager.is_initialized
        with pytest.raises(DatabaseError):
            get_database_manager()
