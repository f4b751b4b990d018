"""
Integration test configuration and fixtures.

Integration tests run the migration manager against real database servers.
Set ``SQLMIGRATE_TEST_DATABASE_URLS`` to a comma separated list of SQLAlchemy
URLs to enable them, for example::

    SQLMIGRATE_TEST_DATABASE_URLS=postgresql://postgres@localhost/test,mysql+pymysql://root@localhost/test
"""

import os
from typing import List

import pytest
from sqlalchemy import inspect, text

from sqlmigrate.database.connection import DatabaseManager

# Mark every test in this directory as integration
pytestmark = pytest.mark.integration

# Tables created by integration scenarios, dropped before and after each test
TEST_TABLES = ["migrations", "schema_history", "people", "pets", "books", "newspapers", "animals"]


def _database_urls() -> List[str]:
    value = os.getenv("SQLMIGRATE_TEST_DATABASE_URLS", "")
    return [url.strip() for url in value.split(",") if url.strip()]


def _drop_test_tables(manager: DatabaseManager) -> None:
    existing = set(inspect(manager.engine).get_table_names())
    with manager.engine.begin() as conn:
        for table_name in TEST_TABLES:
            if table_name in existing:
                conn.execute(text(f"DROP TABLE {table_name}"))


@pytest.fixture(params=_database_urls() or [None])
def db(request, logger):
    """Database manager for each configured integration database."""
    if request.param is None:
        pytest.skip("SQLMIGRATE_TEST_DATABASE_URLS is not set")

    manager = DatabaseManager(request.param, logger)
    manager.initialize()
    _drop_test_tables(manager)
    yield manager
    _drop_test_tables(manager)
    manager.shutdown()
