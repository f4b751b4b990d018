"""
Dialect-sensitive helpers.

Statements in sqlmigrate are written with ``?`` positional placeholders and
rebound here into SQLAlchemy named binds, which SQLAlchemy then renders in the
driver's native paramstyle. The table existence probe is the only place that
inspects driver error text.
"""

import re
from typing import Any, Dict, List, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError
from sqlalchemy.sql.elements import TextClause


# Error fragments meaning "relation is missing", per engine
MISSING_TABLE_MARKERS = (
    "does not exist",   # PostgreSQL
    "doesn't exist",    # MySQL
    "no such table",    # SQLite
)

# Quoted literals and comments are copied verbatim; unterminated ones run to the end
_SQL_TOKEN = re.compile(
    r"""'[^']*(?:'|\Z)"""
    r'''|"[^"]*(?:"|\Z)'''
    r"|--[^\n]*"
    r"|/\*.*?(?:\*/|\Z)"
    r"|\?",
    re.DOTALL,
)


def _escape_colons(sql: str) -> str:
    # text() would otherwise read ":name" as a bind parameter
    return sql.replace(":", "\\:")


def rebind(sql: str, args: Sequence[Any] = ()) -> Tuple[TextClause, Dict[str, Any]]:
    """
    Translate ``?`` placeholders into named bind parameters.

    Without arguments the statement is passed through untouched, so a ``?``
    that is part of the SQL itself (PostgreSQL's jsonb operators, comments)
    reaches the driver as written. With arguments, placeholders inside quoted
    literals and ``--`` or ``/* */`` comments are left alone.

    Args:
        sql: Statement using ``?`` placeholders
        args: Positional parameter values

    Returns:
        Tuple of (text clause, parameter dictionary)

    Raises:
        ValueError: If the number of placeholders does not match ``args``
    """
    if not args:
        return text(_escape_colons(sql)), {}

    parts: List[str] = []
    params: Dict[str, Any] = {}
    position = 0

    for match in _SQL_TOKEN.finditer(sql):
        parts.append(_escape_colons(sql[position:match.start()]))
        position = match.end()

        token = match.group()
        if token != "?":
            parts.append(_escape_colons(token))
            continue

        index = len(params)
        if index >= len(args):
            raise ValueError(
                f"Statement has more placeholders than arguments ({len(args)}): {sql}"
            )
        name = f"p{index + 1}"
        params[name] = args[index]
        parts.append(f":{name}")

    parts.append(_escape_colons(sql[position:]))

    if len(params) != len(args):
        raise ValueError(
            f"Statement has {len(params)} placeholders but {len(args)} arguments: {sql}"
        )

    return text("".join(parts)), params


def is_missing_table_error(error: BaseException) -> bool:
    """Return True if a driver error reports a nonexistent table."""
    message = str(getattr(error, "orig", None) or error).lower()
    return any(marker in message for marker in MISSING_TABLE_MARKERS)


def table_exists(connection: Connection, table_name: str) -> bool:
    """
    Check whether a table exists using the given connection.

    The probe runs inside a SAVEPOINT so that a failed lookup does not abort
    the surrounding transaction on engines that poison it (PostgreSQL).

    Args:
        connection: Open SQLAlchemy connection with an active transaction
        table_name: Table to look for

    Returns:
        True if the table exists
    """
    statement = text(f"SELECT 1 FROM {table_name} WHERE 1 = 0")

    try:
        with connection.begin_nested():
            connection.execute(statement)
    except DBAPIError as e:
        if is_missing_table_error(e):
            return False
        raise

    return True
