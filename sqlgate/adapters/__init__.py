"""Per-dialect adapters: connection strings, read-only sessions and catalog queries."""

from __future__ import annotations

from ..dialects import Dialect
from .base import DialectAdapter
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter

__all__ = [
    "DialectAdapter",
    "MySQLAdapter",
    "PostgresAdapter",
    "SQLiteAdapter",
    "get_adapter",
]

_ADAPTERS: dict[Dialect, type[DialectAdapter]] = {
    Dialect.MYSQL: MySQLAdapter,
    Dialect.POSTGRES: PostgresAdapter,
    Dialect.SQLITE: SQLiteAdapter,
}


def get_adapter(dialect: Dialect | str) -> DialectAdapter:
    """Create the adapter for a dialect or driver name.

    Raises:
        UnsupportedDialectError: If the name is not a supported driver.
    """
    return _ADAPTERS[Dialect.from_name(dialect)]()
