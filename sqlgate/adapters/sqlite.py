"""SQLite adapter."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlglot import exp

from ..dialects import Dialect
from .base import DialectAdapter

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from ..config import ConnectionSettings

_DISPLAY_SUFFIXES = (".db", ".sqlite", ".sqlite3")
# VM instructions between deadline checks
PROGRESS_INTERVAL = 1000


class SQLiteAdapter(DialectAdapter):
    """Adapter for SQLite database files.

    The connection string is the file path with ``mode=ro`` appended, so the
    file is opened read-only even before ``PRAGMA query_only`` runs. Open it
    with ``sqlite3.connect(f"file:{dsn}", uri=True)``.
    """

    @property
    def dialect(self) -> Dialect:
        return Dialect.SQLITE

    @property
    def driver_name(self) -> str:
        return "sqlite"

    @property
    def read_only_statements(self) -> tuple[str, ...]:
        return ("PRAGMA query_only = ON",)

    @contextmanager
    def statement_timeout(self, connection: Any, seconds: float | None) -> Iterator[None]:
        """Abort the running statement once the deadline passes.

        SQLite has no server-side timeout, so a progress handler interrupts
        the statement, which surfaces as an ``OperationalError``. The handler
        is removed when the block exits.
        """
        if not seconds or seconds <= 0:
            yield
            return

        deadline = time.monotonic() + seconds
        connection.set_progress_handler(lambda: time.monotonic() > deadline, PROGRESS_INTERVAL)
        try:
            yield
        finally:
            connection.set_progress_handler(None, 0)

    def build_dsn(self, settings: ConnectionSettings | None = None) -> str:
        settings = settings if settings is not None else self.load_settings()
        settings.require()
        path = settings.path
        if "?" not in path:
            return f"{path}?mode=ro"
        if "mode=" not in path:
            return f"{path}&mode=ro"
        return path

    def database_name(self, dsn: str) -> str:
        name = dsn.split("?", 1)[0].rsplit("/", 1)[-1]
        for suffix in _DISPLAY_SUFFIXES:
            name = name.removesuffix(suffix)
        return name

    def list_tables_query(self, database_name: str) -> str:
        # One database per file; the name is not needed
        query = (
            exp.select("name")
            .from_("sqlite_master")
            .where(
                exp.column("type").eq(exp.Literal.string("table")),
                exp.not_(exp.column("name").like(exp.Literal.string("sqlite_%"))),
            )
            .order_by("name")
        )
        return self._render(query)

    def read_schema_query(self, database_name: str, table_name: str) -> str:
        # PRAGMA arguments cannot be bound, so the name is inlined as a literal
        return f"PRAGMA table_info({self._render(exp.Literal.string(table_name))})"

    def schema_row(self, row: Sequence[Any]) -> dict[str, Any]:
        _, name, data_type, not_null, default, pk = row
        column: dict[str, Any] = {
            "column_name": name,
            "data_type": data_type,
            "is_nullable": "NO" if not_null else "YES",
        }
        if pk:
            column["column_key"] = "PRI"
        if default is not None:
            column["column_default"] = str(default)
        return column
