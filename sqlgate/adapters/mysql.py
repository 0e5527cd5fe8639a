"""MySQL adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlglot import exp

from ..dialects import Dialect
from .base import DialectAdapter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..config import ConnectionSettings


class MySQLAdapter(DialectAdapter):
    """Adapter for MySQL and MariaDB.

    Connection strings use the go-sql-driver form
    ``user:password@tcp(host:port)/database``.
    """

    @property
    def dialect(self) -> Dialect:
        return Dialect.MYSQL

    @property
    def driver_name(self) -> str:
        return "mysql"

    @property
    def read_only_statements(self) -> tuple[str, ...]:
        return ("SET SESSION TRANSACTION READ ONLY",)

    def timeout_statements(self, seconds: float) -> tuple[str, ...]:
        return (f"SET SESSION MAX_EXECUTION_TIME = {max(1, int(seconds * 1000))}",)

    def build_dsn(self, settings: ConnectionSettings | None = None) -> str:
        settings = settings if settings is not None else self.load_settings()
        settings.require()
        return (
            f"{settings.user}:{settings.password}"
            f"@tcp({settings.host}:{settings.port})/{settings.db}"
        )

    def database_name(self, dsn: str) -> str:
        _, sep, tail = dsn.rpartition("/")
        if not sep:
            return ""
        return tail.split("?", 1)[0]

    def list_tables_query(self, database_name: str) -> str:
        query = (
            exp.select("table_name")
            .from_("information_schema.tables")
            .where(exp.column("table_schema").eq(exp.Literal.string(database_name)))
        )
        return self._render(query)

    def read_schema_query(self, database_name: str, table_name: str) -> str:
        query = (
            exp.select(
                "column_name",
                "data_type",
                "is_nullable",
                "column_key",
                "column_default",
                "extra",
            )
            .from_("information_schema.columns")
            .where(
                exp.column("table_schema").eq(exp.Literal.string(database_name)),
                exp.column("table_name").eq(exp.Literal.string(table_name)),
            )
            .order_by("ordinal_position")
        )
        return self._render(query)

    def schema_row(self, row: Sequence[Any]) -> dict[str, Any]:
        name, data_type, is_nullable, column_key, default, extra = row
        column: dict[str, Any] = {
            "column_name": name,
            "data_type": data_type,
            "is_nullable": is_nullable,
            "column_key": column_key or "",
        }
        if default is not None:
            column["column_default"] = str(default)
        if extra:
            column["extra"] = extra
        return column
