"""PostgreSQL adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlsplit

from sqlglot import exp

from ..dialects import Dialect
from .base import DialectAdapter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..config import ConnectionSettings

DEFAULT_SSLMODE = "prefer"

# Catalog queries only look at the default schema
PUBLIC_SCHEMA = "public"


class PostgresAdapter(DialectAdapter):
    """Adapter for PostgreSQL.

    Connection strings are ``postgres://`` URLs with the user and password
    percent-encoded and ``sslmode`` defaulting to ``prefer``.
    """

    @property
    def dialect(self) -> Dialect:
        return Dialect.POSTGRES

    @property
    def driver_name(self) -> str:
        return "postgres"

    @property
    def read_only_statements(self) -> tuple[str, ...]:
        return ("SET SESSION CHARACTERISTICS AS TRANSACTION READ ONLY",)

    def timeout_statements(self, seconds: float) -> tuple[str, ...]:
        return (f"SET statement_timeout = {max(1, int(seconds * 1000))}",)

    def build_dsn(self, settings: ConnectionSettings | None = None) -> str:
        settings = settings if settings is not None else self.load_settings()
        settings.require()
        user = quote(settings.user, safe="")
        password = quote(settings.password, safe="")
        sslmode = settings.sslmode or DEFAULT_SSLMODE
        return (
            f"postgres://{user}:{password}@{settings.host}:{settings.port}"
            f"/{settings.db}?sslmode={sslmode}"
        )

    def database_name(self, dsn: str) -> str:
        try:
            path = urlsplit(dsn).path
        except ValueError:
            return ""
        return path.removeprefix("/")

    def list_tables_query(self, database_name: str) -> str:
        query = (
            exp.select("table_name")
            .from_("information_schema.tables")
            .where(
                exp.column("table_schema").eq(exp.Literal.string(PUBLIC_SCHEMA)),
                exp.column("table_catalog").eq(exp.Literal.string(database_name)),
            )
        )
        return self._render(query)

    def read_schema_query(self, database_name: str, table_name: str) -> str:
        query = (
            exp.select("column_name", "data_type", "is_nullable", "column_default")
            .from_("information_schema.columns")
            .where(
                exp.column("table_catalog").eq(exp.Literal.string(database_name)),
                exp.column("table_schema").eq(exp.Literal.string(PUBLIC_SCHEMA)),
                exp.column("table_name").eq(exp.Literal.string(table_name)),
            )
            .order_by("ordinal_position")
        )
        return self._render(query)

    def schema_row(self, row: Sequence[Any]) -> dict[str, Any]:
        name, data_type, is_nullable, default = row
        column: dict[str, Any] = {
            "column_name": name,
            "data_type": data_type,
            "is_nullable": is_nullable,
        }
        if default is not None:
            column["column_default"] = str(default)
        return column
