"""Base class for dialect adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlglot import exp

from ..config import dialect_settings
from ..lexer import lexical_rules
from ..validator import Validator

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from ..config import ConnectionSettings
    from ..dialects import Dialect
    from ..lexer import LexicalRules
    from ..result import ValidationResult


class DialectAdapter(ABC):
    """Everything the serving layer needs to know about one database.

    An adapter bundles the gatekeeper for its dialect with the metadata
    around it: how to build a connection string from settings, how to force
    a read-only session, and how to query the catalog for tables and
    columns. Adapters hold no connection state and can be shared.

    Subclasses must implement:
    - dialect, driver_name: Identity of the database
    - read_only_statements: Session setup executed after connecting
    - build_dsn(), database_name(): Connection string handling
    - timeout_statements(): Per-statement deadline, when the server has one
    - list_tables_query(), read_schema_query(), schema_row(): Catalog access
    """

    def __init__(self) -> None:
        self._validator = Validator(self.dialect)

    @property
    @abstractmethod
    def dialect(self) -> Dialect:
        """Dialect handled by this adapter."""
        ...

    @property
    @abstractmethod
    def driver_name(self) -> str:
        """Driver name used in configuration (e.g., 'postgres')."""
        ...

    @property
    def server_name(self) -> str:
        return f"{self.driver_name}-readonly-mcp-server"

    @property
    def uri_scheme(self) -> str:
        return self.driver_name

    @property
    def lexical_rules(self) -> LexicalRules:
        return lexical_rules(self.dialect)

    @property
    @abstractmethod
    def read_only_statements(self) -> tuple[str, ...]:
        """Statements that put a fresh session into read-only mode."""
        ...

    def validate(self, sql: str) -> ValidationResult:
        """Validate an untrusted query for this dialect."""
        return self._validator.validate(sql)

    def strip(self, sql: str) -> str:
        """Get the cleaned form of a query for this dialect."""
        return self._validator.strip(sql)

    def load_settings(self) -> ConnectionSettings:
        """Read this dialect's connection settings from the environment."""
        return dialect_settings(self.dialect)

    @abstractmethod
    def build_dsn(self, settings: ConnectionSettings | None = None) -> str:
        """Build a connection string.

        Args:
            settings: Connection settings; read from the environment if None.

        Raises:
            ConfigurationError: If required settings are missing.
        """
        ...

    @abstractmethod
    def database_name(self, dsn: str) -> str:
        """Extract the logical database name from a connection string."""
        ...

    def enforce_read_only(self, connection: Any) -> None:
        """Run the read-only session statements on a DB-API connection."""
        cursor = connection.cursor()
        try:
            for statement in self.read_only_statements:
                cursor.execute(statement)
        finally:
            cursor.close()

    def timeout_statements(self, seconds: float) -> tuple[str, ...]:
        """Session statements that cap how long each following query may run."""
        return ()

    @contextmanager
    def statement_timeout(self, connection: Any, seconds: float | None) -> Iterator[None]:
        """Apply a per-query deadline for the duration of the block.

        No deadline is set when ``seconds`` is None or not positive.
        """
        statements = self.timeout_statements(seconds) if seconds and seconds > 0 else ()
        if statements:
            cursor = connection.cursor()
            try:
                for statement in statements:
                    cursor.execute(statement)
            finally:
                cursor.close()
        yield

    @abstractmethod
    def list_tables_query(self, database_name: str) -> str:
        """SQL listing the table names of a database, one per row."""
        ...

    @abstractmethod
    def read_schema_query(self, database_name: str, table_name: str) -> str:
        """SQL describing the columns of one table."""
        ...

    @abstractmethod
    def schema_row(self, row: Sequence[Any]) -> dict[str, Any]:
        """Normalize one row of read_schema_query() output."""
        ...

    def resource_uri(self, database_name: str, table_name: str) -> str:
        """URI of a table schema resource, e.g. ``mysql://shop/users/schema``."""
        return f"{self.uri_scheme}://{database_name}/{table_name}/schema"

    def parse_resource_uri(self, uri: str) -> tuple[str, str]:
        """Split a schema resource URI into (database_name, table_name).

        Raises:
            ValueError: If the URI has the wrong scheme or shape.
        """
        prefix = f"{self.uri_scheme}://"
        if not uri.startswith(prefix):
            raise ValueError(f"Invalid resource URI: must start with {prefix}")
        parts = uri[len(prefix) :].split("/")
        if len(parts) < 3 or parts[2] != "schema":
            raise ValueError(
                f"Invalid resource URI format: expected {prefix}dbname/tablename/schema"
            )
        return parts[0], parts[1]

    def _render(self, expression: exp.Expression) -> str:
        return expression.sql(dialect=self.dialect.value)
