"""Run gated queries and catalog lookups on a DB-API connection.

The gatekeeper only decides; this module is the thin layer a serving
process puts between the decision and the driver. Rejections and driver
errors come back as a :class:`QueryResult` with ``error`` set rather than
as exceptions, matching how a tool reports a failed call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .config import DEFAULT_MAX_ROWS, DEFAULT_QUERY_TIMEOUT

if TYPE_CHECKING:
    from .adapters import DialectAdapter

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Rows returned by a query, or the reason there are none.

    Attributes:
        columns: Column names in select order.
        rows: One dict per row, keyed by column name.
        truncated: True if more than ``max_rows`` rows were available.
        error: ``Query rejected: ...`` or ``Query error: ...`` on failure.
    """

    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    truncated: bool = False
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def warning(self) -> str | None:
        if self.truncated:
            return f"Result truncated at {len(self.rows)} rows"
        return None


def _driver_error(connection: Any) -> type[BaseException]:
    # PEP 249 drivers expose their exception hierarchy on the connection
    return getattr(connection, "Error", Exception)


def _to_text(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


def execute_query(
    connection: Any,
    sql: str,
    adapter: DialectAdapter,
    max_rows: int = DEFAULT_MAX_ROWS,
    timeout: float | None = DEFAULT_QUERY_TIMEOUT,
) -> QueryResult:
    """Validate a query and, if it is read-only, run it.

    Args:
        connection: An open DB-API connection, already put in read-only
            mode with ``adapter.enforce_read_only()``.
        sql: The untrusted query. It is executed exactly as received.
        adapter: Adapter for the connection's dialect.
        max_rows: Maximum number of rows to return.
        timeout: Seconds the query may run before the database aborts it,
            or None for no deadline.

    Returns:
        QueryResult with the rows, or with ``error`` set.
    """
    verdict = adapter.validate(sql)
    if not verdict.is_safe:
        return QueryResult(error=f"Query rejected: {verdict.reason}")

    cursor = connection.cursor()
    try:
        with adapter.statement_timeout(connection, timeout):
            cursor.execute(sql)
            columns = [d[0] for d in cursor.description or ()]
            fetched = cursor.fetchmany(max_rows + 1) if columns else []
    except _driver_error(connection) as e:
        logger.warning("Query failed on %s: %s", adapter.dialect, e)
        return QueryResult(error=f"Query error: {e}")
    finally:
        cursor.close()

    truncated = len(fetched) > max_rows
    if truncated:
        logger.info("Result truncated at %d rows", max_rows)
        fetched = fetched[:max_rows]

    rows = [dict(zip(columns, map(_to_text, row))) for row in fetched]
    return QueryResult(columns=columns, rows=rows, truncated=truncated)


def list_tables(connection: Any, adapter: DialectAdapter, database_name: str) -> list[str]:
    """Names of the tables in a database, as reported by its catalog."""
    cursor = connection.cursor()
    try:
        cursor.execute(adapter.list_tables_query(database_name))
        return [_to_text(row[0]) for row in cursor.fetchall()]
    finally:
        cursor.close()


def read_schema(
    connection: Any,
    adapter: DialectAdapter,
    database_name: str,
    table_name: str,
) -> list[dict[str, Any]]:
    """Column descriptions of one table, normalized by the adapter."""
    cursor = connection.cursor()
    try:
        cursor.execute(adapter.read_schema_query(database_name, table_name))
        return [adapter.schema_row(row) for row in cursor.fetchall()]
    finally:
        cursor.close()
