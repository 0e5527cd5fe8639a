"""sqlgate - read-only SQL gatekeeper for MySQL, PostgreSQL and SQLite.

sqlgate decides, before a query ever reaches a connection, whether an
untrusted SQL string is guaranteed not to mutate data or tie up the
server. It is a conservative lexical filter, not a parser: anything it
cannot show to be a plain read is rejected.

Quick Start:
    >>> import sqlgate

    # MySQL is the default dialect
    >>> sqlgate.validate("SELECT * FROM users").is_safe
    True
    >>> sqlgate.validate("SELECT 1; DROP TABLE users").reason
    'multiple statements are not allowed'

    # Quick boolean check
    >>> sqlgate.is_safe("SELECT pg_sleep(5)", dialect="postgres")
    False

    # Reusable validator bound to one dialect
    >>> from sqlgate import Validator
    >>> v = Validator("sqlite")
    >>> v.validate("PRAGMA table_info('users')").is_safe
    True
    >>> v.validate("EXPLAIN PRAGMA journal_mode = WAL").reason
    'PRAGMA writes are not allowed'

Dialects:
    - mysql: # comments, backslash escapes, backtick identifiers
    - postgres: dollar quoting, E'' escape strings, nested comments
    - sqlite: backtick and [bracket] identifiers, PRAGMA write blocking

Adapters:
    Each dialect also has an adapter with connection-string building,
    read-only session setup and catalog queries:

    >>> from sqlgate import get_adapter
    >>> adapter = get_adapter("postgres")
    >>> adapter.read_only_statements
    ('SET SESSION CHARACTERISTICS AS TRANSACTION READ ONLY',)
"""

from __future__ import annotations

from .adapters import DialectAdapter, get_adapter
from .dialects import Dialect
from .exceptions import (
    ConfigurationError,
    QueryRejectedError,
    SqlGateError,
    UnsupportedDialectError,
)
from .executor import QueryResult, execute_query
from .lexer import scrub, strip
from .result import ValidationResult
from .validator import Validator

__version__ = "0.1.0"
__all__ = [
    # Main API
    "validate",
    "is_safe",
    "Validator",
    "strip",
    "scrub",
    # Types
    "ValidationResult",
    "Dialect",
    # Adapters
    "DialectAdapter",
    "get_adapter",
    # Execution
    "execute_query",
    "QueryResult",
    # Exceptions
    "SqlGateError",
    "ConfigurationError",
    "UnsupportedDialectError",
    "QueryRejectedError",
]

# One shared validator per dialect; validators are stateless
_default_validators = {dialect: Validator(dialect) for dialect in Dialect}


def validate(sql: str, *, dialect: Dialect | str = Dialect.MYSQL) -> ValidationResult:
    """Validate a SQL query.

    Args:
        sql: The SQL query string to validate.
        dialect: Target dialect ('mysql', 'postgres', 'sqlite' or an alias).

    Returns:
        ValidationResult with is_safe=True if the query is read-only,
        or is_safe=False with a reason explaining why it was blocked.

    Examples:
        >>> import sqlgate
        >>> sqlgate.validate("SELECT * FROM users WHERE name = 'DROP TABLE x'").is_safe
        True
        >>> sqlgate.validate("SELECT SLEEP(10)").reason
        'query contains forbidden function: SLEEP()'
        >>> sqlgate.validate("SELECT SLEEP(10)", dialect="sqlite").is_safe
        True
    """
    return _default_validators[Dialect.from_name(dialect)].validate(sql)


def is_safe(sql: str, *, dialect: Dialect | str = Dialect.MYSQL) -> bool:
    """Check if a SQL query is read-only (convenience wrapper).

    This is a shorthand for `validate(sql).is_safe`.

    Examples:
        >>> import sqlgate
        >>> sqlgate.is_safe("SHOW TABLES")
        True
        >>> sqlgate.is_safe("UPDATE t SET x = 1")
        False
    """
    return validate(sql, dialect=dialect).is_safe
