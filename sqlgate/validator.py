"""Main Validator class - the gatekeeper entry point."""

from __future__ import annotations

import logging

from . import lexer
from .dialects import Dialect
from .exceptions import QueryRejectedError
from .policy import PolicyChecker
from .result import ValidationResult
from .rules import QueryText

logger = logging.getLogger(__name__)


class Validator:
    """Read-only gatekeeper for one SQL dialect.

    The validation process has three phases:
    1. Stripping: literals and comments are neutralized (dialect lexer)
    2. Common rules: prefix allow-list, stacked statements, DML/DDL keywords
    3. Dialect rules: file access, DoS functions, extra keywords, pragmas

    The first failing rule decides the verdict. Validation is pure and never
    raises on query text; malformed input is simply rejected or stripped.

    Example:
        >>> validator = Validator("postgres")
        >>> validator.validate("SELECT * FROM users").is_safe
        True

        >>> result = validator.validate("SELECT pg_sleep(10)")
        >>> result.reason
        'query contains forbidden function: pg_sleep()'

        # The raw query is what gets executed; this is for analysis only
        >>> validator.strip("SELECT 'DROP TABLE users'")
        "SELECT ''"
    """

    def __init__(self, dialect: Dialect | str = Dialect.MYSQL) -> None:
        """Initialize the validator.

        Args:
            dialect: Target dialect, as a Dialect or a driver name such as
                'mysql', 'postgresql' or 'sqlite3'.

        Raises:
            UnsupportedDialectError: If the dialect name is unknown.
        """
        self._dialect = Dialect.from_name(dialect)
        self._policy = PolicyChecker(self._dialect)

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def strip(self, sql: str) -> str:
        """Get the cleaned form of a query (literals and comments neutralized)."""
        return lexer.strip(sql, self._dialect)

    def validate(self, sql: str) -> ValidationResult:
        """Validate a SQL query string.

        Args:
            sql: The untrusted SQL query.

        Returns:
            ValidationResult with is_safe=True if the query is read-only,
            or is_safe=False with the reason of the first failing rule.
        """
        query = QueryText(
            raw=sql,
            cleaned=lexer.strip(sql, self._dialect),
            scrubbed=lexer.scrub(sql, self._dialect),
            alternates=lexer.alternate_views(sql, self._dialect),
        )

        result = self._policy.check(query)
        if not result.passed:
            violation = result.violation
            rule_id = violation.rule_id if violation is not None else None
            logger.debug("Rejected %s query by %s: %s", self._dialect, rule_id, result.message)
            return ValidationResult(
                is_safe=False,
                reason=result.message or "query rejected",
                rule_id=rule_id,
                dialect=self._dialect,
            )

        return ValidationResult(is_safe=True, dialect=self._dialect)

    def check(self, sql: str) -> None:
        """Validate a query and raise if it is rejected.

        Raises:
            QueryRejectedError: If the query is not read-only.
        """
        result = self.validate(sql)
        if not result.is_safe:
            raise QueryRejectedError(result)
