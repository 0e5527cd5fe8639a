"""Exception types raised by sqlgate.

Query validation itself never raises on query text: rejections are reported
through :class:`~sqlgate.result.ValidationResult`. The exceptions below cover
configuration problems and callers that opt into exception-style checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .result import ValidationResult


class SqlGateError(Exception):
    """Base class for all sqlgate errors."""


class ConfigurationError(SqlGateError):
    """Raised when required settings are missing or invalid."""


class UnsupportedDialectError(ConfigurationError):
    """Raised when a dialect selector does not name a supported database."""


class QueryRejectedError(SqlGateError):
    """Raised by :meth:`Validator.check` when a query is not read-only.

    Attributes:
        result: The rejecting ValidationResult.
    """

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.reason or "query rejected")
        self.result = result

    @property
    def reason(self) -> str | None:
        return self.result.reason
