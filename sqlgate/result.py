"""Validation result types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .dialects import Dialect


@dataclass(frozen=True)
class ValidationResult:
    """Immutable verdict of query validation.

    Attributes:
        is_safe: Whether the query passed every rule.
        reason: Human-readable rejection reason (None if safe).
        rule_id: Identifier of the rule that rejected the query.
        dialect: Dialect the query was validated for.
    """

    is_safe: bool
    reason: str | None = None
    rule_id: str | None = None
    dialect: Dialect | None = None

    def __bool__(self) -> bool:
        """Allow using result directly in boolean context."""
        return self.is_safe
