"""Base classes and helpers for policy rules."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..dialects import Dialect


class RuleStage(IntEnum):
    """Evaluation order of rules for a dialect.

    Common rules always run first. Within a dialect, the more specific
    blocklists run after the broader ones so a partial match never hides a
    more precise reason.
    """

    COMMON = 1
    PATTERN = 2
    FUNCTION = 3
    KEYWORD = 4
    PRAGMA = 5


@dataclass(frozen=True)
class QueryText:
    """The views of one query that rules are evaluated against.

    Attributes:
        raw: The query exactly as received.
        cleaned: Literals and comments neutralized (keyword checks).
        scrubbed: Literals neutralized, comments kept (pattern checks).
        alternates: Scrubbed and cleaned forms under other server quoting
            modes (pattern checks).
    """

    raw: str
    cleaned: str
    scrubbed: str
    alternates: tuple[str, ...] = ()

    @property
    def pattern_views(self) -> tuple[str, ...]:
        return (self.scrubbed, self.cleaned, *self.alternates)


@dataclass(frozen=True)
class RuleResult:
    """Result of a rule evaluation.

    Attributes:
        passed: True if no violations were detected
        rule_id: Identifier of the rule that was evaluated
        message: Human-readable rejection reason (if any)
        details: Additional structured details about the violation
    """

    passed: bool
    rule_id: str
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        """Allow using RuleResult in boolean context."""
        return self.passed


class NamedPattern(NamedTuple):
    """A compiled pattern plus the name used in rejection messages."""

    regex: re.Pattern[str]
    desc: str

    def search_any(self, texts: Iterable[str]) -> bool:
        return any(self.regex.search(text) for text in texts)


def keyword(word: str) -> NamedPattern:
    """Whole-word, case-insensitive match for a bare keyword."""
    return NamedPattern(
        re.compile(rf"(?:^|[^a-zA-Z_]){re.escape(word)}(?:[^a-zA-Z_]|$)", re.IGNORECASE),
        word,
    )


def function_call(name: str) -> NamedPattern:
    """Case-insensitive match for ``name(`` with optional whitespace."""
    return NamedPattern(
        re.compile(rf"\b{re.escape(name)}\s*\(", re.IGNORECASE),
        f"{name}()",
    )


def clause(pattern: str, desc: str) -> NamedPattern:
    """Case-insensitive match for a multi-token clause shape."""
    return NamedPattern(re.compile(pattern, re.IGNORECASE | re.DOTALL), desc)


class Rule(ABC):
    """Abstract base class for policy rules.

    Each rule is a pure predicate over the views of a query. Rules are
    stateless after construction, so one instance is shared by every
    validator and may be used from many threads at once.

    Subclasses must implement:
    - rule_id: Unique identifier for the rule
    - name: Human-readable name
    - description: Detailed description of what the rule checks
    - stage: Where the rule sits in the evaluation order
    - check(): The actual validation logic

    Subclasses may override ``dialects`` to restrict where they apply.
    """

    @property
    @abstractmethod
    def rule_id(self) -> str:
        """Unique identifier for this rule (e.g., 'multiple-statements')."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this rule."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Detailed description of what this rule checks for."""
        ...

    @property
    @abstractmethod
    def stage(self) -> RuleStage:
        """Evaluation stage of this rule."""
        ...

    @property
    def dialects(self) -> frozenset[Dialect] | None:
        """Dialects this rule applies to, or None for all of them."""
        return None

    def applies_to(self, dialect: Dialect) -> bool:
        return self.dialects is None or dialect in self.dialects

    @abstractmethod
    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        """Check if the query violates this rule.

        Args:
            query: Raw, cleaned and scrubbed views of the query
            dialect: Dialect the query will run against

        Returns:
            RuleResult indicating pass/fail and details
        """
        ...

    def _pass(self) -> RuleResult:
        """Convenience method to return a passing result."""
        return RuleResult(passed=True, rule_id=self.rule_id)

    def _fail(self, message: str, details: dict[str, Any] | None = None) -> RuleResult:
        """Convenience method to return a failing result."""
        return RuleResult(
            passed=False,
            rule_id=self.rule_id,
            message=message,
            details=details or {},
        )
