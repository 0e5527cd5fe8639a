"""Policy checker that runs the ordered rules for one dialect."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .dialects import Dialect
from .rules import get_rules_for_dialect

if TYPE_CHECKING:
    from .rules import QueryText, Rule, RuleResult


@dataclass(frozen=True)
class PolicyCheckResult:
    """Result of running the policy rules.

    Attributes:
        passed: True if every rule passed.
        violation: The first failing rule result, if any.
    """

    passed: bool
    violation: RuleResult | None = None

    def __bool__(self) -> bool:
        return self.passed

    @property
    def message(self) -> str | None:
        """Get the rejection reason of the failing rule."""
        if self.violation is not None:
            return self.violation.message
        return None


class PolicyChecker:
    """Evaluates common and dialect rules in order; first failure wins.

    The rule list is resolved once at construction and never changes, so
    a checker can be shared between threads.

    Example:
        checker = PolicyChecker(Dialect.SQLITE)
        result = checker.check(query)
        if not result.passed:
            print(f"Blocked: {result.message}")
    """

    def __init__(self, dialect: Dialect | str) -> None:
        """Initialize the policy checker.

        Args:
            dialect: Dialect whose rules should run.
        """
        self.dialect = Dialect.from_name(dialect)
        self._rules: tuple[Rule, ...] = tuple(get_rules_for_dialect(self.dialect))

    def check(self, query: QueryText) -> PolicyCheckResult:
        """Run the rules against the query views.

        Args:
            query: Raw, cleaned and scrubbed views of the query.

        Returns:
            PolicyCheckResult with the first violation, if any.
        """
        for rule in self._rules:
            result = rule.check(query, self.dialect)
            if not result.passed:
                return PolicyCheckResult(passed=False, violation=result)
        return PolicyCheckResult(passed=True)

    @property
    def rules(self) -> list[Rule]:
        """Get the rules in evaluation order."""
        return list(self._rules)
