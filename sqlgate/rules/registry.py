"""Rule registry for discovering and ordering policy rules."""

from __future__ import annotations

from ..dialects import Dialect
from .base import Rule


class RuleRegistry:
    """Central registry for policy rules.

    Rules are registered automatically when their modules are imported.
    Registration order is kept within a stage, and :meth:`for_dialect`
    returns rules ordered by stage, which is the order a validator must
    evaluate them in.

    Example:
        registry = RuleRegistry()
        registry.register(MultipleStatementsRule())

        # Rules a PostgreSQL validator should run, in order
        rules = registry.for_dialect(Dialect.POSTGRES)
    """

    _instance: RuleRegistry | None = None

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}

    @classmethod
    def get_instance(cls) -> RuleRegistry:
        """Get the singleton registry instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, rule: Rule) -> None:
        """Register a rule with the registry.

        Args:
            rule: The rule instance to register

        Raises:
            ValueError: If a rule with the same ID is already registered
        """
        if rule.rule_id in self._rules:
            raise ValueError(f"Rule '{rule.rule_id}' is already registered")
        self._rules[rule.rule_id] = rule

    def unregister(self, rule_id: str) -> None:
        """Remove a rule from the registry.

        Together with :meth:`register` this lets an embedding application
        swap in its own rule for a built-in one. Validators resolve their
        rules when constructed, so changes only affect later validators.
        """
        self._rules.pop(rule_id, None)

    def get(self, rule_id: str) -> Rule | None:
        """Get a rule by its ID."""
        return self._rules.get(rule_id)

    def all(self) -> list[Rule]:
        """Get all registered rules in evaluation order."""
        return sorted(self._rules.values(), key=lambda r: r.stage)

    def for_dialect(self, dialect: Dialect | str) -> list[Rule]:
        """Get the rules that apply to a dialect, in evaluation order."""
        dialect = Dialect.from_name(dialect)
        return [r for r in self.all() if r.applies_to(dialect)]

    def clear(self) -> None:
        """Clear all registered rules.

        Used by tests that build a registry from scratch. Clearing the
        shared instance leaves later validators with no rules at all.
        """
        self._rules.clear()


def _ensure_rules_loaded() -> None:
    """Ensure all rule modules are imported and rules are registered."""
    # Import all rule modules to trigger registration
    from . import (  # noqa: F401
        common,
        dangerous_functions,
        dangerous_statements,
        file_access,
    )


def get_all_rules() -> list[Rule]:
    """Get all registered rules."""
    _ensure_rules_loaded()
    return RuleRegistry.get_instance().all()


def get_rules_for_dialect(dialect: Dialect | str) -> list[Rule]:
    """Get the ordered rules for one dialect."""
    _ensure_rules_loaded()
    return RuleRegistry.get_instance().for_dialect(dialect)
