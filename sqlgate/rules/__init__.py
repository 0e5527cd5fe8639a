"""Policy rules module for sqlgate.

The gatekeeper is a stack of small rules, each a pure predicate over the
views of a query. Common rules apply to every dialect; dialect rules add
forbidden patterns, denial-of-service functions, extra keywords and, for
SQLite, pragma writes.

Architecture:
    - Rule: Abstract base defining the interface for all rules
    - RuleResult: Structured result from rule evaluation
    - RuleStage: Evaluation order across rule kinds
    - RuleRegistry: Central registry for rule discovery and ordering

Usage:
    from sqlgate.rules import get_rules_for_dialect

    for rule in get_rules_for_dialect("postgres"):
        result = rule.check(query, Dialect.POSTGRES)
        if not result.passed:
            print(f"[{result.rule_id}] {result.message}")
"""

from .base import QueryText, Rule, RuleResult, RuleStage
from .registry import RuleRegistry, get_all_rules, get_rules_for_dialect

__all__ = [
    "QueryText",
    "Rule",
    "RuleResult",
    "RuleStage",
    "RuleRegistry",
    "get_all_rules",
    "get_rules_for_dialect",
]
