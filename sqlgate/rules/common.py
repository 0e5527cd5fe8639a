"""Dialect-independent rules applied to every query."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..dialects import Dialect
from .base import Rule, RuleResult, RuleStage, keyword
from .registry import RuleRegistry

if TYPE_CHECKING:
    from .base import QueryText

ALLOWED_PREFIXES = ("SELECT", "SHOW", "DESCRIBE", "DESC", "EXPLAIN")

# SQLite reads settings and catalog data through PRAGMA; writes are blocked later
DIALECT_PREFIXES: dict[Dialect, tuple[str, ...]] = {Dialect.SQLITE: ("PRAGMA",)}

COMMON_DANGEROUS_KEYWORDS = tuple(
    keyword(word)
    for word in (
        "INSERT",
        "UPDATE",
        "DELETE",
        "DROP",
        "CREATE",
        "ALTER",
        "TRUNCATE",
        "GRANT",
        "REVOKE",
    )
)


def _prefix_pattern(prefixes: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile(rf"^(?:{'|'.join(prefixes)})(?:\s|$)")


_ALLOWED_PREFIX = {
    dialect: _prefix_pattern(ALLOWED_PREFIXES + DIALECT_PREFIXES.get(dialect, ()))
    for dialect in Dialect
}
_SET_STATEMENT = re.compile(r"(?:^|;)\s*SET\b", re.IGNORECASE)


class EmptyQueryRule(Rule):
    """Rejects queries that are empty or whitespace only."""

    @property
    def rule_id(self) -> str:
        return "empty-query"

    @property
    def name(self) -> str:
        return "Empty Query"

    @property
    def description(self) -> str:
        return "Rejects queries with no content after trimming whitespace."

    @property
    def stage(self) -> RuleStage:
        return RuleStage.COMMON

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        if not query.raw.strip():
            return self._fail("empty query")
        return self._pass()


class AllowedPrefixRule(Rule):
    """Only lets through queries that start with a read-only statement keyword.

    ``DESC`` and ``DESCRIBE`` may stand alone; every other prefix must be
    followed by whitespace. The check runs on the raw query, so a leading
    comment is rejected rather than skipped. SQLite additionally accepts
    ``PRAGMA``, whose write forms are caught by the pragma-write rule.
    """

    @property
    def rule_id(self) -> str:
        return "allowed-prefix"

    @property
    def name(self) -> str:
        return "Read-Only Statement Prefix"

    @property
    def description(self) -> str:
        return "Requires the query to begin with SELECT, SHOW, DESCRIBE, DESC or EXPLAIN."

    @property
    def stage(self) -> RuleStage:
        return RuleStage.COMMON

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        if _ALLOWED_PREFIX[dialect].match(query.raw.strip().upper()):
            return self._pass()
        return self._fail("only SELECT, SHOW, DESCRIBE, and EXPLAIN queries are allowed")


class MultipleStatementsRule(Rule):
    """Rejects stacked statements.

    A single trailing semicolon followed only by whitespace is tolerated.
    Anything else after the first semicolon of the cleaned query counts as a
    second statement.
    """

    @property
    def rule_id(self) -> str:
        return "multiple-statements"

    @property
    def name(self) -> str:
        return "Stacked Statement Detection"

    @property
    def description(self) -> str:
        return "Rejects queries containing more than one statement."

    @property
    def stage(self) -> RuleStage:
        return RuleStage.COMMON

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        _, sep, rest = query.cleaned.partition(";")
        if sep and rest.strip():
            return self._fail(
                "multiple statements are not allowed",
                {"trailing": rest.strip()[:50]},
            )
        return self._pass()


class CommonKeywordsRule(Rule):
    """Rejects DML, DDL and privilege keywords anywhere outside literals and comments."""

    @property
    def rule_id(self) -> str:
        return "common-keywords"

    @property
    def name(self) -> str:
        return "Mutating Keyword Detection"

    @property
    def description(self) -> str:
        return (
            "Rejects INSERT, UPDATE, DELETE, DROP, CREATE, ALTER, TRUNCATE, "
            "GRANT and REVOKE as whole words."
        )

    @property
    def stage(self) -> RuleStage:
        return RuleStage.COMMON

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        for kw in COMMON_DANGEROUS_KEYWORDS:
            if kw.regex.search(query.cleaned):
                return self._fail(
                    f"query contains forbidden keyword: {kw.desc}",
                    {"keyword": kw.desc},
                )
        return self._pass()


class SetStatementRule(Rule):
    """Rejects SET as a statement keyword.

    Only ``SET`` at the start of the cleaned query or right after a
    semicolon counts, so columns such as ``settings`` are fine.
    """

    @property
    def rule_id(self) -> str:
        return "set-statement"

    @property
    def name(self) -> str:
        return "SET Statement Detection"

    @property
    def description(self) -> str:
        return "Rejects session or variable assignment via SET statements."

    @property
    def stage(self) -> RuleStage:
        return RuleStage.COMMON

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        if _SET_STATEMENT.search(query.cleaned):
            return self._fail("SET statements are not allowed")
        return self._pass()


_registry = RuleRegistry.get_instance()
_registry.register(EmptyQueryRule())
_registry.register(AllowedPrefixRule())
_registry.register(MultipleStatementsRule())
_registry.register(CommonKeywordsRule())
_registry.register(SetStatementRule())
