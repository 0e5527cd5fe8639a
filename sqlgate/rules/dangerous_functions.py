"""Rule for detecting blocking, locking and sleep functions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..dialects import Dialect
from .base import NamedPattern, Rule, RuleResult, RuleStage, function_call
from .registry import RuleRegistry

if TYPE_CHECKING:
    from .base import QueryText


DOS_FUNCTIONS: dict[Dialect, tuple[NamedPattern, ...]] = {
    Dialect.MYSQL: tuple(
        function_call(name)
        for name in (
            "SLEEP",
            "BENCHMARK",
            "GET_LOCK",
            "RELEASE_LOCK",
            "RELEASE_ALL_LOCKS",
            "IS_FREE_LOCK",
            "IS_USED_LOCK",
            "WAIT_FOR_EXECUTED_GTID_SET",
            "WAIT_UNTIL_SQL_THREAD_AFTER_GTIDS",
            "MASTER_POS_WAIT",
            "SOURCE_POS_WAIT",
        )
    ),
    Dialect.POSTGRES: tuple(
        function_call(name)
        for name in (
            "pg_sleep",
            "pg_sleep_for",
            "pg_sleep_until",
            "pg_advisory_lock",
            "pg_advisory_lock_shared",
            "pg_advisory_xact_lock",
            "pg_advisory_xact_lock_shared",
            "pg_try_advisory_lock",
            "pg_try_advisory_lock_shared",
            "pg_try_advisory_xact_lock",
            "pg_try_advisory_xact_lock_shared",
        )
    ),
}


class DenialOfServiceFunctionRule(Rule):
    """Detects functions that block, sleep or hold locks.

    - MySQL: SLEEP(), BENCHMARK(), the GET_LOCK() family and replication
      wait functions
    - PostgreSQL: pg_sleep() variants and advisory locks
    - SQLite: nothing; it has no sleep or lock functions

    A function only counts in the dialect that defines it, so
    ``SELECT SLEEP(1)`` is left alone on PostgreSQL.
    """

    @property
    def rule_id(self) -> str:
        return "dos-functions"

    @property
    def name(self) -> str:
        return "Denial of Service Function Detection"

    @property
    def description(self) -> str:
        return (
            "Detects sleep, benchmark, advisory lock and replication wait "
            "functions that can tie up connections."
        )

    @property
    def stage(self) -> RuleStage:
        return RuleStage.FUNCTION

    @property
    def dialects(self) -> frozenset[Dialect]:
        return frozenset(DOS_FUNCTIONS)

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        """Check for DoS-capable function calls."""
        views = query.pattern_views
        for func in DOS_FUNCTIONS.get(dialect, ()):
            if func.search_any(views):
                return self._fail(
                    f"query contains forbidden function: {func.desc}",
                    {"function": func.desc},
                )
        return self._pass()


RuleRegistry.get_instance().register(DenialOfServiceFunctionRule())
