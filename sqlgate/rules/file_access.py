"""Rule for detecting file system and privileged I/O patterns."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..dialects import Dialect
from .base import NamedPattern, Rule, RuleResult, RuleStage, clause, function_call
from .registry import RuleRegistry

if TYPE_CHECKING:
    from .base import QueryText


FORBIDDEN_PATTERNS: dict[Dialect, tuple[NamedPattern, ...]] = {
    Dialect.MYSQL: (
        clause(r"\bINTO\s+OUTFILE\b", "INTO OUTFILE"),
        clause(r"\bINTO\s+DUMPFILE\b", "INTO DUMPFILE"),
        function_call("LOAD_FILE"),
        clause(r"\bINTO\s+@", "INTO @variable"),
    ),
    Dialect.POSTGRES: (
        clause(r"\bCOPY\s+.*\bTO\b", "COPY ... TO"),
        clause(r"\bCOPY\s+.*\bFROM\b", "COPY ... FROM"),
        function_call("pg_read_file"),
        function_call("pg_read_binary_file"),
        function_call("pg_ls_dir"),
        function_call("lo_import"),
        function_call("lo_export"),
        function_call("pg_stat_file"),
        function_call("pg_ls_logdir"),
        function_call("pg_ls_waldir"),
        function_call("lo_unlink"),
        # Server-side state changes reachable from a plain SELECT
        function_call("set_config"),
        function_call("pg_reload_conf"),
        function_call("pg_terminate_backend"),
        function_call("pg_cancel_backend"),
        function_call("dblink_exec"),
        function_call("nextval"),
        function_call("setval"),
    ),
    Dialect.SQLITE: (
        function_call("load_extension"),
        function_call("writefile"),
        function_call("readfile"),
        function_call("edit"),
        function_call("fts3_tokenizer"),
    ),
}


class FileAccessRule(Rule):
    """Detects dialect-specific file access and privileged I/O.

    This rule catches:
    - MySQL: INTO OUTFILE, INTO DUMPFILE, LOAD_FILE(), INTO @variable
    - PostgreSQL: COPY TO/FROM, pg_read_file() and friends, large object
      import/export, set_config() and backend signalling
    - SQLite: load_extension(), writefile(), readfile(), edit()

    These are clause or function-call shapes, so they are matched against
    the query with literals scrubbed but comments intact, and against the
    fully cleaned query (which closes gaps like ``LOAD_FILE/**/(``), under
    default lexing and under the server modes that move literal boundaries.
    """

    @property
    def rule_id(self) -> str:
        return "file-access"

    @property
    def name(self) -> str:
        return "File System Access Detection"

    @property
    def description(self) -> str:
        return (
            "Detects SQL patterns that read from or write to the file system "
            "or change server state, including INTO OUTFILE, COPY and "
            "file-related functions."
        )

    @property
    def stage(self) -> RuleStage:
        return RuleStage.PATTERN

    @property
    def dialects(self) -> frozenset[Dialect]:
        return frozenset(FORBIDDEN_PATTERNS)

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        """Check for forbidden patterns."""
        views = query.pattern_views
        for pattern in FORBIDDEN_PATTERNS.get(dialect, ()):
            if pattern.search_any(views):
                return self._fail(
                    f"query contains forbidden pattern: {pattern.desc}",
                    {"pattern": pattern.desc},
                )
        return self._pass()


# Register the rule
RuleRegistry.get_instance().register(FileAccessRule())
