"""Rules for dialect-specific statement keywords and SQLite pragma writes."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..dialects import Dialect
from .base import NamedPattern, Rule, RuleResult, RuleStage, keyword
from .registry import RuleRegistry

if TYPE_CHECKING:
    from .base import QueryText


EXTRA_KEYWORDS: dict[Dialect, tuple[NamedPattern, ...]] = {
    Dialect.MYSQL: tuple(
        keyword(word)
        for word in ("CALL", "EXEC", "EXECUTE", "REPLACE", "LOAD", "HANDLER", "RENAME")
    ),
    Dialect.POSTGRES: tuple(
        keyword(word)
        for word in (
            "CALL",
            "EXECUTE",
            "COPY",
            "LISTEN",
            "NOTIFY",
            "PREPARE",
            "DEALLOCATE",
            "VACUUM",
            "REINDEX",
            "CLUSTER",
            # SELECT ... INTO creates a table
            "INTO",
        )
    ),
    Dialect.SQLITE: tuple(
        keyword(word) for word in ("REPLACE", "ATTACH", "DETACH", "REINDEX", "VACUUM")
    ),
}

# Pragmas whose argument only selects what to read, such as a table name
READ_ARGUMENT_PRAGMAS = frozenset(
    {
        "foreign_key_check",
        "foreign_key_list",
        "index_info",
        "index_list",
        "index_xinfo",
        "integrity_check",
        "quick_check",
        "table_info",
        "table_list",
        "table_xinfo",
    }
)

# Pragmas that act on the database whether or not they get an argument
ACTION_PRAGMAS = frozenset({"incremental_vacuum", "optimize", "shrink_memory", "wal_checkpoint"})

# A name token in the cleaned query; '' is a string literal used as a name
_NAME_TOKEN = r"""(?:\w+|"(?:[^"]|"")*"|`[^`]*`|\[[^\]]*\]|'')"""
_PRAGMA = re.compile(r"\bPRAGMA\b", re.IGNORECASE)
_PRAGMA_TARGET = re.compile(
    rf"""\s*(?:{_NAME_TOKEN}\s*\.\s*)?({_NAME_TOKEN})\s*(=|\(\s*[^\s)])?""",
    re.IGNORECASE,
)
_PLAIN_NAME = re.compile(r"\w+")


class DialectKeywordRule(Rule):
    """Detects statement keywords that are dangerous in one dialect.

    Procedure calls, dynamic SQL, upserts, attach/detach, notifications and
    maintenance statements. Matched as whole words against the cleaned
    query so literals such as ``'please call me'`` do not trigger.
    """

    @property
    def rule_id(self) -> str:
        return "extra-keywords"

    @property
    def name(self) -> str:
        return "Dialect Keyword Detection"

    @property
    def description(self) -> str:
        return (
            "Detects CALL, EXECUTE, REPLACE, ATTACH, VACUUM and other "
            "dialect-specific statement keywords."
        )

    @property
    def stage(self) -> RuleStage:
        return RuleStage.KEYWORD

    @property
    def dialects(self) -> frozenset[Dialect]:
        return frozenset(EXTRA_KEYWORDS)

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        for kw in EXTRA_KEYWORDS.get(dialect, ()):
            if kw.regex.search(query.cleaned):
                return self._fail(
                    f"query contains forbidden keyword: {kw.desc}",
                    {"keyword": kw.desc},
                )
        return self._pass()


class PragmaWriteRule(Rule):
    """Blocks SQLite pragmas that change settings.

    ``PRAGMA name = value`` is always a write. ``PRAGMA name(value)`` is a
    write unless the pragma is in READ_ARGUMENT_PRAGMAS (such as
    ``table_info``), where the argument only selects what to read.
    ACTION_PRAGMAS are blocked in every form. A name that cannot be read
    from the cleaned query, such as a string literal, counts as a write.
    Other bare ``PRAGMA name`` reads stay allowed.
    """

    @property
    def rule_id(self) -> str:
        return "pragma-write"

    @property
    def name(self) -> str:
        return "PRAGMA Write Detection"

    @property
    def description(self) -> str:
        return "Detects SQLite PRAGMA statements that assign a value."

    @property
    def stage(self) -> RuleStage:
        return RuleStage.PRAGMA

    @property
    def dialects(self) -> frozenset[Dialect]:
        return frozenset({Dialect.SQLITE})

    def check(self, query: QueryText, dialect: Dialect) -> RuleResult:
        pragma = _find_pragma_write(query.cleaned)
        if pragma is not None:
            return self._fail("PRAGMA writes are not allowed", {"pragma": pragma})
        return self._pass()


def _pragma_name(token: str) -> str:
    if token[:1] in "\"`[":
        token = token[1:-1]
    return token.lower()


def _find_pragma_write(cleaned: str) -> str | None:
    """Return the name of the first mutating pragma in the cleaned query."""
    for match in _PRAGMA.finditer(cleaned):
        target = _PRAGMA_TARGET.match(cleaned, match.end())
        if target is None:
            rest = cleaned[match.end() :].strip()
            if rest:
                return rest.split()[0]
            continue

        token, form = target.group(1), target.group(2)
        name = _pragma_name(token)
        if not _PLAIN_NAME.fullmatch(name):
            return token
        if name in ACTION_PRAGMAS or form == "=":
            return name
        if form is not None and name not in READ_ARGUMENT_PRAGMAS:
            return name
    return None


_registry = RuleRegistry.get_instance()
_registry.register(DialectKeywordRule())
_registry.register(PragmaWriteRule())
