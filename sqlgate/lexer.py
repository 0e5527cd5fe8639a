"""Dialect-aware stripping of string literals and comments.

Keyword checks must never be fooled by text that only *looks* like SQL,
such as ``'DROP TABLE users'`` inside a literal or ``; DROP TABLE users``
inside a comment. The scanner here walks the query once, left to right,
and at each position lets exactly one recognizer consume input:

1. line comments (``--`` everywhere, ``#`` in MySQL)
2. block comments (``/* ... */``)
3. dollar-quoted strings (PostgreSQL)
4. single-quoted strings
5. double-quoted strings or identifiers
6. backtick identifiers
7. bracket identifiers
8. any other character

String literals become ``''`` (``""`` for MySQL double-quoted strings),
comments become a single space and identifiers pass through unchanged.
Unterminated constructs run to the end of the input instead of raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from .dialects import Dialect

STRING_PLACEHOLDER = "''"
DOUBLE_QUOTED_PLACEHOLDER = '""'
COMMENT_PLACEHOLDER = " "

# $$ or $tag$ where tag follows identifier rules and does not start with a digit
_DOLLAR_TAG = re.compile(r"\$(?:[^\W\d$][\w]*)?\$")
# MySQL /*!50001 ... */ and MariaDB /*M!100100 ... */ bodies are executed
_EXECUTABLE_COMMENT = re.compile(r"/\*M?!\d*")


@dataclass(frozen=True)
class LexicalRules:
    """Which recognizers are active for a dialect.

    Attributes:
        hash_comments: ``#`` starts a line comment.
        dash_comment_needs_space: ``--`` is only a comment when followed by
            whitespace, a control character or the end of input.
        nested_block_comments: ``/* /* */ */`` nests.
        executable_comments: ``/*! ... */`` bodies are SQL, not comments.
        dollar_quotes: ``$tag$ ... $tag$`` strings.
        backslash_escapes: backslash escapes the next character in every
            quoted string.
        escape_string_prefix: backslash escapes only inside ``E'...'``.
        double_quote_strings: ``"..."`` is a string rather than an identifier.
        ansi_quotes: ``"..."`` ends at the first undoubled quote even where
            backslashes escape in single-quoted strings. Its text is still
            hidden, as for a string.
        backtick_identifiers: ```name``` identifiers.
        bracket_identifiers: ``[name]`` identifiers.
    """

    hash_comments: bool = False
    dash_comment_needs_space: bool = False
    nested_block_comments: bool = False
    executable_comments: bool = False
    dollar_quotes: bool = False
    backslash_escapes: bool = False
    escape_string_prefix: bool = False
    double_quote_strings: bool = False
    ansi_quotes: bool = False
    backtick_identifiers: bool = False
    bracket_identifiers: bool = False


MYSQL_RULES = LexicalRules(
    hash_comments=True,
    dash_comment_needs_space=True,
    executable_comments=True,
    backslash_escapes=True,
    double_quote_strings=True,
    backtick_identifiers=True,
)

POSTGRES_RULES = LexicalRules(
    nested_block_comments=True,
    dollar_quotes=True,
    escape_string_prefix=True,
)

SQLITE_RULES = LexicalRules(
    backtick_identifiers=True,
    bracket_identifiers=True,
)

# Server modes that change where literals end. MySQL may run with
# NO_BACKSLASH_ESCAPES or ANSI_QUOTES, PostgreSQL with
# standard_conforming_strings off.
ALTERNATE_RULES: dict[Dialect, tuple[LexicalRules, ...]] = {
    Dialect.MYSQL: (
        replace(MYSQL_RULES, backslash_escapes=False),
        replace(MYSQL_RULES, ansi_quotes=True),
    ),
    Dialect.POSTGRES: (replace(POSTGRES_RULES, backslash_escapes=True),),
    Dialect.SQLITE: (),
}

_RULES_BY_DIALECT: dict[Dialect, LexicalRules] = {
    Dialect.MYSQL: MYSQL_RULES,
    Dialect.POSTGRES: POSTGRES_RULES,
    Dialect.SQLITE: SQLITE_RULES,
}


def lexical_rules(dialect: Dialect | str) -> LexicalRules:
    """Get the lexical rule set for a dialect."""
    return _RULES_BY_DIALECT[Dialect.from_name(dialect)]


def strip(sql: str, dialect: Dialect | str) -> str:
    """Neutralize string literals and comments for keyword detection.

    The result keeps the relative order of everything outside literals and
    comments, but not its offsets. It is only meant for presence checks and
    must never be executed.

    Args:
        sql: The raw, untrusted query.
        dialect: Dialect whose lexical rules apply.

    Returns:
        The cleaned query.

    Example:
        >>> strip("SELECT * FROM users WHERE name = 'DROP TABLE'", "mysql")
        "SELECT * FROM users WHERE name = ''"
    """
    return _Scanner(sql, lexical_rules(dialect), keep_comments=False).run()


def scrub(sql: str, dialect: Dialect | str) -> str:
    """Neutralize string literals but keep comments verbatim.

    Uses the same scan as :func:`strip`, so quotes inside comments are
    still recognized as comment text. Function and clause patterns are
    matched against this view.
    """
    return _Scanner(sql, lexical_rules(dialect), keep_comments=True).run()


def alternate_views(sql: str, dialect: Dialect | str) -> tuple[str, ...]:
    """Scrubbed and cleaned forms of a query under the dialect's server modes.

    A literal that hides ``SLEEP(10)`` under default lexing may end early
    on a server running with a different quoting mode. Pattern checks also
    look at these views so the call is seen either way.

    Example:
        >>> alternate_views("SELECT '\\\\', SLEEP(10), '\\\\'", "mysql")[0]
        "SELECT '', SLEEP(10), ''"
    """
    views: list[str] = []
    for rules in ALTERNATE_RULES[Dialect.from_name(dialect)]:
        views.append(_Scanner(sql, rules, keep_comments=True).run())
        views.append(_Scanner(sql, rules, keep_comments=False).run())
    return tuple(views)


def _is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class _Scanner:
    """Single forward pass over a query with an explicit cursor."""

    def __init__(self, sql: str, rules: LexicalRules, keep_comments: bool) -> None:
        self.sql = sql
        self.length = len(sql)
        self.rules = rules
        self.keep_comments = keep_comments
        self.pos = 0
        self.out: list[str] = []
        self._in_executable_comment = False

    def run(self) -> str:
        while self.pos < self.length:
            consumed = (
                self._line_comment()
                or self._block_comment()
                or self._dollar_quoted()
                or self._single_quoted()
                or self._double_quoted()
                or self._backtick_quoted()
                or self._bracket_quoted()
            )
            if not consumed:
                self.out.append(self.sql[self.pos])
                self.pos += 1
        return "".join(self.out)

    def _emit_comment(self, text: str) -> None:
        self.out.append(text if self.keep_comments else COMMENT_PLACEHOLDER)

    def _line_comment(self) -> bool:
        sql, i = self.sql, self.pos
        if sql.startswith("--", i):
            if self.rules.dash_comment_needs_space:
                follower = sql[i + 2 : i + 3]
                if follower and not (follower.isspace() or ord(follower) < 32):
                    return False
        elif not (self.rules.hash_comments and sql[i] == "#"):
            return False

        end = sql.find("\n", i)
        if end == -1:
            end = self.length
        self._emit_comment(sql[i:end])
        self.pos = end
        return True

    def _block_comment(self) -> bool:
        sql, i = self.sql, self.pos

        if self._in_executable_comment and sql.startswith("*/", i):
            self._in_executable_comment = False
            self._emit_comment("*/")
            self.pos = i + 2
            return True

        if not sql.startswith("/*", i):
            return False

        if self.rules.executable_comments and not self._in_executable_comment:
            marker = _EXECUTABLE_COMMENT.match(sql, i)
            if marker:
                # Only the markers are dropped; the body is scanned as SQL
                self._in_executable_comment = True
                self._emit_comment(marker.group())
                self.pos = marker.end()
                return True

        depth = 1
        j = i + 2
        while j < self.length and depth:
            if sql.startswith("*/", j):
                depth -= 1
                j += 2
            elif self.rules.nested_block_comments and sql.startswith("/*", j):
                depth += 1
                j += 2
            else:
                j += 1
        self._emit_comment(sql[i:j])
        self.pos = j
        return True

    def _dollar_quoted(self) -> bool:
        sql, i = self.sql, self.pos
        if not self.rules.dollar_quotes or sql[i] != "$":
            return False
        # foo$bar$ is an identifier, not the start of a quote
        if i > 0 and _is_identifier_char(sql[i - 1]):
            return False

        tag = _DOLLAR_TAG.match(sql, i)
        if tag is None:
            return False
        close = sql.find(tag.group(), tag.end())
        if close == -1:
            return False

        self.out.append(STRING_PLACEHOLDER)
        self.pos = close + len(tag.group())
        return True

    def _single_quoted(self) -> bool:
        i = self.pos
        if self.sql[i] != "'":
            return False
        backslash = self.rules.backslash_escapes or (
            self.rules.escape_string_prefix and self._has_escape_prefix(i)
        )
        self.pos = self._skip_quoted(i + 1, "'", backslash)
        self.out.append(STRING_PLACEHOLDER)
        return True

    def _has_escape_prefix(self, quote_pos: int) -> bool:
        """True for the quote of an ``E'...'`` literal (E not ending a word)."""
        if quote_pos == 0 or self.sql[quote_pos - 1] not in "eE":
            return False
        return quote_pos == 1 or not _is_identifier_char(self.sql[quote_pos - 2])

    def _double_quoted(self) -> bool:
        i = self.pos
        if self.sql[i] != '"':
            return False
        if self.rules.double_quote_strings:
            backslash = self.rules.backslash_escapes and not self.rules.ansi_quotes
            self.pos = self._skip_quoted(i + 1, '"', backslash)
            self.out.append(DOUBLE_QUOTED_PLACEHOLDER)
            return True
        end = self._skip_quoted(i + 1, '"', backslash=False)
        self.out.append(self.sql[i:end])
        self.pos = end
        return True

    def _backtick_quoted(self) -> bool:
        i = self.pos
        if not self.rules.backtick_identifiers or self.sql[i] != "`":
            return False
        end = self._skip_quoted(i + 1, "`", backslash=False)
        self.out.append(self.sql[i:end])
        self.pos = end
        return True

    def _bracket_quoted(self) -> bool:
        i = self.pos
        if not self.rules.bracket_identifiers or self.sql[i] != "[":
            return False
        close = self.sql.find("]", i + 1)
        end = self.length if close == -1 else close + 1
        self.out.append(self.sql[i:end])
        self.pos = end
        return True

    def _skip_quoted(self, start: int, quote: str, backslash: bool) -> int:
        """Return the index just past the closing quote (or end of input).

        A doubled quote is always an escaped quote. With ``backslash`` set a
        backslash also escapes whatever character follows it.
        """
        sql = self.sql
        j = start
        while j < self.length:
            ch = sql[j]
            if ch == quote:
                if sql.startswith(quote, j + 1):
                    j += 2
                    continue
                return j + 1
            if backslash and ch == "\\" and j + 1 < self.length:
                j += 2
                continue
            j += 1
        return self.length
