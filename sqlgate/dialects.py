"""Supported SQL dialects."""

from __future__ import annotations

from enum import Enum

from .exceptions import UnsupportedDialectError


class Dialect(str, Enum):
    """The three databases the gatekeeper understands.

    The dialect is chosen once at configuration time and decides both the
    lexical rules used for stripping and the rule tables used for policy
    checks.
    """

    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: Dialect | str) -> Dialect:
        """Resolve a dialect selector such as ``"postgresql"`` or ``"sqlite3"``.

        Args:
            name: A Dialect member or a case-insensitive driver name.

        Returns:
            The matching Dialect.

        Raises:
            UnsupportedDialectError: If the name is not a known alias.
        """
        if isinstance(name, Dialect):
            return name
        dialect = _ALIASES.get(name.strip().lower())
        if dialect is None:
            raise UnsupportedDialectError(
                f"unsupported database driver: {name} (supported: mysql, postgres, sqlite)"
            )
        return dialect


_ALIASES: dict[str, Dialect] = {
    "mysql": Dialect.MYSQL,
    "postgres": Dialect.POSTGRES,
    "postgresql": Dialect.POSTGRES,
    "sqlite": Dialect.SQLITE,
    "sqlite3": Dialect.SQLITE,
}
