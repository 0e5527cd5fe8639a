"""Environment configuration for the gatekeeper and its adapters.

Settings are read from ``MCP_*`` environment variables and, when present,
a ``.env`` file in the working directory.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .dialects import Dialect
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DRIVER = "mysql"
DEFAULT_MAX_ROWS = 10000
DEFAULT_QUERY_TIMEOUT = 30


class GateSettings(BaseSettings):
    """Process-wide settings.

    Attributes:
        db_driver: Dialect selector (``MCP_DB_DRIVER``), defaults to mysql.
        max_rows: Row cap for query results (``MCP_MAX_ROWS``).
        query_timeout: Per-query deadline in seconds (``MCP_QUERY_TIMEOUT``).
    """

    model_config = SettingsConfigDict(env_prefix="MCP_", env_file=".env", extra="ignore")

    db_driver: str = DEFAULT_DRIVER
    max_rows: int = DEFAULT_MAX_ROWS
    query_timeout: int = DEFAULT_QUERY_TIMEOUT

    @field_validator("max_rows", "query_timeout", mode="before")
    @classmethod
    def _fallback_to_default(cls, value: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        try:
            number = int(value)
        except (TypeError, ValueError):
            number = 0
        if number <= 0:
            logger.warning(
                "Invalid MCP_%s=%r, using default %d", info.field_name.upper(), value, default
            )
            return default
        return number

    @property
    def dialect(self) -> Dialect:
        """The configured dialect.

        Raises:
            UnsupportedDialectError: If MCP_DB_DRIVER names an unknown driver.
        """
        return Dialect.from_name(self.db_driver or DEFAULT_DRIVER)


class ConnectionSettings(BaseSettings):
    """Base for per-dialect connection settings.

    Subclasses list the fields that must be set in ``required_fields``.
    """

    required_fields: ClassVar[tuple[str, ...]] = ()

    def missing(self) -> list[str]:
        """Environment variable names of required settings that are unset."""
        prefix = self.model_config.get("env_prefix", "")
        return [
            f"{prefix}{name}".upper()
            for name in self.required_fields
            if not getattr(self, name)
        ]

    def require(self) -> None:
        """Raise if any required setting is missing.

        Raises:
            ConfigurationError: Listing every missing environment variable.
        """
        missing = self.missing()
        if missing:
            raise ConfigurationError(
                f"missing required environment variables: {', '.join(missing)}"
            )


class MySQLSettings(ConnectionSettings):
    model_config = SettingsConfigDict(env_prefix="MCP_MYSQL_", env_file=".env", extra="ignore")

    required_fields: ClassVar[tuple[str, ...]] = ("host", "port", "db", "user", "password")

    host: str | None = None
    port: str | None = None
    db: str | None = None
    user: str | None = None
    password: str | None = None


class PostgresSettings(ConnectionSettings):
    model_config = SettingsConfigDict(env_prefix="MCP_PG_", env_file=".env", extra="ignore")

    required_fields: ClassVar[tuple[str, ...]] = ("host", "port", "db", "user", "password")

    host: str | None = None
    port: str | None = None
    db: str | None = None
    user: str | None = None
    password: str | None = None
    sslmode: str | None = None


class SQLiteSettings(ConnectionSettings):
    model_config = SettingsConfigDict(env_prefix="MCP_SQLITE_", env_file=".env", extra="ignore")

    required_fields: ClassVar[tuple[str, ...]] = ("path",)

    path: str | None = None


SETTINGS_BY_DIALECT: dict[Dialect, type[ConnectionSettings]] = {
    Dialect.MYSQL: MySQLSettings,
    Dialect.POSTGRES: PostgresSettings,
    Dialect.SQLITE: SQLiteSettings,
}


def load_settings(**overrides: Any) -> GateSettings:
    """Load the process-wide settings from the environment."""
    return GateSettings(**overrides)


def dialect_settings(dialect: Dialect | str, **overrides: Any) -> ConnectionSettings:
    """Load the connection settings for a dialect from the environment."""
    return SETTINGS_BY_DIALECT[Dialect.from_name(dialect)](**overrides)
