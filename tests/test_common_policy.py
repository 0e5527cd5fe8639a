"""Tests for the rules shared by every dialect."""

import pytest

import sqlgate
from sqlgate import Dialect, QueryRejectedError, Validator

ALL_DIALECTS = list(Dialect)


class TestEmptyQuery:
    """Empty and whitespace-only queries."""

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize("sql", ["", "   ", "\n\t "])
    def test_rejected(self, dialect: Dialect, sql: str) -> None:
        result = sqlgate.validate(sql, dialect=dialect)
        assert result.is_safe is False
        assert result.reason == "empty query"
        assert result.rule_id == "empty-query"


class TestAllowedPrefix:
    """Only read statements may start a query."""

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM users",
            "select * from users",
            "  SELECT 1  ",
            "SHOW TABLES",
            "DESCRIBE users",
            "DESC users",
            "DESC",
            "EXPLAIN SELECT * FROM users",
            "SELECT\n1",
        ],
    )
    def test_allowed(self, dialect: Dialect, sql: str) -> None:
        assert sqlgate.is_safe(sql, dialect=dialect)

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize(
        "sql",
        [
            "WITH x AS (SELECT 1) SELECT * FROM x",
            "SELECTX FROM t",
            "(SELECT 1)",
            "VALUES (1)",
            "-- comment\nSELECT 1",
            "/* c */ SELECT 1",
            "LOAD DATA INFILE '/tmp/data.txt' INTO TABLE users",
        ],
    )
    def test_rejected(self, dialect: Dialect, sql: str) -> None:
        result = sqlgate.validate(sql, dialect=dialect)
        assert result.is_safe is False
        assert result.reason == "only SELECT, SHOW, DESCRIBE, and EXPLAIN queries are allowed"

    def test_pragma_prefix_only_in_sqlite(self) -> None:
        assert sqlgate.is_safe("PRAGMA table_info('t')", dialect="sqlite")
        assert not sqlgate.is_safe("PRAGMA table_info('t')", dialect="mysql")
        assert not sqlgate.is_safe("PRAGMA table_info('t')", dialect="postgres")


class TestMultipleStatements:
    """Stacked statements are rejected; one trailing semicolon is fine."""

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT 1; DROP TABLE users",
            "SELECT 1; SELECT 2",
            "SELECT 1;;",
        ],
    )
    def test_rejected(self, dialect: Dialect, sql: str) -> None:
        result = sqlgate.validate(sql, dialect=dialect)
        assert result.reason == "multiple statements are not allowed"

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize("sql", ["SELECT 1;", "SELECT 1;  \n", "SELECT ';' FROM t"])
    def test_allowed(self, dialect: Dialect, sql: str) -> None:
        assert sqlgate.is_safe(sql, dialect=dialect)

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    def test_semicolon_then_comment_then_statement(self, dialect: Dialect) -> None:
        result = sqlgate.validate("SELECT 1; -- comment\nDROP TABLE users", dialect=dialect)
        assert result.reason == "multiple statements are not allowed"

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize(
        "sql",
        ["SELECT 1 -- ; DROP TABLE users", "SELECT 1 /* ; DROP TABLE users */"],
    )
    def test_semicolon_in_comment_is_ignored(self, dialect: Dialect, sql: str) -> None:
        assert sqlgate.is_safe(sql, dialect=dialect)


class TestCommonKeywords:
    """DML, DDL and privilege keywords anywhere outside literals."""

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize(
        "sql,keyword",
        [
            ("SELECT * FROM t WHERE EXISTS (DELETE FROM users)", "DELETE"),
            ("EXPLAIN INSERT INTO users VALUES (1)", "INSERT"),
            ("EXPLAIN UPDATE users SET name = 'x'", "UPDATE"),
            ("SELECT 1 FROM (DROP TABLE users)", "DROP"),
            ("explain create table t (id int)", "CREATE"),
            ("EXPLAIN ALTER TABLE users ADD COLUMN age INT", "ALTER"),
            ("SELECT truncate FROM t", "TRUNCATE"),
            ("SHOW GRANT", "GRANT"),
            ("DESC REVOKE", "REVOKE"),
        ],
    )
    def test_rejected(self, dialect: Dialect, sql: str, keyword: str) -> None:
        result = sqlgate.validate(sql, dialect=dialect)
        assert result.reason == f"query contains forbidden keyword: {keyword}"
        assert result.rule_id == "common-keywords"

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT created_at FROM orders",
            "SELECT updated_at FROM products",
            "SELECT deleted FROM items",
            "SELECT dropped_count, creator FROM stats",
            "SELECT * FROM users WHERE name = 'DROP TABLE users'",
        ],
    )
    def test_keyword_fragments_allowed(self, dialect: Dialect, sql: str) -> None:
        assert sqlgate.is_safe(sql, dialect=dialect)

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    def test_keyword_in_comment_allowed(self, dialect: Dialect) -> None:
        assert sqlgate.is_safe("SELECT 1 -- DROP TABLE x", dialect=dialect)
        assert sqlgate.is_safe("SELECT 1 /* DROP TABLE x */", dialect=dialect)

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    def test_escaped_quote_does_not_end_literal(self, dialect: Dialect) -> None:
        """``''`` keeps the literal open, so DROP stays inside it."""
        assert sqlgate.is_safe("SELECT 'O''Brien; DROP TABLE t' FROM users", dialect=dialect)


class TestSetStatement:
    """SET as a statement keyword."""

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize(
        "sql",
        ["SELECT * FROM settings", "SELECT * FROM user_settings WHERE setting_name = 'theme'"],
    )
    def test_set_prefix_in_names_allowed(self, dialect: Dialect, sql: str) -> None:
        assert sqlgate.is_safe(sql, dialect=dialect)

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    def test_set_statement_rejected(self, dialect: Dialect) -> None:
        result = sqlgate.validate("SET @var = 1", dialect=dialect)
        assert result.is_safe is False

    def test_set_after_semicolon_is_reported_as_stacking(self) -> None:
        result = sqlgate.validate("SELECT 1; SET x = 1")
        assert result.reason == "multiple statements are not allowed"


class TestValidatorAPI:
    """The public validator surface."""

    @pytest.fixture
    def validator(self) -> Validator:
        return Validator("postgresql")

    def test_dialect_alias(self, validator: Validator) -> None:
        assert validator.dialect is Dialect.POSTGRES

    def test_default_dialect_is_mysql(self) -> None:
        assert Validator().dialect is Dialect.MYSQL
        assert sqlgate.validate("SELECT SLEEP(1)").is_safe is False

    def test_result_is_truthy_when_safe(self, validator: Validator) -> None:
        result = validator.validate("SELECT 1")
        assert result
        assert result.reason is None
        assert result.dialect is Dialect.POSTGRES

    def test_result_is_falsy_when_rejected(self, validator: Validator) -> None:
        assert not validator.validate("DROP TABLE users")

    def test_check_raises(self, validator: Validator) -> None:
        with pytest.raises(QueryRejectedError) as exc_info:
            validator.check("SELECT pg_sleep(1)")
        assert exc_info.value.reason == "query contains forbidden function: pg_sleep()"
        assert exc_info.value.result.rule_id == "dos-functions"

    def test_check_passes_silently(self, validator: Validator) -> None:
        validator.check("SELECT 1")

    def test_unknown_dialect(self) -> None:
        with pytest.raises(sqlgate.UnsupportedDialectError, match="unsupported database driver"):
            Validator("oracle")

    def test_unknown_dialect_is_configuration_error(self) -> None:
        with pytest.raises(sqlgate.ConfigurationError):
            sqlgate.validate("SELECT 1", dialect="mssql")

    def test_strip(self, validator: Validator) -> None:
        assert validator.strip("SELECT 'x' /* c */") == "SELECT ''  "

    def test_first_failing_rule_wins(self, validator: Validator) -> None:
        """Prefix runs before keyword checks."""
        result = validator.validate("DROP TABLE users")
        assert result.rule_id == "allowed-prefix"
