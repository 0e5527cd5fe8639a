"""Tests for the SQLite gatekeeper."""

import sqlite3

import pytest

from sqlgate import Validator


@pytest.fixture
def validator() -> Validator:
    return Validator("sqlite")


class TestAllowedQueries:
    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM users",
            "SELECT id, name FROM users WHERE id = 1",
            "select * from users",
            "SHOW TABLES",
            "DESCRIBE users",
            "DESC users",
            "EXPLAIN SELECT * FROM users",
            "SELECT * FROM settings",
            "SELECT * FROM user_settings WHERE setting_name = 'theme'",
            "SELECT created_at FROM orders",
            "SELECT updated_at FROM products",
            "SELECT deleted FROM items",
            "SELECT * FROM users WHERE name = 'DROP TABLE users'",
            "SELECT [drop_flag], `order` FROM [my table]",
            "SELECT SLEEP(10)",
            "SELECT pg_sleep(10)",
            "SELECT * FROM t WHERE f = 'load_extension(x)'",
        ],
    )
    def test_allowed(self, validator: Validator, sql: str) -> None:
        result = validator.validate(sql)
        assert result.is_safe is True, result.reason


class TestBlockedQueries:
    @pytest.mark.parametrize(
        "sql",
        [
            "INSERT INTO users VALUES (1, 'test')",
            "UPDATE users SET name = 'test'",
            "DELETE FROM users",
            "DROP TABLE users",
            "CREATE TABLE test (id INT)",
            "ALTER TABLE users ADD COLUMN age INT",
            "TRUNCATE TABLE users",
            "GRANT ALL ON *.* TO 'user'",
            "REVOKE ALL ON *.* FROM 'user'",
            "SET @var = 1",
            "SELECT 1; DROP TABLE users",
            "REPLACE INTO users VALUES (1, 'test')",
            "ATTACH DATABASE '/tmp/other.db' AS other",
            "DETACH DATABASE other",
            "REINDEX users",
            "VACUUM",
        ],
    )
    def test_blocked(self, validator: Validator, sql: str) -> None:
        assert validator.validate(sql).is_safe is False


class TestForbiddenPatterns:
    @pytest.mark.parametrize(
        "sql,desc",
        [
            ("SELECT load_extension('hack.so')", "load_extension()"),
            ("SELECT writefile('/tmp/data', content)", "writefile()"),
            ("SELECT readfile('/etc/passwd')", "readfile()"),
            ("SELECT edit(content)", "edit()"),
            ("SELECT fts3_tokenizer('simple')", "fts3_tokenizer()"),
        ],
    )
    def test_blocked(self, validator: Validator, sql: str, desc: str) -> None:
        result = validator.validate(sql)
        assert result.reason == f"query contains forbidden pattern: {desc}"

    def test_edit_needs_call_syntax(self, validator: Validator) -> None:
        assert validator.validate("SELECT edited, credit FROM t").is_safe is True


class TestExtraKeywords:
    @pytest.mark.parametrize(
        "sql,keyword",
        [
            ("EXPLAIN REPLACE INTO t VALUES (1)", "REPLACE"),
            ("SELECT replace(name, 'a', 'b') FROM t", "REPLACE"),
            ("EXPLAIN ATTACH 'x.db' AS x", "ATTACH"),
            ("EXPLAIN DETACH x", "DETACH"),
            ("EXPLAIN REINDEX", "REINDEX"),
            ("EXPLAIN VACUUM", "VACUUM"),
        ],
    )
    def test_blocked(self, validator: Validator, sql: str, keyword: str) -> None:
        result = validator.validate(sql)
        assert result.reason == f"query contains forbidden keyword: {keyword}"


class TestPragmaPolicy:
    @pytest.mark.parametrize(
        "sql",
        [
            "EXPLAIN PRAGMA journal_mode = WAL",
            "EXPLAIN PRAGMA synchronous = OFF",
            "EXPLAIN PRAGMA foreign_keys = ON",
            "PRAGMA journal_mode = WAL",
            "PRAGMA main.user_version=7",
            "pragma writable_schema = 1",
            "PRAGMA query_only(0)",
            "PRAGMA \"journal_mode\" (WAL)",
            "PRAGMA main.cache_size(-2000)",
            "PRAGMA optimize",
            "PRAGMA wal_checkpoint(PASSIVE)",
            "PRAGMA incremental_vacuum",
            # String literals are accepted as pragma names
            "PRAGMA 'query_only' = 0",
            "PRAGMA 'journal_mode' = 'wal'",
            "PRAGMA main.'user_version' = 9",
            "PRAGMA 'user_version'('7')",
            "PRAGMA 'optimize'",
            "PRAGMA /* c */ 'query_only' = 0",
            # Setters called with an argument
            "PRAGMA analysis_limit(5)",
            "PRAGMA fullfsync(1)",
            "PRAGMA checkpoint_fullfsync(1)",
            "PRAGMA default_cache_size(10)",
            "PRAGMA count_changes(1)",
            "PRAGMA temp_store_directory('/tmp')",
            "PRAGMA some_future_pragma(1)",
        ],
    )
    def test_writes_blocked(self, validator: Validator, sql: str) -> None:
        result = validator.validate(sql)
        assert result.reason == "PRAGMA writes are not allowed"
        assert result.rule_id == "pragma-write"

    def test_literal_name_disables_query_only(self, validator: Validator) -> None:
        """A literal pragma name really does switch off read-only mode."""
        sql = "PRAGMA 'query_only' = 0"
        conn = sqlite3.connect(":memory:")
        try:
            conn.execute("CREATE TABLE t (x INTEGER)")
            conn.execute("PRAGMA query_only = ON")
            conn.execute(sql)
            conn.execute("INSERT INTO t VALUES (1)")
        finally:
            conn.close()
        assert validator.validate(sql).is_safe is False

    @pytest.mark.parametrize(
        "sql",
        [
            "PRAGMA foreign_key_check('orders')",
            "PRAGMA foreign_key_list(orders)",
            "PRAGMA index_info('idx')",
            "PRAGMA index_xinfo('idx')",
            "PRAGMA integrity_check(10)",
            "PRAGMA quick_check",
            "PRAGMA table_list('t')",
            'PRAGMA "table_info"(t)',
        ],
    )
    def test_read_arguments_allowed(self, validator: Validator, sql: str) -> None:
        result = validator.validate(sql)
        assert result.is_safe is True, result.reason

    @pytest.mark.parametrize(
        "sql",
        [
            "PRAGMA table_info('t')",
            "PRAGMA table_info(users)",
            "PRAGMA index_list('users')",
            "PRAGMA journal_mode",
            "PRAGMA foreign_keys",
            "PRAGMA main.table_xinfo('t')",
            "EXPLAIN PRAGMA user_version",
            "SELECT * FROM pragma_table_info('t')",
        ],
    )
    def test_reads_allowed(self, validator: Validator, sql: str) -> None:
        result = validator.validate(sql)
        assert result.is_safe is True, result.reason

    def test_assignment_in_literal_allowed(self, validator: Validator) -> None:
        assert validator.validate("SELECT 'PRAGMA journal_mode = WAL'").is_safe is True

    def test_pragma_details(self, validator: Validator) -> None:
        from sqlgate.rules import QueryText, RuleRegistry, get_all_rules

        get_all_rules()
        rule = RuleRegistry.get_instance().get("pragma-write")
        assert rule is not None
        query = QueryText(
            raw="PRAGMA [journal_mode] = OFF",
            cleaned="PRAGMA [journal_mode] = OFF",
            scrubbed="PRAGMA [journal_mode] = OFF",
        )
        result = rule.check(query, validator.dialect)
        assert result.details == {"pragma": "journal_mode"}
