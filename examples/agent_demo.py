#!/usr/bin/env python3
"""
sqlgate Demo: an AI agent asks for data and tries to change it.

This demo runs simulated LLM-generated SQL through the gatekeeper and, for
the queries that pass, against a throwaway in-memory SQLite database.
No server or API keys needed.

Run:
    pip install -e .
    python examples/agent_demo.py
"""

from __future__ import annotations

import sqlite3
import time

import sqlgate
from sqlgate.executor import list_tables, read_schema

# The kinds of queries an AI might write when asked about a database
SIMULATED_AI_QUERIES = [
    {
        "user_prompt": "How many users signed up this year?",
        "ai_sql": "SELECT COUNT(*) AS n FROM users WHERE created_at >= '2024-01-01'",
    },
    {
        "user_prompt": "Show me the biggest orders",
        "ai_sql": """
            SELECT u.name, o.amount
            FROM orders o
            JOIN users u ON u.id = o.user_id
            ORDER BY o.amount DESC
            LIMIT 3
        """,
    },
    {
        "user_prompt": "Clean up the database to make it faster",
        "ai_sql": "SELECT 1; DROP TABLE orders; VACUUM;",
    },
    {
        "user_prompt": "Remove all test users",
        "ai_sql": "DELETE FROM users WHERE name LIKE 'test%'",
    },
    {
        "user_prompt": "Turn on write-ahead logging",
        "ai_sql": "PRAGMA journal_mode = WAL",
    },
    {
        "user_prompt": "What columns does the users table have?",
        "ai_sql": "PRAGMA table_info('users')",
    },
]

# The same text can be harmless in one dialect and dangerous in another
CROSS_DIALECT_QUERIES = [
    "SELECT SLEEP(5)",
    "SELECT pg_sleep(5)",
    "SELECT 1 # ; DROP TABLE users",
    "SELECT 'it\\'s'; DROP TABLE users; -- '",
    "SELECT * INTO archive FROM users",
]


def build_database(adapter: sqlgate.DialectAdapter) -> sqlite3.Connection:
    conn = sqlite3.connect(":memory:")
    conn.executescript(
        """
        CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, created_at TEXT);
        CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, amount REAL);
        INSERT INTO users (name, created_at) VALUES
            ('alice', '2024-02-01'), ('bob', '2023-11-12'), ('carol', '2024-06-30');
        INSERT INTO orders (user_id, amount) VALUES (1, 120.0), (1, 35.5), (3, 410.0), (2, 9.99);
        """
    )
    adapter.enforce_read_only(conn)
    return conn


def demo_agent_queries() -> None:
    """Run the simulated agent queries through the gate."""
    print("\n" + "=" * 60)
    print("AGENT QUERIES (sqlite)")
    print("   Reads run; everything else is rejected before execution")
    print("=" * 60)

    adapter = sqlgate.get_adapter("sqlite")
    conn = build_database(adapter)
    try:
        for scenario in SIMULATED_AI_QUERIES:
            result = sqlgate.execute_query(conn, scenario["ai_sql"], adapter)
            print(f"\nUser asked: \"{scenario['user_prompt']}\"")
            print(f"AI generated: {' '.join(scenario['ai_sql'].split())[:60]}")
            if result.is_error:
                print(f"   BLOCKED  {result.error}")
            else:
                print(f"   ALLOWED  {len(result.rows)} row(s): {result.rows[:3]}")
    finally:
        conn.close()


def demo_dialects() -> None:
    """Show how the verdict depends on the dialect."""
    print("\n" + "=" * 60)
    print("DIALECTS")
    print("=" * 60)

    for sql in CROSS_DIALECT_QUERIES:
        print(f"\n   SQL: {sql}")
        for dialect in sqlgate.Dialect:
            result = sqlgate.validate(sql, dialect=dialect)
            verdict = "allowed" if result.is_safe else f"blocked: {result.reason}"
            print(f"   {dialect.value:<9} {verdict}")


def demo_catalog() -> None:
    """List tables and describe one, the way a schema resource would."""
    print("\n" + "=" * 60)
    print("CATALOG")
    print("=" * 60)

    adapter = sqlgate.get_adapter("sqlite")
    conn = build_database(adapter)
    try:
        for table in list_tables(conn, adapter, "main"):
            print(f"\n   {adapter.resource_uri('main', table)}")
            for column in read_schema(conn, adapter, "main", table):
                print(f"      {column}")
    finally:
        conn.close()


def demo_benchmark() -> None:
    """Quick performance benchmark."""
    print("\n" + "=" * 60)
    print("PERFORMANCE")
    print("=" * 60)

    validator = sqlgate.Validator("postgres")
    test_sql = "SELECT u.*, o.* FROM users u JOIN orders o ON u.id = o.user_id WHERE u.name = 'x'"

    # Warm up
    for _ in range(100):
        validator.validate(test_sql)

    iterations = 10000
    start = time.perf_counter()
    for _ in range(iterations):
        validator.validate(test_sql)
    elapsed = time.perf_counter() - start

    per_query_us = (elapsed / iterations) * 1_000_000
    print(f"\n   Validated {iterations:,} queries in {elapsed:.3f}s")
    print(f"   {per_query_us:.1f} us per query")


if __name__ == "__main__":
    demo_agent_queries()
    demo_dialects()
    demo_catalog()
    demo_benchmark()
