"""Tests that run the JSON gatekeeper fixtures in tests/fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

import sqlgate

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_test_cases() -> list[tuple[str, str, dict[str, Any]]]:
    """Load every case, expanded once per dialect it lists."""
    cases: list[tuple[str, str, dict[str, Any]]] = []

    for file in sorted(FIXTURES_DIR.glob("*.json")):
        data = json.loads(file.read_text())
        fixture_name = data.get("name", file.stem)
        default_dialects = data.get("dialects", ["mysql", "postgres", "sqlite"])
        for test in data["tests"]:
            test_name = test.get("description", test["sql"][:50])
            for dialect in test.get("dialects", default_dialects):
                cases.append((f"{fixture_name}: {test_name} [{dialect}]", dialect, test))

    return cases


test_cases = load_test_cases()


@pytest.mark.skipif(len(test_cases) == 0, reason="No fixtures found")
@pytest.mark.parametrize("name,dialect,test_case", test_cases)
def test_fixture(name: str, dialect: str, test_case: dict[str, Any]) -> None:
    """Run one fixture case against one dialect."""
    sql = test_case["sql"]
    expected = test_case["expected"]

    if "stripped" in expected:
        assert sqlgate.strip(sql, dialect) == expected["stripped"]
        return

    result = sqlgate.validate(sql, dialect=dialect)

    assert result.is_safe == expected["isSafe"], (
        f"Expected is_safe={expected['isSafe']}, got {result.is_safe}. "
        f"Reason: {result.reason}"
    )

    if "reason" in expected:
        assert result.reason == expected["reason"]

    if "reasonContains" in expected and not expected["isSafe"]:
        assert expected["reasonContains"].lower() in (result.reason or "").lower(), (
            f"Expected reason to contain '{expected['reasonContains']}', "
            f"got '{result.reason}'"
        )

    if "ruleId" in expected:
        assert result.rule_id == expected["ruleId"]
