"""Tests for the assertion engine."""

import pytest

from grpcscript.assertions import (
    AssertionEngine,
    AssertionStatus,
    assert_contains,
    assert_equals,
    check,
)
from grpcscript.document import AssertionSpec

RESPONSE = '{"id": "123", "name": "Alice Smith", "count": 3, "tags": ["a", "b"]}'


@pytest.fixture
def engine():
    return AssertionEngine()


class TestOperators:

    def test_equals_pass(self, engine):
        result = engine.check(AssertionSpec("jsonpath", "$.id", "==", "123"), RESPONSE)
        assert result.passed
        assert result.message == 'PASS: jsonpath "$.id" == "123"'
        assert result.actual == "123"

    def test_equals_fail(self, engine):
        result = engine.check(AssertionSpec("jsonpath", "$.id", "==", "999"), RESPONSE)
        assert result.failed
        assert result.status == AssertionStatus.FAILED
        assert result.message == 'FAIL: jsonpath "$.id" == "999" (actual: "123")'

    def test_numbers_compare_as_text(self, engine):
        assert engine.equals(RESPONSE, "$.count", "3").passed
        assert not engine.equals(RESPONSE, "$.count", "3.0").passed

    def test_not_equals(self, engine):
        assert engine.not_equals(RESPONSE, "$.id", "0").passed
        assert not engine.not_equals(RESPONSE, "$.id", "123").passed

    def test_contains(self, engine):
        assert engine.contains(RESPONSE, "$.name", "Smith").passed
        assert not engine.contains(RESPONSE, "$.name", "Jones").passed

    def test_contains_on_array_uses_compact_json(self, engine):
        assert engine.contains(RESPONSE, "$.tags", '"a","b"').passed

    def test_empty_expected(self, engine):
        assert engine.contains(RESPONSE, "$.name", "").passed


class TestErrors:

    def test_unknown_operator(self, engine):
        result = engine.check(AssertionSpec("jsonpath", "$.id", ">=", "1"), RESPONSE)
        assert not result.passed
        assert result.status == AssertionStatus.ERROR
        assert result.message == "unknown operator '>='"

    def test_path_error(self, engine):
        result = engine.check(AssertionSpec("jsonpath", "$.missing", "==", "1"), RESPONSE)
        assert not result.passed
        assert result.status == AssertionStatus.ERROR
        assert result.message == "failed to evaluate jsonpath '$.missing': key 'missing' not found"

    def test_invalid_response_json(self, engine):
        result = engine.check(AssertionSpec("jsonpath", "$.id", "==", "1"), "not json")
        assert result.status == AssertionStatus.ERROR

    def test_unknown_kind_is_skipped_as_pass(self, engine):
        result = engine.check(AssertionSpec("xpath", "//id", "==", "1"), RESPONSE)
        assert result.passed
        assert result.message == "Warning: skipping unknown assertion type 'xpath'"


class TestHelpers:

    def test_check_all_keeps_order(self, engine):
        specs = [
            AssertionSpec("jsonpath", "$.id", "==", "123"),
            AssertionSpec("jsonpath", "$.id", "==", "0"),
        ]
        results = engine.check_all(specs, RESPONSE)
        assert [r.passed for r in results] == [True, False]

    def test_module_functions(self):
        assert check(AssertionSpec("jsonpath", "$.id", "==", "123"), RESPONSE).passed
        assert assert_equals(RESPONSE, "$.name", "Alice Smith").passed
        assert assert_contains(RESPONSE, "$.name", "Alice").passed

    def test_to_dict(self, engine):
        data = engine.equals(RESPONSE, "$.id", "123").to_dict()
        assert data["status"] == "passed"
        assert data["actual"] == "123"
        assert data["path"] == "$.id"
