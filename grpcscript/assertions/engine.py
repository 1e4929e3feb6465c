"""
Assertion engine for evaluating checks on response JSON.

This module provides the assertion logic for verifying RPC
responses against the [Asserts] section of a request.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..document.models import AssertionSpec, AssertOp
from .jsonpath import PathEvaluationError, evaluate_jsonpath
from .models import AssertionResult

logger = logging.getLogger(__name__)


class AssertionEngine:
    """
    Engine for running assertions on response JSON.

    Every comparison works on the stringified value at the path:
    - ==: the value equals the expected text
    - !=: the value differs from the expected text
    - contains: the expected text is a substring of the value

    Example:
        engine = AssertionEngine()
        response = '{"id": "123", "status": "active"}'

        result = engine.equals(response, "$.status", "active")
        result = engine.check(AssertionSpec("jsonpath", "$.id", "!=", "0"), response)
    """

    def __init__(self):
        self._operators: dict[str, Callable[[str, str], bool]] = {
            AssertOp.EQ.value: lambda actual, expected: actual == expected,
            AssertOp.NE.value: lambda actual, expected: actual != expected,
            AssertOp.CONTAINS.value: lambda actual, expected: expected in actual,
        }

    @property
    def operators(self) -> list[str]:
        return list(self._operators)

    def check(self, spec: AssertionSpec, response_json: str) -> AssertionResult:
        """
        Evaluate one assertion against a response.

        Never raises: evaluation problems are reported in the result.

        Args:
            spec: The parsed assertion
            response_json: The response rendered as JSON text

        Returns:
            AssertionResult indicating pass/fail/error
        """
        if not spec.is_jsonpath:
            logger.warning(f"Skipping unknown assertion type {spec.kind!r}")
            return AssertionResult.passed_result(
                message=f"Warning: skipping unknown assertion type '{spec.kind}'",
                path=spec.path,
                expected=spec.expected,
            )

        try:
            actual = evaluate_jsonpath(response_json, spec.path)
        except PathEvaluationError as e:
            return AssertionResult.error_result(
                message=f"failed to evaluate jsonpath '{spec.path}': {e}",
                path=spec.path,
                expected=spec.expected,
            )

        compare = self._operators.get(spec.operator)
        if compare is None:
            return AssertionResult.error_result(
                message=f"unknown operator '{spec.operator}'",
                path=spec.path,
                expected=spec.expected,
            )

        rendered = f'jsonpath "{spec.path}" {spec.operator} "{spec.expected}"'
        if compare(actual, spec.expected):
            return AssertionResult.passed_result(
                message=f"PASS: {rendered}",
                path=spec.path,
                expected=spec.expected,
                actual=actual,
            )
        return AssertionResult.failed_result(
            message=f'FAIL: {rendered} (actual: "{actual}")',
            path=spec.path,
            expected=spec.expected,
            actual=actual,
        )

    def check_all(self, specs: list[AssertionSpec], response_json: str) -> list[AssertionResult]:
        """Evaluate every assertion in order."""
        return [self.check(spec, response_json) for spec in specs]

    def equals(self, response_json: str, path: str, expected: str) -> AssertionResult:
        """Assert that the value at a path equals `expected`."""
        return self.check(AssertionSpec("jsonpath", path, AssertOp.EQ.value, expected), response_json)

    def not_equals(self, response_json: str, path: str, expected: str) -> AssertionResult:
        """Assert that the value at a path differs from `expected`."""
        return self.check(AssertionSpec("jsonpath", path, AssertOp.NE.value, expected), response_json)

    def contains(self, response_json: str, path: str, expected: str) -> AssertionResult:
        """Assert that the value at a path contains `expected` as a substring."""
        return self.check(
            AssertionSpec("jsonpath", path, AssertOp.CONTAINS.value, expected), response_json
        )


# Convenience functions for quick assertions
def check(spec: AssertionSpec, response_json: str) -> AssertionResult:
    """Evaluate a single assertion."""
    return AssertionEngine().check(spec, response_json)


def assert_equals(response_json: str, path: str, expected: str) -> AssertionResult:
    """Check if the value at a path equals expected."""
    return AssertionEngine().equals(response_json, path, expected)


def assert_contains(response_json: str, path: str, expected: str) -> AssertionResult:
    """Check if the value at a path contains expected."""
    return AssertionEngine().contains(response_json, path, expected)
