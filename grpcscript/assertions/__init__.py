"""
Assertion Engine for Response Validation

This package provides the restricted JSONPath evaluator and the
assertion engine used by [Captures] and [Asserts] sections.

Supported assertions:
    - ==: the value at a path equals a literal
    - !=: the value at a path differs from a literal
    - contains: the value at a path contains a literal substring

Usage:
    from grpcscript.assertions import AssertionEngine, evaluate_jsonpath

    response = '{"users": [{"name": "Alice"}, {"name": "Bob"}]}'

    evaluate_jsonpath(response, "users[1].name")  # "Bob"

    engine = AssertionEngine()
    result = engine.equals(response, "$.users[0].name", "Alice")
    print(result)  # PASS: jsonpath "$.users[0].name" == "Alice"
"""

# Models
from .models import AssertionResult, AssertionStatus

# Path evaluation
from .jsonpath import (
    IndexOutOfBoundsError,
    InvalidIndexError,
    InvalidJSONError,
    KeyNotFoundError,
    PathEvaluationError,
    TypeMismatchError,
    UnclosedBracketError,
    evaluate_jsonpath,
    evaluate_path,
    stringify,
)

# Engine
from .engine import (
    AssertionEngine,
    # Convenience functions
    check,
    assert_equals,
    assert_contains,
)

__all__ = [
    # Models
    "AssertionResult",
    "AssertionStatus",
    # Path evaluation
    "evaluate_jsonpath",
    "evaluate_path",
    "stringify",
    "PathEvaluationError",
    "InvalidJSONError",
    "UnclosedBracketError",
    "InvalidIndexError",
    "TypeMismatchError",
    "IndexOutOfBoundsError",
    "KeyNotFoundError",
    # Engine
    "AssertionEngine",
    # Convenience functions
    "check",
    "assert_equals",
    "assert_contains",
]
