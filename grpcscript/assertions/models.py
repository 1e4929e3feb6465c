"""
Assertion result models.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class AssertionStatus(str, Enum):
    """Outcome of a single assertion."""
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"  # path could not be evaluated or operator unknown


@dataclass
class AssertionResult:
    """
    Result of evaluating one [Asserts] line.

    Attributes:
        status: Whether the assertion passed, failed, or could not be evaluated
        message: Line shown to the user, e.g. 'PASS: jsonpath "$.id" == "123"'
        path: The path that was evaluated
        expected: The expected literal as written
        actual: The stringified value found, when the path resolved

    Only PASSED counts as passing; ERROR stops a run just like FAILED.
    """
    status: AssertionStatus
    message: str
    path: str | None = None
    expected: str | None = None
    actual: str | None = None

    @property
    def passed(self) -> bool:
        return self.status == AssertionStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status == AssertionStatus.FAILED

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def passed_result(cls, message: str, **details: str | None) -> AssertionResult:
        return cls(AssertionStatus.PASSED, message, **details)

    @classmethod
    def failed_result(cls, message: str, **details: str | None) -> AssertionResult:
        return cls(AssertionStatus.FAILED, message, **details)

    @classmethod
    def error_result(cls, message: str, **details: str | None) -> AssertionResult:
        return cls(AssertionStatus.ERROR, message, **details)
