"""
Report data models for document runs.

A RunReport holds one StepRecord per call in the document, in document
order, plus run metadata and the final variable values.
"""

from __future__ import annotations

import hashlib
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..assertions.models import AssertionResult

RULE_HEAVY = "═" * 59
RULE_LIGHT = "─" * 59


class StepStatus(str, Enum):
    """Status of an individual call."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"

    @property
    def icon(self) -> str:
        return _ICONS[self.value]


class RunStatus(str, Enum):
    """Overall status of a run."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"

    @property
    def icon(self) -> str:
        return _ICONS[self.value]


_ICONS = {
    "pending": "⏳",
    "running": "🔄",
    "passed": "✅",
    "failed": "❌",
    "error": "⚠️",
    "skipped": "⏭️",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _elapsed_ms(start: datetime | None, end: datetime | None) -> float | None:
    if start is None or end is None:
        return None
    return (end - start).total_seconds() * 1000


@dataclass
class StepRecord:
    """
    Record of a single call.

    Request fields hold the values actually sent, after variable
    substitution. `response_json` is the decoded response as printed.
    """
    index: int
    name: str
    service: str
    method: str
    protocol: str
    status: StepStatus = StepStatus.PENDING

    started_at: datetime | None = None
    ended_at: datetime | None = None

    address: str | None = None
    headers: dict[str, str] | None = None
    body: str | None = None
    response_json: str | None = None

    captures: dict[str, str] = field(default_factory=dict)
    capture_warnings: list[str] = field(default_factory=list)
    assertions: list[AssertionResult] = field(default_factory=list)

    error_message: str | None = None
    error_details: dict[str, Any] | None = None
    failure_message: str | None = None

    @property
    def title(self) -> str:
        return self.name or f"Request {self.index}"

    @property
    def operation(self) -> str:
        return f"{self.service}/{self.method}"

    @property
    def duration_ms(self) -> float | None:
        return _elapsed_ms(self.started_at, self.ended_at)

    def start(self) -> None:
        self.status = StepStatus.RUNNING
        self.started_at = _now()

    def complete(self, status: StepStatus) -> None:
        self.status = status
        self.ended_at = _now()

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "index": self.index,
            "name": self.name,
            "operation": self.operation,
            "protocol": self.protocol,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "duration_ms": self.duration_ms,
            "request": {
                "address": self.address,
                "headers": self.headers,
                "body": self.body,
            },
            "response": _parse_json(self.response_json),
            "captures": self.captures,
            "capture_warnings": self.capture_warnings,
            "assertions": [a.to_dict() for a in self.assertions],
            "error": {
                "message": self.error_message,
                "details": self.error_details,
            } if self.error_message else None,
            "failure_message": self.failure_message,
        }


@dataclass
class StepCounts:
    """Number of calls per final status."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    skipped: int = 0

    @classmethod
    def from_steps(cls, steps: list[StepRecord]) -> StepCounts:
        statuses = [s.status for s in steps]
        return cls(
            total=len(statuses),
            passed=statuses.count(StepStatus.PASSED),
            failed=statuses.count(StepStatus.FAILED),
            errors=statuses.count(StepStatus.ERROR),
            skipped=statuses.count(StepStatus.SKIPPED),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "errors": self.errors,
            "skipped": self.skipped,
        }


@dataclass
class RunReport:
    """Complete record of a document run."""
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    started_at: datetime = field(default_factory=_now)
    ended_at: datetime | None = None

    document_name: str = ""
    document_hash: str = ""

    status: RunStatus = RunStatus.PENDING
    steps: list[StepRecord] = field(default_factory=list)
    variables: dict[str, str] = field(default_factory=dict)
    counts: StepCounts = field(default_factory=StepCounts)

    @property
    def passed(self) -> bool:
        return self.status == RunStatus.PASSED

    @property
    def duration_ms(self) -> float | None:
        return _elapsed_ms(self.started_at, self.ended_at)

    def start(self) -> None:
        self.status = RunStatus.RUNNING
        self.started_at = _now()

    def complete(self) -> None:
        """Freeze timing and derive counts and the overall status."""
        self.ended_at = _now()
        self.counts = StepCounts.from_steps(self.steps)

        if self.counts.errors:
            self.status = RunStatus.ERROR
        elif self.counts.failed:
            self.status = RunStatus.FAILED
        else:
            self.status = RunStatus.PASSED

    def add_step(self, step: StepRecord) -> None:
        self.steps.append(step)

    def get_step(self, index: int) -> StepRecord | None:
        """Get a call record by its 1-based index."""
        return next((s for s in self.steps if s.index == index), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_ms": self.duration_ms,
            "document": {
                "name": self.document_name,
                "hash": self.document_hash,
            },
            "status": self.status.value,
            "counts": self.counts.to_dict(),
            "variables": self.variables,
            "steps": [step.to_dict() for step in self.steps],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def summary(self) -> str:
        """Render a plain-text summary of the run."""
        duration = f"{self.duration_ms:.0f}ms" if self.duration_ms is not None else "N/A"
        c = self.counts
        lines = [
            RULE_HEAVY,
            f"  Run Report: {self.document_name or '<document>'}",
            RULE_HEAVY,
            f"  Run ID:     {self.run_id}",
            f"  Status:     {self.status.icon} {self.status.value.upper()}",
            f"  Duration:   {duration}",
            RULE_LIGHT,
            f"  Calls: {c.passed} passed, {c.failed} failed, {c.errors} errors, {c.skipped} skipped",
            RULE_LIGHT,
        ]

        for step in self.steps:
            step_duration = f"{step.duration_ms:.0f}ms" if step.duration_ms is not None else "N/A"
            lines.append(
                f"  {step.status.icon} [{step.index}] {step.title} ({step.operation}) - {step_duration}"
            )
            if step.failure_message:
                lines.append(f"      └─ {step.failure_message}")
            elif step.error_message:
                lines.append(f"      └─ Error: {step.error_message}")
            for warning in step.capture_warnings:
                lines.append(f"      └─ Warning: {warning}")

        lines.append(RULE_HEAVY)
        return "\n".join(lines)


def compute_document_hash(text: str) -> str:
    """First 12 hex chars of the SHA-256 of the document text."""
    return hashlib.sha256(text.encode()).hexdigest()[:12]


def _parse_json(text: str | None) -> Any:
    """Embed response JSON as structured data when it parses."""
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
