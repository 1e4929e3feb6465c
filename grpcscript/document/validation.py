"""
Validation for .grpc request documents.

Parsing stops at the first malformed request. The validator parses every
request independently instead, so a single pass reports all problems.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import MissingFieldError, StructuralParseError
from .models import CallRecord
from .parser import DocumentParser


# ─────────────────────────────────────────────────────────────────────────────
# Validation Result Types
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ValidationError:
    """Represents a single validation error with context."""
    path: str  # e.g., "request 2" or "settings.log_level"
    message: str
    value: Any = None
    suggestion: str | None = None

    def __str__(self) -> str:
        parts = [f"❌ {self.path}: {self.message}"]
        if self.value is not None:
            parts.append(f"   Got: {repr(self.value)}")
        if self.suggestion:
            parts.append(f"   💡 {self.suggestion}")
        return "\n".join(parts)


@dataclass
class ValidationResult:
    """Result of validation."""
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(
        self,
        path: str,
        message: str,
        value: Any = None,
        suggestion: str | None = None
    ) -> None:
        self.errors.append(ValidationError(path, message, value, suggestion))

    def __str__(self) -> str:
        if self.is_valid:
            return "✅ Validation passed"
        lines = [f"Validation failed with {len(self.errors)} error(s):\n"]
        lines.extend(str(e) for e in self.errors)
        return "\n".join(lines)


# ─────────────────────────────────────────────────────────────────────────────
# Document Validator
# ─────────────────────────────────────────────────────────────────────────────

_SUGGESTIONS = {
    "address": "Add a 'GRPC http://host:port' line",
    "service": "Add 'Service: package.ServiceName'",
    "method": "Add 'Method: MethodName'",
}


class DocumentValidator:
    """Checks every request in a document and collects the errors."""

    def __init__(self, text: str):
        self.text = text
        self.result = ValidationResult()
        self.records: list[CallRecord] = []

    def validate(self) -> ValidationResult:
        for item in DocumentParser(self.text).parse_each():
            if isinstance(item, CallRecord):
                self.records.append(item)
            else:
                self._add_parse_error(item)
        return self.result

    def _add_parse_error(self, error: StructuralParseError) -> None:
        path = f"request {error.segment}" if error.segment is not None else "document"
        suggestion = None
        if isinstance(error, MissingFieldError):
            suggestion = _SUGGESTIONS.get(error.field)
        self.result.add_error(
            path,
            error.message,
            value=getattr(error, "value", None),
            suggestion=suggestion,
        )
