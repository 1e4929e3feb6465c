"""
Errors raised while parsing request documents.
"""

from __future__ import annotations


class StructuralParseError(ValueError):
    """A document segment is malformed and cannot become a call record."""

    def __init__(self, message: str, segment: int | None = None):
        self.message = message
        self.segment = segment
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.segment is None:
            return self.message
        return f"request {self.segment}: {self.message}"


class EmptyDocumentError(StructuralParseError):
    """The document contains no request segments."""

    def __init__(self):
        super().__init__("no requests found in file")


class MissingFieldError(StructuralParseError):
    """A required field (address, service or method) was not provided."""

    MESSAGES = {
        "address": "missing required 'GRPC <address>' line",
        "service": "missing required 'Service:' field",
        "method": "missing required 'Method:' field",
    }

    def __init__(self, field: str, segment: int | None = None):
        self.field = field
        super().__init__(self.MESSAGES[field], segment)


class InvalidTimeoutError(StructuralParseError):
    """The Timeout value is not a valid duration."""

    def __init__(self, value: str, reason: str, segment: int | None = None):
        self.value = value
        super().__init__(f"invalid timeout duration {value!r}: {reason}", segment)


class InvalidProtocolError(StructuralParseError):
    """The Protocol value is not a known protocol variant."""

    def __init__(self, value: str, choices: list[str], segment: int | None = None):
        self.value = value
        super().__init__(
            f"invalid protocol {value!r}, must be one of: {', '.join(choices)}",
            segment,
        )
