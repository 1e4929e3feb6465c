"""
Typed data structures for .grpc request documents.

This module contains the enums and dataclasses that represent
a parsed request document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ─────────────────────────────────────────────────────────────────────────────
# Document tokens and defaults
# ─────────────────────────────────────────────────────────────────────────────

SEPARATOR = "---"
ADDRESS_KEYWORD = "GRPC"
CAPTURES_MARKER = "[Captures]"
ASSERTS_MARKER = "[Asserts]"

DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_BODY = "{}"


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────

class ProtocolVariant(str, Enum):
    """Wire protocol used to reach a service."""
    GRPC = "grpc"
    GRPC_WEB = "grpc-web"
    CONNECT = "connect"

    @classmethod
    def parse(cls, value: str) -> ProtocolVariant:
        """Case-insensitive lookup, raising ValueError for unknown names."""
        return cls(value.strip().lower())


DEFAULT_PROTOCOL = ProtocolVariant.GRPC_WEB


class AssertionKind(str, Enum):
    """Assertion kinds the evaluator knows how to execute."""
    JSONPATH = "jsonpath"


class AssertOp(str, Enum):
    """Supported assertion operators."""
    EQ = "=="
    NE = "!="
    CONTAINS = "contains"


# ─────────────────────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class AssertionSpec:
    """
    A single check performed against a response.

    `kind` and `operator` are kept as written so that unknown kinds and
    operators survive parsing and are reported at evaluation time.
    """
    kind: str
    path: str
    operator: str
    expected: str = ""

    @property
    def is_jsonpath(self) -> bool:
        return self.kind == AssertionKind.JSONPATH.value

    def __str__(self) -> str:
        return f'{self.kind} "{self.path}" {self.operator} "{self.expected}"'


@dataclass
class CallRecord:
    """One request parsed from a document segment."""
    address: str
    service: str
    method: str
    name: str = ""
    protocol: ProtocolVariant = DEFAULT_PROTOCOL
    timeout: float = DEFAULT_TIMEOUT
    headers: dict[str, str] = field(default_factory=dict)
    body: str = DEFAULT_BODY
    captures: dict[str, str] = field(default_factory=dict)  # variable -> path
    assertions: list[AssertionSpec] = field(default_factory=list)
    index: int = 1  # 1-based position in the document

    @property
    def title(self) -> str:
        """Display name: the comment name, or 'Request N'."""
        return self.name or f"Request {self.index}"

    @property
    def operation(self) -> str:
        return f"{self.service}/{self.method}"
