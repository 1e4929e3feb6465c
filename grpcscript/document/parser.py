"""
Parser for .grpc request documents.

A document holds one or more requests separated by `---` lines. Each
request is a block of header lines, an optional JSON body, and optional
[Captures] and [Asserts] sections:

    # Get a user
    GRPC http://localhost:8080/api/grpc
    Service: example.UserService
    Method: GetUser
    Authorization: Bearer {{token}}

    {
      "user_id": "123"
    }

    [Captures]
    user_name: $.name

    [Asserts]
    jsonpath "$.status" == "active"

The body must come before the [Captures] and [Asserts] sections: the
section markers end the body, and once a section has started, lines
beginning with `{` are section lines rather than body.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from .errors import (
    EmptyDocumentError,
    InvalidProtocolError,
    InvalidTimeoutError,
    MissingFieldError,
    StructuralParseError,
)
from .models import (
    ADDRESS_KEYWORD,
    ASSERTS_MARKER,
    CAPTURES_MARKER,
    DEFAULT_BODY,
    SEPARATOR,
    AssertionSpec,
    CallRecord,
    ProtocolVariant,
)

logger = logging.getLogger(__name__)


class _Mode(str, Enum):
    HEADER = "header"
    BODY = "body"
    CAPTURES = "captures"
    ASSERTS = "asserts"


# ─────────────────────────────────────────────────────────────────────────────
# Durations
# ─────────────────────────────────────────────────────────────────────────────

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """
    Parse a duration such as "500ms", "5s", "1m30s" or "1.5h" into seconds.

    Raises:
        ValueError: If the text is not a valid duration
    """
    text = value.strip()
    sign = 1.0
    if text[:1] in ("+", "-"):
        if text[0] == "-":
            sign = -1.0
        text = text[1:]

    if text == "0":
        return 0.0
    if not text:
        raise ValueError("empty duration")

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos != len(text):
        if pos == 0 and re.fullmatch(r"[\d.]+", text):
            raise ValueError("missing unit in duration")
        raise ValueError("unrecognized duration format")

    return sign * total


# ─────────────────────────────────────────────────────────────────────────────
# Assertion lines
# ─────────────────────────────────────────────────────────────────────────────

def parse_assertion_line(line: str) -> AssertionSpec | None:
    """
    Parse `<kind> "<path>" <operator> <value>` into an AssertionSpec.

    Quoted parts end at the next double quote, so a quote inside a path or
    value ends it early. Returns None for lines that don't fit the shape.
    """
    trimmed = line.strip()
    if len(trimmed.split()) < 4:
        return None

    kind, sep, rest = trimmed.partition(" ")
    if not sep:
        return None

    rest = rest.strip()
    if not rest.startswith('"'):
        return None
    rest = rest[1:]
    end = rest.find('"')
    if end == -1:
        return None
    path = rest[:end]

    rest = rest[end + 1:].strip()
    operator, sep, rest = rest.partition(" ")
    if not sep:
        return None

    rest = rest.strip()
    if rest.startswith('"'):
        rest = rest[1:]
        end = rest.find('"')
        expected = rest[:end] if end != -1 else ""
    else:
        expected = rest

    return AssertionSpec(kind=kind, path=path, operator=operator, expected=expected)


# ─────────────────────────────────────────────────────────────────────────────
# Segments
# ─────────────────────────────────────────────────────────────────────────────

def split_segments(text: str) -> list[list[str]]:
    """Split document text into per-request line lists on `---` lines."""
    segments: list[list[str]] = []
    current: list[str] = []

    for line in text.splitlines():
        if line.strip() == SEPARATOR:
            if any(l.strip() for l in current):
                segments.append(current)
            current = []
            continue
        current.append(line)

    if any(l.strip() for l in current):
        segments.append(current)

    return segments


class SegmentParser:
    """Parses the lines of one segment into a CallRecord."""

    def __init__(self, lines: list[str], index: int = 1):
        self.lines = lines
        self.index = index
        self.mode = _Mode.HEADER
        self.record = CallRecord(address="", service="", method="", index=index)
        self.body_lines: list[str] = []

    def parse(self) -> CallRecord:
        for line in self.lines:
            self._feed(line)

        record = self.record
        record.body = "\n".join(self.body_lines) if self.body_lines else DEFAULT_BODY

        if not record.address:
            raise MissingFieldError("address", self.index)
        if not record.service:
            raise MissingFieldError("service", self.index)
        if not record.method:
            raise MissingFieldError("method", self.index)

        return record

    def _feed(self, line: str) -> None:
        trimmed = line.strip()

        if self.mode == _Mode.HEADER and not trimmed:
            return

        if trimmed.startswith("#"):
            if not self.record.name:
                self.record.name = trimmed[1:].strip()
            return

        if trimmed == CAPTURES_MARKER:
            self.mode = _Mode.CAPTURES
            return
        if trimmed == ASSERTS_MARKER:
            self.mode = _Mode.ASSERTS
            return

        if self.mode == _Mode.CAPTURES:
            self._parse_capture_line(line)
            return
        if self.mode == _Mode.ASSERTS:
            self._parse_assert_line(line)
            return

        if self.mode == _Mode.HEADER and trimmed.startswith("{"):
            self.mode = _Mode.BODY

        if self.mode == _Mode.BODY:
            self.body_lines.append(line)
            return

        self._parse_header_line(line)

    def _parse_header_line(self, line: str) -> None:
        if line.startswith(f"{ADDRESS_KEYWORD} "):
            self.record.address = line[len(ADDRESS_KEYWORD):].strip()
            return

        key, sep, value = line.partition(":")
        if not sep:
            logger.debug(f"request {self.index}: ignoring header line {line!r}")
            return
        key = key.strip()
        value = value.strip()

        if key == "Service":
            self.record.service = value
        elif key == "Method":
            self.record.method = value
        elif key == "Protocol":
            try:
                self.record.protocol = ProtocolVariant.parse(value)
            except ValueError:
                raise InvalidProtocolError(
                    value, [p.value for p in ProtocolVariant], self.index
                ) from None
        elif key == "Timeout":
            try:
                self.record.timeout = parse_duration(value)
            except ValueError as e:
                raise InvalidTimeoutError(value, str(e), self.index) from None
        else:
            self.record.headers[key] = value

    def _parse_capture_line(self, line: str) -> None:
        if not line.strip():
            return
        name, sep, path = line.partition(":")
        if not sep:
            logger.debug(f"request {self.index}: dropping capture line {line!r}")
            return
        self.record.captures[name.strip()] = path.strip()

    def _parse_assert_line(self, line: str) -> None:
        if not line.strip():
            return
        spec = parse_assertion_line(line)
        if spec is None:
            logger.debug(f"request {self.index}: dropping assertion line {line!r}")
            return
        self.record.assertions.append(spec)


class DocumentParser:
    """Parses a whole document into an ordered list of CallRecords."""

    def __init__(self, text: str):
        self.text = text

    def parse(self) -> list[CallRecord]:
        """
        Parse every segment, stopping at the first malformed one.

        Raises:
            StructuralParseError: If the document is empty or a segment is invalid
        """
        segments = split_segments(self.text)
        if not segments:
            raise EmptyDocumentError()
        return [
            SegmentParser(lines, index).parse()
            for index, lines in enumerate(segments, start=1)
        ]

    def parse_each(self) -> list[CallRecord | StructuralParseError]:
        """Parse every segment independently, returning records or errors in order."""
        segments = split_segments(self.text)
        if not segments:
            return [EmptyDocumentError()]

        results: list[CallRecord | StructuralParseError] = []
        for index, lines in enumerate(segments, start=1):
            try:
                results.append(SegmentParser(lines, index).parse())
            except StructuralParseError as e:
                results.append(e)
        return results


def parse_document(text: str) -> list[CallRecord]:
    """Parse document text into call records."""
    return DocumentParser(text).parse()
