"""
Request Documents

This package parses .grpc request documents into typed call records.

Usage:
    from grpcscript.document import load_document, validate_document

    # Load from file (raises StructuralParseError on malformed requests)
    records = load_document("flows/users.grpc")

    # Or validate from string, collecting every error
    records, result = validate_document(text)
    if not result.is_valid:
        print(result)
"""

# Public API
from .loader import load_document, read_document, validate_document, validate_document_file
from .parser import DocumentParser, parse_assertion_line, parse_document, parse_duration

# Models
from .models import (
    DEFAULT_BODY,
    DEFAULT_PROTOCOL,
    DEFAULT_TIMEOUT,
    AssertionKind,
    AssertionSpec,
    AssertOp,
    CallRecord,
    ProtocolVariant,
)

# Errors
from .errors import (
    EmptyDocumentError,
    InvalidProtocolError,
    InvalidTimeoutError,
    MissingFieldError,
    StructuralParseError,
)

# Validation
from .validation import DocumentValidator, ValidationError, ValidationResult

__all__ = [
    # Loader functions
    "load_document",
    "read_document",
    "validate_document",
    "validate_document_file",
    # Parser
    "DocumentParser",
    "parse_document",
    "parse_assertion_line",
    "parse_duration",
    # Models
    "CallRecord",
    "AssertionSpec",
    "AssertionKind",
    "AssertOp",
    "ProtocolVariant",
    "DEFAULT_BODY",
    "DEFAULT_PROTOCOL",
    "DEFAULT_TIMEOUT",
    # Errors
    "StructuralParseError",
    "EmptyDocumentError",
    "MissingFieldError",
    "InvalidTimeoutError",
    "InvalidProtocolError",
    # Validation
    "DocumentValidator",
    "ValidationError",
    "ValidationResult",
]
