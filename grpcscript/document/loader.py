"""
Document loader for .grpc request files.

This module provides the public API for loading and validating
request documents from disk or strings.
"""

from __future__ import annotations

from pathlib import Path

from .models import CallRecord
from .parser import parse_document
from .validation import DocumentValidator, ValidationResult


def read_document(path: str | Path) -> str:
    """
    Read a request document from disk.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    return Path(path).read_text(encoding="utf-8")


def load_document(path: str | Path) -> list[CallRecord]:
    """
    Load and parse all requests in a .grpc file.

    Raises:
        FileNotFoundError: If the file does not exist
        StructuralParseError: If the document is empty or a request is malformed

    Example:
        records = load_document("flows/user.grpc")
        for record in records:
            print(record.title, record.operation)
    """
    return parse_document(read_document(path))


def validate_document(text: str) -> tuple[list[CallRecord] | None, ValidationResult]:
    """
    Validate a document given as a string.

    Every request is checked independently, so all errors are reported.

    Returns:
        Tuple of (records or None, ValidationResult)
        If validation fails, records will be None.
    """
    validator = DocumentValidator(text)
    result = validator.validate()
    if not result.is_valid:
        return None, result
    return validator.records, result


def validate_document_file(path: str | Path) -> tuple[list[CallRecord] | None, ValidationResult]:
    """Validate a .grpc file on disk."""
    path = Path(path)

    if not path.exists():
        result = ValidationResult()
        result.add_error(
            str(path),
            "File not found",
            suggestion="Check the file path is correct"
        )
        return None, result

    try:
        text = read_document(path)
    except UnicodeDecodeError as e:
        result = ValidationResult()
        result.add_error(str(path), f"File is not valid UTF-8: {e}")
        return None, result

    return validate_document(text)
