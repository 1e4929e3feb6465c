"""
Restricted JSONPath evaluation over response JSON.

Supported syntax:
    - Optional root selector: `$.user.name` or `user.name`
    - Dot notation: `user.details.name`
    - Array indexing: `users[0].id`, `[1]`, `matrix[0][2]`

Wildcards, filters, slices and recursive descent are not supported.
"""

from __future__ import annotations

import json
import re
from typing import Any


class PathEvaluationError(ValueError):
    """A path could not be evaluated against a JSON document."""


class InvalidJSONError(PathEvaluationError):
    """The source text is not valid JSON."""


class UnclosedBracketError(PathEvaluationError):
    """An array index is missing its closing bracket."""


class InvalidIndexError(PathEvaluationError):
    """An array index is not an integer."""


class TypeMismatchError(PathEvaluationError):
    """The path expects an object or array but found another type."""


class IndexOutOfBoundsError(PathEvaluationError):
    """An array index is negative or past the end of the array."""


class KeyNotFoundError(PathEvaluationError):
    """An object does not contain the requested key."""


_INDEX = re.compile(r"[+-]?\d+")


def json_type_name(value: Any) -> str:
    """Name of a parsed JSON value's type, as used in error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def stringify(value: Any) -> str:
    """Render a JSON value the way captures and assertions compare it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _strip_root(path: str) -> str:
    if path.startswith("$."):
        return path[2:]
    if path.startswith("$"):
        return path[1:]
    return path


def _field(value: Any, key: str) -> Any:
    if not isinstance(value, dict):
        raise TypeMismatchError(
            f"expected object for key '{key}' but got {json_type_name(value)}"
        )
    if key not in value:
        raise KeyNotFoundError(f"key '{key}' not found")
    return value[key]


def _element(value: Any, index_text: str) -> Any:
    if not _INDEX.fullmatch(index_text):
        raise InvalidIndexError(f"invalid array index '{index_text}'")
    index = int(index_text)

    if not isinstance(value, list):
        raise TypeMismatchError(f"expected array but got {json_type_name(value)}")
    if index < 0 or index >= len(value):
        raise IndexOutOfBoundsError(f"array index out of bounds: {index}")
    return value[index]


def evaluate_path(data: Any, path: str) -> Any:
    """
    Follow `path` through a parsed JSON value and return what it reaches.

    Raises:
        PathEvaluationError: If the path is malformed or does not match the data
    """
    value = data
    path = _strip_root(path)

    while path:
        if path.startswith("["):
            end = path.find("]")
            if end == -1:
                raise UnclosedBracketError(f"unclosed array index in path: {path}")
            value = _element(value, path[1:end])
            path = path[end + 1:]
            if path.startswith("."):
                path = path[1:]
            continue

        segment, _, rest = path.partition(".")
        bracket = segment.find("[")
        if bracket != -1:
            # users[0].name -> key "users", then "[0].name"
            value = _field(value, segment[:bracket])
            path = segment[bracket:] + ("." + rest if rest else "")
            continue

        value = _field(value, segment)
        path = rest

    return value


def evaluate_jsonpath(json_text: str, path: str) -> str:
    """
    Evaluate `path` against a JSON document and return the stringified result.

    Example:
        >>> evaluate_jsonpath('{"user": {"name": "Alice"}}', "$.user.name")
        'Alice'

    Raises:
        PathEvaluationError: If the JSON is invalid or the path cannot be followed
    """
    try:
        data = json.loads(json_text)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidJSONError(f"invalid JSON response: {e}") from e

    return stringify(evaluate_path(data, path))
