"""Variable substitution for {{name}} placeholders.

Example:
    >>> substitute("Bearer {{token}}", {"token": "abc123"})
    'Bearer abc123'
    >>> substitute("{{unknown}}", {"token": "abc123"})
    '{{unknown}}'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any


def placeholder(name: str) -> str:
    return "{{%s}}" % name


def substitute(text: str, variables: Mapping[str, Any] | None) -> str:
    """Replace every {{name}} whose name is in `variables` with its value.

    Placeholders for unknown names are left untouched. Substitution is a
    single pass over `text`, so inserted values are never expanded again.
    """
    if not variables:
        return text

    pattern = re.compile("|".join(re.escape(placeholder(n)) for n in variables))

    def replace(match: re.Match) -> str:
        return str(variables[match.group(0)[2:-2]])

    return pattern.sub(replace, text)
