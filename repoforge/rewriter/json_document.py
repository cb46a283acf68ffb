"""Reading and writing the JSON configuration documents."""

from __future__ import annotations

import json
from typing import Any

from .errors import RewriteError


def load_object(document: str, text: str) -> dict[str, Any]:
    """Parse *text* and require a JSON object at the top level."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RewriteError(document, f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise RewriteError(document, "top-level value must be an object")
    return data


def dump_object(data: dict[str, Any]) -> str:
    """Serialise like the template does: 2-space indent, trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
