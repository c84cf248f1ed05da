"""Helpers for arguments that arrive as text from MCP clients."""

import json
from typing import Any


def decode_json_argument(value: Any) -> Any:
    """
    Decode a JSON-encoded argument.

    Non-string values are returned unchanged, as are strings that are not
    valid JSON, so plain text inputs pass through verbatim. Empty strings
    decode to None.
    """
    if not isinstance(value, str):
        return value
    if not value.strip():
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value
