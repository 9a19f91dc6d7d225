"""
JSON extraction from generation output.

Generated text may wrap the payload in prose or a fenced code block. The
scanner walks the text for the first balanced ``{...}`` span that decodes to a
JSON object, tracking string literals so braces inside strings are ignored.
"""

import json
from typing import Any, Dict, Optional, Tuple


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index just past the brace that closes ``text[start]``, or None."""
    depth = 0
    in_string = False
    escape_next = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escape_next:
                escape_next = False
            elif char == '\\':
                escape_next = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def find_json_object(text: str) -> Optional[Tuple[int, int]]:
    """
    Locate the first top-level JSON object in ``text``.

    Returns:
        ``(start, end)`` slice bounds, or None when no object decodes
    """
    if not text:
        return None

    position = text.find('{')
    while position != -1:
        end = _balanced_end(text, position)
        if end is not None:
            try:
                decoded = json.loads(text[position:end])
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, dict):
                return position, end
        # a balanced span that fails to decode is skipped whole
        position = text.find('{', position + 1 if end is None else end)
    return None


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Decode the first top-level JSON object in ``text``, or None."""
    bounds = find_json_object(text)
    if bounds is None:
        return None
    start, end = bounds
    return json.loads(text[start:end])
