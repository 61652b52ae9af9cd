"""Helpers for structured (JSON) model output."""

from __future__ import annotations

import re

_FENCE_RE = re.compile(r"```(?:json)?\s*(.+?)```", re.DOTALL)


def extract_json_object(content: str) -> str:
    """Strip markdown fences and surrounding chatter, keeping the outermost ``{...}`` block."""

    match = _FENCE_RE.search(content)
    if match:
        content = match.group(1).strip()

    start = content.find("{")
    if start < 0:
        return content

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(content)):
        char = content[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return content[start : index + 1]
    return content[start:]
