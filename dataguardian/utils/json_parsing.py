"""JSON parsing helpers for LLM response text."""

from __future__ import annotations

import json
import re
from typing import Any


def load_json_from_text(text: str | None) -> Any:
    """Strip LLM markdown fences and parse JSON.

    Handles ``````json ... `````` wrappers that models
    sometimes emit even when structured output is
    requested.

    Args:
        text: Raw LLM response text, possibly
            wrapped in code fences.

    Returns:
        Parsed JSON value, or ``None`` on failure.
    """
    content = (text or "").strip()
    if content.startswith("```"):
        content = re.sub(r"^```[a-zA-Z]*\n?", "", content)
        content = re.sub(r"```\s*$", "", content).strip()
    try:
        return json.loads(content)
    except (json.JSONDecodeError, ValueError):
        return None


def _balanced_block_end(text: str, start: int) -> int | None:
    """Return the index of the ``}`` closing the ``{`` at *start*.

    Braces inside JSON string literals are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def extract_json_object(text: str | None) -> dict[str, Any] | None:
    """Parse the first balanced ``{...}`` object embedded in *text*.

    Models often wrap the requested JSON in prose ("Here is the
    analysis: {...} Let me know ...").  The text is first tried as
    a whole (fences stripped); otherwise each ``{`` is tried as the
    start of a balanced block until one parses as an object.

    Returns:
        The parsed object, or ``None`` when no block parses.
    """
    whole = load_json_from_text(text)
    if isinstance(whole, dict):
        return whole

    content = text or ""
    start = content.find("{")
    while start != -1:
        end = _balanced_block_end(content, start)
        if end is not None:
            try:
                parsed = json.loads(content[start : end + 1])
            except (json.JSONDecodeError, ValueError):
                parsed = None
            if isinstance(parsed, dict):
                return parsed
        start = content.find("{", start + 1)
    return None
