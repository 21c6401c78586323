# utils/json_extract.py
import json
from typing import Any, Dict, Optional


def find_json_object(text: str) -> Optional[str]:
    """Return the first balanced top-level {...} block in text, or None.

    Single pass: open braces are kept on a stack, and the earliest-starting
    block that closes wins. Braces inside JSON string literals are ignored, so
    prose around the object and braces quoted in values do not confuse the
    match. An unmatched "{" before the object is skipped.
    """
    if not isinstance(text, str):
        return None
    starts = []
    best = None
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"' and starts:
            in_string = True
        elif ch == "{":
            starts.append(i)
        elif ch == "}" and starts:
            start = starts.pop()
            if best is None or start < best[0]:
                best = (start, i)
            if not starts:
                return text[best[0]:best[1] + 1]
    if best is None:
        return None
    return text[best[0]:best[1] + 1]


def try_parse_llm_json(text: str) -> Optional[Dict[str, Any]]:
    """Find first JSON object in text and parse it; returns dict or None."""
    block = find_json_object(text)
    if block is None:
        return None
    try:
        obj = json.loads(block)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None
