"""
Extraction of JSON structures from noisy model output.

Models asked for "ONLY valid JSON" still wrap it in code fences or prose.
These helpers recover the payload without ever raising.
"""

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def find_balanced_array(text: str) -> Optional[str]:
    """
    Return the substring from the first '[' to its matching ']'.

    Brackets inside JSON string literals are ignored. Returns None when there
    is no '[' or the array is never closed.
    """
    start = text.find("[")
    if start == -1:
        return None

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
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_array(raw_text: Any) -> list[dict]:
    """
    Extract a list of JSON objects from model output.

    Tries a direct parse first, then the first balanced [...] span. A direct
    parse that yields anything other than a list falls through to the scan,
    so an array wrapped in an object is still recovered. Any failure yields
    []. Elements that are not objects are dropped.
    """
    if not isinstance(raw_text, str):
        return []

    text = raw_text.strip()
    if not text:
        return []

    parsed: Any = None
    try:
        parsed = json.loads(text)
    except ValueError:
        pass

    if not isinstance(parsed, list):
        candidate = find_balanced_array(text)
        if candidate is None:
            logger.warning("No complete JSON array found in model output")
            return []
        try:
            parsed = json.loads(candidate)
        except ValueError as e:
            logger.warning(f"Bracketed candidate is not valid JSON: {e}")
            return []

    return [item for item in parsed if isinstance(item, dict)]


def parse_json_object(raw_text: Any) -> Optional[dict]:
    """
    Parse a JSON object, tolerating a surrounding code fence or prose.

    Returns None when no object can be recovered.
    """
    if not isinstance(raw_text, str):
        return None

    text = _CODE_FENCE.sub("", raw_text.strip())
    try:
        parsed = json.loads(text)
    except ValueError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            parsed = json.loads(text[start:end + 1])
        except ValueError:
            return None
    return parsed if isinstance(parsed, dict) else None
