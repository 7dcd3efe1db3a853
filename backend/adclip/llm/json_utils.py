"""
Helpers for pulling JSON out of model responses.
"""

import json
import re
from typing import Any, Optional


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines:
            lines = lines[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()
    return cleaned


def extract_json(raw: Any) -> Optional[Any]:
    """Return parsed JSON from a dict/list response or from text that contains JSON."""
    if isinstance(raw, (dict, list)):
        return raw
    if raw is None:
        return None

    cleaned = strip_code_fences(str(raw))
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for pattern in (r"\{.*\}", r"\[.*\]"):
        match = re.search(pattern, cleaned, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(0))
            except json.JSONDecodeError:
                return None

    return None
