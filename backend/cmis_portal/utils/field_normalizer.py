"""
Field Normalizer

List-typed student fields (domains of interest, target industries, skills)
arrive and sit in storage in three encodings: native lists, JSON-encoded
strings and comma-separated strings. Everything that reads or writes them goes
through ``normalize_string_list`` so callers only ever see ``List[str]``.
"""
import json
from typing import Any, List


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def normalize_string_list(value: Any) -> List[str]:
    """
    Coerce a list-like value into a list of strings. Never raises.

    - list/tuple: returned as a list (order preserved, no dedup)
    - str: JSON list if it parses to one, otherwise comma-split with trimming
    - anything else (None, "", False, numbers, dicts): empty list
    """
    if isinstance(value, (list, tuple)):
        return [item if isinstance(item, str) else str(item) for item in value]

    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            parsed = json.loads(value)
        except (ValueError, TypeError):
            return _split_csv(value)
        if isinstance(parsed, list):
            return [item if isinstance(item, str) else str(item) for item in parsed]
        return _split_csv(value)

    return []


def normalize_agenda(value: Any) -> List[str]:
    """Event agenda: JSON list of lines, or newline-delimited text"""
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]

    if not isinstance(value, str) or not value.strip():
        return []

    try:
        parsed = json.loads(value)
    except (ValueError, TypeError):
        parsed = None

    if isinstance(parsed, list):
        return [str(item) for item in parsed]

    return [line.strip() for line in value.splitlines() if line.strip()]
