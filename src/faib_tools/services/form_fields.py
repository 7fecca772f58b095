"""
Field lookup helpers for SheepCRM form responses.

Form response answers are keyed by long, generated field identifiers
(e.g. "renewal-2025.certificates-issued.bls+aed") whose exact spelling varies
between form revisions. These helpers find values by key suffix or by
case-insensitive substring, with ordered fallback chains.

Malformed values never raise: counts degrade to 0 and lists to [].
"""

import re
from collections.abc import Mapping
from typing import Any, Iterable, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def find_by_suffix(fields: Mapping[str, Any], suffix: str) -> Optional[Any]:
    """Return the value of the first key ending with ``suffix`` (case-sensitive)."""
    for key, value in fields.items():
        if key.endswith(suffix):
            return value
    return None


def find_by_partial(fields: Mapping[str, Any], partial: str) -> Optional[Any]:
    """Return the value of the first key containing ``partial`` (case-insensitive)."""
    needle = partial.lower()
    for key, value in fields.items():
        if needle in key.lower():
            return value
    return None


def find_first_partial(
    fields: Mapping[str, Any],
    partials: Iterable[str],
    default: Optional[Any] = None,
) -> Optional[Any]:
    """
    Try each partial key in priority order.

    Returns the first value that is not empty (None, "" and [] are skipped),
    otherwise ``default``.
    """
    for partial in partials:
        value = find_by_partial(fields, partial)
        if not _is_empty(value):
            return value
    return default


def parse_count(value: Any) -> int:
    """
    Parse a count from a string or number.

    Leading whitespace is ignored and trailing text after the digits is
    dropped ("12 certs" -> 12). Anything unparseable, and any negative
    result, becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        try:
            return max(0, int(value))
        except (OverflowError, ValueError):
            return 0
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    return max(0, int(match.group(1)))


def find_count_by_suffix(fields: Mapping[str, Any], suffix: str) -> int:
    """Find a certificate count by key suffix, 0 when absent or malformed."""
    return parse_count(find_by_suffix(fields, suffix))


def find_count(fields: Mapping[str, Any], suffixes: Iterable[str]) -> int:
    """Try each suffix in order; the first non-zero count wins."""
    for suffix in suffixes:
        count = find_count_by_suffix(fields, suffix)
        if count:
            return count
    return 0


def ensure_list(value: Any) -> list[str]:
    """
    Coerce a loosely-typed answer into a list of non-empty strings.

    None and "" give [], a plain string gives a one-item list, a
    comma-separated string is split and trimmed, and a list keeps its
    non-empty items.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                items.append(text)
        return items
    return []


def as_dict(value: Any) -> dict:
    """Return ``value`` if it is a dict, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False
