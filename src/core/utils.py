"""
Core Utility Functions.

Small helpers shared by the catalog, order and admin layers.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Set


_SLUG_INVALID = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACES = re.compile(r"\s+")
_SLUG_DASHES = re.compile(r"-+")


def coerce_number(value: Any, default: float = 0.0) -> float:
    """
    Convert a possibly-missing or string numeric field to float.

    Supabase returns numeric columns as strings or numbers depending on
    the column type; spreadsheet cells arrive as floats, strings or NaN.

    Examples:
        >>> coerce_number("12.50")
        12.5
        >>> coerce_number(None, default=4)
        4.0
    """
    if value is None or value == "":
        return float(default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return float(default)
    # NaN from pandas
    if number != number:
        return float(default)
    return number


def generate_slug(name: str) -> str:
    """
    Build a URL slug from a display name.

    Example:
        >>> generate_slug("  Pajama Sets & More ")
        'pajama-sets-more'
    """
    slug = _SLUG_INVALID.sub("", (name or "").lower().strip())
    slug = _SLUG_SPACES.sub("-", slug)
    return _SLUG_DASHES.sub("-", slug).strip("-")


def normalize_string_set(items: Optional[Iterable[str]]) -> Set[str]:
    """
    Normalize strings to a set of lowercase, stripped values.

    Args:
        items: Strings (may contain None, empty strings)
    """
    return {s.lower().strip() for s in (items or []) if s and s.strip()}


def split_csv(value: Any) -> List[str]:
    """
    Split a comma-separated cell into trimmed, non-empty parts.

    Lists pass through (trimmed); None and NaN give an empty list.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, float) and value != value:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


def ilike_any(columns: Iterable[str], term: str) -> str:
    """
    PostgREST ``or`` filter matching ``term`` anywhere in any of ``columns``.

    The pattern is double quoted so commas, dots and parentheses in the
    term stay part of the value; backslashes and quotes are escaped.

    Example:
        >>> ilike_any(["name", "sku"], "a,b")
        'name.ilike."%a,b%",sku.ilike."%a,b%"'
    """
    escaped = term.strip().replace("\\", "\\\\").replace('"', '\\"')
    return ",".join(f'{column}.ilike."%{escaped}%"' for column in columns)


def chunk_list(items: List[Any], chunk_size: int) -> List[List[Any]]:
    """Split a list into chunks of the given size (used for batched inserts)."""
    return [items[i:i + chunk_size] for i in range(0, len(items), chunk_size)]


def drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` without None values (partial updates)."""
    return {k: v for k, v in data.items() if v is not None}
