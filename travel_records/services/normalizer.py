from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

"""Header normalization and canonical field resolution.

Spreadsheet headers arrive in many spellings ("Position /Designation",
"PositionDesignation", "Official Station"...). Headers are normalized to a
lookup key and each canonical field picks the first of its synonyms that is
present in the row.
"""

__all__ = [
    "normalize_header",
    "normalize_row",
    "resolve_fields",
]


def normalize_header(raw_header: Any) -> str:
    """Lower-case and trim a header cell into a lookup key."""
    if raw_header is None:
        return ""
    return str(raw_header).strip().lower()


def normalize_row(raw_row: Mapping[Any, Any]) -> dict[str, Any]:
    """Re-key a raw row by normalized header.

    When two headers normalize to the same key the first column wins.
    """
    normalized: dict[str, Any] = {}
    for header, value in raw_row.items():
        key = normalize_header(header)
        if key not in normalized:
            normalized[key] = value
    return normalized


def resolve_fields(
    normalized_headers: Iterable[str],
    synonyms: Mapping[str, Iterable[str]],
) -> dict[str, str | None]:
    """Map each canonical field to the header key that carries it.

    Parameters
    ----------
    normalized_headers: header keys present in the row (already normalized)
    synonyms: canonical field -> ordered synonym keys

    Returns
    -------
    canonical field -> first matching header key, or None when no synonym is present
    """
    present = set(normalized_headers)
    resolved: dict[str, str | None] = {}
    for canonical, candidates in synonyms.items():
        resolved[canonical] = next((c for c in candidates if c in present), None)
    return resolved
