from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

import numpy as np
import pandas as pd

"""Date cell coercion.

Travel sheets carry dates in whatever form the clerk typed them:

- spreadsheet serial numbers (days since 1899-12-30)
- cells formatted as dates, which pandas already decodes to Timestamp
- text in day/month/year order, delimited by '/', '-' or '.', with 2 or 4 digit years

Everything is coerced to an ISO ``YYYY-MM-DD`` string. A value that cannot be
read as a date becomes "" and is treated as a missing field by the validator;
coerce_date never raises.
"""

__all__ = [
    "SPREADSHEET_EPOCH",
    "coerce_date",
    "serial_to_date",
    "is_blank_cell",
]

# 1900 date system (Lotus 1-2-3 leap year bug included)
SPREADSHEET_EPOCH = date(1899, 12, 30)

_NUMERIC_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_STRIP_RE = re.compile(r"[\"'\r\n]")
_SPLIT_RE = re.compile(r"[/\-.]")
_DIGITS_RE = re.compile(r"[0-9]+")


def serial_to_date(serial: float) -> date | None:
    """Convert a spreadsheet serial to a calendar date, truncating to whole days."""
    if not math.isfinite(serial):
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(days=math.trunc(serial))
    except (OverflowError, ValueError):
        return None


def is_blank_cell(raw: Any) -> bool:
    """True for None, NaN/NaT and whitespace-only strings."""
    if raw is None:
        return True
    if isinstance(raw, str):
        return raw.strip() == ""
    try:
        return bool(pd.isna(raw))
    except (TypeError, ValueError):
        return False


def _is_number(raw: Any) -> bool:
    if isinstance(raw, (bool, np.bool_)):
        return False
    return isinstance(raw, (int, float, np.integer, np.floating))


def _from_text(text: str) -> str:
    cleaned = _STRIP_RE.sub("", text).strip()
    parts = _SPLIT_RE.split(cleaned)
    if len(parts) != 3 or not all(_DIGITS_RE.fullmatch(p) for p in parts):
        return ""
    if len(parts[0]) == 4:
        # ISO (export round trip)
        y, m, d = parts
    else:
        d, m, y = parts
        if len(y) == 2:
            y = "20" + y
    try:
        return date(int(y), int(m), int(d)).isoformat()
    except ValueError:
        return ""


def coerce_date(raw: Any) -> str:
    """Coerce a date cell to an ISO date string, or "" when it is not a date.

    Examples:
        >>> coerce_date(45000)
        '2023-03-15'
        >>> coerce_date("5/7/24")
        '2024-07-05'
        >>> coerce_date("next week")
        ''
    """
    if is_blank_cell(raw):
        return ""
    if isinstance(raw, datetime):  # pd.Timestamp 含む
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()
    if isinstance(raw, np.datetime64):
        try:
            return pd.Timestamp(raw).date().isoformat()
        except (ValueError, OverflowError):
            return ""
    if _is_number(raw):
        try:
            d = serial_to_date(float(raw))
        except OverflowError:
            return ""
        return d.isoformat() if d is not None else ""
    if not isinstance(raw, str):
        return ""

    stripped = raw.strip()
    if _NUMERIC_RE.fullmatch(stripped):
        # 数値文字列もシリアル値として扱う
        d = serial_to_date(float(stripped))
        return d.isoformat() if d is not None else ""
    return _from_text(stripped)
