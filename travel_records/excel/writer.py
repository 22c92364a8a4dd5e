from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.fields import RecordKind, get_schema

"""Spreadsheet export, the inverse of ingestion.

Headers are the field labels in table order. Each label normalizes to one of
the field's synonyms, so an exported workbook uploads back to the same
canonical fields.
"""

__all__ = [
    "records_to_frame",
    "write_spreadsheet",
]


def _export_value(value: Any, is_date: bool) -> Any:
    if value is None:
        return ""
    if is_date and isinstance(value, str) and "T" in value:
        # API は "2024-07-05T00:00:00.000Z" 形式で返すことがある
        return value.split("T", 1)[0]
    return value


def records_to_frame(records: Iterable[Mapping[str, Any]], kind: RecordKind | str) -> pd.DataFrame:
    schema = get_schema(kind)
    data = [[_export_value(rec.get(f.name), f.is_date) for f in schema.fields] for rec in records]
    return pd.DataFrame(data, columns=[f.label for f in schema.fields])


def write_spreadsheet(
    records: Iterable[Mapping[str, Any]],
    kind: RecordKind | str,
    dest: Path,
    sheet_name: str | None = None,
) -> Path:
    """Write records to an .xlsx workbook and return its path."""
    schema = get_schema(kind)
    df = records_to_frame(records, schema.kind)
    dest.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(dest) as writer:
        df.to_excel(writer, sheet_name=sheet_name or schema.collection, index=False)
    return dest
