from __future__ import annotations

import itertools
import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from ..excel.reader import SpreadsheetParseError
from ..models.fields import RecordKind, RecordSchema, get_schema
from ..models.records import Batch, CandidateRecord, DropReason, RawRow, ValidatedRecord
from .dates import coerce_date, is_blank_cell
from .normalizer import normalize_row, resolve_fields
from .validator import validate

"""Batch assembly: RawRows -> Batch of ValidatedRecords.

Per row: normalize headers, resolve canonical fields via the synonym table,
clean text cells, coerce date cells, validate. Rows failing validation are
dropped with a reason; the batch keeps the original row order.
"""

__all__ = [
    "FIRST_DATA_ROW",
    "assemble",
    "build_candidate",
    "clean_cell",
]

logger = logging.getLogger(__name__)

# Sheet row of the first data row (row 1 is the header)
FIRST_DATA_ROW = 2


def clean_cell(value: Any) -> Any:
    """Normalize a non-date cell into a JSON friendly scalar ("" when blank)."""
    if is_blank_cell(value):
        return ""
    if isinstance(value, str):
        return value.strip()
    if hasattr(value, "item") and not isinstance(value, (datetime, date)):
        value = value.item()
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        # 空セル混在の整数列は pandas で float 化される
        return int(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def build_candidate(raw_row: Mapping[Any, Any], schema: RecordSchema, row_number: int) -> CandidateRecord:
    normalized = normalize_row(raw_row)
    resolved = resolve_fields(normalized.keys(), schema.synonyms)
    values: dict[str, Any] = {}
    for spec in schema.fields:
        header = resolved[spec.name]
        cell = normalized.get(header) if header is not None else None
        values[spec.name] = coerce_date(cell) if spec.is_date else clean_cell(cell)
    return CandidateRecord(row_number=row_number, values=values, raw_values=dict(raw_row))


def assemble(
    raw_rows: Iterable[RawRow],
    kind: RecordKind | str,
    required_fields: Iterable[str] | None = None,
    row_numbers: Iterable[int] | None = None,
) -> Batch:
    """Assemble decoded sheet rows into a Batch.

    Args:
        raw_rows: rows from the spreadsheet reader, in sheet order
        kind: record kind selecting the field table
        required_fields: override of the kind's default required fields
        row_numbers: sheet row of each raw row (from read_numbered_rows);
            consecutive from FIRST_DATA_ROW when omitted

    Returns:
        Batch with validated records (sheet order) and drop reasons

    Raises:
        SpreadsheetParseError: extracting rows from the source failed
        ValueError: a required field is not a canonical field of the kind, or
            row_numbers runs out before raw_rows
    """
    schema = get_schema(kind)
    required = tuple(required_fields) if required_fields is not None else schema.required
    unknown = [f for f in required if f not in schema.field_names]
    if unknown:
        raise ValueError(f"unknown {schema.kind.value} fields required: {unknown}")

    records: list[ValidatedRecord] = []
    dropped: list[DropReason] = []
    rows = iter(raw_rows)
    numbers = iter(row_numbers) if row_numbers is not None else itertools.count(FIRST_DATA_ROW)
    seen = 0
    while True:
        try:
            raw = next(rows)
        except StopIteration:
            break
        except Exception as e:
            raise SpreadsheetParseError(f"row extraction failed after {seen} row(s): {e}") from e
        row_number = next(numbers, None)
        if row_number is None:
            raise ValueError(f"no row number for row {seen + 1}")
        seen += 1

        result = validate(build_candidate(raw, schema, row_number), required, schema)
        if isinstance(result, DropReason):
            logger.warning("kind=%s dropped %s", schema.kind.value, result)
            dropped.append(result)
        else:
            records.append(result)

    logger.debug(
        "kind=%s assembled valid=%d dropped=%d",
        schema.kind.value,
        len(records),
        len(dropped),
    )
    return Batch(kind=schema.kind, records=records, dropped=dropped)
