from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.records import RawRow

"""Spreadsheet decoding.

The first sheet of the workbook is read with pandas; the header row (first row
by default) supplies the original header strings and every following non-blank
row becomes one RawRow (original header -> cell value), tagged with its sheet
row number.

Cells are handed over as plain Python values: NaN -> None, numpy scalars ->
int/float/str. Date-formatted cells stay pandas Timestamps; the date coercer
deals with them.
"""

__all__ = [
    "NumberedRow",
    "SpreadsheetParseError",
    "read_spreadsheet",
    "read_numbered_rows",
    "frame_to_rows",
    "frame_to_numbered_rows",
]

# (sheet row number, row); the header row is sheet row ``header_row + 1``
NumberedRow = tuple[int, RawRow]


class SpreadsheetParseError(Exception):
    """Raised when uploaded content cannot be decoded as a spreadsheet."""


def _na_options(keep_na_strings: list[str] | None) -> tuple[bool, list[str] | None]:
    # pandas 既定の NA 文字列集合から keep_na_strings を除外
    # (イニシャル "NA" のような実データを NaN 化させないため)
    if not keep_na_strings:
        return True, None
    import pandas._libs.parsers as parsers

    custom_na = parsers.STR_NA_VALUES.copy() - set(keep_na_strings)
    return False, list(custom_na)


def _cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return None
    if hasattr(value, "item") and not isinstance(value, pd.Timestamp):
        # numpy scalar -> Python scalar (JSON serializable)
        return value.item()
    return value


def frame_to_numbered_rows(df: pd.DataFrame, header_row: int = 0) -> list[NumberedRow]:
    """Turn a header-applied DataFrame into numbered RawRows.

    Fully blank rows are skipped but still counted, so every row keeps the
    number it has in the sheet (first data row = ``header_row + 2``).
    """
    columns = [str(c).strip() for c in df.columns]
    first = header_row + 2
    rows: list[NumberedRow] = []
    for pos, (_, raw) in enumerate(df.iterrows()):
        if raw.isna().all():
            continue
        cells = {col: _cell(val) for col, val in zip(columns, raw.tolist(), strict=False)}
        rows.append((first + pos, cells))
    return rows


def frame_to_rows(df: pd.DataFrame) -> list[RawRow]:
    return [row for _, row in frame_to_numbered_rows(df)]


def read_numbered_rows(
    source: Path | str | bytes,
    sheet: int | str = 0,
    header_row: int = 0,
    keep_na_strings: list[str] | None = None,
) -> list[NumberedRow]:
    """Decode a workbook into ``(sheet row number, RawRow)`` pairs in sheet order.

    Parameters
    ----------
    source: path to an .xlsx/.xls file, or the uploaded file bytes
    sheet: sheet index or name (the upload screens always used the first sheet)
    header_row: 0-based row holding the headers (rows above it are titles)
    keep_na_strings: strings excluded from pandas' default NaN conversion (e.g. ['NA'])

    Raises
    ------
    SpreadsheetParseError: file missing or content not readable as a spreadsheet
    """
    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise SpreadsheetParseError("empty upload")
        target: Any = io.BytesIO(source)
    else:
        target = Path(source)
        if not target.exists():
            raise SpreadsheetParseError(f"file not found: {target}")

    keep_default_na, na_values = _na_options(keep_na_strings)
    try:
        df = pd.read_excel(
            target,
            sheet_name=sheet,
            header=header_row,
            keep_default_na=keep_default_na,
            na_values=na_values,
        )
    except Exception as e:
        raise SpreadsheetParseError(f"cannot read spreadsheet: {e}") from e
    return frame_to_numbered_rows(df, header_row)


def read_spreadsheet(
    source: Path | str | bytes,
    sheet: int | str = 0,
    header_row: int = 0,
    keep_na_strings: list[str] | None = None,
) -> list[RawRow]:
    """Decode a workbook into an ordered list of RawRows (row numbers dropped)."""
    return [row for _, row in read_numbered_rows(source, sheet, header_row, keep_na_strings)]
