from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from travel_records.excel.reader import (
    SpreadsheetParseError,
    frame_to_numbered_rows,
    frame_to_rows,
    read_numbered_rows,
    read_spreadsheet,
)


def test_reads_first_sheet_rows_in_order(make_workbook):
    path = make_workbook(
        "emp.xlsx",
        [
            {"Office": "HR", " Full Name ": "Ana", "Initial": "AC"},
            {"Office": "IT", " Full Name ": "Ben", "Initial": "BD"},
        ],
    )
    rows = read_spreadsheet(path)
    assert rows == [
        {"Office": "HR", "Full Name": "Ana", "Initial": "AC"},
        {"Office": "IT", "Full Name": "Ben", "Initial": "BD"},
    ]


def test_accepts_uploaded_bytes(make_workbook):
    path = make_workbook("emp.xlsx", [{"Full Name": "Ana"}])
    assert read_spreadsheet(path.read_bytes()) == [{"Full Name": "Ana"}]


def test_blank_rows_are_skipped_and_cells_are_plain_values(make_workbook):
    path = make_workbook(
        "t.xlsx",
        [
            {"Name": "A", "DatesFrom": 45000},
            {"Name": None, "DatesFrom": None},
            {"Name": "B", "DatesFrom": None},
        ],
    )
    rows = read_spreadsheet(path)
    assert len(rows) == 2
    assert rows[0]["DatesFrom"] == 45000
    assert type(rows[0]["DatesFrom"]) in (int, float)
    assert rows[1]["DatesFrom"] is None


def test_keep_na_strings(make_workbook):
    path = make_workbook("emp.xlsx", [{"Full Name": "Nora Abad", "Initial": "NA"}])
    assert read_spreadsheet(path)[0]["Initial"] is None
    assert read_spreadsheet(path, keep_na_strings=["NA"])[0]["Initial"] == "NA"


def test_missing_file(temp_workdir: Path):
    with pytest.raises(SpreadsheetParseError, match="file not found"):
        read_spreadsheet(temp_workdir / "nope.xlsx")


def test_empty_upload():
    with pytest.raises(SpreadsheetParseError, match="empty upload"):
        read_spreadsheet(b"")


def test_non_spreadsheet_content(temp_workdir: Path):
    bogus = temp_workdir / "data" / "notes.xlsx"
    bogus.write_text("not a workbook", encoding="utf-8")
    with pytest.raises(SpreadsheetParseError, match="cannot read spreadsheet"):
        read_spreadsheet(bogus)
    with pytest.raises(SpreadsheetParseError):
        read_spreadsheet(b"\x00\x01garbage")


def test_frame_to_rows_converts_numpy_scalars():
    df = pd.DataFrame({"a": [1, 2], "b": [1.5, None]})
    rows = frame_to_rows(df)
    assert rows == [{"a": 1, "b": 1.5}, {"a": 2, "b": None}]
    assert not any(hasattr(v, "dtype") for r in rows for v in r.values())


def test_row_numbers_count_blank_rows(make_workbook):
    path = make_workbook(
        "gaps.xlsx",
        [
            {"Name": "A", "Area": "North"},
            {"Name": None, "Area": None},
            {"Name": "B", "Area": None},
        ],
    )
    numbered = read_numbered_rows(path)
    assert [n for n, _ in numbered] == [2, 4]
    assert numbered[1][1] == {"Name": "B", "Area": None}


def test_row_numbers_follow_header_row(temp_workdir: Path):
    path = temp_workdir / "data" / "titled.xlsx"
    df = pd.DataFrame([{"Name": "A"}, {"Name": None}, {"Name": "C"}])
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Sheet1", index=False, startrow=1)
        writer.sheets["Sheet1"]["A1"] = "Travel Authority 2024"

    numbered = read_numbered_rows(path, header_row=1)
    assert numbered == [(3, {"Name": "A"}), (5, {"Name": "C"})]


def test_frame_to_numbered_rows_offsets_by_header_row():
    df = pd.DataFrame({"a": [1, None, 3]})
    assert [n for n, _ in frame_to_numbered_rows(df)] == [2, 4]
    assert [n for n, _ in frame_to_numbered_rows(df, header_row=2)] == [4, 6]
