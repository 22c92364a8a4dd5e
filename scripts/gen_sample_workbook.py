#!/usr/bin/env python3
"""Sample workbook generator for manual upload testing.

Generates employee or travel sheets in the shape clerks actually send:
- Row 1: Header row, each column spelled with one of the accepted header variants
- Row 2+: Data rows, dates as spreadsheet serials or D/M/Y text
- A configurable share of rows with one required field left blank

The output uploads with ``travel-records upload KIND FILE``.
"""
from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from travel_records.models.fields import RecordKind, get_schema
from travel_records.services.dates import SPREADSHEET_EPOCH

OFFICES = ["HR", "Finance", "Engineering", "Planning", "Admin"]
POSITIONS = ["Engineer II", "Clerk", "Analyst", "Driver", "Accountant III"]
FIRST_NAMES = ["Ana", "Ben", "Carla", "Dante", "Elena", "Felix", "Grace", "Hugo"]
LAST_NAMES = ["Cruz", "Diaz", "Reyes", "Santos", "Garcia", "Lopez", "Ramos"]
STATIONS = ["Region 1", "Region 4A", "Central Office", "District 2"]
PURPOSES = ["Site inspection", "Training", "Audit", "Coordination meeting"]
HOSTS = ["DPWH", "DILG", "City Hall", "Regional Office"]
DESTINATIONS = ["Baguio", "Cebu", "Davao", "Iloilo", "Tacloban"]
AREAS = ["North", "South", "Visayas", "Mindanao"]
FUNDS = ["Regular", "Project", "Trust Fund"]


def _pick(rng: np.random.Generator, values: list[str], rows: int) -> list[str]:
    return [values[i] for i in rng.integers(0, len(values), rows)]


def _headers(kind: RecordKind, rng: np.random.Generator) -> dict[str, str]:
    """Canonical field -> header text, choosing a random accepted spelling per column."""
    schema = get_schema(kind)
    return {f.name: f.synonyms[rng.integers(0, len(f.synonyms))].title() for f in schema.fields}


def _date_cell(d: date, as_serial: bool) -> Any:
    if as_serial:
        return (d - SPREADSHEET_EPOCH).days
    return f"{d.day}/{d.month}/{d.year % 100:02d}"


def generate_rows(kind: RecordKind, rows: int, incomplete_ratio: float = 0.1, seed: int = 42) -> pd.DataFrame:
    """Generate a sheet of ``rows`` records keyed by canonical field.

    Args:
        kind: record kind whose field table drives the columns
        rows: Number of data rows to generate
        incomplete_ratio: share of rows with one required field blanked
        seed: Random seed for reproducible data

    Returns:
        DataFrame with canonical field names as columns
    """
    rng = np.random.default_rng(seed)
    names = [f"{a} {b}" for a, b in zip(_pick(rng, FIRST_NAMES, rows), _pick(rng, LAST_NAMES, rows), strict=True)]
    initials = ["".join(p[0] for p in n.split()) for n in names]

    if kind is RecordKind.EMPLOYEE:
        data: dict[str, list[Any]] = {
            "office": _pick(rng, OFFICES, rows),
            "fullname": names,
            "positionTitle": _pick(rng, POSITIONS, rows),
            "initial": initials,
        }
    else:
        start = date(2024, 1, 1)
        offsets = rng.integers(0, 365, rows)
        lengths = rng.integers(0, 5, rows)
        serial = rng.random(rows) < 0.5
        from_dates = [start + timedelta(days=int(o)) for o in offsets]
        data = {
            "employeeID": [f"E-{i:05d}" for i in rng.integers(1, 99999, rows)],
            "initial": initials,
            "name": names,
            "positiondesignation": _pick(rng, POSITIONS, rows),
            "station": _pick(rng, STATIONS, rows),
            "purpose": _pick(rng, PURPOSES, rows),
            "host": _pick(rng, HOSTS, rows),
            "fromDate": [_date_cell(d, bool(s)) for d, s in zip(from_dates, serial, strict=True)],
            "toDate": [
                _date_cell(d + timedelta(days=int(n)), bool(s))
                for d, n, s in zip(from_dates, lengths, serial, strict=True)
            ],
            "destination": _pick(rng, DESTINATIONS, rows),
            "area": _pick(rng, AREAS, rows),
            "sourceOfFunds": _pick(rng, FUNDS, rows),
        }

    df = pd.DataFrame(data, dtype=object)
    required = list(get_schema(kind).required)
    incomplete = np.flatnonzero(rng.random(rows) < incomplete_ratio)
    for i in incomplete:
        df.at[int(i), required[rng.integers(0, len(required))]] = None
    return df


def create_workbook(
    output_path: Path,
    kind: RecordKind,
    rows: int,
    incomplete_ratio: float = 0.1,
    seed: int = 42,
) -> int:
    """Write the sample sheet and return the number of incomplete rows."""
    rng = np.random.default_rng(seed + 1)
    df = generate_rows(kind, rows, incomplete_ratio, seed)
    headers = _headers(kind, rng)
    df = df.rename(columns=headers)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=get_schema(kind).collection, index=False)

    incomplete = int(df.isna().any(axis=1).sum())
    print(f"Created workbook: {output_path}")
    print(f"  Kind: {kind.value}")
    print(f"  Rows: {rows} (incomplete: {incomplete})")
    print(f"  Headers: {', '.join(df.columns)}")
    return incomplete


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate sample employee / travel workbooks for upload testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 200 travel rows, about 10% incomplete
  %(prog)s travel data/travels.xlsx

  # Employees, no incomplete rows
  %(prog)s employee data/employees.xlsx --rows 50 --incomplete 0
        """,
    )
    parser.add_argument("kind", choices=[k.value for k in RecordKind])
    parser.add_argument("output", type=Path, help="Output workbook path")
    parser.add_argument("--rows", type=int, default=200, help="Number of data rows (default: 200)")
    parser.add_argument(
        "--incomplete",
        type=float,
        default=0.1,
        help="Share of rows with a blank required field (default: 0.1)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args(argv)

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.incomplete <= 1:
        print("Error: --incomplete must be between 0 and 1", file=sys.stderr)
        return 1

    try:
        create_workbook(args.output, RecordKind(args.kind), args.rows, args.incomplete, args.seed)
    except OSError as e:
        print(f"Error writing workbook: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
