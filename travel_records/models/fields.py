from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Canonical field tables for employee and travel records.

Every semantic attribute has exactly one canonical name. Spreadsheet headers are
matched against the ``synonyms`` of each field after normalization (lower-case,
trimmed), so the synonym tuples below are stored already normalized.

The ``label`` is what an exported workbook uses as its header; its normalized
form is always one of the synonyms so an export re-imports cleanly.
"""

__all__ = [
    "RecordKind",
    "FieldSpec",
    "RecordSchema",
    "EMPLOYEE_SCHEMA",
    "TRAVEL_SCHEMA",
    "get_schema",
]


class RecordKind(Enum):
    """Record types managed by the remote records API."""
    EMPLOYEE = "employee"
    TRAVEL = "travel"


@dataclass(frozen=True)
class FieldSpec:
    """One canonical field and the header spellings that map onto it."""
    name: str  # canonical field name (payload key)
    label: str  # export header / human-readable name
    synonyms: tuple[str, ...]  # normalized header variants, first match wins
    is_date: bool = False


@dataclass(frozen=True)
class RecordSchema:
    kind: RecordKind
    collection: str  # API collection path segment
    fields: tuple[FieldSpec, ...]
    required: tuple[str, ...]  # default required canonical fields

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def date_fields(self) -> set[str]:
        return {f.name for f in self.fields if f.is_date}

    @property
    def synonyms(self) -> dict[str, tuple[str, ...]]:
        return {f.name: f.synonyms for f in self.fields}

    def field(self, name: str) -> FieldSpec:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"unknown {self.kind.value} field: {name}")

    def label_for(self, name: str) -> str:
        try:
            return self.field(name).label
        except KeyError:
            return name


EMPLOYEE_SCHEMA = RecordSchema(
    kind=RecordKind.EMPLOYEE,
    collection="employees",
    fields=(
        FieldSpec("office", "Office", ("office",)),
        FieldSpec("fullname", "Full Name", ("full name", "fullname", "name")),
        FieldSpec("positionTitle", "Position Title", ("position title", "positiontitle", "position")),
        FieldSpec("initial", "Initial", ("initial", "initials")),
    ),
    # 旧画面は "Full Name" が空の行を除外していた
    required=("fullname",),
)

TRAVEL_SCHEMA = RecordSchema(
    kind=RecordKind.TRAVEL,
    collection="travels",
    fields=(
        FieldSpec("employeeID", "Employee ID", ("employee id", "employeeid", "employee_id", "uid")),
        FieldSpec("initial", "Initial", ("initial", "initials")),
        FieldSpec("name", "Name", ("name", "full name", "fullname")),
        FieldSpec(
            "positiondesignation",
            "Position/Designation",
            (
                "position /designation",
                "position/designation",
                "position / designation",
                "positiondesignation",
                "position designation",
            ),
        ),
        FieldSpec("station", "Official Station", ("official station", "station")),
        FieldSpec("purpose", "Purpose", ("purpose of travel", "purpose")),
        FieldSpec("host", "Host", ("host of activity", "host")),
        FieldSpec("fromDate", "DatesFrom", ("datesfrom", "dates from", "date from", "fromdate"), is_date=True),
        FieldSpec("toDate", "DatesTo", ("datesto", "dates to", "date to", "todate"), is_date=True),
        FieldSpec("destination", "Destination", ("destination",)),
        FieldSpec("area", "Area", ("area",)),
        FieldSpec("sourceOfFunds", "Source of Funds", ("source of funds", "sourceoffunds", "fund source")),
    ),
    required=(
        "name",
        "positiondesignation",
        "station",
        "purpose",
        "host",
        "fromDate",
        "toDate",
        "destination",
        "area",
    ),
)

_SCHEMAS = {
    RecordKind.EMPLOYEE: EMPLOYEE_SCHEMA,
    RecordKind.TRAVEL: TRAVEL_SCHEMA,
}


def get_schema(kind: RecordKind | str) -> RecordSchema:
    """Return the field table for a record kind (enum or its string value)."""
    if isinstance(kind, str):
        try:
            kind = RecordKind(kind.strip().lower())
        except ValueError as e:
            raise KeyError(f"unknown record kind: {kind}") from e
    return _SCHEMAS[kind]
