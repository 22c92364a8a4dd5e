from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .fields import RecordKind

"""Row-level domain models for the ingestion pipeline.

CandidateRecord -> (validate) -> ValidatedRecord | DropReason -> Batch

``row_number`` is the row in the uploaded sheet (header = row 1, first data
row = 2). Blank rows skipped by the reader keep their numbers reserved.
"""

__all__ = [
    "RawRow",
    "CandidateRecord",
    "ValidatedRecord",
    "DropReason",
    "Batch",
]

# Original header -> cell value, as produced by the spreadsheet reader
RawRow = dict[str, Any]


@dataclass(frozen=True)
class CandidateRecord:
    """One sheet row keyed by canonical field, after header resolution and coercion."""
    row_number: int
    values: dict[str, Any]  # canonical field -> coerced value ("" = missing)
    raw_values: dict[str, Any] | None = None  # original cells for debug output


@dataclass(frozen=True)
class ValidatedRecord:
    """A candidate with every required field present and dates in ISO form."""
    row_number: int
    values: dict[str, Any]

    def to_payload(self) -> dict[str, Any]:
        return dict(self.values)


@dataclass(frozen=True)
class DropReason:
    """Why a row was excluded from the batch."""
    row_number: int
    missing: tuple[str, ...]  # canonical field names
    labels: tuple[str, ...] = ()  # display labels, same order as ``missing``

    def __str__(self) -> str:
        names = self.labels or self.missing
        return f"row {self.row_number}: missing {', '.join(names)}"


@dataclass(frozen=True)
class Batch:
    """Validated records from one uploaded sheet plus the rows that were dropped."""
    kind: RecordKind
    records: list[ValidatedRecord] = field(default_factory=list)
    dropped: list[DropReason] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)

    def payload(self) -> list[dict[str, Any]]:
        return [r.to_payload() for r in self.records]
