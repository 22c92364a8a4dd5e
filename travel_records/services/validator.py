from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..models.fields import RecordSchema
from ..models.records import CandidateRecord, DropReason, ValidatedRecord

__all__ = [
    "is_missing",
    "validate",
]


def is_missing(value: Any) -> bool:
    """A value is missing when absent (None) or empty after coercion."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def validate(
    candidate: CandidateRecord,
    required_fields: Iterable[str],
    schema: RecordSchema | None = None,
) -> ValidatedRecord | DropReason:
    """Check that every required field is present in a candidate record.

    A date that failed to coerce arrives here as "" and therefore counts as
    missing. Dropping a row never aborts the batch: the returned DropReason is
    collected by the assembler and only reported in aggregate.

    Args:
        candidate: coerced row keyed by canonical field
        required_fields: canonical fields that must be present
        schema: optional field table used to attach display labels to the reason

    Returns:
        ValidatedRecord when complete, otherwise DropReason listing the missing fields
    """
    missing = tuple(f for f in required_fields if is_missing(candidate.values.get(f)))
    if missing:
        labels = tuple(schema.label_for(f) for f in missing) if schema is not None else ()
        return DropReason(row_number=candidate.row_number, missing=missing, labels=labels)
    return ValidatedRecord(row_number=candidate.row_number, values=dict(candidate.values))
