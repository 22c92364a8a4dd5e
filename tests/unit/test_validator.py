from __future__ import annotations

from travel_records.models.fields import TRAVEL_SCHEMA
from travel_records.models.records import CandidateRecord, DropReason, ValidatedRecord
from travel_records.services.validator import is_missing, validate


def test_is_missing():
    assert is_missing(None)
    assert is_missing("")
    assert is_missing("  ")
    assert not is_missing("x")
    assert not is_missing(0)


def test_complete_candidate_is_validated():
    cand = CandidateRecord(row_number=2, values={"name": "Name A", "purpose": "Audit"})
    result = validate(cand, ["name", "purpose"])
    assert isinstance(result, ValidatedRecord)
    assert result.row_number == 2
    assert result.to_payload() == {"name": "Name A", "purpose": "Audit"}


def test_missing_fields_are_listed_in_required_order():
    cand = CandidateRecord(row_number=5, values={"name": "", "purpose": None, "host": "X"})
    result = validate(cand, ["purpose", "host", "name"], TRAVEL_SCHEMA)
    assert isinstance(result, DropReason)
    assert result.missing == ("purpose", "name")
    assert result.labels == ("Purpose", "Name")
    assert str(result) == "row 5: missing Purpose, Name"


def test_failed_date_counts_as_missing():
    cand = CandidateRecord(row_number=3, values={"fromDate": ""})
    result = validate(cand, ["fromDate"])
    assert isinstance(result, DropReason)
    assert str(result) == "row 3: missing fromDate"


def test_no_required_fields_accepts_anything():
    cand = CandidateRecord(row_number=2, values={})
    assert isinstance(validate(cand, []), ValidatedRecord)
