from __future__ import annotations

from unittest.mock import MagicMock

from travel_records.api.client import BulkResponse, ServerRejectedError, TransportError
from travel_records.models.fields import RecordKind
from travel_records.models.outcome import Failure, FailureKind, Success
from travel_records.models.records import Batch, DropReason, ValidatedRecord
from travel_records.services.submitter import submit


def _batch(n: int, dropped: int = 0) -> Batch:
    return Batch(
        kind=RecordKind.EMPLOYEE,
        records=[ValidatedRecord(row_number=i + 2, values={"fullname": f"E{i}"}) for i in range(n)],
        dropped=[DropReason(row_number=100 + i, missing=("fullname",)) for i in range(dropped)],
    )


def test_empty_batch_never_calls_client():
    client = MagicMock()
    outcome = submit(_batch(0, dropped=3), client)
    assert outcome == Failure(FailureKind.NO_VALID_ROWS, "no valid rows (3 dropped)", dropped=3)
    client.bulk_insert.assert_not_called()


def test_success_carries_count_message_and_dropped():
    client = MagicMock()
    client.bulk_insert.return_value = BulkResponse(inserted=2, message="ok")
    outcome = submit(_batch(2, dropped=1), client)
    assert outcome == Success(inserted=2, message="ok", dropped=1)
    assert outcome.ok
    client.bulk_insert.assert_called_once_with(RecordKind.EMPLOYEE, [{"fullname": "E0"}, {"fullname": "E1"}])


def test_transport_error_maps_to_failure():
    client = MagicMock()
    client.bulk_insert.side_effect = TransportError("connection refused")
    outcome = submit(_batch(1), client)
    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.TRANSPORT_ERROR
    assert "connection refused" in outcome.detail
    assert client.bulk_insert.call_count == 1


def test_server_rejection_maps_to_failure():
    client = MagicMock()
    client.bulk_insert.side_effect = ServerRejectedError("returned 500", status_code=500)
    outcome = submit(_batch(1), client)
    assert outcome.kind is FailureKind.SERVER_REJECTED
    assert not outcome.ok
