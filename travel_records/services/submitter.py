from __future__ import annotations

import logging
from typing import Protocol

from ..api.client import BulkResponse, ServerRejectedError, TransportError
from ..models.fields import RecordKind
from ..models.outcome import Failure, FailureKind, Success, UploadOutcome
from ..models.records import Batch

"""Bulk submission of an assembled batch.

A single attempt per upload. Transport and server failures are turned into a
Failure outcome here; the caller decides about rollback.
"""

__all__ = [
    "BulkSink",
    "submit",
]

logger = logging.getLogger(__name__)


class BulkSink(Protocol):
    def bulk_insert(self, kind: RecordKind | str, records: list[dict]) -> BulkResponse: ...


def submit(batch: Batch, client: BulkSink) -> UploadOutcome:
    """Send a batch to the bulk endpoint and interpret the result.

    An empty batch is a Failure(NO_VALID_ROWS) and never reaches the network.
    """
    if batch.is_empty:
        return Failure(
            kind=FailureKind.NO_VALID_ROWS,
            detail=f"no valid rows ({batch.dropped_count} dropped)",
            dropped=batch.dropped_count,
        )

    try:
        response = client.bulk_insert(batch.kind, batch.payload())
    except TransportError as e:
        logger.debug("bulk submit transport failure: %s", e)
        return Failure(kind=FailureKind.TRANSPORT_ERROR, detail=str(e), dropped=batch.dropped_count)
    except ServerRejectedError as e:
        logger.debug("bulk submit rejected status=%s: %s", e.status_code, e)
        return Failure(kind=FailureKind.SERVER_REJECTED, detail=str(e), dropped=batch.dropped_count)

    return Success(inserted=response.inserted, message=response.message, dropped=batch.dropped_count)
