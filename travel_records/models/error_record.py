from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .outcome import Failure
from .records import DropReason

"""One line of the upload error log.

Two sources feed the log: rows dropped by validation (``row`` = the data row
number) and uploads that ended in a Failure (``row`` = -1, no single row is at
fault).
"""

__all__ = [
    "ErrorRecord",
    "ROW_MISSING_FIELDS",
    "FILE_LEVEL_ROW",
]

ROW_MISSING_FIELDS = "ROW_MISSING_FIELDS"
FILE_LEVEL_ROW = -1


def _utc_stamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    timestamp: str  # ISO8601 UTC, "Z" suffix
    file: str
    kind: str  # employee / travel
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, kind: str, row: int, error_type: str, message: str) -> ErrorRecord:
        return ErrorRecord(_utc_stamp(), file, kind, row, error_type, message)

    @staticmethod
    def from_drop(file: str, kind: str, reason: DropReason) -> ErrorRecord:
        """Entry for a row excluded because required fields were missing."""
        return ErrorRecord.create(file, kind, reason.row_number, ROW_MISSING_FIELDS, str(reason))

    @staticmethod
    def from_failure(file: str, kind: str, failure: Failure) -> ErrorRecord:
        """File-level entry for an upload that ended in a Failure."""
        return ErrorRecord.create(file, kind, FILE_LEVEL_ROW, failure.kind.error_type, failure.detail)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
