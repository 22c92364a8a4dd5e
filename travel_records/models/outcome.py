from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""UploadOutcome tagged result.

An upload ends in exactly one of:

- ``Success(inserted, message)``: the bulk endpoint accepted the batch
- ``Failure(kind, detail)``: anything else; the caller rolls back the live set

``dropped`` carries the aggregate count of rows excluded by validation, which
is reported alongside either result.
"""

__all__ = [
    "FailureKind",
    "Success",
    "Failure",
    "UploadOutcome",
]


class FailureKind(Enum):
    PARSE_ERROR = "parse_error"  # file could not be decoded as a spreadsheet
    NO_VALID_ROWS = "no_valid_rows"  # every row failed validation
    SERVER_REJECTED = "server_rejected"  # non-2xx status or malformed body
    TRANSPORT_ERROR = "transport_error"  # endpoint unreachable

    @property
    def error_type(self) -> str:
        """UPPER_SNAKE form used in the error log."""
        return self.name


@dataclass(frozen=True)
class Success:
    inserted: int
    message: str
    dropped: int = 0

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: str
    dropped: int = 0

    @property
    def ok(self) -> bool:
        return False


UploadOutcome = Success | Failure
