from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from ..models.outcome import Failure, UploadOutcome

"""Live record set and snapshot/rollback state machine.

State transitions::

    IDLE --start_upload--> SNAPSHOTTED --on_outcome(Success)--> ROLLBACK_AVAILABLE
                                       --on_outcome(Failure)--> IDLE (snapshot restored)
    ROLLBACK_AVAILABLE --manual_rollback--> IDLE (snapshot restored)
    any --start_upload--> SNAPSHOTTED (previous snapshot discarded)

The manager is the only writer of the live set; readers go through the
RecordStore query methods, which hand out copies.
"""

__all__ = [
    "UploadState",
    "RollbackStateError",
    "RecordStore",
    "SnapshotManager",
]

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class UploadState(Enum):
    IDLE = "idle"
    SNAPSHOTTED = "snapshotted"
    ROLLBACK_AVAILABLE = "rollback_available"


class RollbackStateError(Exception):
    """Raised on a transition that is not valid in the current state."""


class RecordStore:
    """In-memory live record set with a read-only query interface."""

    def __init__(self, records: Iterable[Mapping[str, Any]] = ()) -> None:
        self._records: list[Record] = [dict(r) for r in records]

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> list[Record]:
        return copy.deepcopy(self._records)

    def search(self, term: str) -> list[Record]:
        """Records with any string value containing ``term`` (case-insensitive)."""
        needle = term.lower()
        return [
            copy.deepcopy(r)
            for r in self._records
            if any(isinstance(v, str) and needle in v.lower() for v in r.values())
        ]

    def sorted_by(self, field: str) -> list[Record]:
        return sorted(self.records(), key=lambda r: str(r.get(field) or "").lower())

    # SnapshotManager からのみ呼ばれる
    def _replace(self, records: Iterable[Mapping[str, Any]]) -> None:
        self._records = copy.deepcopy([dict(r) for r in records])

    def _extend(self, records: Iterable[Mapping[str, Any]]) -> None:
        self._records.extend(copy.deepcopy([dict(r) for r in records]))

    def _snapshot(self) -> tuple[Record, ...]:
        return tuple(copy.deepcopy(self._records))


class SnapshotManager:
    """Owns the live record set and the single retained snapshot."""

    def __init__(self, store: RecordStore | None = None) -> None:
        self.store = store if store is not None else RecordStore()
        self._snapshot: tuple[Record, ...] | None = None
        self._state = UploadState.IDLE

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def rollback_available(self) -> bool:
        return self._state is UploadState.ROLLBACK_AVAILABLE

    @property
    def snapshot(self) -> tuple[Record, ...] | None:
        return copy.deepcopy(self._snapshot)

    def start_upload(self) -> None:
        """Capture the live set; any older snapshot is discarded (last snapshot wins)."""
        if self._state is UploadState.SNAPSHOTTED:
            raise RollbackStateError("an upload is already in flight")
        if self._snapshot is not None:
            logger.debug("discarding previous snapshot (%d records)", len(self._snapshot))
        self._snapshot = self.store._snapshot()
        self._state = UploadState.SNAPSHOTTED

    def stage(self, records: Iterable[Mapping[str, Any]]) -> None:
        """Optimistically add batch records to the live set while the upload is in flight."""
        if self._state is not UploadState.SNAPSHOTTED:
            raise RollbackStateError(f"cannot stage records in state {self._state.value}")
        self.store._extend(records)

    def on_outcome(self, outcome: UploadOutcome) -> UploadOutcome:
        """Settle the in-flight upload.

        Success keeps the live set and the snapshot for one manual rollback.
        Failure restores the snapshot immediately. The outcome is returned so
        the caller can surface it.
        """
        if self._state is not UploadState.SNAPSHOTTED:
            raise RollbackStateError(f"no upload in flight (state={self._state.value})")
        if isinstance(outcome, Failure):
            self._restore()
            logger.info("upload failed (%s) - live records rolled back", outcome.kind.value)
        else:
            self._state = UploadState.ROLLBACK_AVAILABLE
        return outcome

    def manual_rollback(self) -> bool:
        """Restore the pre-upload snapshot after a successful upload.

        Returns False (no-op) when no rollback is available.
        """
        if self._state is not UploadState.ROLLBACK_AVAILABLE:
            logger.warning("rollback ignored: nothing to roll back (state=%s)", self._state.value)
            return False
        self._restore()
        logger.info("live records rolled back to pre-upload snapshot (%d records)", len(self.store))
        return True

    def abort(self) -> None:
        """Restore the snapshot when the upload path itself crashed (not an outcome)."""
        if self._state is UploadState.SNAPSHOTTED:
            self._restore()

    def refresh(self, records: Iterable[Mapping[str, Any]]) -> None:
        """Replace the live set with a fresh server listing. Keeps any retained snapshot."""
        if self._state is UploadState.SNAPSHOTTED:
            raise RollbackStateError("cannot refresh while an upload is in flight")
        self.store._replace(records)

    def _restore(self) -> None:
        if self._snapshot is None:
            raise RollbackStateError(f"no snapshot to restore (state={self._state.value})")
        self.store._replace(self._snapshot)
        self._snapshot = None
        self._state = UploadState.IDLE
