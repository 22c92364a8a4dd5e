from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

from ..api.client import ApiError, RecordsApiClient
from ..config.loader import AppConfig
from ..excel.reader import SpreadsheetParseError, read_numbered_rows
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.fields import RecordKind, RecordSchema, get_schema
from ..models.outcome import Failure, FailureKind, Success, UploadOutcome
from ..models.records import Batch
from .assembler import assemble
from .notify import Notifier
from .snapshot import SnapshotManager
from .submitter import submit

"""Upload service: one uploaded spreadsheet end to end.

    file bytes -> read_numbered_rows -> assemble -> start_upload -> stage
               -> submit -> on_outcome -> notify

Every failure (parse error, no valid rows, rejected batch, transport error) is
caught here and turned into exactly one notification; the snapshot manager
rolls the live record set back on any Failure after the snapshot. A file that
cannot be decoded never reaches the snapshot manager, so an earlier upload
stays available for rollback. Uploads are serialized: a second call while one
is running raises UploadInProgressError.
"""

__all__ = [
    "UploadInProgressError",
    "UploadService",
]

logger = logging.getLogger(__name__)


class UploadInProgressError(Exception):
    """Raised when an upload is started while another one is still running."""


class UploadService:
    def __init__(
        self,
        client: RecordsApiClient,
        config: AppConfig | None = None,
        notifier: Notifier | None = None,
        error_log: ErrorLogBuffer | None = None,
        managers: dict[RecordKind, SnapshotManager] | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.notifier = notifier or Notifier(config.notification_seconds if config else 4.0)
        self.error_log = error_log or ErrorLogBuffer(Path(config.error_log_dir) if config else None)
        self.managers: dict[RecordKind, SnapshotManager] = dict(managers or {})
        self.last_batch: Batch | None = None
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def manager_for(self, kind: RecordKind | str) -> SnapshotManager:
        schema = get_schema(kind)
        if schema.kind not in self.managers:
            self.managers[schema.kind] = SnapshotManager()
        return self.managers[schema.kind]

    def load(self, kind: RecordKind | str) -> int:
        """Fill the live set for ``kind`` from the API. Returns the record count."""
        manager = self.manager_for(kind)
        manager.refresh(self.client.list_records(kind))
        return len(manager.store)

    def upload(
        self,
        source: Path | str | bytes,
        kind: RecordKind | str,
        *,
        file_name: str | None = None,
        refresh: bool | None = None,
    ) -> UploadOutcome:
        """Upload one spreadsheet as a bulk transaction.

        Args:
            source: path or raw bytes of the uploaded workbook
            kind: record kind of the sheet
            file_name: name used in logs (defaults to the path name)
            refresh: reload the live set from the API after success
                (defaults to ``refresh_after_upload`` from config)

        Returns:
            Success or Failure; failures have already been rolled back

        Raises:
            UploadInProgressError: another upload is running
        """
        if not self._lock.acquire(blocking=False):
            raise UploadInProgressError("an upload is already in progress")
        try:
            return self._upload(source, get_schema(kind), file_name, refresh)
        finally:
            self._lock.release()

    def rollback(self, kind: RecordKind | str) -> bool:
        """Manually undo the last successful upload of ``kind`` in the live set."""
        schema = get_schema(kind)
        restored = self.manager_for(schema.kind).manual_rollback()
        if restored:
            self.notifier.notify(f"Rolled back last {schema.kind.value} upload")
        return restored

    def _upload(
        self,
        source: Path | str | bytes,
        schema: RecordSchema,
        file_name: str | None,
        refresh: bool | None,
    ) -> UploadOutcome:
        name = file_name or (Path(source).name if not isinstance(source, (bytes, bytearray)) else "<upload>")
        manager = self.manager_for(schema.kind)
        try:
            batch = self._read(source, schema, name)
        except SpreadsheetParseError as e:
            # Batch が無いのでスナップショットには触れない (前回の rollback を保持)
            outcome: UploadOutcome = Failure(kind=FailureKind.PARSE_ERROR, detail=str(e))
        else:
            manager.start_upload()
            try:
                outcome = self._submit(batch, manager)
            except Exception:
                manager.abort()
                raise
            manager.on_outcome(outcome)

            if isinstance(outcome, Success):
                if refresh is None:
                    refresh = self.config.refresh_after_upload if self.config else True
                if refresh:
                    self._refresh(schema, manager)

        if isinstance(outcome, Failure):
            self.error_log.append(ErrorRecord.from_failure(name, schema.kind.value, outcome))

        self._notify(outcome, schema)
        try:
            self.error_log.flush()
        except OSError as e:
            logger.warning("error log flush failed: %s", e)
        return outcome

    def _read(self, source: Path | str | bytes, schema: RecordSchema, name: str) -> Batch:
        """Decode and assemble one workbook; drop reasons go to the error log."""
        keep_na = self.config.keep_na_strings if self.config else None
        required = self.config.required_for(schema.kind) if self.config else None
        numbered = read_numbered_rows(source, keep_na_strings=keep_na)
        batch = assemble(
            [row for _, row in numbered],
            schema.kind,
            required,
            row_numbers=[n for n, _ in numbered],
        )

        self.last_batch = batch
        logger.info(
            "file=%s kind=%s rows=%d valid=%d dropped=%d",
            name,
            schema.kind.value,
            len(numbered),
            len(batch.records),
            batch.dropped_count,
        )
        self.error_log.extend(ErrorRecord.from_drop(name, schema.kind.value, r) for r in batch.dropped)
        return batch

    def _submit(self, batch: Batch, manager: SnapshotManager) -> UploadOutcome:
        if not batch.is_empty:
            manager.stage(batch.payload())
        return submit(batch, self.client)

    def _refresh(self, schema: RecordSchema, manager: SnapshotManager) -> None:
        try:
            records: list[dict[str, Any]] = self.client.list_records(schema.kind)
        except ApiError as e:
            logger.warning("refresh after upload failed, keeping local records: %s", e)
            return
        manager.refresh(records)

    def _notify(self, outcome: UploadOutcome, schema: RecordSchema) -> None:
        if isinstance(outcome, Success):
            skipped = f" ({outcome.dropped} row(s) skipped)" if outcome.dropped else ""
            self.notifier.notify(
                f"Uploaded {outcome.inserted} {schema.kind.value} record(s): {outcome.message}{skipped}"
            )
        else:
            self.notifier.notify(
                f"Upload failed [{outcome.kind.value}]: {outcome.detail}",
                level="error",
            )
