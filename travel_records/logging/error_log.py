from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Upload error log (JSON Lines).

Entries are buffered during an upload and appended on flush() to a single
file per process, ``<log_dir>/errors-YYYYMMDD-HHMMSS.log`` (UTC). The file is
only created once there is something to write.
"""

__all__ = [
    "ErrorLogBuffer",
    "LOGS_DIR",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    def __init__(self, log_dir: Path | None = None) -> None:
        self.log_dir = log_dir if log_dir is not None else LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._path: Path | None = None

    @property
    def file_path(self) -> Path:
        """Log file of this process; the name is fixed on first use."""
        if self._path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._path = self.log_dir / f"errors-{stamp}.log"
        return self._path

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._pending.extend(records)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Append pending entries to the log file.

        Returns the file written, or None when nothing was pending. Entries stay
        pending if the write fails (OSError propagates).
        """
        if not self._pending:
            return None
        path = self.file_path
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.writelines(r.to_json_line() + "\n" for r in self._pending)
        self._pending.clear()
        return path
