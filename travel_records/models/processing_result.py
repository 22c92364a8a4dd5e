from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for multi-file upload runs.

One FileStat per uploaded file, aggregated into a ProcessingResult that feeds
the SUMMARY line printed by the CLI.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file upload statistics."""
    file_name: str
    status: str  # success / failed
    inserted_rows: int  # rows reported inserted by the bulk endpoint
    dropped_rows: int  # rows excluded by validation
    elapsed_seconds: float
    failure_kind: str | None = None  # FailureKind.value when failed


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for one CLI upload run."""
    success_files: int
    failed_files: int
    total_inserted_rows: int
    total_dropped_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files

    @staticmethod
    def from_stats(stats: list[FileStat], start_time: datetime, end_time: datetime) -> ProcessingResult:
        success = sum(1 for s in stats if s.status == "success")
        return ProcessingResult(
            success_files=success,
            failed_files=len(stats) - success,
            total_inserted_rows=sum(s.inserted_rows for s in stats),
            total_dropped_rows=sum(s.dropped_rows for s in stats),
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - start_time).total_seconds(),
            file_stats=stats,
        )
