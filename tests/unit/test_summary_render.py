from __future__ import annotations

from datetime import UTC, datetime, timedelta

from travel_records.models.processing_result import FileStat, ProcessingResult
from travel_records.services.summary import render_summary_line

START = datetime(2024, 7, 5, 10, 0, 0, tzinfo=UTC)


def test_from_stats_aggregates():
    stats = [
        FileStat("a.xlsx", "success", 10, 2, 0.5),
        FileStat("b.xlsx", "failed", 0, 1, 0.1, "server_rejected"),
        FileStat("c.xlsx", "success", 3, 0, 0.2),
    ]
    result = ProcessingResult.from_stats(stats, START, START + timedelta(seconds=1.5))
    assert result.total_files == 3
    assert result.success_files == 2
    assert result.failed_files == 1
    assert result.total_inserted_rows == 13
    assert result.total_dropped_rows == 3
    assert result.file_stats == stats
    assert render_summary_line(result) == (
        "SUMMARY files=3 success=2 failed=1 inserted=13 dropped=3 elapsed_sec=1.5"
    )


def test_render_small_and_zero_elapsed():
    result = ProcessingResult.from_stats([], START, START)
    assert render_summary_line(result) == "SUMMARY files=0 success=0 failed=0 inserted=0 dropped=0 elapsed_sec=0"

    tiny = ProcessingResult.from_stats([], START, START + timedelta(microseconds=1500))
    assert render_summary_line(tiny).endswith("elapsed_sec=0.0015")
