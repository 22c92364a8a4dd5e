from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for upload runs."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a finished run.

    Format::

        SUMMARY files={total} success={success} failed={failed} inserted={rows}
        dropped={dropped} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_inserted_rows=12,
        ...     total_dropped_rows=2, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1 success=1 failed=0 inserted=12 dropped=2 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"inserted={result.total_inserted_rows} "
        f"dropped={result.total_dropped_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
