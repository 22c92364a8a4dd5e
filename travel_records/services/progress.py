from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.outcome import Success, UploadOutcome

"""Upload progress bar (tqdm, TTY only).

One tick per uploaded workbook; the postfix carries the running inserted and
failed counts. Redirected output gets no bar at all, so log lines stay free of
control sequences.
"""

__all__ = [
    "UploadProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class UploadProgress:
    """Tracks a multi-file upload run and mirrors it on a progress bar."""

    def __init__(self, total_files: int, *, kind: str) -> None:
        self.total_files = total_files
        self.label = f"Uploading {kind}"
        self.started = 0
        self.inserted = 0
        self.failed = 0

        self.pbar: TqdmType[Any] | None = None
        if is_tty_enabled():
            self.pbar = tqdm(
                total=total_files,
                desc=self.label,
                unit="file",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def begin(self, path: Path) -> None:
        self.started += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.label} ({path.name})")

    def done(self, outcome: UploadOutcome) -> None:
        if isinstance(outcome, Success):
            self.inserted += outcome.inserted
        else:
            self.failed += 1
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.label)
            self.pbar.set_postfix(inserted=self.inserted, failed=self.failed)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> UploadProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
