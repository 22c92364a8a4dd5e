from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from travel_records.models.outcome import Failure, FailureKind, Success
from travel_records.services.progress import UploadProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestUploadProgress:
    def test_bar_created_on_tty(self):
        with patch("travel_records.services.progress.is_tty_enabled", return_value=True), \
             patch("travel_records.services.progress.tqdm") as mock_tqdm:
            progress = UploadProgress(5, kind="travel")

            assert progress.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Uploading travel",
                unit="file",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_outcomes_update_counts_and_bar(self):
        with patch("travel_records.services.progress.is_tty_enabled", return_value=True), \
             patch("travel_records.services.progress.tqdm") as mock_tqdm:
            pbar = mock_tqdm.return_value
            with UploadProgress(2, kind="employee") as progress:
                progress.begin(Path("data/a.xlsx"))
                pbar.set_description.assert_called_with("Uploading employee (a.xlsx)")
                progress.done(Success(inserted=3, message="ok"))
                pbar.set_postfix.assert_called_with(inserted=3, failed=0)

                progress.begin(Path("data/b.xlsx"))
                progress.done(Failure(FailureKind.TRANSPORT_ERROR, "down"))
                pbar.set_postfix.assert_called_with(inserted=3, failed=1)
                assert pbar.update.call_count == 2
                assert progress.started == 2
            pbar.close.assert_called_once()
            assert progress.pbar is None

    def test_disabled_without_tty(self):
        with patch("travel_records.services.progress.is_tty_enabled", return_value=False), \
             patch("travel_records.services.progress.tqdm") as mock_tqdm:
            with UploadProgress(3, kind="travel") as progress:
                progress.begin(Path("a.xlsx"))
                progress.done(Failure(FailureKind.PARSE_ERROR, "bad"))
            mock_tqdm.assert_not_called()
            assert not progress.enabled
            assert progress.failed == 1
