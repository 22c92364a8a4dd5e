# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from travel_records.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("RECORDS_API_URL", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: http://api.test
  timeout: null
notification_seconds: 4
keep_na_strings: [NA]
error_log_dir: ./logs
refresh_after_upload: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "app.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[..., Path]:
    """Write rows (list of dicts, header = keys of the first row) to data/<name>."""

    def _make(name: str, rows: list[dict[str, Any]], columns: list[str] | None = None) -> Path:
        path = temp_workdir / "data" / name
        df = pd.DataFrame(rows, columns=columns)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Sheet1", index=False)
        return path

    return _make


@pytest.fixture()
def travel_rows() -> list[dict[str, Any]]:
    base = {
        "Position /Designation": "Engineer II",
        "Official Station": "Region 1",
        "Purpose of Travel": "Site inspection",
        "Host of Activity": "DPWH",
        "DatesFrom": "5/7/24",
        "DatesTo": "7/7/24",
        "Destination": "Baguio",
        "Area": "North",
    }
    return [
        {"Name": "Name A", **base},
        {"Name": "Name B", **base, "Purpose of Travel": None},
    ]
