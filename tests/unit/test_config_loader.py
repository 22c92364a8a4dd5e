from __future__ import annotations

from pathlib import Path

import pytest

from travel_records.config.loader import ConfigError, load_config
from travel_records.models.fields import TRAVEL_SCHEMA


def _write(temp_workdir: Path, text: str) -> Path:
    p = temp_workdir / "config" / "app.yml"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_config_defaults(temp_workdir: Path):
    cfg = load_config(_write(temp_workdir, "api:\n  base_url: http://api.test\n"))
    assert cfg.api.base_url == "http://api.test"
    assert cfg.api.timeout is None
    assert cfg.notification_seconds == 4.0
    assert cfg.keep_na_strings is None
    assert cfg.error_log_dir == "./logs"
    assert cfg.refresh_after_upload is True
    assert cfg.required_for("travel") == TRAVEL_SCHEMA.required
    assert cfg.required_for("employee") == ("fullname",)


def test_load_config_full(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.keep_na_strings == ["NA"]
    assert cfg.refresh_after_upload is False
    assert cfg.notification_seconds == 4


def test_required_fields_override(temp_workdir: Path):
    cfg = load_config(
        _write(
            temp_workdir,
            "api:\n  base_url: http://api.test\n  timeout: 2.5\n"
            "required_fields:\n  employee: [fullname, office]\n",
        )
    )
    assert cfg.api.timeout == 2.5
    assert cfg.required_for("employee") == ("fullname", "office")
    assert cfg.required_for("travel") == TRAVEL_SCHEMA.required


def test_unknown_required_field(temp_workdir: Path):
    p = _write(temp_workdir, "api:\n  base_url: http://x\nrequired_fields:\n  travel: [salary]\n")
    with pytest.raises(ConfigError, match=r"required_fields.travel: unknown fields \['salary'\]"):
        load_config(p)


def test_env_overrides_base_url(write_config: Path, monkeypatch):
    monkeypatch.setenv("RECORDS_API_URL", "https://records.example")
    assert load_config(write_config).api.base_url == "https://records.example"


def test_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_invalid_yaml(temp_workdir: Path):
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(_write(temp_workdir, "api: [unclosed\n"))
