from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.fields import RecordKind, get_schema

"""Config loader.

Responsibilities:
- Load YAML config (default ``config/app.yml``)
- Validate against the packaged JSON schema (config_schema.json)
- Apply defaults and check per-kind required field overrides
- Let ``RECORDS_API_URL`` override ``api.base_url``
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/app.yml")
API_URL_ENV = "RECORDS_API_URL"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    timeout: float | None = None  # None = 応答まで待つ


@dataclass(frozen=True)
class AppConfig:
    api: ApiConfig
    required_fields: dict[str, tuple[str, ...]] = field(default_factory=dict)
    notification_seconds: float = 4.0
    keep_na_strings: list[str] | None = None
    error_log_dir: str = "./logs"
    refresh_after_upload: bool = True

    def required_for(self, kind: RecordKind | str) -> tuple[str, ...]:
        schema = get_schema(kind)
        return self.required_fields.get(schema.kind.value, schema.required)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/invalid, or the config violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _required_fields(raw: dict[str, list[str]]) -> dict[str, tuple[str, ...]]:
    resolved: dict[str, tuple[str, ...]] = {}
    for kind_name, names in raw.items():
        schema = get_schema(kind_name)
        unknown = [n for n in names if n not in schema.field_names]
        if unknown:
            raise ConfigError(f"required_fields.{kind_name}: unknown fields {unknown}")
        resolved[schema.kind.value] = tuple(names)
    return resolved


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    api_raw = data["api"]
    base_url = os.getenv(API_URL_ENV) or api_raw["base_url"]
    return AppConfig(
        api=ApiConfig(base_url=base_url, timeout=api_raw.get("timeout")),
        required_fields=_required_fields(data.get("required_fields") or {}),
        notification_seconds=data.get("notification_seconds", 4.0),
        keep_na_strings=data.get("keep_na_strings"),
        error_log_dir=data.get("error_log_dir", "./logs"),
        refresh_after_upload=data.get("refresh_after_upload", True),
    )
