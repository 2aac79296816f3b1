"""Config loader — YAML to dataclasses."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from herostats.errors import ConfigError

DEFAULT_FALLBACK_PATH = "~/.herostats/local_storage.json"


@dataclass
class StorageConfig:
    primary: str = "json"  # "json" | "sqlite"
    primary_path: str = "saved_players.json"
    fallback_path: str | None = DEFAULT_FALLBACK_PATH
    sqlite_timeout: float = 5.0


@dataclass
class ApiConfig:
    key: str = ""
    base_url: str = "https://api.t1qq.com/api/tool/wzrr/morebattle"
    timeout: int = 30
    hero_list: str = "heroList.json"


@dataclass
class AppConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    api: ApiConfig = field(default_factory=ApiConfig)


def load_config(path: Path | None) -> AppConfig:
    """Load config from YAML file. A missing file means all defaults."""
    raw = {}
    if path is not None and path.exists():
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"config {path} must be a mapping")

    try:
        storage = StorageConfig(**(raw.get("storage") or {}))
        api = ApiConfig(**(raw.get("api") or {}))
    except TypeError as e:
        raise ConfigError(f"unknown config key in {path}: {e}") from e

    if storage.primary not in ("json", "sqlite"):
        raise ConfigError(f"storage.primary must be 'json' or 'sqlite', got {storage.primary!r}")
    if not api.key:
        api.key = os.environ.get("HEROSTATS_API_KEY", "")

    return AppConfig(storage=storage, api=api)
