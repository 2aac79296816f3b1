"""Tests for config loader — YAML to dataclasses."""

import tempfile
from pathlib import Path

import pytest
import yaml


def test_load_config_parses_sections():
    """load_config should parse YAML into storage and api sections."""
    raw = {
        "storage": {
            "primary": "sqlite",
            "primary_path": "/tmp/bookmarks.db",
            "fallback_path": None,
        },
        "api": {"key": "abc123", "timeout": 10},
    }
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(raw, f)
        path = f.name

    from herostats.config import load_config

    cfg = load_config(Path(path))
    assert cfg.storage.primary == "sqlite"
    assert cfg.storage.primary_path == "/tmp/bookmarks.db"
    assert cfg.storage.fallback_path is None
    assert cfg.api.key == "abc123"
    assert cfg.api.timeout == 10
    assert cfg.api.base_url.startswith("https://")


def test_load_config_defaults(tmp_path, monkeypatch):
    """A missing file yields defaults; the API key comes from the environment."""
    monkeypatch.setenv("HEROSTATS_API_KEY", "from-env")
    from herostats.config import load_config

    cfg = load_config(tmp_path / "absent.yaml")
    assert cfg.storage.primary == "json"
    assert cfg.storage.primary_path == "saved_players.json"
    assert cfg.storage.fallback_path == "~/.herostats/local_storage.json"
    assert cfg.api.key == "from-env"


def test_load_config_rejects_unknown_backend(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("storage:\n  primary: redis\n")
    from herostats.config import load_config
    from herostats.errors import ConfigError

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_rejects_unknown_key(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api:\n  tiemout: 3\n")
    from herostats.config import load_config
    from herostats.errors import ConfigError

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_rejects_malformed_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("storage: [unclosed\n")
    from herostats.config import load_config
    from herostats.errors import ConfigError

    with pytest.raises(ConfigError):
        load_config(path)
