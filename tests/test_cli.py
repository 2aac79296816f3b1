"""Tests for the herostats command line."""

from unittest.mock import patch

import pytest
import yaml


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "storage": {
            "primary_path": str(tmp_path / "saved.json"),
            "fallback_path": str(tmp_path / "local_storage.json"),
        },
        "api": {"key": "KEY", "hero_list": str(tmp_path / "heroList.json")},
    }))
    return path


def _run(config_path, *argv):
    from herostats.cli import main

    with pytest.raises(SystemExit) as exc:
        main(["--config", str(config_path), *argv])
    return exc.value.code


def test_save_list_remove(config_path, capsys):
    assert _run(config_path, "save", "P1", "Alice") == 0
    assert _run(config_path, "list") == 0
    out = capsys.readouterr().out
    assert "Saved." in out
    assert "Alice" in out and "P1" in out

    assert _run(config_path, "remove", "P1") == 0
    assert _run(config_path, "remove", "P1") == 1
    assert _run(config_path, "list") == 0
    assert "No saved players." in capsys.readouterr().out


def test_save_blank_nickname_is_an_error(config_path, capsys):
    assert _run(config_path, "save", "P1", "   ") == 1
    assert "nickname" in capsys.readouterr().out


def test_select_unknown_player(config_path, capsys):
    assert _run(config_path, "select", "nobody") == 1
    assert "No saved player nobody" in capsys.readouterr().out


def test_query_prints_summary_and_writes_badges(config_path, tmp_path, capsys):
    result = {
        "success": True,
        "category": "1",
        "total": 1,
        "summary": {"totalGames": 1, "winRate": "100.0%", "avgKDA": "1.0/0.0/2.0",
                    "totalWins": 1, "totalLoss": 0},
        "recentGames": [{
            "index": 1, "time": "01-02 10:00", "heroName": "瑶", "kda": "1/0/2",
            "score": "10.2", "result": "Victory", "mode": "排位赛",
        }],
        "modesCount": 1,
    }
    _run(config_path, "save", "P1", "Alice")
    with patch("herostats.cli.StatsClient") as MockClient:
        MockClient.return_value.query_battles.return_value = result
        code = _run(config_path, "query", "P1", "--badges", str(tmp_path / "badges"))

    assert code == 0
    MockClient.return_value.query_battles.assert_called_once_with("KEY", "P1", "1")
    out = capsys.readouterr().out
    assert "Win rate: 100.0%" in out
    assert "1/0/2" in out
    assert (tmp_path / "badges" / "game_001.png").exists()


def test_query_without_api_key(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("HEROSTATS_API_KEY", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"storage": {"primary_path": str(tmp_path / "s.json"),
                                           "fallback_path": None}}))
    assert _run(path, "query", "P1") == 1
    assert "No API key" in capsys.readouterr().out


def test_categories(config_path, capsys):
    assert _run(config_path, "categories") == 0
    out = capsys.readouterr().out
    assert "1  All matches" in out
    assert "5  Custom room" in out
