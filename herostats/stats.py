"""Match statistics API client.

Queries the remote match-history endpoint for each API mode in a
category, merges and deduplicates the results and builds the summary the
CLI prints.
"""

from __future__ import annotations

import http.client
import json
import logging
import threading
import urllib.parse
import urllib.request
from dataclasses import dataclass
from pathlib import Path

from herostats.errors import StatsAPIError
from herostats.heroes import DEFAULT_HERO_LIST, hero_name

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.t1qq.com/api/tool/wzrr/morebattle"

# category -> API "option" values
CATEGORY_MODES = {
    "1": ["0"],
    "2": ["1", "16"],
    "3": ["4"],
    "4": ["2", "7", "3", "5", "6", "17"],
    "5": ["8", "9", "10"],
}

CATEGORY_LABELS = {
    "1": "All matches",
    "2": "Ranked",
    "3": "Peak",
    "4": "Matchmaking",
    "5": "Custom room",
}

RANKED_BATTLE_TYPES = {12, 13, 15, 16}


@dataclass
class MatchRecord:
    dt_event_time: str = ""
    game_time: str = ""
    kill_cnt: int = 0
    dead_cnt: int = 0
    assist_cnt: int = 0
    game_result: int = 0
    hero_id: int = 0
    map_name: str = ""
    grade_game: str = ""
    hero_icon: str = ""
    role_job_name: str = ""
    stars: int = 0
    game_seq: str = ""
    battle_type: int = 0

    @classmethod
    def from_api(cls, raw: dict) -> MatchRecord:
        def _int(key):
            try:
                return int(raw.get(key) or 0)
            except (TypeError, ValueError):
                return 0

        return cls(
            dt_event_time=str(raw.get("dtEventTime") or ""),
            game_time=str(raw.get("gametime") or ""),
            kill_cnt=_int("killcnt"),
            dead_cnt=_int("deadcnt"),
            assist_cnt=_int("assistcnt"),
            game_result=_int("gameresult"),
            hero_id=_int("heroId"),
            map_name=str(raw.get("mapName") or ""),
            grade_game=str(raw.get("gradeGame") or ""),
            hero_icon=str(raw.get("heroIcon") or ""),
            role_job_name=str(raw.get("roleJobName") or ""),
            stars=_int("stars"),
            game_seq=str(raw.get("gameSeq") or ""),
            battle_type=_int("battleType"),
        )

    @property
    def dedupe_key(self) -> str:
        if self.game_seq:
            return self.game_seq
        return f"{self.dt_event_time}-{self.hero_id}"

    @property
    def won(self) -> bool:
        return self.game_result == 1


def is_ranked(record: MatchRecord) -> bool:
    return "排位" in record.map_name or record.battle_type in RANKED_BATTLE_TYPES


def is_peak(record: MatchRecord) -> bool:
    return "巅峰" in record.map_name


def category_modes(category: str) -> list[str]:
    """API modes for a category; unknown categories query everything."""
    return CATEGORY_MODES.get(category, CATEGORY_MODES["1"])


def category_options() -> list[dict]:
    return [{"value": value, "label": label} for value, label in CATEGORY_LABELS.items()]


def analyze_summary(records: list[MatchRecord]) -> dict:
    """Totals, win rate and average K/D/A."""
    if not records:
        return {
            "totalGames": 0,
            "winRate": "0%",
            "avgKDA": "0/0/0",
            "totalWins": 0,
            "totalLoss": 0,
        }
    total = len(records)
    wins = sum(1 for r in records if r.won)
    avg_k = sum(r.kill_cnt for r in records) / total
    avg_d = sum(r.dead_cnt for r in records) / total
    avg_a = sum(r.assist_cnt for r in records) / total
    return {
        "totalGames": total,
        "winRate": f"{wins / total * 100:.1f}%",
        "avgKDA": f"{avg_k:.1f}/{avg_d:.1f}/{avg_a:.1f}",
        "totalWins": wins,
        "totalLoss": total - wins,
    }


def recent_games(records: list[MatchRecord], count: int | None = None,
                 hero_list: Path = DEFAULT_HERO_LIST) -> list[dict]:
    """Display rows for the first count records."""
    if count is None or count > len(records):
        count = len(records)
    rows = []
    for i, r in enumerate(records[:count]):
        rows.append({
            "index": i + 1,
            "time": r.game_time,
            "heroId": r.hero_id,
            "heroName": hero_name(r.hero_id, hero_list),
            "heroIcon": r.hero_icon,
            "kda": f"{r.kill_cnt}/{r.dead_cnt}/{r.assist_cnt}",
            "kills": r.kill_cnt,
            "deaths": r.dead_cnt,
            "assists": r.assist_cnt,
            "score": r.grade_game,
            "result": "Victory" if r.won else "Defeat",
            "resultClass": "win" if r.won else "lose",
            "mode": r.map_name,
        })
    return rows


class StatsClient:
    """Client for the match-history endpoint."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 30,
                 hero_list: Path | str = DEFAULT_HERO_LIST):
        self.base_url = base_url
        self.timeout = timeout
        self.hero_list = Path(hero_list)

    def _url(self, api_key: str, player_id: str, mode: str) -> str:
        query = urllib.parse.urlencode({"key": api_key, "id": player_id, "option": mode})
        return f"{self.base_url}?{query}"

    def fetch_mode(self, api_key: str, player_id: str, mode: str) -> list[MatchRecord]:
        """Fetch one API mode. Raises StatsAPIError on any failure."""
        req = urllib.request.Request(
            self._url(api_key, player_id, mode),
            headers={"User-Agent": "herostats/1.0"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                data = json.loads(resp.read())
        except (OSError, http.client.HTTPException) as e:
            raise StatsAPIError(f"mode {mode} request failed: {e}") from e
        except ValueError as e:
            raise StatsAPIError(f"mode {mode} returned invalid JSON: {e}") from e

        if not isinstance(data, dict) or data.get("code") != 200:
            msg = data.get("msg", "") if isinstance(data, dict) else ""
            raise StatsAPIError(f"mode {mode} API error: {msg}")
        payload = data.get("data") or {}
        items = payload.get("list") if isinstance(payload, dict) else None
        if items is None:
            return []
        if not isinstance(items, list):
            raise StatsAPIError(f"mode {mode} returned a malformed match list")
        return [MatchRecord.from_api(item) for item in items if isinstance(item, dict)]

    def query_battles(self, api_key: str, player_id: str, category: str = "1") -> dict:
        """Fetch every mode of a category concurrently and summarise.

        Modes that fail are logged and skipped.
        """
        modes = category_modes(category)
        logger.debug("Querying category %s -> modes %s", category, modes)

        seen: set[str] = set()
        records: list[MatchRecord] = []
        lock = threading.Lock()

        def _worker(mode: str):
            try:
                fetched = self.fetch_mode(api_key, player_id, mode)
            except StatsAPIError as e:
                logger.warning("%s", e)
                return
            with lock:
                for record in fetched:
                    key = record.dedupe_key
                    if key in seen:
                        continue
                    seen.add(key)
                    if category == "4" and (is_ranked(record) or is_peak(record)):
                        continue
                    records.append(record)
            logger.debug("Mode %s returned %d records", mode, len(fetched))

        threads = [threading.Thread(target=_worker, args=(m,), daemon=True) for m in modes]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        records.sort(key=lambda r: r.dt_event_time, reverse=True)
        result = {
            "success": True,
            "category": category,
            "total": len(records),
            "summary": analyze_summary(records),
            "recentGames": recent_games(records, hero_list=self.hero_list),
            "modesCount": len(modes),
        }
        if not records:
            label = CATEGORY_LABELS.get(category, CATEGORY_LABELS["1"])
            result["message"] = f"No matches recorded for this player in {label}"
        return result
