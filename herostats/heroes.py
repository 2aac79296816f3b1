"""Hero names by id.

Loads heroList.json ([{ename, cname, title, hero_type}, ...]) once per
path and falls back to a small built-in table.
"""

import json
import logging
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_HERO_LIST = Path("heroList.json")

_FALLBACK_NAMES = {
    505: "瑶",
    155: "马可波罗",
    196: "诸葛亮",
    119: "干将莫邪",
    184: "蔡文姬",
    503: "海月",
    117: "钟无艳",
    585: "元流之子(辅助)",
    188: "大禹",
}

HERO_TYPES = {
    1: "Tank",
    2: "Warrior",
    3: "Assassin",
    4: "Mage",
    5: "Marksman",
    6: "Support",
}

_heroes: dict[Path, dict[int, dict]] = {}
_lock = threading.Lock()


def load_hero_list(path: Path = DEFAULT_HERO_LIST) -> dict[int, dict] | None:
    """Return {ename: hero} for path, or None if the file is unusable."""
    path = Path(path)
    with _lock:
        if path in _heroes:
            return _heroes[path]
        try:
            with open(path, encoding="utf-8") as f:
                heroes = json.load(f)
            table = {int(h["ename"]): h for h in heroes}
        except (OSError, KeyError, TypeError, ValueError) as e:
            logger.debug("Hero list %s unavailable: %s", path, e)
            return None
        logger.debug("Loaded %d heroes from %s", len(table), path)
        _heroes[path] = table
        return table


def clear_cache() -> None:
    with _lock:
        _heroes.clear()


def _fallback_name(hero_id: int) -> str:
    return _FALLBACK_NAMES.get(hero_id, f"Unknown hero ({hero_id})")


def hero_name(hero_id: int, path: Path = DEFAULT_HERO_LIST) -> str:
    table = load_hero_list(path)
    if table and hero_id in table:
        return table[hero_id].get("cname") or _fallback_name(hero_id)
    return _fallback_name(hero_id)


def hero_info(hero_id: int, path: Path = DEFAULT_HERO_LIST) -> dict:
    """Name, title, role and display name for a hero id."""
    table = load_hero_list(path)
    hero = table.get(hero_id) if table else None
    if hero is None:
        return {"id": hero_id, "name": _fallback_name(hero_id), "type": "unknown"}
    return {
        "id": hero_id,
        "name": hero.get("cname", ""),
        "title": hero.get("title", ""),
        "type": HERO_TYPES.get(hero.get("hero_type"), "Unknown type"),
        "fullName": f"{hero.get('cname', '')} - {hero.get('title', '')}",
    }
