"""herostats — command line entry point."""

import argparse
import logging
import sys
from pathlib import Path

from herostats.config import load_config
from herostats.errors import ConfigError, ValidationError
from herostats.manager import BookmarkManager, build_manager
from herostats.renderer import (
    format_bookmarks,
    format_games,
    format_summary,
    render_score_badge,
)
from herostats.stats import StatsClient, category_options

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="herostats", description="Match stats and saved players")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    sub = parser.add_subparsers(dest="command", required=True)

    query = sub.add_parser("query", help="Look up match statistics for a player")
    query.add_argument("player_id")
    query.add_argument("--category", default="1", choices=["1", "2", "3", "4", "5"])
    query.add_argument("--limit", type=int, default=None, help="Show at most N matches")
    query.add_argument("--badges", default=None, help="Write score badge PNGs to this directory")

    save = sub.add_parser("save", help="Bookmark a player id")
    save.add_argument("player_id")
    save.add_argument("nickname")

    remove = sub.add_parser("remove", help="Delete a bookmark")
    remove.add_argument("player_id")

    select = sub.add_parser("select", help="Mark a bookmark as used")
    select.add_argument("player_id")

    sub.add_parser("list", help="Show saved players")
    sub.add_parser("categories", help="Show match categories")
    return parser


def _write_badges(games: list[dict], directory: Path) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for game in games:
        img = render_score_badge(game["score"])
        img.save(directory / f"game_{game['index']:03d}.png")


def run_query(args, config, manager: BookmarkManager) -> int:
    if not config.api.key:
        print("No API key configured (api.key or HEROSTATS_API_KEY).")
        return 1
    client = StatsClient(
        base_url=config.api.base_url,
        timeout=config.api.timeout,
        hero_list=config.api.hero_list,
    )
    result = client.query_battles(config.api.key, args.player_id, args.category)
    if manager.get(args.player_id) is not None:
        manager.select(args.player_id)

    games = result["recentGames"]
    if args.limit is not None:
        games = games[:args.limit]
    print(format_summary(result["summary"]))
    if result.get("message"):
        print(result["message"])
    else:
        print(format_games(games))
    if args.badges:
        _write_badges(games, Path(args.badges))
    return 0


def run(args) -> int:
    config = load_config(Path(args.config))
    manager = build_manager(config)

    if args.command == "query":
        return run_query(args, config, manager)
    if args.command == "save":
        ok = manager.save(args.player_id, args.nickname)
        print("Saved." if ok else "Save failed.")
        return 0 if ok else 1
    if args.command == "remove":
        if manager.remove(args.player_id):
            print("Removed.")
            return 0
        print(f"No saved player {args.player_id}.")
        return 1
    if args.command == "select":
        record = manager.select(args.player_id)
        if record is None:
            print(f"No saved player {args.player_id}.")
            return 1
        print(f"{record.nickname} ({record.id})")
        return 0
    if args.command == "list":
        print(format_bookmarks(manager.list()))
        return 0
    if args.command == "categories":
        for option in category_options():
            print(f"{option['value']}  {option['label']}")
        return 0
    return 1


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        code = run(args)
    except (ConfigError, ValidationError) as e:
        print(f"Error: {e}")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
