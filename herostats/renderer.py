"""Presentation helpers — score colors, PIL badges, text tables."""

from datetime import datetime

from PIL import Image, ImageDraw, ImageFont

from herostats.bookmarks import BookmarkRecord

# (minimum score, color), checked top-down
SCORE_COLORS = [
    (10.0, "#10b981"),
    (8.0, "#f59e0b"),
    (6.0, "#f97316"),
]
LOW_SCORE_COLOR = "#ef4444"

RESULT_COLORS = {
    "win": "#22c55e",
    "lose": "#ef4444",
}

FONT_PATH = "DejaVuSans-Bold.ttf"


def _font(size: int) -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(FONT_PATH, size)
    except OSError:
        return ImageFont.load_default(size=size)


def parse_score(score) -> float | None:
    try:
        return float(score)
    except (TypeError, ValueError):
        return None


def score_to_color(score) -> str:
    """Map a match grade (string or number) to a hex color."""
    value = parse_score(score)
    if value is None:
        return LOW_SCORE_COLOR
    for threshold, color in SCORE_COLORS:
        if value >= threshold:
            return color
    return LOW_SCORE_COLOR


def result_to_color(result_class: str) -> str:
    return RESULT_COLORS.get(result_class, "#6b7280")


def render_score_badge(
    score,
    size: tuple[int, int] = (72, 32),
) -> Image.Image:
    """Render a rounded badge showing the score on its color."""
    img = Image.new("RGB", size, "#111111")
    draw = ImageDraw.Draw(img)
    draw.rounded_rectangle(
        (0, 0, size[0] - 1, size[1] - 1),
        radius=size[1] // 3,
        fill=score_to_color(score),
    )
    label = str(score) if score not in (None, "") else "-"
    draw.text(
        (size[0] // 2, size[1] // 2),
        label, font=_font(size[1] // 2), fill="white", anchor="mm",
    )
    return img


def format_time(timestamp: int) -> str:
    if not timestamp:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%m-%d %H:%M")


def _table(headers: list[str], rows: list[list[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = ["  ".join(h.ljust(w) for h, w in zip(headers, widths))]
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(c.ljust(w) for c, w in zip(row, widths)))
    return "\n".join(lines)


def format_bookmarks(records: list[BookmarkRecord]) -> str:
    if not records:
        return "No saved players."
    rows = [
        [r.nickname, r.id, format_time(r.save_time), format_time(r.last_used)]
        for r in records
    ]
    return _table(["Nickname", "ID", "Saved", "Last used"], rows)


def format_summary(summary: dict) -> str:
    return (
        f"Games: {summary['totalGames']}  "
        f"Win rate: {summary['winRate']}  "
        f"Avg KDA: {summary['avgKDA']}  "
        f"W/L: {summary['totalWins']}/{summary['totalLoss']}"
    )


def format_games(games: list[dict]) -> str:
    """Match table for rows produced by stats.recent_games."""
    if not games:
        return "No matches."
    rows = [
        [str(g["index"]), g["time"], g["heroName"], g["kda"],
         g["score"] or "-", g["result"], g["mode"]]
        for g in games
    ]
    return _table(["#", "Time", "Hero", "K/D/A", "Score", "Result", "Mode"], rows)
