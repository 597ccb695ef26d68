"""
Derived statistics for the dashboard, badges and challenges screens.

Read-only helpers over a GameData snapshot.
"""

from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Tuple

from gameverse.catalog import format_game_name
from gameverse.models import Badge, GameData, GameProgress
from gameverse.scheduler import parse_timestamp

BADGE_TABS = ("all", "unlocked", "locked")
SORT_ORDERS = ("default", "newest", "oldest", "alphabetical")


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _percent(part: int, whole: int) -> int:
    return _round_half_up(part * 100 / whole) if whole else 0


def badge_progress(snapshot: GameData) -> Tuple[int, int, int]:
    """(unlocked, total, percent)."""
    total = len(snapshot.badges)
    unlocked = sum(1 for b in snapshot.badges if b.unlocked)
    return unlocked, total, _percent(unlocked, total)


def challenge_progress(snapshot: GameData) -> Tuple[int, int, int]:
    """(completed, total, percent) for the current generation."""
    total = len(snapshot.challenges)
    completed = sum(1 for c in snapshot.challenges if c.completed)
    return completed, total, _percent(completed, total)


def coins_available(snapshot: GameData) -> int:
    return sum(c.reward_coins for c in snapshot.challenges if not c.completed)


def coins_earned(snapshot: GameData) -> int:
    """Coins earned in the current generation (lifetime total is sessionStats.totalCoins)."""
    return sum(c.reward_coins for c in snapshot.challenges if c.completed)


def most_played_game(progress: GameProgress) -> str:
    most_played = ""
    max_plays = 0
    for game, stats in progress.items():
        plays = stats.get("plays") or 0
        if plays > max_plays:
            max_plays = plays
            most_played = game
    return format_game_name(most_played) if max_plays > 0 else "None yet"


def best_performance(progress: GameProgress) -> str:
    """
    One-line highlight: the best win rate, or failing that the strongest
    game-specific metric (reaction speed, memory level, trivia score).
    """
    best_game = ""
    best_metric = 0.0

    for game, stats in progress.items():
        wins, plays = stats.get("wins") or 0, stats.get("plays") or 0
        if wins and plays:
            rate = wins / plays
            if rate > best_metric:
                best_metric = rate
                best_game = f"{format_game_name(game)} ({_round_half_up(rate * 100)}% win rate)"

    if best_game:
        return best_game

    for game, stats in progress.items():
        if game == "reaction-speed" and stats.get("bestTime"):
            metric = max(0, 100 - stats["bestTime"] / 5)
            if metric > best_metric:
                best_metric = metric
                best_game = f"{format_game_name(game)} ({_round_half_up(metric)}% speed)"
        elif game == "memory-match" and stats.get("level"):
            metric = stats["level"] * 25
            if metric > best_metric:
                best_metric = metric
                best_game = f"{format_game_name(game)} (Level {stats['level']})"
        elif game == "trivia-quiz" and stats.get("bestScore"):
            metric = stats["bestScore"] * 20
            if metric > best_metric:
                best_metric = metric
                best_game = f"{format_game_name(game)} (Best Score {stats['bestScore']})"

    return best_game or "No competitive games played yet"


def badges_by_game(badges: List[Badge]) -> "OrderedDict[str, List[Badge]]":
    grouped: "OrderedDict[str, List[Badge]]" = OrderedDict()
    for badge in badges:
        grouped.setdefault(badge.game, []).append(badge)
    return grouped


def filter_badges(badges: List[Badge], tab: str = "all", query: str = "") -> List[Badge]:
    """tab is "all", "unlocked", "locked" or a badge's game id; query searches the text fields."""
    if tab == "unlocked":
        result = [b for b in badges if b.unlocked]
    elif tab == "locked":
        result = [b for b in badges if not b.unlocked]
    elif tab != "all":
        result = [b for b in badges if b.game == tab]
    else:
        result = list(badges)

    needle = query.strip().lower()
    if needle:
        result = [
            b for b in result
            if needle in b.title.lower()
            or needle in b.description.lower()
            or needle in b.game.lower()
            or needle in b.requirement.lower()
        ]
    return result


def _unlocked_time(badge: Badge) -> datetime:
    return parse_timestamp(badge.unlocked_at or "") or datetime.min


def sort_badges(badges: List[Badge], order: str = "default") -> List[Badge]:
    if order not in SORT_ORDERS:
        raise ValueError(f"unknown sort order: {order}")
    if order == "alphabetical":
        return sorted(badges, key=lambda b: b.title.lower())
    if order in ("newest", "oldest"):
        unlocked = [b for b in badges if b.unlocked]
        locked = [b for b in badges if not b.unlocked]
        unlocked.sort(key=_unlocked_time, reverse=(order == "newest"))
        return unlocked + locked
    # Unlocked first, then grouped by game.
    return sorted(badges, key=lambda b: (not b.unlocked, b.game))


def daily_activity(snapshot: GameData, days: int = 7) -> Dict[str, Dict[str, int]]:
    """The most recent `days` daily logs, oldest first."""
    logs = snapshot.session_stats.daily_logs
    return {day: logs[day].to_dict() for day in sorted(logs)[-days:]}