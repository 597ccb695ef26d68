from datetime import datetime

import pytest

from gameverse import summary
from gameverse.catalog import CHALLENGE_TEMPLATES
from gameverse.models import DailyLog, default_game_data
from gameverse.scheduler import generate_challenges


@pytest.fixture
def snapshot():
    return default_game_data(generate_challenges(datetime(2026, 10, 18, 12, 0, 0)))


def unlock(snapshot, badge_id, when):
    badge = snapshot.get_badge(badge_id)
    badge.unlocked = True
    badge.unlocked_at = when


def test_badge_progress_rounds_half_up(snapshot):
    assert summary.badge_progress(snapshot) == (0, len(snapshot.badges), 0)
    unlock(snapshot, "rps_novice", "2026-10-18T10:00:00")
    unlocked, total, pct = summary.badge_progress(snapshot)
    assert (unlocked, total) == (1, 101)
    assert pct == 1


def test_challenge_progress_and_coins(snapshot):
    total_rewards = sum(t.reward_coins for t in CHALLENGE_TEMPLATES)
    assert summary.coins_available(snapshot) == total_rewards
    assert summary.coins_earned(snapshot) == 0

    snapshot.get_challenge("rps_daily_win_3").completed = True
    assert summary.challenge_progress(snapshot) == (1, 23, 4)
    assert summary.coins_earned(snapshot) == 50
    assert summary.coins_available(snapshot) == total_rewards - 50


def test_most_played_game(snapshot):
    assert summary.most_played_game(snapshot.game_progress) == "None yet"
    snapshot.game_progress["trivia-quiz"]["plays"] = 4
    snapshot.game_progress["dice-roller"]["plays"] = 2
    assert summary.most_played_game(snapshot.game_progress) == "Trivia Quiz"


def test_best_performance_prefers_win_rate(snapshot):
    snapshot.game_progress["rock-paper-scissors"].update({"wins": 3, "plays": 4})
    snapshot.game_progress["card-battle"].update({"wins": 1, "plays": 4})
    assert summary.best_performance(snapshot.game_progress) == "Rock Paper Scissors (75% win rate)"


def test_best_performance_falls_back_to_game_metrics(snapshot):
    snapshot.game_progress["reaction-speed"]["bestTime"] = 250
    snapshot.game_progress["memory-match"]["level"] = 2
    assert summary.best_performance(snapshot.game_progress) == "Memory Match (Level 2)"
    snapshot.game_progress["trivia-quiz"]["bestScore"] = 5
    assert summary.best_performance(snapshot.game_progress) == "Trivia Quiz (Best Score 5)"


def test_best_performance_nothing_played():
    assert summary.best_performance({}) == "No competitive games played yet"


def test_badges_by_game_keeps_catalog_order(snapshot):
    grouped = summary.badges_by_game(snapshot.badges)
    assert list(grouped)[0] == "rock-paper-scissors"
    assert list(grouped)[-1] == "all"
    assert len(grouped["rock-paper-scissors"]) == 10


def test_filter_badges(snapshot):
    unlock(snapshot, "rps_novice", "2026-10-18T10:00:00")
    assert [b.id for b in summary.filter_badges(snapshot.badges, "unlocked")] == ["rps_novice"]
    assert len(summary.filter_badges(snapshot.badges, "locked")) == 100
    assert all(b.game == "card-battle" for b in summary.filter_badges(snapshot.badges, "card-battle"))
    searched = summary.filter_badges(snapshot.badges, "all", "  COLLECTOR ")
    assert {b.id for b in searched} >= {"badge_collector_bronze", "badge_collector_gold"}


def test_sort_badges(snapshot):
    unlock(snapshot, "rps_novice", "2026-10-01T10:00:00")
    unlock(snapshot, "battle_novice", "2026-10-10T10:00:00")
    newest = summary.sort_badges(snapshot.badges, "newest")
    assert [b.id for b in newest[:2]] == ["battle_novice", "rps_novice"]
    oldest = summary.sort_badges(snapshot.badges, "oldest")
    assert [b.id for b in oldest[:2]] == ["rps_novice", "battle_novice"]
    default = summary.sort_badges(snapshot.badges)
    assert {b.id for b in default[:2]} == {"rps_novice", "battle_novice"}
    alphabetical = summary.sort_badges(snapshot.badges, "alphabetical")
    titles = [b.title.lower() for b in alphabetical]
    assert titles == sorted(titles)
    with pytest.raises(ValueError):
        summary.sort_badges(snapshot.badges, "random")


def test_daily_activity_keeps_most_recent_days(snapshot):
    logs = snapshot.session_stats.daily_logs
    for day in range(1, 10):
        logs[f"2026-10-{day:02d}"] = DailyLog(games_played=day)
    activity = summary.daily_activity(snapshot, days=7)
    assert list(activity) == [f"2026-10-{d:02d}" for d in range(3, 10)]
    assert activity["2026-10-09"]["gamesPlayed"] == 9
