"""
Rule Evaluator: badge and challenge predicates over a GameData snapshot.

Responsibility: decide which locked badges / open challenges are satisfied.
Nothing more.

Does NOT:
- Mutate the snapshot (pure, idempotent)
- Unlock or award anything (ProgressStore applies the returned ids)
- Check challenge expiry (ProgressStore rejects expired completions)

Each id maps to a rule object built once at import time. Per-game rules are
declarative thresholds over one game's stat record; cross-game rules read the
whole snapshot. A rule that raises is logged and counts as "not satisfied".
"""

import logging
import operator
from typing import Callable, Dict, Iterable, Set

from gameverse.models import GameData, StatRecord

logger = logging.getLogger(__name__)

# "Worse than any real result" for lower-is-better fields (times, moves, guesses)
UNRECORDED = float("inf")

_OPS = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "==": operator.eq,
}


# ============================================================================
# CONDITIONS (one stat record)
# ============================================================================

class Threshold:
    """
    field <op> value, with a neutral stand-in for missing stats.

    zero_is_missing: the default documents seed best-of fields with 0, which
    means "never recorded" rather than "a perfect 0".
    """

    def __init__(self, field: str, op: str, value: float, missing: float = 0, zero_is_missing: bool = False):
        if op not in _OPS:
            raise ValueError(f"unsupported comparator: {op}")
        self.field = field
        self.op = op
        self.value = value
        self.missing = missing
        self.zero_is_missing = zero_is_missing

    def read(self, stats: StatRecord) -> float:
        value = stats.get(self.field)
        if value is None or (self.zero_is_missing and value == 0):
            return self.missing
        return value

    def holds(self, stats: StatRecord) -> bool:
        return _OPS[self.op](self.read(stats), self.value)

    def __repr__(self):
        return f"Threshold({self.field} {self.op} {self.value})"


class StreakAtLeast:
    """Best win streak (falling back to the current streak) >= n."""

    def __init__(self, n: int):
        self.n = n

    def holds(self, stats: StatRecord) -> bool:
        return max(stats.get("bestStreak") or 0, stats.get("streak") or 0) >= self.n

    def __repr__(self):
        return f"StreakAtLeast({self.n})"


def at_least(field: str, n: float) -> Threshold:
    return Threshold(field, ">=", n)


def above(field: str, n: float) -> Threshold:
    return Threshold(field, ">", n)


def at_most(field: str, n: float) -> Threshold:
    """Lower-is-better field: missing or 0 means not yet recorded."""
    return Threshold(field, "<=", n, missing=UNRECORDED, zero_is_missing=True)


def exactly(field: str, n: float) -> Threshold:
    return Threshold(field, "==", n)


def best_exactly(field: str, n: float) -> Threshold:
    return Threshold(field, "==", n, missing=UNRECORDED, zero_is_missing=True)


# ============================================================================
# RULES (whole snapshot)
# ============================================================================

class StatRule:
    """All conditions hold for one game's stat record."""

    def __init__(self, game: str, *conditions):
        self.game = game
        self.conditions = conditions

    def __call__(self, snapshot: GameData) -> bool:
        stats = snapshot.game_progress.get(self.game) or {}
        return all(c.holds(stats) for c in self.conditions)

    def __repr__(self):
        return f"StatRule({self.game}, {', '.join(map(repr, self.conditions))})"


class SnapshotRule:
    """measure(snapshot) >= n for cross-game aggregates."""

    def __init__(self, measure: Callable[[GameData], float], n: float, op: str = ">="):
        self.measure = measure
        self.n = n
        self.op = op

    def __call__(self, snapshot: GameData) -> bool:
        return _OPS[self.op](self.measure(snapshot), self.n)

    def __repr__(self):
        return f"SnapshotRule({self.measure.__name__} {self.op} {self.n})"


def games_played(snapshot: GameData) -> int:
    """Number of distinct games with at least one play."""
    return sum(1 for stats in snapshot.game_progress.values() if (stats.get("plays") or 0) > 0)


def total_plays(snapshot: GameData) -> int:
    return sum(stats.get("plays") or 0 for stats in snapshot.game_progress.values())


def badges_unlocked(snapshot: GameData) -> int:
    return sum(1 for b in snapshot.badges if b.unlocked)


def lifetime_challenges_completed(snapshot: GameData) -> int:
    return snapshot.session_stats.challenges_completed


def lifetime_badge_unlocks(snapshot: GameData) -> int:
    return snapshot.session_stats.badges_unlocked


def generation_challenges_completed(snapshot: GameData) -> int:
    return sum(1 for c in snapshot.challenges if c.completed)


# ============================================================================
# BADGE TABLE
# ============================================================================

RPS = "rock-paper-scissors"
GUESS = "number-guess"
MEMORY = "memory-match"
TRIVIA = "trivia-quiz"
WORD = "word-unscramble"
PUZZLE = "grid-puzzle"
CLICKER = "idle-clicker"
BATTLE = "card-battle"
REACTION = "reaction-speed"

BADGE_RULES: Dict[str, Callable[[GameData], bool]] = {
    # Rock Paper Scissors
    "rps_novice": StatRule(RPS, at_least("wins", 3)),
    "rps_intermediate": StatRule(RPS, at_least("wins", 10)),
    "rps_advanced": StatRule(RPS, at_least("wins", 25)),
    "rps_expert": StatRule(RPS, at_least("wins", 50)),
    "rps_master": StatRule(RPS, at_least("wins", 100)),
    "rps_streak_3": StatRule(RPS, StreakAtLeast(3)),
    "rps_streak_5": StatRule(RPS, StreakAtLeast(5)),
    "rps_streak_10": StatRule(RPS, StreakAtLeast(10)),
    "rps_plays_50": StatRule(RPS, at_least("plays", 50)),
    "rps_plays_100": StatRule(RPS, at_least("plays", 100)),
    # Number Guess (bestScore = fewest guesses)
    "guess_novice": StatRule(GUESS, at_least("plays", 3)),
    "guess_intermediate": StatRule(GUESS, at_least("plays", 10)),
    "guess_advanced": StatRule(GUESS, at_least("plays", 25)),
    "guess_expert": StatRule(GUESS, at_most("bestScore", 5)),
    "guess_master": StatRule(GUESS, at_most("bestScore", 3)),
    "guess_plays_50": StatRule(GUESS, at_least("plays", 50)),
    "guess_plays_100": StatRule(GUESS, at_least("plays", 100)),
    "guess_perfect": StatRule(GUESS, best_exactly("bestScore", 1)),
    "guess_persistent": StatRule(GUESS, at_least("plays", 5), at_most("bestScore", 7)),
    "guess_lucky": StatRule(GUESS, at_most("bestScore", 2)),
    # Memory Match (bestScore = fewest moves)
    "memory_novice": StatRule(MEMORY, at_least("level", 1)),
    "memory_intermediate": StatRule(MEMORY, at_least("level", 2)),
    "memory_advanced": StatRule(MEMORY, at_least("level", 3)),
    "memory_expert": StatRule(MEMORY, at_least("level", 4)),
    "memory_master": StatRule(MEMORY, at_least("level", 4), at_most("bestScore", 20)),
    "memory_quick": StatRule(MEMORY, at_most("bestScore", 15)),
    "memory_efficient": StatRule(MEMORY, at_most("bestScore", 12)),
    "memory_plays_25": StatRule(MEMORY, at_least("plays", 25)),
    "memory_plays_50": StatRule(MEMORY, at_least("plays", 50)),
    "memory_perfect": StatRule(MEMORY, at_least("level", 4), at_most("bestScore", 16)),
    # Trivia Quiz (bestScore = most correct answers)
    "trivia_novice": StatRule(TRIVIA, at_least("score", 3)),
    "trivia_intermediate": StatRule(TRIVIA, at_least("score", 5)),
    "trivia_advanced": StatRule(TRIVIA, at_least("bestScore", 5)),
    "trivia_expert": StatRule(TRIVIA, at_least("bestScore", 5), at_least("plays", 10)),
    "trivia_master": StatRule(TRIVIA, at_least("bestScore", 5), at_least("plays", 25)),
    "trivia_perfect": StatRule(TRIVIA, at_least("bestScore", 5), at_least("plays", 5)),
    "trivia_quick": StatRule(TRIVIA, at_least("bestScore", 4), at_least("plays", 3)),
    "trivia_plays_25": StatRule(TRIVIA, at_least("plays", 25)),
    "trivia_plays_50": StatRule(TRIVIA, at_least("plays", 50)),
    "trivia_knowledgeable": StatRule(TRIVIA, at_least("bestScore", 4), at_least("plays", 15)),
    # Word Unscramble
    "word_novice": StatRule(WORD, at_least("solved", 3)),
    "word_intermediate": StatRule(WORD, at_least("solved", 10)),
    "word_advanced": StatRule(WORD, at_least("solved", 25)),
    "word_expert": StatRule(WORD, at_least("solved", 50)),
    "word_master": StatRule(WORD, at_least("solved", 100)),
    "word_no_hints": StatRule(WORD, at_least("solved", 10), exactly("hintsUsed", 0)),
    "word_efficient": StatRule(WORD, at_least("solved", 20), Threshold("hintsUsed", "<=", 5)),
    "word_plays_25": StatRule(WORD, at_least("plays", 25)),
    "word_plays_50": StatRule(WORD, at_least("plays", 50)),
    "word_vocabulary": StatRule(WORD, at_least("solved", 30)),
    # Grid Puzzle
    "puzzle_novice": StatRule(PUZZLE, at_least("plays", 1)),
    "puzzle_intermediate": StatRule(PUZZLE, at_least("plays", 5)),
    "puzzle_advanced": StatRule(PUZZLE, at_least("plays", 15)),
    "puzzle_expert": StatRule(PUZZLE, at_most("bestMoves", 50)),
    "puzzle_master": StatRule(PUZZLE, at_most("bestMoves", 30)),
    "puzzle_quick": StatRule(PUZZLE, at_most("bestTime", 60)),
    "puzzle_efficient": StatRule(PUZZLE, at_most("bestMoves", 40)),
    "puzzle_plays_25": StatRule(PUZZLE, at_least("plays", 25)),
    "puzzle_plays_50": StatRule(PUZZLE, at_least("plays", 50)),
    "puzzle_speed_demon": StatRule(PUZZLE, at_most("bestTime", 45)),
    # Idle Clicker
    "clicker_novice": StatRule(CLICKER, at_least("coins", 100)),
    "clicker_intermediate": StatRule(CLICKER, at_least("coins", 500)),
    "clicker_advanced": StatRule(CLICKER, at_least("coins", 1000)),
    "clicker_expert": StatRule(CLICKER, at_least("coins", 5000)),
    "clicker_master": StatRule(CLICKER, at_least("coins", 10000)),
    "clicker_clicks_100": StatRule(CLICKER, at_least("clicks", 100)),
    "clicker_clicks_500": StatRule(CLICKER, at_least("clicks", 500)),
    "clicker_cps_10": StatRule(CLICKER, at_least("cps", 10)),
    "clicker_cps_50": StatRule(CLICKER, at_least("cps", 50)),
    "clicker_cps_100": StatRule(CLICKER, at_least("cps", 100)),
    # Card Battle
    "battle_novice": StatRule(BATTLE, at_least("wins", 3)),
    "battle_intermediate": StatRule(BATTLE, at_least("wins", 10)),
    "battle_advanced": StatRule(BATTLE, at_least("wins", 25)),
    "battle_expert": StatRule(BATTLE, at_least("wins", 50)),
    "battle_master": StatRule(BATTLE, at_least("wins", 100)),
    "battle_strategist": StatRule(BATTLE, at_least("wins", 15), Threshold("losses", "<=", 5)),
    "battle_comeback": StatRule(BATTLE, at_least("wins", 10), at_least("losses", 10)),
    "battle_plays_25": StatRule(BATTLE, at_least("plays", 25)),
    "battle_plays_50": StatRule(BATTLE, at_least("plays", 50)),
    "battle_undefeated": StatRule(BATTLE, at_least("wins", 5), exactly("losses", 0)),
    # Reaction Speed (bestTime in ms)
    "reaction_novice": StatRule(REACTION, at_most("bestTime", 500)),
    "reaction_intermediate": StatRule(REACTION, at_most("bestTime", 400)),
    "reaction_advanced": StatRule(REACTION, at_most("bestTime", 300)),
    "reaction_expert": StatRule(REACTION, at_most("bestTime", 250)),
    "reaction_master": StatRule(REACTION, at_most("bestTime", 200)),
    "reaction_lightning": StatRule(REACTION, at_most("bestTime", 180)),
    "reaction_superhuman": StatRule(REACTION, at_most("bestTime", 150)),
    "reaction_plays_25": StatRule(REACTION, at_least("plays", 25)),
    "reaction_plays_50": StatRule(REACTION, at_least("plays", 50)),
    "reaction_consistent": StatRule(REACTION, at_least("plays", 10), at_most("bestTime", 300)),
    # Special (cross-game)
    "gameverse_novice": SnapshotRule(games_played, 3),
    "gameverse_intermediate": SnapshotRule(games_played, 5),
    "gameverse_advanced": SnapshotRule(games_played, 7),
    "gameverse_expert": SnapshotRule(games_played, 9),
    "gameverse_master": SnapshotRule(games_played, 10),
    "gameverse_addict": SnapshotRule(total_plays, 100),
    "badge_collector_bronze": SnapshotRule(badges_unlocked, 10),
    "badge_collector_silver": SnapshotRule(badges_unlocked, 25),
    "badge_collector_gold": SnapshotRule(badges_unlocked, 50),
    "badge_collector_platinum": SnapshotRule(badges_unlocked, 75),
    "challenge_master": SnapshotRule(lifetime_challenges_completed, 25),
}


# ============================================================================
# CHALLENGE TABLE
# ============================================================================

CHALLENGE_RULES: Dict[str, Callable[[GameData], bool]] = {
    "rps_daily_win_3": StatRule(RPS, at_least("wins", 3)),
    "rps_daily_play_5": StatRule(RPS, at_least("plays", 5)),
    "guess_daily_win": StatRule(GUESS, at_least("plays", 1), above("score", 0)),
    "guess_daily_under_5": StatRule(GUESS, at_most("bestScore", 5)),
    "memory_daily_complete": StatRule(MEMORY, at_least("plays", 1)),
    "memory_daily_level_2": StatRule(MEMORY, at_least("level", 2)),
    "trivia_daily_score_3": StatRule(TRIVIA, at_least("score", 3)),
    "trivia_daily_perfect": StatRule(TRIVIA, at_least("score", 5)),
    "word_daily_solve_3": StatRule(WORD, at_least("solved", 3)),
    "word_daily_no_hints": StatRule(WORD, at_least("solved", 1), exactly("hintsUsed", 0)),
    "puzzle_daily_complete": StatRule(PUZZLE, at_least("plays", 1)),
    "puzzle_daily_under_50": StatRule(PUZZLE, at_most("bestMoves", 50)),
    "clicker_daily_100": StatRule(CLICKER, at_least("coins", 100)),
    "clicker_daily_clicks_50": StatRule(CLICKER, at_least("clicks", 50)),
    "battle_daily_win": StatRule(BATTLE, at_least("wins", 1)),
    "battle_daily_win_3": StatRule(BATTLE, at_least("wins", 3)),
    "reaction_daily_under_400": StatRule(REACTION, at_most("bestTime", 400)),
    "reaction_daily_play_5": StatRule(REACTION, at_least("plays", 5)),
    "daily_play_3_games": SnapshotRule(games_played, 3),
    "daily_play_5_games": SnapshotRule(games_played, 5),
    "daily_total_plays_10": SnapshotRule(total_plays, 10),
    "daily_unlock_badge": SnapshotRule(lifetime_badge_unlocks, 0, op=">"),
    "daily_complete_5_challenges": SnapshotRule(generation_challenges_completed, 5),
}


# ============================================================================
# EVALUATION
# ============================================================================

def check_rule(rule_id: str, rule: Callable[[GameData], bool], snapshot: GameData) -> bool:
    """Evaluate one rule in isolation; errors count as not satisfied."""
    try:
        return bool(rule(snapshot))
    except Exception:
        logger.warning(f"[RULES] Rule {rule_id} failed; treating as not satisfied", exc_info=True)
        return False


def _satisfied(pending: Iterable[str], table: Dict[str, Callable[[GameData], bool]], snapshot: GameData) -> Set[str]:
    satisfied = set()
    for item_id in pending:
        rule = table.get(item_id)
        if rule is None:
            logger.debug(f"[RULES] No rule registered for {item_id}")
            continue
        if check_rule(item_id, rule, snapshot):
            satisfied.add(item_id)
    return satisfied


def evaluate_badges(snapshot: GameData) -> Set[str]:
    """Ids of locked badges whose rule now holds."""
    return _satisfied((b.id for b in snapshot.badges if not b.unlocked), BADGE_RULES, snapshot)


def evaluate_challenges(snapshot: GameData) -> Set[str]:
    """Ids of open challenges whose rule now holds."""
    return _satisfied((c.id for c in snapshot.challenges if not c.completed), CHALLENGE_RULES, snapshot)
