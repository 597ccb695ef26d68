"""
GameVerse data model.

The persisted document is a single JSON object:

    {"gameProgress": {...}, "badges": [...], "challenges": [...], "sessionStats": {...}}

Python attributes are snake_case; to_dict()/from_dict() own the mapping to the
camelCase keys of the stored document. GameData.from_dict() raises KeyError,
TypeError or ValueError only when the top-level shape is wrong; unreadable
entries inside it are dropped or zeroed with a warning.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gameverse.catalog import (
    BADGE_CATALOG,
    GAME_REGISTRY,
    BadgeTemplate,
    ChallengeTemplate,
)

logger = logging.getLogger(__name__)

# Closed vocabulary of per-game stat fields.
STAT_FIELDS = frozenset({
    "plays",
    "wins",
    "losses",
    "draws",
    "score",
    "bestScore",
    "bestTime",
    "bestMoves",
    "level",
    "solved",
    "hintsUsed",
    "coins",
    "cps",
    "clicks",
    "timeSpent",
    "streak",
    "bestStreak",
})

# Rates may be fractional; everything else is a counter.
FRACTIONAL_FIELDS = frozenset({"cps"})

StatRecord = Dict[str, float]
GameProgress = Dict[str, StatRecord]


@dataclass
class Badge:
    id: str
    title: str
    description: str
    game: str
    requirement: str
    icon: str
    unlocked: bool = False
    unlocked_at: Optional[str] = None

    @classmethod
    def from_template(cls, template: BadgeTemplate) -> "Badge":
        return cls(
            id=template.id,
            title=template.title,
            description=template.description,
            game=template.game,
            requirement=template.requirement,
            icon=template.icon,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "game": self.game,
            "requirement": self.requirement,
            "unlocked": self.unlocked,
            "icon": self.icon,
        }
        if self.unlocked_at is not None:
            data["unlockedAt"] = self.unlocked_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Badge":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description", ""),
            game=data.get("game", ""),
            requirement=data.get("requirement", ""),
            icon=data.get("icon", ""),
            unlocked=bool(data.get("unlocked", False)),
            unlocked_at=data.get("unlockedAt"),
        )


@dataclass
class Challenge:
    id: str
    title: str
    description: str
    game: str
    requirement: str
    reward_coins: int
    expires_at: str
    completed: bool = False
    completed_at: Optional[str] = None

    @classmethod
    def from_template(cls, template: ChallengeTemplate, expires_at: str) -> "Challenge":
        return cls(
            id=template.id,
            title=template.title,
            description=template.description,
            game=template.game,
            requirement=template.requirement,
            reward_coins=template.reward_coins,
            expires_at=expires_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "game": self.game,
            "requirement": self.requirement,
            "rewardCoins": self.reward_coins,
            "completed": self.completed,
        }
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
        data["expiresAt"] = self.expires_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Challenge":
        reward = int(data.get("rewardCoins", 0))
        if reward < 0:
            raise ValueError(f"negative rewardCoins for challenge {data.get('id')}")
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description", ""),
            game=data.get("game", ""),
            requirement=data.get("requirement", ""),
            reward_coins=reward,
            expires_at=str(data["expiresAt"]),
            completed=bool(data.get("completed", False)),
            completed_at=data.get("completedAt"),
        )


@dataclass
class DailyLog:
    games_played: int = 0
    time_spent: int = 0
    coins_earned: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "gamesPlayed": self.games_played,
            "timeSpent": self.time_spent,
            "coinsEarned": self.coins_earned,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyLog":
        return cls(
            games_played=_count(data, "gamesPlayed"),
            time_spent=_count(data, "timeSpent"),
            coins_earned=_count(data, "coinsEarned"),
        )


@dataclass
class SessionStats:
    total_plays: int = 0
    total_time: int = 0
    badges_unlocked: int = 0
    challenges_completed: int = 0
    total_coins: int = 0
    daily_logs: Dict[str, DailyLog] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPlays": self.total_plays,
            "totalTime": self.total_time,
            "badgesUnlocked": self.badges_unlocked,
            "challengesCompleted": self.challenges_completed,
            "totalCoins": self.total_coins,
            "dailyLogs": {day: log.to_dict() for day, log in self.daily_logs.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionStats":
        if not isinstance(data, dict):
            logger.warning("[MODEL] sessionStats is not an object; resetting counters")
            data = {}
        logs = data.get("dailyLogs", {}) or {}
        if not isinstance(logs, dict):
            logger.warning("[MODEL] dailyLogs is not an object; dropping daily history")
            logs = {}
        return cls(
            total_plays=_count(data, "totalPlays"),
            total_time=_count(data, "totalTime"),
            badges_unlocked=_count(data, "badgesUnlocked"),
            challenges_completed=_count(data, "challengesCompleted"),
            total_coins=_count(data, "totalCoins"),
            daily_logs={
                str(day): DailyLog.from_dict(log)
                for day, log in logs.items()
                if isinstance(log, dict)
            },
        )


@dataclass
class GameData:
    game_progress: GameProgress
    badges: List[Badge]
    challenges: List[Challenge]
    session_stats: SessionStats

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameProgress": {game: dict(stats) for game, stats in self.game_progress.items()},
            "badges": [b.to_dict() for b in self.badges],
            "challenges": [c.to_dict() for c in self.challenges],
            "sessionStats": self.session_stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameData":
        if not isinstance(data, dict):
            raise TypeError("GameData document must be an object")
        progress = data["gameProgress"]
        if not isinstance(progress, dict):
            raise TypeError("gameProgress must be an object")
        return cls(
            game_progress={
                str(game): validate_stat_record(str(game), stats)
                for game, stats in progress.items()
            },
            badges=_parse_badges(data["badges"]),
            challenges=_parse_challenges(data.get("challenges", []) or []),
            session_stats=SessionStats.from_dict(data.get("sessionStats", {}) or {}),
        )

    def get_badge(self, badge_id: str) -> Optional[Badge]:
        for badge in self.badges:
            if badge.id == badge_id:
                return badge
        return None

    def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        for challenge in self.challenges:
            if challenge.id == challenge_id:
                return challenge
        return None


# ============================================================================
# DEFAULTS
# ============================================================================

def default_game_progress() -> GameProgress:
    return {game_id: dict(entry.defaults) for game_id, entry in GAME_REGISTRY.items()}


def default_badges() -> List[Badge]:
    return [Badge.from_template(t) for t in BADGE_CATALOG]


def default_game_data(challenges: List[Challenge]) -> GameData:
    """Fresh zeroed document; the caller supplies a freshly generated challenge set."""
    return GameData(
        game_progress=default_game_progress(),
        badges=default_badges(),
        challenges=challenges,
        session_stats=SessionStats(),
    )


# ============================================================================
# BOUNDARY VALIDATION
# ============================================================================

def validate_stat_record(game_id: str, record: Any) -> StatRecord:
    """
    Keep only recognized, numeric stat fields.

    Unknown names and non-numeric values are dropped (logged), negative values
    are clamped to 0, integral counters are stored as int.
    """
    if not isinstance(record, dict):
        logger.warning(f"[MODEL] Stats for {game_id} are not an object; resetting")
        return {}

    clean: StatRecord = {}
    for name, value in record.items():
        if name not in STAT_FIELDS:
            logger.warning(f"[MODEL] Dropping unknown stat {game_id}.{name}")
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning(f"[MODEL] Dropping non-numeric stat {game_id}.{name}={value!r}")
            continue
        if value < 0:
            value = 0
        if name not in FRACTIONAL_FIELDS and isinstance(value, float) and value.is_integer():
            value = int(value)
        clean[name] = value
    return clean


def _count(data: Dict[str, Any], key: str) -> int:
    """Read a non-negative counter; null or unreadable values become 0."""
    value = data.get(key)
    if value is None:
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        logger.warning(f"[MODEL] Resetting unreadable counter {key}={value!r}")
        return 0


def _parse_badges(entries: Any) -> List[Badge]:
    if not isinstance(entries, list):
        raise TypeError("badges must be a list")
    badges = []
    for entry in entries:
        try:
            badges.append(Badge.from_dict(entry))
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"[MODEL] Dropping unreadable badge entry: {e!r}")
    return badges


def _parse_challenges(entries: Any) -> List[Challenge]:
    """
    Parse the stored challenge set.

    Challenges are regenerated from templates anyway, so one unreadable entry
    discards the whole set (an empty list is always due for refresh) instead
    of failing the document.
    """
    if not isinstance(entries, list):
        logger.warning("[MODEL] challenges is not a list; regenerating")
        return []
    try:
        return [Challenge.from_dict(c) for c in entries]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning(f"[MODEL] Unreadable challenge set, regenerating: {e!r}")
        return []
