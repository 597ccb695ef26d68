"""
Progress Store: the single owner of the GameData document.

Contract:
- Every mutation runs synchronously against the in-memory document and then
  writes the whole document to storage.
- A failed write is logged and the store keeps working in memory only.
- Readers get deep-copied snapshots; nothing mutable escapes.
- Unlocks, completions, resets and refreshes are announced as StoreEvents
  to subscribed listeners.
"""

import copy
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from gameverse import rules, scheduler
from gameverse.catalog import BADGE_CATALOG, GAME_REGISTRY
from gameverse.config import get_config
from gameverse.events import StoreEvent, StoreEventType, StoreListener
from gameverse.models import (
    Badge,
    DailyLog,
    GameData,
    default_game_data,
    validate_stat_record,
)
from gameverse.storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "gameverse-data"


class DataImportError(ValueError):
    """An imported document is not valid JSON or not shaped like GameData."""


class ProgressStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        config=None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        cfg = config or get_config()
        self.storage = storage
        self.data_key = cfg.get("storage.data_key", "gameverse-data")
        self.legacy_streak_key = cfg.get("storage.legacy_streak_key", "rps-streak")
        self._clock = clock or datetime.now
        self._listeners: List[StoreListener] = []
        self._data = default_game_data(scheduler.generate_challenges(self._clock()))
        self.loaded = False
        self.persistence_ok = True

    # ========================================================================
    # LOAD / SAVE
    # ========================================================================

    def load(self) -> GameData:
        """
        Read the persisted document, falling back to defaults.

        Missing catalog badges and games are appended, stale challenges are
        regenerated, the legacy streak key is folded in, and today's daily
        log is created.
        """
        now = self._clock()
        data = self._read_persisted()
        if data is None:
            data = default_game_data(scheduler.generate_challenges(now))
        else:
            _merge_catalog(data)
            data.challenges = scheduler.refresh_challenges(data.challenges, now)

        self._data = data
        self._migrate_legacy_streak()
        self._today_log()
        self.loaded = True
        self._save()
        logger.info(
            f"[STORE] Loaded progress: {sum(1 for b in data.badges if b.unlocked)}/{len(data.badges)} badges, "
            f"{data.session_stats.total_plays} plays"
        )
        return self.snapshot()

    def _read_persisted(self) -> Optional[GameData]:
        try:
            raw = self.storage.get(self.data_key)
        except StorageError as e:
            logger.warning(f"[STORE] Could not read stored progress: {e}")
            return None
        if not raw:
            return None
        try:
            return GameData.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"[STORE] Stored progress unreadable, starting fresh: {e}")
            return None

    def _save(self) -> bool:
        try:
            self.storage.set(self.data_key, json.dumps(self._data.to_dict()))
        except StorageError as e:
            if self.persistence_ok:
                logger.warning(f"[STORE] Save failed, continuing in memory only: {e}")
            self.persistence_ok = False
            return False
        self.persistence_ok = True
        return True

    def _migrate_legacy_streak(self) -> None:
        try:
            raw = self.storage.get(self.legacy_streak_key)
        except StorageError as e:
            logger.warning(f"[STORE] Could not read legacy streak: {e}")
            return
        if raw is None:
            return
        try:
            legacy = max(0, int(raw))
        except ValueError:
            logger.warning(f"[STORE] Ignoring unreadable legacy streak {raw!r}")
            legacy = 0

        stats = self._data.game_progress.setdefault("rock-paper-scissors", {})
        stats["streak"] = max(stats.get("streak", 0), legacy)
        stats["bestStreak"] = max(stats.get("bestStreak", 0), legacy)
        try:
            self.storage.remove(self.legacy_streak_key)
        except StorageError as e:
            logger.warning(f"[STORE] Could not remove legacy streak key: {e}")
            return
        logger.info(f"[STORE] Migrated legacy streak ({legacy}) into rock-paper-scissors progress")

    # ========================================================================
    # READS
    # ========================================================================

    def snapshot(self) -> GameData:
        return copy.deepcopy(self._data)

    def game_stats(self, game_id: str) -> Dict[str, Any]:
        return dict(self._data.game_progress.get(game_id, {}))

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.warning(f"[STORE] Listener failed on {event.type.value}", exc_info=True)

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def _now(self) -> datetime:
        return self._clock()

    def _today_log(self) -> DailyLog:
        day = scheduler.today_key(self._now())
        return self._data.session_stats.daily_logs.setdefault(day, DailyLog())

    def update_progress(self, game_id: str, partial: Dict[str, Any]) -> None:
        """
        Shallow-merge partial into the game's stat record.

        Best-of comparisons are the caller's job; values are stored as given
        after field-name and type validation.
        """
        clean = validate_stat_record(game_id, partial)
        if not clean:
            return
        self._data.game_progress.setdefault(game_id, {}).update(clean)
        self._save()

    def increment_plays(self, game_id: str) -> None:
        stats = self._data.game_progress.setdefault(game_id, {})
        stats["plays"] = stats.get("plays", 0) + 1
        self._data.session_stats.total_plays += 1
        self._today_log().games_played += 1
        self._save()

    def record_time_spent(self, game_id: str, seconds: int) -> None:
        if seconds <= 0:
            return
        seconds = int(seconds)
        stats = self._data.game_progress.setdefault(game_id, {})
        stats["timeSpent"] = stats.get("timeSpent", 0) + seconds
        self._data.session_stats.total_time += seconds
        self._today_log().time_spent += seconds
        self._save()

    def record_streak(self, game_id: str, won: Optional[bool]) -> int:
        """
        Track the win streak inside the game's own record.

        won=True extends the streak, False breaks it, None (a draw) leaves it.
        Returns the current streak.
        """
        stats = self._data.game_progress.setdefault(game_id, {})
        streak = stats.get("streak", 0)
        if won is True:
            streak += 1
        elif won is False:
            streak = 0
        stats["streak"] = streak
        stats["bestStreak"] = max(stats.get("bestStreak", 0), streak)
        self._save()
        return streak

    def unlock_badge(self, badge_id: str) -> Optional[StoreEvent]:
        badge = self._data.get_badge(badge_id)
        if badge is None:
            logger.debug(f"[STORE] Unknown badge {badge_id}")
            return None
        if badge.unlocked:
            return None

        badge.unlocked = True
        badge.unlocked_at = scheduler.timestamp(self._now())
        self._data.session_stats.badges_unlocked += 1
        self._save()

        logger.info(f"[STORE] Badge unlocked: {badge_id}")
        event = StoreEvent(
            StoreEventType.BADGE_UNLOCKED,
            item_id=badge_id,
            title=badge.title,
            details={"description": badge.description, "icon": badge.icon},
        )
        self._emit(event)
        return event

    def complete_challenge(self, challenge_id: str) -> Optional[StoreEvent]:
        challenge = self._data.get_challenge(challenge_id)
        if challenge is None:
            logger.debug(f"[STORE] Unknown challenge {challenge_id}")
            return None
        if challenge.completed:
            return None
        now = self._now()
        if scheduler.is_expired(challenge, now):
            logger.info(f"[STORE] Challenge {challenge_id} expired at {challenge.expires_at}; not completing")
            return None

        challenge.completed = True
        challenge.completed_at = scheduler.timestamp(now)
        stats = self._data.session_stats
        stats.challenges_completed += 1
        stats.total_coins += challenge.reward_coins
        self._today_log().coins_earned += challenge.reward_coins
        self._save()

        logger.info(f"[STORE] Challenge completed: {challenge_id} (+{challenge.reward_coins} coins)")
        event = StoreEvent(
            StoreEventType.CHALLENGE_COMPLETED,
            item_id=challenge_id,
            title=challenge.title,
            details={"reward_coins": challenge.reward_coins},
        )
        self._emit(event)
        return event

    def reset(self) -> None:
        """Replace everything with a fresh default document."""
        self._data = default_game_data(scheduler.generate_challenges(self._now()))
        self._today_log()
        self._save()
        logger.info("[STORE] All progress reset")
        self._emit(StoreEvent(StoreEventType.DATA_RESET))

    def refresh_challenges(self) -> None:
        """Force a new challenge generation regardless of expiry."""
        self._data.challenges = scheduler.generate_challenges(self._now())
        self._save()
        logger.info("[STORE] Challenges refreshed on request")
        self._emit(StoreEvent(StoreEventType.CHALLENGES_REFRESHED))

    def ensure_fresh_challenges(self) -> bool:
        """Regenerate the generation if it expired while running. True if it did."""
        current = self._data.challenges
        refreshed = scheduler.refresh_challenges(current, self._now())
        if refreshed is current:
            return False
        self._data.challenges = refreshed
        self._save()
        self._emit(StoreEvent(StoreEventType.CHALLENGES_REFRESHED))
        return True

    # ========================================================================
    # RULE APPLICATION
    # ========================================================================

    def check_and_unlock_badges(self) -> List[StoreEvent]:
        """
        Unlock every badge whose rule holds.

        Repeats until nothing new unlocks, since collector badges count
        unlocked badges.
        """
        events: List[StoreEvent] = []
        while True:
            satisfied = rules.evaluate_badges(self._data)
            unlocked = []
            # Catalog order keeps the event sequence stable.
            for badge in list(self._data.badges):
                if badge.id in satisfied:
                    event = self.unlock_badge(badge.id)
                    if event:
                        unlocked.append(event)
            if not unlocked:
                break
            events.extend(unlocked)
        return events

    def check_and_complete_challenges(self) -> List[StoreEvent]:
        self.ensure_fresh_challenges()
        events: List[StoreEvent] = []
        satisfied = rules.evaluate_challenges(self._data)
        for challenge in list(self._data.challenges):
            if challenge.id in satisfied:
                event = self.complete_challenge(challenge.id)
                if event:
                    events.append(event)
        return events

    # ========================================================================
    # EXPORT / IMPORT
    # ========================================================================

    def export_json(self) -> str:
        return json.dumps(self._data.to_dict(), indent=2)

    def export_filename(self, today: Optional[datetime] = None) -> str:
        return f"{EXPORT_PREFIX}-{scheduler.today_key(today or self._now())}.json"

    def export_to_file(self, directory: Path) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.export_filename()
        path.write_text(self.export_json(), encoding="utf-8")
        logger.info(f"[STORE] Exported progress to {path}")
        return path

    def import_json(self, text: str) -> GameData:
        """
        Replace the document with an exported one.

        Raises DataImportError when the text is not a GameData document; the
        current data is left untouched in that case.
        """
        try:
            data = GameData.from_dict(json.loads(text))
        except (ValueError, KeyError, TypeError) as e:
            raise DataImportError(f"Invalid GameVerse data file: {e}") from e

        _merge_catalog(data)
        data.challenges = scheduler.refresh_challenges(data.challenges, self._now())
        self._data = data
        self._today_log()
        self._save()
        logger.info("[STORE] Imported progress document")
        self._emit(StoreEvent(StoreEventType.DATA_IMPORTED))
        return self.snapshot()


def _merge_catalog(data: GameData) -> None:
    """Append catalog badges and known games missing from a persisted document."""
    known = {b.id for b in data.badges}
    missing = [Badge.from_template(t) for t in BADGE_CATALOG if t.id not in known]
    if missing:
        logger.info(f"[STORE] Adding {len(missing)} new badges from the catalog")
        data.badges.extend(missing)

    for game_id, entry in GAME_REGISTRY.items():
        if game_id not in data.game_progress:
            data.game_progress[game_id] = validate_stat_record(game_id, dict(entry.defaults))
