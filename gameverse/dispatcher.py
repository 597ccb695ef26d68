"""
Dispatcher Module

Responsibility: Carry out a resolved Intent through the host application.

Does NOT:
- Classify text (IntentResolver's job)
- Mutate game progress (it only reads ProgressStore snapshots)
- Render screens (navigate/set_theme/reload are host callables)

Design:
- One handler per Intent.action, looked up in a table
- Replies go through the respond callable (chat transcript + speech)
- Screen changes are delayed briefly so the reply is seen first; the
  pending navigation/close lives in a single timer slot
- A failing collaborator is logged and reported in the result; it never
  propagates to the caller
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional

from gameverse import policy
from gameverse.capabilities import TimerScheduler
from gameverse.chat_history import CLEARED_MESSAGE, ChatHistory
from gameverse.config import get_config, get_runtime_overrides, set_runtime_override
from gameverse.intent_resolver import (
    ACTION_CLEAR_CHAT,
    ACTION_CLOSE,
    ACTION_COINS,
    ACTION_MUTE,
    ACTION_NAVIGATE,
    ACTION_PLAY,
    ACTION_REFRESH,
    ACTION_THEME,
    ACTION_TIME,
    ACTION_VOLUME_DOWN,
    ACTION_VOLUME_UP,
    FALLBACK_TEXT,
    Intent,
)
from gameverse.progress_store import ProgressStore
from gameverse.timers import TimerSlot

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    intent: Intent
    handled: bool = True
    response: Optional[str] = None
    path: Optional[str] = None
    closing: bool = False


def route_path(route: str) -> str:
    """'home' is the site root; every other page id is a top-level path."""
    return "/" if route == "home" else f"/{route}"


def game_path(game_id: str) -> str:
    return f"/games/{game_id}"


def format_time_response(now: datetime) -> str:
    time_string = now.strftime("%I:%M:%S %p").lstrip("0")
    date_string = f"{now.strftime('%A, %B')} {now.day}, {now.year}"
    return f"The current time is {time_string} and today is {date_string}."


class Dispatcher:
    def __init__(
        self,
        navigate: Callable[[str], None],
        respond: Callable[[str], None],
        store: Optional[ProgressStore] = None,
        chat: Optional[ChatHistory] = None,
        scheduler: Optional[TimerScheduler] = None,
        on_close: Optional[Callable[[], None]] = None,
        set_theme: Optional[Callable[[str], None]] = None,
        reload: Optional[Callable[[], None]] = None,
        stop_speaking: Optional[Callable[[], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        config=None,
    ):
        cfg = config or get_config()
        self.navigation_delay = float(cfg.get("dispatcher.navigation_delay_seconds", policy.NAVIGATION_DELAY_SECONDS))
        self.close_delay = float(cfg.get("dispatcher.close_delay_seconds", policy.CLOSE_DELAY_SECONDS))
        self.default_volume = float(cfg.get("speech.volume", policy.SPEECH_VOLUME))

        self.navigate = navigate
        self.respond = respond
        self.store = store
        self.chat = chat
        self.on_close = on_close
        self.set_theme = set_theme
        self.reload = reload
        self.stop_speaking = stop_speaking
        self._clock = clock or datetime.now
        self._pending = TimerSlot(scheduler, "dispatch") if scheduler is not None else None

        self._handlers: Dict[str, Callable[[Intent, DispatchResult], None]] = {
            ACTION_NAVIGATE: self._navigate,
            ACTION_PLAY: self._play,
            ACTION_CLOSE: self._close,
            ACTION_THEME: self._theme,
            ACTION_TIME: self._time,
            ACTION_REFRESH: self._refresh,
            ACTION_COINS: self._coins,
            ACTION_CLEAR_CHAT: self._clear_chat,
            ACTION_VOLUME_UP: self._volume_up,
            ACTION_VOLUME_DOWN: self._volume_down,
            ACTION_MUTE: self._mute,
        }

    def dispatch(self, intent: Intent) -> DispatchResult:
        result = DispatchResult(intent)
        handler = self._handlers.get(intent.action, self._reply)
        try:
            handler(intent, result)
        except Exception:
            logger.warning(f"[DISPATCH] Handling {intent} failed", exc_info=True)
            result.handled = False
        logger.info(f"[DISPATCH] {intent.action} -> {result.path or result.response!r}")
        return result

    def cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _say(self, text: str, result: DispatchResult) -> None:
        result.response = text
        self.respond(text)

    def _later(self, delay: float, action: Callable[[], None]) -> None:
        if self._pending is None:
            action()
        else:
            self._pending.schedule(delay, action)

    def _go(self, path: str, result: DispatchResult) -> None:
        result.path = path

        def go():
            if self.on_close:
                self.on_close()
            self.navigate(path)

        self._later(self.navigation_delay, go)

    # ========================================================================
    # HANDLERS
    # ========================================================================

    def _reply(self, intent: Intent, result: DispatchResult) -> None:
        self._say(intent.response or FALLBACK_TEXT, result)

    def _navigate(self, intent: Intent, result: DispatchResult) -> None:
        self._say(intent.response, result)
        self._go(route_path(intent.target), result)

    def _play(self, intent: Intent, result: DispatchResult) -> None:
        self._say(intent.response, result)
        self._go(game_path(intent.target), result)

    def _close(self, intent: Intent, result: DispatchResult) -> None:
        self._say(intent.response, result)
        result.closing = True
        if self.on_close:
            self._later(self.close_delay, self.on_close)

    def _theme(self, intent: Intent, result: DispatchResult) -> None:
        if intent.target:
            set_runtime_override("theme", intent.target)
            if self.set_theme:
                self.set_theme(intent.target)
        self._say(intent.response, result)

    def _time(self, intent: Intent, result: DispatchResult) -> None:
        self._say(format_time_response(self._clock()), result)

    def _refresh(self, intent: Intent, result: DispatchResult) -> None:
        self._say(intent.response, result)
        if self.reload:
            self._later(self.navigation_delay, self.reload)

    def _coins(self, intent: Intent, result: DispatchResult) -> None:
        if self.store is None:
            self._say("Let me show you your coins.", result)
        else:
            total = self.store.snapshot().session_stats.total_coins
            unit = "coin" if total == 1 else "coins"
            self._say(f"You have earned {total} {unit} from daily challenges.", result)
        self._go(route_path(intent.target or "dashboard"), result)

    def _clear_chat(self, intent: Intent, result: DispatchResult) -> None:
        result.response = CLEARED_MESSAGE
        if self.chat is not None:
            self.chat.clear()

    def _set_volume(self, delta: float) -> float:
        current = float(get_runtime_overrides().get("speech_volume", self.default_volume))
        volume = round(min(1.0, max(0.0, current + delta)), 2)
        set_runtime_override("speech_volume", volume)
        set_runtime_override("speech_muted", False)
        return volume

    def _volume_up(self, intent: Intent, result: DispatchResult) -> None:
        self._set_volume(policy.VOLUME_STEP)
        self._say(intent.response, result)

    def _volume_down(self, intent: Intent, result: DispatchResult) -> None:
        self._set_volume(-policy.VOLUME_STEP)
        self._say(intent.response, result)

    def _mute(self, intent: Intent, result: DispatchResult) -> None:
        if self.stop_speaking:
            self.stop_speaking()
        set_runtime_override("speech_muted", True)
        self._say(intent.response, result)
