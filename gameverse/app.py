"""
GameVerse composition root.

Builds exactly one ProgressStore and wires it, the voice controller, the
intent resolver, the dispatcher and the chat transcript together. Hosts
(UI shells, tests) create a GameVerseApp and pass it around; nothing in
the core reaches for a global store.
"""

import logging
from collections import deque
from datetime import datetime
from typing import Callable, Deque, List, Optional

from gameverse.capabilities import SpeechRecognizer, SpeechSynthesizer, TimerScheduler
from gameverse.chat_history import DEFAULT_GREETING, ChatHistory
from gameverse.config import Config, get_config
from gameverse.dispatcher import DispatchResult, Dispatcher
from gameverse.events import StoreEvent
from gameverse.intent_resolver import Intent, IntentResolver
from gameverse.permissions import PermissionSettings
from gameverse.progress_store import ProgressStore
from gameverse.storage import KeyValueStorage, create_storage
from gameverse.timers import ThreadingTimerScheduler
from gameverse.version import get_version
from gameverse.voice_session import VoiceSessionController
from gameverse.wake_word import detect_wake_word

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
NOTIFICATION_LIMIT = 20


def setup_logging(config: Optional[Config] = None) -> None:
    """Configure root logging once, from system.log_level (system.debug_mode forces DEBUG)."""
    cfg = config or get_config()
    level_name = str(cfg.get("system.log_level", "INFO")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    if cfg.get("system.debug_mode", False):
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.debug(f"[APP] Logging at {logging.getLevelName(level)}")


class GameVerseApp:
    def __init__(
        self,
        storage: KeyValueStorage,
        navigate: Callable[[str], None],
        scheduler: Optional[TimerScheduler] = None,
        background: Optional[SpeechRecognizer] = None,
        foreground: Optional[SpeechRecognizer] = None,
        synthesizer: Optional[SpeechSynthesizer] = None,
        on_close: Optional[Callable[[], None]] = None,
        set_theme: Optional[Callable[[str], None]] = None,
        reload: Optional[Callable[[], None]] = None,
        permission_prompt: Optional[Callable[[], bool]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        config: Optional[Config] = None,
    ):
        cfg = config or get_config()
        self.config = cfg
        self.scheduler = scheduler or ThreadingTimerScheduler()
        self._clock = clock or datetime.now

        self.store = ProgressStore(storage, config=cfg, clock=self._clock)
        self.permissions = PermissionSettings(storage, cfg.get("storage.permission_key", "micPermissionStatus"))
        self.chat = ChatHistory(
            max_messages=cfg.get("chat.history_limit", 50),
            greeting=cfg.get("chat.greeting", DEFAULT_GREETING),
            clock=self._clock,
        )
        self.resolver = IntentResolver()
        self.notifications: Deque[str] = deque(maxlen=NOTIFICATION_LIMIT)
        self.store.subscribe(self._on_store_event)

        self.voice = VoiceSessionController(
            scheduler=self.scheduler,
            permissions=self.permissions,
            background=background,
            foreground=foreground,
            synthesizer=synthesizer,
            resolver=self.resolver,
            on_intent=self._on_voice_intent,
            on_response=self.respond,
            permission_prompt=permission_prompt,
            config=cfg,
        )
        self.dispatcher = Dispatcher(
            navigate=navigate,
            respond=self.respond,
            store=self.store,
            chat=self.chat,
            scheduler=self.scheduler,
            on_close=on_close,
            set_theme=set_theme,
            reload=reload,
            stop_speaking=self.voice.stop_speaking,
            clock=self._clock,
            config=cfg,
        )
        self.last_result: Optional[DispatchResult] = None

    def start(self) -> None:
        version = get_version()
        logger.info(f"[APP] GameVerse core {version['version']} ({version['milestone']}) starting")
        self.store.load()
        self.voice.start()

    def close(self) -> None:
        try:
            self.dispatcher.cancel_pending()
        finally:
            self.voice.close()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ========================================================================
    # CHAT / VOICE
    # ========================================================================

    def respond(self, text: str) -> None:
        self.chat.add_assistant(text)
        self.voice.speak(text)

    def submit_text(self, text: str) -> Optional[DispatchResult]:
        """
        Typed chat input. "hey buddy" alone opens the command window like the
        spoken wake phrase; anything else is resolved and dispatched.
        """
        if not text or not text.strip():
            return None
        self.chat.add_user(text.strip())
        wake = detect_wake_word(text)
        if wake.detected and not wake.has_command:
            self.voice.begin_awaiting_command()
            return None
        return self._dispatch(self.resolver.resolve(text))

    def _on_voice_intent(self, intent: Intent) -> None:
        self.chat.add_user(intent.raw_text)
        self._dispatch(intent)

    def _dispatch(self, intent: Intent) -> DispatchResult:
        self.last_result = self.dispatcher.dispatch(intent)
        return self.last_result

    # ========================================================================
    # PROGRESS
    # ========================================================================

    def evaluate_progress(self) -> List[StoreEvent]:
        """
        Apply newly satisfied badges and challenges; mini-games call this after each round.

        Completed challenges feed challenge badges, so both passes repeat
        until neither changes anything.
        """
        events: List[StoreEvent] = []
        while True:
            round_events = self.store.check_and_unlock_badges()
            round_events.extend(self.store.check_and_complete_challenges())
            if not round_events:
                return events
            events.extend(round_events)

    def _on_store_event(self, event: StoreEvent) -> None:
        self.notifications.append(event.message)


def build_app(
    navigate: Callable[[str], None],
    config: Optional[Config] = None,
    storage: Optional[KeyValueStorage] = None,
    **kwargs,
) -> GameVerseApp:
    """Create storage from config (unless given) and return an unstarted app."""
    cfg = config or get_config()
    return GameVerseApp(storage or create_storage(cfg), navigate, config=cfg, **kwargs)
