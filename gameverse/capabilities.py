"""
PLATFORM CAPABILITY CONTRACTS

The voice layer consumes speech recognition, speech synthesis and timers
through these interfaces and never talks to a platform API directly.

Core principle: adapters report what happened. Nothing else.
- No wake-word logic
- No restart or retry decisions (VoiceSessionController owns those)
- No intent handling

Callbacks are plain attributes, assigned by the owner before start():

    recognizer.on_result = lambda transcript: ...
    recognizer.on_error = lambda code: ...
    recognizer.on_end = lambda: ...
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class CapabilityError(Exception):
    """A platform adapter refused an operation (already started, device busy...)."""


# ============================================================================
# SPEECH RECOGNITION
# ============================================================================

class SpeechRecognizer(ABC):
    """
    One recognition session.

    Configuration flags are read at start():
    - continuous: keep listening across utterances (background wake-word mode)
    - lang: BCP-47 language tag
    - interim_results: deliver partial transcripts

    Events (delivered in platform order):
    - on_result(transcript: str)
    - on_error(code: str), e.g. "no-speech", "network", "not-allowed"
    - on_end() after the session stops for any reason
    """

    def __init__(self, continuous: bool = False, lang: str = "en-US", interim_results: bool = False):
        self.continuous = continuous
        self.lang = lang
        self.interim_results = interim_results
        self.on_result: Optional[Callable[[str], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None
        self.on_end: Optional[Callable[[], None]] = None

    @abstractmethod
    def start(self) -> None:
        """Begin capturing. May raise CapabilityError."""

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing; a pending result may still be delivered."""

    @abstractmethod
    def abort(self) -> None:
        """Stop immediately and drop any pending result."""

    def _emit_result(self, transcript: str) -> None:
        if self.on_result:
            self.on_result(transcript)

    def _emit_error(self, code: str) -> None:
        if self.on_error:
            self.on_error(code)

    def _emit_end(self) -> None:
        if self.on_end:
            self.on_end()


# ============================================================================
# SPEECH SYNTHESIS
# ============================================================================

class SpeechSynthesizer(ABC):
    """
    Text-to-speech output.

    Events: on_start(), on_end(), on_error(code).
    """

    def __init__(self):
        self.on_start: Optional[Callable[[], None]] = None
        self.on_end: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None

    @abstractmethod
    def speak(self, text: str, rate: float = 1.0, pitch: float = 1.0, volume: float = 1.0) -> None:
        """Queue text for speaking."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop speaking and drop anything queued."""


# ============================================================================
# TIMERS
# ============================================================================

class TimerHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running; no-op once it ran."""


class TimerScheduler(ABC):
    """Run a callback once after a delay, on the owner's event loop or thread."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        """Schedule callback after delay seconds."""

    @abstractmethod
    def time(self) -> float:
        """Monotonic clock in seconds, used for deadlines."""
