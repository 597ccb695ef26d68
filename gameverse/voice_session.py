"""
VOICE SESSION CONTROLLER

Event-driven control of two recognition sessions:

- background: continuous, listens for the "hey buddy" wake phrase
- foreground: single-shot, captures one explicit command

Modes:
- IDLE: nothing capturing (a restart may be pending)
- BACKGROUND_LISTENING: wake-word spotting
- FOREGROUND_LISTENING: manual command capture (mic button)
- AWAITING_COMMAND: wake phrase heard alone; prompt spoken, capturing the follow-up

Transitions:
- IDLE -> BACKGROUND_LISTENING        start(), only with microphone permission
- BACKGROUND -> AWAITING_COMMAND      wake phrase with no command; foreground starts after a short delay
- BACKGROUND -> IDLE                  wake phrase + command; command dispatched, background resumes after cooldown
- FOREGROUND/AWAITING -> IDLE         result, error, end or manual toggle; background resumes after cooldown
- BACKGROUND -> IDLE                  error; background restarts after a growing backoff until the error cap,
                                      then stays down until restart_manually()

Rules:
- Only one recognizer runs at a time; the foreground never starts before the background is stopped.
- All delayed work goes through one TimerSlot, so scheduling always replaces what was pending.
- Events from a session that is no longer the active one are ignored.
- close() always aborts both sessions, the pending timer and speech.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from gameverse import policy
from gameverse.capabilities import SpeechRecognizer, SpeechSynthesizer, TimerScheduler
from gameverse.config import get_config, get_runtime_overrides
from gameverse.intent_resolver import Intent, IntentResolver
from gameverse.permissions import PermissionSettings
from gameverse.timers import TimerSlot
from gameverse.wake_word import detect_wake_word

logger = logging.getLogger(__name__)


# ============================================================================
# ENUMERATIONS
# ============================================================================

class VoiceMode(Enum):
    IDLE = "idle"
    BACKGROUND_LISTENING = "background-listening"
    FOREGROUND_LISTENING = "foreground-listening"
    AWAITING_COMMAND = "awaiting-command"


class VoiceStatus(Enum):
    """What the UI should show next to the microphone button."""
    UNSUPPORTED = "unsupported"
    PERMISSION_REQUIRED = "permission-required"
    PERMISSION_DENIED = "permission-denied"
    READY = "ready"
    LISTENING = "listening"
    MANUAL_RESTART_REQUIRED = "manual-restart-required"


_FOREGROUND_MODES = (VoiceMode.FOREGROUND_LISTENING, VoiceMode.AWAITING_COMMAND)


# ============================================================================
# CONTROLLER
# ============================================================================

class VoiceSessionController:
    """
    Owns both recognizers, the wake-word handoff, error backoff and the
    restart timer. Transcripts become intents through the IntentResolver and
    are handed to on_intent.
    """

    def __init__(
        self,
        scheduler: TimerScheduler,
        permissions: PermissionSettings,
        background: Optional[SpeechRecognizer] = None,
        foreground: Optional[SpeechRecognizer] = None,
        synthesizer: Optional[SpeechSynthesizer] = None,
        resolver: Optional[IntentResolver] = None,
        on_intent: Optional[Callable[[Intent], None]] = None,
        on_response: Optional[Callable[[str], None]] = None,
        on_status_change: Optional[Callable[[VoiceStatus], None]] = None,
        on_mode_change: Optional[Callable[[VoiceMode, VoiceMode], None]] = None,
        permission_prompt: Optional[Callable[[], bool]] = None,
        config=None,
    ):
        cfg = config or get_config()
        self.max_consecutive_errors = int(cfg.get("voice.max_consecutive_errors", policy.MAX_CONSECUTIVE_ERRORS))
        self.backoff_base = float(cfg.get("voice.backoff_base_seconds", policy.BACKOFF_BASE_SECONDS))
        self.backoff_cap = float(cfg.get("voice.backoff_cap_seconds", policy.BACKOFF_CAP_SECONDS))
        self.restart_after_end = float(cfg.get("voice.restart_after_end_seconds", policy.RESTART_AFTER_END_SECONDS))
        self.manual_restart_delay = float(
            cfg.get("voice.manual_restart_delay_seconds", policy.MANUAL_RESTART_DELAY_SECONDS)
        )
        self.command_prompt_delay = float(
            cfg.get("voice.command_prompt_delay_seconds", policy.COMMAND_PROMPT_DELAY_SECONDS)
        )
        self.wake_cooldown = float(cfg.get("voice.wake_cooldown_seconds", policy.WAKE_COOLDOWN_SECONDS))
        self.wake_prompt = cfg.get("voice.wake_prompt", "How can I help you?")
        self.speech_rate = float(cfg.get("speech.rate", policy.SPEECH_RATE))
        self.speech_pitch = float(cfg.get("speech.pitch", policy.SPEECH_PITCH))
        self.speech_volume = float(cfg.get("speech.volume", policy.SPEECH_VOLUME))
        lang = cfg.get("voice.lang", "en-US")

        self.permissions = permissions
        self.background = background
        self.foreground = foreground
        self.synthesizer = synthesizer
        self.resolver = resolver or IntentResolver()
        self.on_intent = on_intent
        self.on_response = on_response
        self.on_status_change = on_status_change
        self.on_mode_change = on_mode_change
        self.permission_prompt = permission_prompt

        self._lock = threading.RLock()
        self._timer = TimerSlot(scheduler, "voice-restart", lock=self._lock)
        self._mode = VoiceMode.IDLE
        self._status: Optional[VoiceStatus] = None
        self.consecutive_errors = 0
        self.is_speaking = False
        self.closed = False
        self._foreground_active = False

        if background is not None:
            background.continuous = True
            background.lang = lang
            background.interim_results = False
            background.on_result = self._on_background_result
            background.on_error = self._on_background_error
            background.on_end = self._on_background_end
        if foreground is not None:
            foreground.continuous = False
            foreground.lang = lang
            foreground.interim_results = False
            foreground.on_result = self._on_foreground_result
            foreground.on_error = self._on_foreground_error
            foreground.on_end = self._on_foreground_end
        if synthesizer is not None:
            synthesizer.on_start = self._on_speech_start
            synthesizer.on_end = self._on_speech_end
            synthesizer.on_error = self._on_speech_error

        self._refresh_status()

    # ========================================================================
    # STATE
    # ========================================================================

    @property
    def mode(self) -> VoiceMode:
        return self._mode

    @property
    def status(self) -> VoiceStatus:
        return self._status

    @property
    def supported(self) -> bool:
        return self.background is not None or self.foreground is not None

    @property
    def restart_deadline(self) -> Optional[float]:
        """Scheduler time at which the pending restart fires, if any."""
        return self._timer.deadline

    @property
    def manual_restart_required(self) -> bool:
        return self.consecutive_errors >= self.max_consecutive_errors

    def _set_mode(self, new_mode: VoiceMode) -> None:
        old_mode = self._mode
        if old_mode == new_mode:
            return
        self._mode = new_mode
        logger.info(f"[VOICE] Mode: {old_mode.value} -> {new_mode.value}")
        if self.on_mode_change:
            self.on_mode_change(old_mode, new_mode)
        self._refresh_status()

    def _refresh_status(self) -> None:
        if not self.supported:
            status = VoiceStatus.UNSUPPORTED
        elif self.permissions.denied:
            status = VoiceStatus.PERMISSION_DENIED
        elif not self.permissions.granted:
            status = VoiceStatus.PERMISSION_REQUIRED
        elif self._mode != VoiceMode.IDLE:
            status = VoiceStatus.LISTENING
        elif self.manual_restart_required:
            status = VoiceStatus.MANUAL_RESTART_REQUIRED
        else:
            status = VoiceStatus.READY
        if status != self._status:
            self._status = status
            logger.debug(f"[VOICE] Status: {status.value}")
            if self.on_status_change:
                self.on_status_change(status)

    # ========================================================================
    # PUBLIC CONTROLS
    # ========================================================================

    def start(self) -> bool:
        """Begin background wake-word listening. False when voice is unavailable."""
        with self._lock:
            self.closed = False
            if not self.supported:
                logger.info("[VOICE] Speech recognition unavailable; voice commands disabled")
                self._refresh_status()
                return False
            if not self.permissions.granted:
                logger.info("[VOICE] Microphone permission not granted; not listening")
                self._refresh_status()
                return False
            if self._mode == VoiceMode.IDLE:
                self._start_background()
            return True

    def toggle_listening(self) -> None:
        """Mic button: start a foreground capture, or cancel the running one."""
        with self._lock:
            if not self.permissions.granted:
                self.request_permission()
                return
            if self.foreground is None:
                logger.info("[VOICE] Command recognition not supported")
                self._refresh_status()
                return

            if self._mode in _FOREGROUND_MODES:
                self._foreground_active = False
                self._abort(self.foreground, "foreground")
                self._set_mode(VoiceMode.IDLE)
                self._schedule_resume(self.wake_cooldown)
                return

            self._start_foreground(VoiceMode.FOREGROUND_LISTENING)

    def restart_manually(self) -> bool:
        """Clear the error count and bring background listening back."""
        with self._lock:
            if not self.permissions.granted or self.background is None:
                return False
            logger.info(f"[VOICE] Manual restart (clearing {self.consecutive_errors} errors)")
            self.consecutive_errors = 0
            self._timer.cancel()
            if self._mode in _FOREGROUND_MODES:
                self._foreground_active = False
                self._abort(self.foreground, "foreground")
            self._abort(self.background, "background")
            self._set_mode(VoiceMode.IDLE)
            self._refresh_status()
            self._timer.schedule(self.manual_restart_delay, self._resume_background)
            return True

    def begin_awaiting_command(self) -> None:
        """Wake phrase heard on its own: prompt, then capture the follow-up command."""
        with self._lock:
            self._respond(self.wake_prompt)
            if self.foreground is None or not self.permissions.granted:
                return
            previous = self._mode
            self._set_mode(VoiceMode.AWAITING_COMMAND)
            if previous == VoiceMode.BACKGROUND_LISTENING:
                self._stop(self.background, "background")
            elif self._foreground_active:
                self._foreground_active = False
                self._abort(self.foreground, "foreground")
            self._timer.schedule(self.command_prompt_delay, self._start_awaited_capture)

    def request_permission(self) -> bool:
        """Ask the platform for microphone access and persist the answer."""
        with self._lock:
            granted = True
            if self.permission_prompt is not None:
                try:
                    granted = bool(self.permission_prompt())
                except Exception as e:
                    logger.warning(f"[VOICE] Permission prompt failed: {e}")
                    granted = False
            if granted:
                self.permissions.grant()
                self._refresh_status()
                self.start()
            else:
                self.permissions.deny()
                self._refresh_status()
            return granted

    def close(self) -> None:
        """Tear down: abort both sessions, cancel timers and speech. Always completes."""
        with self._lock:
            try:
                self._timer.cancel()
            finally:
                self._foreground_active = False
                self._abort(self.background, "background")
                self._abort(self.foreground, "foreground")
                self.stop_speaking()
                self._set_mode(VoiceMode.IDLE)
                self.closed = True
                logger.info("[VOICE] Controller closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ========================================================================
    # SPEECH OUTPUT
    # ========================================================================

    def speak(self, text: str) -> bool:
        with self._lock:
            if self.synthesizer is None or not text:
                return False
            overrides = get_runtime_overrides()
            if overrides.get("speech_muted"):
                logger.debug("[VOICE] Muted; not speaking")
                return False
            volume = float(overrides.get("speech_volume", self.speech_volume))
            try:
                self.synthesizer.cancel()
                self.synthesizer.speak(text, rate=self.speech_rate, pitch=self.speech_pitch, volume=volume)
            except Exception as e:
                logger.warning(f"[VOICE] Speech synthesis failed: {e}")
                self.is_speaking = False
                return False
            return True

    def stop_speaking(self) -> None:
        with self._lock:
            if self.synthesizer is not None:
                try:
                    self.synthesizer.cancel()
                except Exception as e:
                    logger.warning(f"[VOICE] Could not cancel speech: {e}")
            self.is_speaking = False

    def _respond(self, text: str) -> None:
        if self.on_response:
            self.on_response(text)
        else:
            self.speak(text)

    def _on_speech_start(self) -> None:
        self.is_speaking = True

    def _on_speech_end(self) -> None:
        self.is_speaking = False

    def _on_speech_error(self, code: str) -> None:
        logger.debug(f"[VOICE] Synthesis error: {code}")
        self.is_speaking = False

    # ========================================================================
    # SESSION HELPERS
    # ========================================================================

    def _stop(self, recognizer: Optional[SpeechRecognizer], label: str) -> None:
        if recognizer is None:
            return
        try:
            recognizer.stop()
        except Exception as e:
            logger.warning(f"[VOICE] Error stopping {label} recognition: {e}")

    def _abort(self, recognizer: Optional[SpeechRecognizer], label: str) -> None:
        if recognizer is None:
            return
        try:
            recognizer.abort()
        except Exception as e:
            logger.warning(f"[VOICE] Error aborting {label} recognition: {e}")

    def _start_background(self) -> None:
        if self.background is None or not self.permissions.granted or self.closed:
            return
        self._timer.cancel()
        self._set_mode(VoiceMode.BACKGROUND_LISTENING)
        try:
            self.background.start()
        except Exception as e:
            logger.warning(f"[VOICE] Could not start background recognition: {e}")
            self._background_failed("start-failed")
            return
        logger.debug("[VOICE] Background listening started")

    def _start_foreground(self, mode: VoiceMode) -> None:
        self._timer.cancel()
        if self._mode == VoiceMode.BACKGROUND_LISTENING:
            # Set the new mode first so the background's end event is ignored.
            self._set_mode(mode)
            self._stop(self.background, "background")
        else:
            self._set_mode(mode)
        self._foreground_active = True
        try:
            self.foreground.start()
        except Exception as e:
            logger.warning(f"[VOICE] Could not start command recognition: {e}")
            self._finish_foreground()

    def _start_awaited_capture(self) -> None:
        with self._lock:
            if self._mode != VoiceMode.AWAITING_COMMAND or self.closed:
                return
            self._start_foreground(VoiceMode.AWAITING_COMMAND)

    def _resume_background(self) -> None:
        with self._lock:
            if self._mode != VoiceMode.IDLE or self.closed:
                return
            if self.manual_restart_required:
                return
            self._start_background()

    def _schedule_resume(self, delay: float) -> None:
        if self.background is None or self.closed:
            return
        self._timer.schedule(delay, self._resume_background)

    def _finish_foreground(self) -> None:
        self._foreground_active = False
        self._set_mode(VoiceMode.IDLE)
        self._schedule_resume(self.wake_cooldown)

    def _dispatch(self, text: str) -> None:
        intent = self.resolver.resolve(text)
        logger.info(f"[VOICE] Command: {intent}")
        if self.on_intent:
            self.on_intent(intent)

    def _backoff_delay(self) -> float:
        return min(self.backoff_base * self.consecutive_errors, self.backoff_cap)

    def _permission_revoked(self, code: str) -> None:
        logger.warning(f"[VOICE] Microphone access refused ({code}); voice commands disabled")
        self._timer.cancel()
        self.permissions.deny()
        self._set_mode(VoiceMode.IDLE)
        self._refresh_status()

    def _background_failed(self, code: str) -> None:
        self.consecutive_errors += 1
        self._set_mode(VoiceMode.IDLE)
        if self.manual_restart_required:
            logger.warning(
                f"[VOICE] {self.consecutive_errors} consecutive recognition errors; "
                "background listening paused until restarted manually"
            )
            self._timer.cancel()
            self._refresh_status()
            return
        delay = self._backoff_delay()
        logger.warning(
            f"[VOICE] Background recognition error '{code}' "
            f"({self.consecutive_errors}/{self.max_consecutive_errors}); restarting in {delay:.1f}s"
        )
        self._timer.schedule(delay, self._resume_background)

    # ========================================================================
    # BACKGROUND EVENTS
    # ========================================================================

    def _on_background_result(self, transcript: str) -> None:
        with self._lock:
            if self._mode != VoiceMode.BACKGROUND_LISTENING:
                return
            self.consecutive_errors = 0
            logger.debug(f"[VOICE] Background heard: {transcript!r}")
            wake = detect_wake_word(transcript)
            if not wake.detected:
                return

            logger.info("[VOICE] Wake phrase detected")
            if wake.has_command:
                self._set_mode(VoiceMode.IDLE)
                self._stop(self.background, "background")
                self._dispatch(wake.command)
                self._schedule_resume(self.wake_cooldown)
            else:
                self.begin_awaiting_command()

    def _on_background_error(self, code: str) -> None:
        with self._lock:
            if self._mode != VoiceMode.BACKGROUND_LISTENING:
                return
            if code in policy.PERMISSION_ERROR_CODES:
                self._permission_revoked(code)
                return
            self._background_failed(code)

    def _on_background_end(self) -> None:
        with self._lock:
            if self._mode != VoiceMode.BACKGROUND_LISTENING:
                return
            if not self.permissions.granted or self.manual_restart_required:
                self._set_mode(VoiceMode.IDLE)
                return
            logger.debug("[VOICE] Background session ended; restarting")
            self._set_mode(VoiceMode.IDLE)
            self._timer.schedule(self.restart_after_end, self._resume_background)

    # ========================================================================
    # FOREGROUND EVENTS
    # ========================================================================

    def _on_foreground_result(self, transcript: str) -> None:
        with self._lock:
            if not self._foreground_active:
                return
            self._finish_foreground()
            self._dispatch(transcript)

    def _on_foreground_error(self, code: str) -> None:
        with self._lock:
            if not self._foreground_active:
                return
            if code in policy.PERMISSION_ERROR_CODES:
                self._permission_revoked(code)
                return
            logger.warning(f"[VOICE] Command recognition error: {code}")
            self._finish_foreground()

    def _on_foreground_end(self) -> None:
        with self._lock:
            if not self._foreground_active:
                return
            self._finish_foreground()
