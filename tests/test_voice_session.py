"""
TEST: Voice Session Controller

Modes: IDLE, BACKGROUND_LISTENING, FOREGROUND_LISTENING, AWAITING_COMMAND

Key tests:
1. Background listening only starts with microphone permission
2. Wake phrase + command dispatches and resumes after the cooldown
3. Wake phrase alone prompts, then opens a foreground capture
4. Errors back off (3s, 6s) and stop at the third; manual restart recovers
5. Only one recognizer is ever running
6. Permission errors persist "denied"
7. close() tears everything down
"""

import unittest

from fakes import FakeRecognizer, FakeScheduler, FakeSynthesizer
from gameverse.config import set_runtime_override
from gameverse.permissions import PermissionSettings
from gameverse.storage import InMemoryStorage
from gameverse.voice_session import VoiceMode, VoiceSessionController, VoiceStatus


class VoiceTestCase(unittest.TestCase):
    granted = True

    def setUp(self):
        self.scheduler = FakeScheduler()
        self.storage = InMemoryStorage()
        self.permissions = PermissionSettings(self.storage)
        if self.granted:
            self.permissions.grant()
        self.background = FakeRecognizer()
        self.foreground = FakeRecognizer()
        self.synth = FakeSynthesizer()
        self.intents = []
        self.statuses = []
        self.controller = self.make_controller()

    def make_controller(self, **overrides):
        kwargs = dict(
            scheduler=self.scheduler,
            permissions=self.permissions,
            background=self.background,
            foreground=self.foreground,
            synthesizer=self.synth,
            on_intent=self.intents.append,
            on_status_change=self.statuses.append,
        )
        kwargs.update(overrides)
        return VoiceSessionController(**kwargs)

    def assert_single_recognizer(self):
        self.assertFalse(self.background.running and self.foreground.running)


# ============================================================================
# STARTUP / CAPABILITY
# ============================================================================

class TestStartup(VoiceTestCase):
    def test_start_begins_background_listening(self):
        self.assertTrue(self.controller.start())
        self.assertEqual(self.controller.mode, VoiceMode.BACKGROUND_LISTENING)
        self.assertEqual(self.controller.status, VoiceStatus.LISTENING)
        self.assertEqual(self.background.start_count, 1)
        self.assertTrue(self.background.continuous)
        self.assertFalse(self.foreground.continuous)

    def test_start_twice_does_not_restart(self):
        self.controller.start()
        self.controller.start()
        self.assertEqual(self.background.start_count, 1)

    def test_unsupported_platform(self):
        controller = self.make_controller(background=None, foreground=None)
        self.assertFalse(controller.start())
        self.assertEqual(controller.status, VoiceStatus.UNSUPPORTED)
        self.assertFalse(controller.supported)

    def test_background_start_failure_counts_as_error(self):
        background = FakeRecognizer(fail_start=True)
        controller = self.make_controller(background=background)
        controller.start()
        self.assertEqual(controller.consecutive_errors, 1)
        self.assertEqual(controller.mode, VoiceMode.IDLE)
        self.assertEqual(controller.restart_deadline, 3.0)


class TestPermission(VoiceTestCase):
    granted = False

    def test_no_permission_no_listening(self):
        self.assertFalse(self.controller.start())
        self.assertEqual(self.controller.status, VoiceStatus.PERMISSION_REQUIRED)
        self.assertEqual(self.background.start_count, 0)

    def test_request_permission_granted_starts_listening(self):
        self.assertTrue(self.controller.request_permission())
        self.assertEqual(self.storage.get("micPermissionStatus"), "granted")
        self.assertEqual(self.controller.mode, VoiceMode.BACKGROUND_LISTENING)

    def test_request_permission_refused(self):
        controller = self.make_controller(permission_prompt=lambda: False)
        self.assertFalse(controller.request_permission())
        self.assertEqual(controller.status, VoiceStatus.PERMISSION_DENIED)
        self.assertEqual(self.storage.get("micPermissionStatus"), "denied")
        self.assertEqual(self.background.start_count, 0)

    def test_mic_button_asks_for_permission(self):
        controller = self.make_controller(permission_prompt=lambda: True)
        controller.toggle_listening()
        self.assertTrue(self.permissions.granted)
        self.assertEqual(controller.mode, VoiceMode.BACKGROUND_LISTENING)

    def test_permission_error_during_listening(self):
        self.permissions.grant()
        self.controller.start()
        self.background.fail("not-allowed")
        self.assertTrue(self.permissions.denied)
        self.assertEqual(self.controller.status, VoiceStatus.PERMISSION_DENIED)
        self.assertEqual(self.controller.mode, VoiceMode.IDLE)
        self.assertIsNone(self.controller.restart_deadline)
        self.scheduler.advance(60)
        self.assertEqual(self.background.start_count, 1)


# ============================================================================
# WAKE WORD
# ============================================================================

class TestWakeWord(VoiceTestCase):
    def setUp(self):
        super().setUp()
        self.controller.start()

    def test_ordinary_speech_is_ignored(self):
        self.background.say("what a nice day")
        self.assertEqual(self.intents, [])
        self.assertEqual(self.controller.mode, VoiceMode.BACKGROUND_LISTENING)

    def test_wake_with_command_dispatches(self):
        self.background.say("Hey Buddy open dashboard")
        self.assertEqual(len(self.intents), 1)
        self.assertEqual(self.intents[0].target, "dashboard")
        self.assertEqual(self.controller.mode, VoiceMode.IDLE)
        self.assertEqual(self.background.stop_count, 1)
        self.assertEqual(self.foreground.start_count, 0)

        self.scheduler.advance(4.9)
        self.assertEqual(self.background.start_count, 1)
        self.scheduler.advance(0.2)
        self.assertEqual(self.background.start_count, 2)
        self.assertEqual(self.controller.mode, VoiceMode.BACKGROUND_LISTENING)

    def test_wake_alone_awaits_command(self):
        self.background.say("hey buddy")
        self.assertEqual(self.controller.mode, VoiceMode.AWAITING_COMMAND)
        self.assertEqual(self.synth.spoken[-1][0], "How can I help you?")
        self.assertEqual(self.background.stop_count, 1)
        self.assertEqual(self.foreground.start_count, 0)

        self.scheduler.advance(1.0)
        self.assertEqual(self.foreground.start_count, 1)
        self.assert_single_recognizer()

        self.foreground.say("play trivia")
        self.foreground.end()
        self.assertEqual(self.intents[0].target, "trivia-quiz")
        self.assertEqual(self.controller.mode, VoiceMode.IDLE)

        self.scheduler.advance(5.0)
        self.assertEqual(self.controller.mode, VoiceMode.BACKGROUND_LISTENING)
        self.assert_single_recognizer()

    def test_late_background_end_is_ignored_while_awaiting(self):
        self.background.say("hey buddy")
        self.background.end()
        self.assertEqual(self.controller.mode, VoiceMode.AWAITING_COMMAND)
        self.scheduler.advance(1.0)
        self.assertEqual(self.foreground.start_count, 1)

    def test_awaited_capture_without_speech_returns_to_background(self):
        self.background.say("hey buddy")
        self.scheduler.advance(1.0)
        self.foreground.fail("no-speech")
        self.assertEqual(self.controller.mode, VoiceMode.IDLE)
        self.foreground.end()
        self.scheduler.advance(5.0)
        self.assertEqual(self.controller.mode, VoiceMode.BACKGROUND_LISTENING)
        self.assertEqual(self.intents, [])


# ============================================================================
# MANUAL (MIC BUTTON) CAPTURE
# ============================================================================

class TestForeground(VoiceTestCase):
    def setUp(self):
        super().setUp()
        self.controller.start()

    def test_toggle_stops_background_first(self):
        self.controller.toggle_listening()
        self.assertEqual(self.controller.mode, VoiceMode.FOREGROUND_LISTENING)
        self.assertEqual(self.background.stop_count, 1)
        self.assertEqual(self.foreground.start_count, 1)
        self.assert_single_recognizer()

        # The stopped background session reports its end; nothing restarts.
        self.background.end()
        self.assertEqual(self.controller.mode, VoiceMode.FOREGROUND_LISTENING)
        self.assertIsNone(self.controller.restart_deadline)

    def test_toggle_again_cancels(self):
        self.controller.toggle_listening()
        self.controller.toggle_listening()
        self.assertEqual(self.foreground.abort_count, 1)
        self.assertEqual(self.controller.mode, VoiceMode.IDLE)
        self.scheduler.advance(5.0)
        self.assertEqual(self.controller.mode, VoiceMode.BACKGROUND_LISTENING)

    def test_foreground_result_dispatches(self):
        self.controller.toggle_listening()
        self.foreground.say("open badges")
        self.foreground.end()
        self.assertEqual([i.target for i in self.intents], ["badges"])
        self.assertEqual(self.controller.mode, VoiceMode.IDLE)

    def test_stale_foreground_events_are_ignored(self):
        self.controller.toggle_listening()
        self.controller.toggle_listening()
        self.foreground.say("open badges")
        self.assertEqual(self.intents, [])


# ============================================================================
# ERROR BACKOFF
# ============================================================================

class TestBackoff(VoiceTestCase):
    def setUp(self):
        super().setUp()
        self.controller.start()

    def test_backoff_grows_with_errors(self):
        self.background.fail("network")
        self.assertEqual(self.controller.consecutive_errors, 1)
        self.assertEqual(self.controller.restart_deadline, 3.0)
        self.scheduler.advance(3.0)
        self.assertEqual(self.background.start_count, 2)

        self.background.fail("network")
        self.assertEqual(self.controller.restart_deadline, 3.0 + 6.0)

    def test_successful_result_resets_error_count(self):
        self.background.fail("network")
        self.scheduler.advance(3.0)
        self.background.say("just chatting")
        self.assertEqual(self.controller.consecutive_errors, 0)

    def test_third_error_requires_manual_restart(self):
        for delay in (3.0, 6.0):
            self.background.fail("network")
            self.scheduler.advance(delay)
        self.background.fail("network")

        self.assertEqual(self.controller.consecutive_errors, 3)
        self.assertTrue(self.controller.manual_restart_required)
        self.assertEqual(self.controller.status, VoiceStatus.MANUAL_RESTART_REQUIRED)
        self.assertIsNone(self.controller.restart_deadline)
        self.scheduler.advance(120)
        self.assertEqual(self.background.start_count, 3)

        self.assertTrue(self.controller.restart_manually())
        self.assertEqual(self.controller.consecutive_errors, 0)
        self.scheduler.advance(0.5)
        self.assertEqual(self.background.start_count, 4)
        self.assertEqual(self.controller.mode, VoiceMode.BACKGROUND_LISTENING)
        self.assertEqual(self.controller.status, VoiceStatus.LISTENING)

    def test_end_restarts_after_a_second(self):
        self.background.end()
        self.assertEqual(self.controller.mode, VoiceMode.IDLE)
        self.assertEqual(self.controller.restart_deadline, 1.0)
        self.scheduler.advance(1.0)
        self.assertEqual(self.background.start_count, 2)

    def test_error_then_end_keeps_the_backoff(self):
        self.background.fail("network")
        self.background.end()
        self.assertEqual(self.controller.restart_deadline, 3.0)

    def test_only_one_restart_pending(self):
        self.background.fail("network")
        self.controller.toggle_listening()
        self.controller.toggle_listening()
        self.assertEqual(len(self.scheduler.pending()), 1)


# ============================================================================
# SPEECH / TEARDOWN
# ============================================================================

class TestSpeechAndClose(VoiceTestCase):
    def test_speak_uses_runtime_volume(self):
        set_runtime_override("speech_volume", 0.4)
        self.assertTrue(self.controller.speak("hello"))
        self.assertEqual(self.synth.spoken[-1], ("hello", 0.4))
        self.assertTrue(self.controller.is_speaking)

    def test_muted_speech_is_skipped(self):
        set_runtime_override("speech_muted", True)
        self.assertFalse(self.controller.speak("hello"))
        self.assertEqual(self.synth.spoken, [])

    def test_speech_events_track_speaking(self):
        self.controller.speak("hello")
        self.synth.on_end()
        self.assertFalse(self.controller.is_speaking)

    def test_close_tears_everything_down(self):
        self.controller.start()
        self.background.fail("network")
        self.controller.close()
        self.assertTrue(self.controller.closed)
        self.assertEqual(self.controller.mode, VoiceMode.IDLE)
        self.assertIsNone(self.controller.restart_deadline)
        self.assertGreaterEqual(self.background.abort_count, 1)
        self.assertGreaterEqual(self.foreground.abort_count, 1)
        self.assertGreaterEqual(self.synth.cancel_count, 1)
        self.scheduler.advance(60)
        self.assertEqual(self.background.start_count, 1)

    def test_context_manager_closes(self):
        with self.make_controller() as controller:
            controller.start()
        self.assertTrue(controller.closed)
        self.assertFalse(self.background.running)


if __name__ == "__main__":
    unittest.main()
