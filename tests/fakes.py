"""
Deterministic stand-ins for the platform capabilities.

FakeScheduler only fires timers when a test calls advance(); the fake
recognizers and synthesizer record calls and let the test emit events.
"""

from datetime import datetime, timedelta

from gameverse.capabilities import (
    CapabilityError,
    SpeechRecognizer,
    SpeechSynthesizer,
    TimerHandle,
    TimerScheduler,
)


class FakeHandle(TimerHandle):
    def __init__(self, deadline, seq, callback):
        self.deadline = deadline
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler(TimerScheduler):
    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self.handles = []

    def call_later(self, delay, callback):
        self._seq += 1
        handle = FakeHandle(self.now + delay, self._seq, callback)
        self.handles.append(handle)
        return handle

    def time(self):
        return self.now

    def pending(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [h for h in self.pending() if h.deadline <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.deadline, h.seq))
            self.now = handle.deadline
            handle.fired = True
            handle.callback()
        self.now = target


class FakeRecognizer(SpeechRecognizer):
    def __init__(self, fail_start=False):
        super().__init__()
        self.fail_start = fail_start
        self.running = False
        self.start_count = 0
        self.stop_count = 0
        self.abort_count = 0

    def start(self):
        if self.fail_start:
            raise CapabilityError("device busy")
        self.running = True
        self.start_count += 1

    def stop(self):
        self.running = False
        self.stop_count += 1

    def abort(self):
        self.running = False
        self.abort_count += 1

    # Platform events
    def say(self, transcript):
        self._emit_result(transcript)

    def fail(self, code):
        self._emit_error(code)

    def end(self):
        self.running = False
        self._emit_end()


class FakeSynthesizer(SpeechSynthesizer):
    def __init__(self):
        super().__init__()
        self.spoken = []
        self.cancel_count = 0

    def speak(self, text, rate=1.0, pitch=1.0, volume=1.0):
        self.spoken.append((text, volume))
        if self.on_start:
            self.on_start()

    def cancel(self):
        self.cancel_count += 1


class FakeClock:
    """Callable clock the test can move forward."""

    def __init__(self, now=None):
        self.now = now or datetime(2026, 10, 18, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
