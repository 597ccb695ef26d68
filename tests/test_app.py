import json
import logging

import pytest

from fakes import FakeClock, FakeRecognizer, FakeScheduler, FakeSynthesizer
from gameverse.app import GameVerseApp, build_app, setup_logging
from gameverse.config import Config
from gameverse.storage import InMemoryStorage
from gameverse.version import CURRENT_VERSION, get_version
from gameverse.voice_session import VoiceMode


@pytest.fixture
def parts():
    return {
        "paths": [],
        "scheduler": FakeScheduler(),
        "background": FakeRecognizer(),
        "foreground": FakeRecognizer(),
        "synthesizer": FakeSynthesizer(),
        "storage": InMemoryStorage({"micPermissionStatus": "granted"}),
    }


@pytest.fixture
def app(parts):
    app = GameVerseApp(
        storage=parts["storage"],
        navigate=parts["paths"].append,
        scheduler=parts["scheduler"],
        background=parts["background"],
        foreground=parts["foreground"],
        synthesizer=parts["synthesizer"],
        clock=FakeClock(),
    )
    app.start()
    yield app
    app.close()


def test_start_loads_progress_and_listens(app, parts):
    assert app.store.loaded
    assert parts["storage"].get("gameverse-data") is not None
    assert app.voice.mode == VoiceMode.BACKGROUND_LISTENING


def test_typed_command_is_dispatched(app, parts):
    result = app.submit_text("Open badges")
    assert result.path == "/badges"
    parts["scheduler"].advance(1.0)
    assert parts["paths"] == ["/badges"]
    roles = [(m.role, m.content) for m in app.chat.messages()[-2:]]
    assert roles == [("user", "Open badges"), ("assistant", "Taking you to Badges...")]
    assert parts["synthesizer"].spoken[-1][0] == "Taking you to Badges..."


def test_typed_wake_phrase_opens_command_window(app, parts):
    assert app.submit_text("hey buddy") is None
    assert app.voice.mode == VoiceMode.AWAITING_COMMAND
    assert app.chat.last().content == "How can I help you?"
    parts["scheduler"].advance(1.0)
    assert parts["foreground"].start_count == 1


def test_typed_wake_phrase_with_command(app):
    result = app.submit_text("hey buddy play dice")
    assert result.path == "/games/dice-roller"


def test_blank_input_is_ignored(app):
    before = len(app.chat)
    assert app.submit_text("   ") is None
    assert len(app.chat) == before


def test_spoken_command_reaches_dispatcher(app, parts):
    parts["background"].say("hey buddy open settings")
    assert app.last_result.path == "/settings"
    assert app.chat.messages()[-2].content == "open settings"


def test_evaluate_progress_collects_notifications(app):
    app.store.increment_plays("rock-paper-scissors")
    app.store.update_progress("rock-paper-scissors", {"wins": 3})
    events = app.evaluate_progress()
    ids = {e.item_id for e in events}
    assert {"rps_novice", "rps_daily_win_3"} <= ids
    assert any(n.startswith("Badge Unlocked:") for n in app.notifications)
    assert any(n.startswith("Challenge Completed:") for n in app.notifications)


def test_evaluate_progress_settles_challenge_badges(app):
    doc = json.loads(app.store.export_json())
    doc["sessionStats"]["challengesCompleted"] = 24
    doc["gameProgress"]["card-battle"]["wins"] = 1
    app.store.import_json(json.dumps(doc))

    events = app.evaluate_progress()
    ids = [e.item_id for e in events]
    assert "battle_daily_win" in ids
    assert "challenge_master" in ids
    assert app.store.snapshot().get_badge("challenge_master").unlocked
    assert app.evaluate_progress() == []


def test_close_stops_voice(app, parts):
    app.close()
    assert app.voice.closed
    assert not parts["background"].running


def test_build_app_uses_configured_storage():
    cfg = Config({"storage": {"backend": "memory"}})
    app = build_app(lambda path: None, config=cfg, scheduler=FakeScheduler())
    assert isinstance(app.store.storage, InMemoryStorage)


def test_setup_logging_level(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
    setup_logging(Config({"system": {"log_level": "debug"}}))
    assert calls["level"] == logging.DEBUG
    setup_logging(Config({"system": {"log_level": "nonsense"}}))
    assert calls["level"] == logging.INFO
    setup_logging(Config({"system": {"log_level": "warning", "debug_mode": True}}))
    assert calls["level"] == logging.DEBUG


def test_start_logs_version(parts, caplog):
    app = GameVerseApp(parts["storage"], parts["paths"].append, scheduler=parts["scheduler"], clock=FakeClock())
    with caplog.at_level(logging.INFO, logger="gameverse.app"):
        app.start()
    assert f"GameVerse core {get_version()['version']}" in caplog.text
    app.close()


def test_version_history_ends_at_current():
    info = get_version()
    assert info["version"] == CURRENT_VERSION
    assert info["history"][-1]["version"] == CURRENT_VERSION
