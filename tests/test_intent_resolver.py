import pytest

from gameverse.intent_resolver import (
    ACTION_CLEAR_CHAT,
    ACTION_CLOSE,
    ACTION_COINS,
    ACTION_FALLBACK,
    ACTION_GAME_INFO,
    ACTION_HELP,
    ACTION_MUTE,
    ACTION_NAVIGATE,
    ACTION_PLAY,
    ACTION_POPULAR_GAMES,
    ACTION_REFRESH,
    ACTION_SMALL_TALK,
    ACTION_THEME,
    ACTION_TIME,
    ACTION_VOLUME_DOWN,
    ACTION_VOLUME_UP,
    FALLBACK_TEXT,
    HELP_TEXT,
    IntentResolver,
    IntentType,
    extract_destination,
    extract_game,
    resolve,
)


@pytest.fixture
def resolver():
    return IntentResolver()


def test_wake_phrase_does_not_pick_home(resolver):
    intent = resolver.resolve("hey buddy open dashboard")
    assert intent.intent_type == IntentType.NAVIGATE
    assert intent.action == ACTION_NAVIGATE
    assert intent.target == "dashboard"
    assert intent.raw_text == "open dashboard"


def test_play_game(resolver):
    intent = resolver.resolve("Play Memory Match")
    assert intent.intent_type == IntentType.PLAY_GAME
    assert intent.action == ACTION_PLAY
    assert intent.target == "memory-match"
    assert intent.response == "Opening Memory Match..."


def test_game_info_is_not_a_launch(resolver):
    intent = resolver.resolve("tell me about memory match")
    assert intent.intent_type == IntentType.QUERY
    assert intent.action == ACTION_GAME_INFO
    assert intent.target == "memory-match"
    assert "Flip cards" in intent.response


@pytest.mark.parametrize("text,route", [
    ("go to home", "home"),
    ("open the games", "games"),
    ("take me to my achievements", "badges"),
    ("navigate to daily challenges", "daily-challenges"),
    ("open settings", "settings"),
    ("open about page", "about"),
])
def test_navigation_destinations(resolver, text, route):
    intent = resolver.resolve(text)
    assert intent.action == ACTION_NAVIGATE
    assert intent.target == route


@pytest.mark.parametrize("text,route", [
    ("show my stats", "dashboard"),
    ("my badges please", "badges"),
    ("any missions today", "daily-challenges"),
])
def test_shortcuts_without_navigation_verb(resolver, text, route):
    intent = resolver.resolve(text)
    assert intent.action == ACTION_NAVIGATE
    assert intent.target == route


def test_destination_table_order():
    # "start" (home) is listed before "play games" (games).
    assert extract_destination("start the show") == "home"
    assert extract_destination("nothing here") is None
    assert extract_game("rock paper scissors please") == "rock-paper-scissors"
    assert extract_game("card battle") == "card-battle"


def test_open_without_known_destination_falls_through(resolver):
    intent = resolver.resolve("open trivia")
    assert intent.intent_type == IntentType.UNKNOWN
    assert intent.action == ACTION_FALLBACK


def test_help(resolver):
    intent = resolver.resolve("what can you do")
    assert intent.intent_type == IntentType.HELP
    assert intent.action == ACTION_HELP
    assert intent.response == HELP_TEXT


def test_close(resolver):
    intent = resolver.resolve("goodbye")
    assert intent.intent_type == IntentType.CLOSE
    assert intent.action == ACTION_CLOSE


@pytest.mark.parametrize("text,target", [
    ("dark mode", "dark"),
    ("switch to light mode", "light"),
    ("change the theme", None),
])
def test_theme(resolver, text, target):
    intent = resolver.resolve(text)
    assert intent.intent_type == IntentType.SETTINGS_CHANGE
    assert intent.action == ACTION_THEME
    assert intent.target == target


def test_time(resolver):
    intent = resolver.resolve("what time is it")
    assert intent.intent_type == IntentType.QUERY
    assert intent.action == ACTION_TIME


def test_refresh(resolver):
    assert resolver.resolve("reload").action == ACTION_REFRESH


def test_popular_and_coins(resolver):
    assert resolver.resolve("what are the popular games").action == ACTION_POPULAR_GAMES
    coins = resolver.resolve("how many coins do i have")
    assert coins.action == ACTION_COINS
    assert coins.target == "dashboard"


@pytest.mark.parametrize("text,action", [
    ("clear chat", ACTION_CLEAR_CHAT),
    ("louder", ACTION_VOLUME_UP),
    ("quieter", ACTION_VOLUME_DOWN),
    ("mute", ACTION_MUTE),
])
def test_settings_changes(resolver, text, action):
    intent = resolver.resolve(text)
    assert intent.intent_type == IntentType.SETTINGS_CHANGE
    assert intent.action == action


def test_small_talk(resolver):
    intent = resolver.resolve("thank you")
    assert intent.action == ACTION_SMALL_TALK
    assert intent.response.startswith("You're welcome")
    assert resolver.resolve("who are you").action == ACTION_SMALL_TALK


def test_fallback(resolver):
    intent = resolver.resolve("banana")
    assert intent.intent_type == IntentType.UNKNOWN
    assert intent.action == ACTION_FALLBACK
    assert intent.response == FALLBACK_TEXT


def test_empty_and_none_input(resolver):
    assert resolver.resolve("").action == ACTION_FALLBACK
    assert resolver.resolve(None).action == ACTION_FALLBACK


def test_classification_error_yields_fallback(resolver, monkeypatch):
    def boom(_text):
        raise RuntimeError("bad table")

    monkeypatch.setattr(resolver, "_classify", boom)
    intent = resolver.resolve("open games")
    assert intent.action == ACTION_FALLBACK
    assert intent.raw_text == "open games"


def test_module_level_resolve():
    assert resolve("play trivia").target == "trivia-quiz"
