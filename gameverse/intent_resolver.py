"""
Intent Resolver

Responsibility: Convert a command transcript to a structured intent.
Nothing more.

Does NOT:
- Navigate, speak or change settings (Dispatcher's job)
- Read progress data (Dispatcher fills in live answers)
- Understand language (ordered keyword/phrase matching only)
- Raise (unmatched or broken input resolves to the fallback intent)

Categories are checked in a fixed order and the first category whose
trigger phrases match wins. Inside navigation and game launch, the target
comes from an ordered lookup table: the first entry with a phrase contained
in the text wins.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from gameverse.catalog import format_game_name, get_game_info
from gameverse.wake_word import strip_wake_word

logger = logging.getLogger(__name__)


class IntentType(Enum):
    NAVIGATE = "navigate"
    PLAY_GAME = "play_game"
    HELP = "help"
    SETTINGS_CHANGE = "settings_change"
    QUERY = "query"
    CLOSE = "close"
    UNKNOWN = "unknown"


# Intent.action values
ACTION_NAVIGATE = "navigate"
ACTION_PLAY = "play"
ACTION_HELP = "help"
ACTION_CLOSE = "close"
ACTION_THEME = "theme"
ACTION_TIME = "time"
ACTION_GAME_INFO = "game_info"
ACTION_REFRESH = "refresh"
ACTION_POPULAR_GAMES = "popular_games"
ACTION_COINS = "coins"
ACTION_CLEAR_CHAT = "clear_chat"
ACTION_VOLUME_UP = "volume_up"
ACTION_VOLUME_DOWN = "volume_down"
ACTION_MUTE = "mute"
ACTION_SMALL_TALK = "small_talk"
ACTION_FALLBACK = "fallback"


@dataclass
class Intent:
    """
    Structured intent extracted from a transcript.

    Fields:
    - intent_type: coarse category
    - action: what the Dispatcher should do (see ACTION_* constants)
    - raw_text: the command text that was classified
    - target: route, game id or theme value, when the action needs one
    - response: text to say back, when it does not depend on live data
    """
    intent_type: IntentType
    action: str
    raw_text: str
    target: Optional[str] = None
    response: Optional[str] = None

    def __str__(self) -> str:
        target_str = f", target='{self.target}'" if self.target else ""
        return f"Intent({self.intent_type.value}/{self.action}{target_str}, text='{self.raw_text[:50]}')"


# ============================================================================
# LOOKUP TABLES (declaration order is the tie-break)
# ============================================================================

DESTINATIONS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("home", ("home", "main page", "start", "landing page", "homepage", "front page", "welcome page")),
    ("games", ("games", "game list", "all games", "play games", "game library", "games page", "game collection")),
    ("daily-challenges", (
        "daily challenges", "challenges", "daily", "challenge", "tasks",
        "missions", "quests", "daily tasks", "daily missions",
    )),
    ("dashboard", (
        "dashboard", "stats", "statistics", "progress", "analytics",
        "data", "performance", "my stats", "my progress", "my dashboard",
    )),
    ("badges", (
        "badges", "achievements", "trophies", "awards", "medals",
        "accomplishments", "my badges", "my achievements", "my trophies",
    )),
    ("about", ("about", "info", "information", "details", "learn more", "about page", "about us", "about gameverse")),
    ("settings", (
        "settings", "preferences", "options", "configuration",
        "setup", "settings page", "my settings", "game settings",
    )),
)

GAMES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("rock-paper-scissors", (
        "rock paper scissors", "rock paper", "rps", "rock", "scissors", "paper game", "rock paper scissor",
    )),
    ("number-guess", (
        "number guess", "guess number", "number guessing", "number game",
        "guessing game", "guess the number", "number guessing game",
    )),
    ("dice-roller", ("dice roller", "dice", "roll dice", "dice game", "rolling dice", "dice rolling", "roll the dice")),
    ("memory-match", (
        "memory match", "memory game", "matching game", "match cards",
        "memory cards", "card matching", "memory matching",
    )),
    ("trivia-quiz", (
        "trivia quiz", "trivia", "quiz", "questions", "trivia game",
        "quiz game", "question game", "trivia questions",
    )),
    ("word-unscramble", (
        "word unscramble", "unscramble", "word game", "scramble",
        "word puzzle", "unscramble words", "word scramble",
    )),
    ("grid-puzzle", ("grid puzzle", "puzzle", "sliding puzzle", "tile puzzle", "grid game", "sliding tiles", "puzzle game")),
    ("idle-clicker", (
        "idle clicker", "clicker", "clicking game", "idle game", "click game", "clicker game", "idle clicking",
    )),
    ("card-battle", ("card battle", "battle", "card game", "battle cards", "card fight", "card wars", "battle card game")),
    ("reaction-speed", (
        "reaction speed", "reaction", "speed test", "reaction test", "reflex test", "reaction time", "speed reaction",
    )),
)


# ============================================================================
# CANNED TEXT
# ============================================================================

HELP_TEXT = """I can help you navigate GameVerse and provide information. Here are some commands you can try:

Navigation:
- "Open Games" to see all games
- "Go to Dashboard" to see your stats
- "Show my badges" to view your achievements
- "Open daily challenges" to see today's challenges
- "Take me to settings" to access settings

Games:
- "Play Rock Paper Scissors" to start a specific game
- "Tell me about Memory Match" to learn about a game
- "What are the popular games?" to get recommendations

Other Commands:
- "Dark mode" or "Light mode" to change theme
- "What time is it?" to check the current time
- "Clear chat" to reset our conversation
- "Close" or "Exit" to close this chat

You can activate me anytime by saying "Hey Buddy" followed by a command."""

GOODBYE_TEXT = "Goodbye! Closing the chat window."
POPULAR_GAMES_TEXT = (
    "Our most popular games are Rock Paper Scissors, Memory Match, and Trivia Quiz. "
    "Would you like to play one of these?"
)
FALLBACK_TEXT = (
    "I'm not sure how to help with that. Try asking me to open a game, show your stats, "
    "or navigate to a specific page. Say 'help' for more options."
)

# Checked in order; first phrase hit wins.
SMALL_TALK: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("hello", "hi "), "Hello! How can I help you with GameVerse today?"),
    (("thank",), "You're welcome! Is there anything else I can help you with?"),
    (("who are you", "what are you"),
     "I'm GameVerse Buddy, your virtual assistant for the GameVerse platform. "
     "I can help you navigate the site, play games, and check your progress."),
    (("how do i play", "how to play"),
     "You can browse our games by saying 'Open Games' or directly start a specific game by saying "
     "'Play' followed by the game name, like 'Play Rock Paper Scissors'."),
    (("best game", "recommend", "suggestion"),
     "I'd recommend trying Memory Match or Trivia Quiz if you're new. "
     "Rock Paper Scissors is also a classic favorite!"),
)


def format_destination(route: str) -> str:
    return format_game_name(route)


def _contains_any(text: str, phrases) -> bool:
    return any(p in text for p in phrases)


def _lookup(text: str, table: Tuple[Tuple[str, Tuple[str, ...]], ...]) -> Optional[str]:
    for key, phrases in table:
        if _contains_any(text, phrases):
            return key
    return None


def extract_destination(text: str) -> Optional[str]:
    return _lookup(text, DESTINATIONS)


def extract_game(text: str) -> Optional[str]:
    return _lookup(text, GAMES)


class IntentResolver:
    """
    Ordered keyword resolver.

    Intentionally dumb for predictability: the same text always yields the
    same intent.
    """

    def __init__(self):
        self.navigation_keywords = ("go to", "open", "navigate to", "take me to")
        self.game_launch_keywords = ("play", "start game", "launch game")
        self.help_keywords = ("help", "what can you do", "commands", "how to use")
        self.stats_keywords = ("stats", "statistics", "progress", "my performance")
        self.badges_keywords = ("badges", "achievements", "trophies", "awards")
        self.challenges_keywords = ("challenges", "daily challenges", "tasks", "missions")
        self.close_keywords = ("close", "exit", "bye", "goodbye")
        self.theme_keywords = ("dark mode", "light mode", "theme", "change color")
        self.time_keywords = ("time", "date", "day", "today")
        self.game_info_keywords = ("tell me about", "what is", "how to play")
        self.settings_keywords = ("settings", "preferences", "options")
        self.about_keywords = ("about", "information", "info")
        self.refresh_keywords = ("refresh", "reload", "update")
        self.home_keywords = ("home", "main page", "start page")
        self.games_list_keywords = ("games list", "all games", "show games")
        self.popular_keywords = ("popular games", "best games", "recommended games")
        self.coins_keywords = ("coins", "how many coins", "my coins")
        self.clear_chat_keywords = ("clear chat", "clear messages", "reset chat")
        self.volume_up_keywords = ("volume up", "louder", "increase volume")
        self.volume_down_keywords = ("volume down", "quieter", "decrease volume")
        self.mute_keywords = ("mute", "silent", "stop speaking")

    def resolve(self, transcript: str) -> Intent:
        """
        Classify transcript. A leading wake phrase is stripped first.

        Never raises; anything unexpected yields the fallback intent.
        """
        text = ""
        try:
            text = strip_wake_word(transcript or "")
            intent = self._classify(text)
        except Exception:
            logger.warning(f"[INTENT] Could not classify {transcript!r}; using fallback", exc_info=True)
            intent = Intent(IntentType.UNKNOWN, ACTION_FALLBACK, text, response=FALLBACK_TEXT)
        logger.debug(f"[INTENT] {intent}")
        return intent

    def _classify(self, text: str) -> Intent:
        if _contains_any(text, self.navigation_keywords):
            destination = extract_destination(text)
            if destination:
                return self._navigate(text, destination)

        if _contains_any(text, self.game_launch_keywords):
            game = extract_game(text)
            if game:
                return Intent(
                    IntentType.PLAY_GAME, ACTION_PLAY, text,
                    target=game, response=f"Opening {format_destination(game)}...",
                )

        if _contains_any(text, self.help_keywords):
            return Intent(IntentType.HELP, ACTION_HELP, text, response=HELP_TEXT)

        if _contains_any(text, self.stats_keywords):
            return self._navigate(text, "dashboard")
        if _contains_any(text, self.badges_keywords):
            return self._navigate(text, "badges")
        if _contains_any(text, self.challenges_keywords):
            return self._navigate(text, "daily-challenges")

        if _contains_any(text, self.close_keywords):
            return Intent(IntentType.CLOSE, ACTION_CLOSE, text, response=GOODBYE_TEXT)

        if _contains_any(text, self.theme_keywords):
            return self._theme(text)

        if _contains_any(text, self.time_keywords):
            return Intent(IntentType.QUERY, ACTION_TIME, text)

        if _contains_any(text, self.game_info_keywords):
            game = extract_game(text)
            if game:
                return Intent(IntentType.QUERY, ACTION_GAME_INFO, text, target=game, response=get_game_info(game))

        if _contains_any(text, self.settings_keywords):
            return self._navigate(text, "settings")
        if _contains_any(text, self.about_keywords):
            return self._navigate(text, "about")

        if _contains_any(text, self.refresh_keywords):
            return Intent(IntentType.NAVIGATE, ACTION_REFRESH, text, response="Refreshing the page...")

        if _contains_any(text, self.home_keywords):
            return self._navigate(text, "home")
        if _contains_any(text, self.games_list_keywords):
            return self._navigate(text, "games")

        if _contains_any(text, self.popular_keywords):
            return Intent(IntentType.QUERY, ACTION_POPULAR_GAMES, text, response=POPULAR_GAMES_TEXT)

        if _contains_any(text, self.coins_keywords):
            return Intent(IntentType.QUERY, ACTION_COINS, text, target="dashboard")

        if _contains_any(text, self.clear_chat_keywords):
            return Intent(IntentType.SETTINGS_CHANGE, ACTION_CLEAR_CHAT, text)

        if _contains_any(text, self.volume_up_keywords):
            return Intent(IntentType.SETTINGS_CHANGE, ACTION_VOLUME_UP, text, response="I've increased the volume.")
        if _contains_any(text, self.volume_down_keywords):
            return Intent(IntentType.SETTINGS_CHANGE, ACTION_VOLUME_DOWN, text, response="I've decreased the volume.")
        if _contains_any(text, self.mute_keywords):
            return Intent(IntentType.SETTINGS_CHANGE, ACTION_MUTE, text, response="I've muted the audio.")

        return self._fallback(text)

    def _navigate(self, text: str, route: str) -> Intent:
        return Intent(
            IntentType.NAVIGATE, ACTION_NAVIGATE, text,
            target=route, response=f"Taking you to {format_destination(route)}...",
        )

    def _theme(self, text: str) -> Intent:
        if "dark" in text:
            return Intent(IntentType.SETTINGS_CHANGE, ACTION_THEME, text, target="dark", response="Switching to dark mode.")
        if "light" in text:
            return Intent(IntentType.SETTINGS_CHANGE, ACTION_THEME, text, target="light", response="Switching to light mode.")
        return Intent(
            IntentType.SETTINGS_CHANGE, ACTION_THEME, text,
            response="You can say 'dark mode' or 'light mode' to change the theme.",
        )

    def _fallback(self, text: str) -> Intent:
        for phrases, reply in SMALL_TALK:
            if _contains_any(text, phrases):
                return Intent(IntentType.QUERY, ACTION_SMALL_TALK, text, response=reply)
        return Intent(IntentType.UNKNOWN, ACTION_FALLBACK, text, response=FALLBACK_TEXT)


_resolver: Optional[IntentResolver] = None


def resolve(transcript: str) -> Intent:
    """Module-level convenience around a shared IntentResolver."""
    global _resolver
    if _resolver is None:
        _resolver = IntentResolver()
    return _resolver.resolve(transcript)
