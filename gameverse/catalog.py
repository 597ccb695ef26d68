"""
Canonical catalogs for GameVerse: games, badges, daily challenge templates.

These are static, versioned lists shipped with the application.
Badges are only ever appended here; an id, once shipped, is never reused.
Predicates for each id live in gameverse.rules.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

ALL_GAMES = "all"


@dataclass(frozen=True)
class GameEntry:
    id: str
    name: str
    description: str
    defaults: Tuple[Tuple[str, float], ...]


@dataclass(frozen=True)
class BadgeTemplate:
    id: str
    title: str
    description: str
    game: str
    requirement: str
    icon: str


@dataclass(frozen=True)
class ChallengeTemplate:
    id: str
    title: str
    description: str
    game: str
    requirement: str
    reward_coins: int


# ============================================================================
# GAMES
# ============================================================================

GAME_REGISTRY: Dict[str, GameEntry] = {
    "rock-paper-scissors": GameEntry(
        "rock-paper-scissors",
        "Rock Paper Scissors",
        "Rock Paper Scissors is a classic game where you choose rock, paper, or scissors. "
        "Rock beats scissors, scissors beats paper, and paper beats rock. "
        "Try to predict your opponent's move to win!",
        (("wins", 0), ("losses", 0), ("draws", 0), ("plays", 0)),
    ),
    "number-guess": GameEntry(
        "number-guess",
        "Number Guess",
        "In Number Guess, you try to guess a number between 1 and 100. "
        "After each guess, you'll get a hint whether the target number is higher or lower.",
        (("plays", 0), ("bestScore", 0), ("score", 0)),
    ),
    "dice-roller": GameEntry(
        "dice-roller",
        "Dice Roller",
        "Dice Roller lets you roll virtual dice. "
        "It's a simple game of chance - see what numbers you can roll!",
        (("plays", 0),),
    ),
    "memory-match": GameEntry(
        "memory-match",
        "Memory Match",
        "Memory Match tests your memory skills. Flip cards to find matching pairs. "
        "The fewer moves you make, the better your score!",
        (("plays", 0), ("bestScore", 0), ("level", 1)),
    ),
    "trivia-quiz": GameEntry(
        "trivia-quiz",
        "Trivia Quiz",
        "Trivia Quiz challenges your knowledge with questions across various topics. "
        "Answer correctly before the timer runs out!",
        (("plays", 0), ("score", 0), ("bestScore", 0)),
    ),
    "word-unscramble": GameEntry(
        "word-unscramble",
        "Word Unscramble",
        "In Word Unscramble, you're given jumbled letters and need to rearrange them to form "
        "a valid word. You can use hints if you get stuck.",
        (("plays", 0), ("solved", 0), ("hintsUsed", 0)),
    ),
    "grid-puzzle": GameEntry(
        "grid-puzzle",
        "Grid Puzzle",
        "Grid Puzzle is a sliding tile puzzle where you rearrange tiles to form the correct "
        "sequence. The fewer moves, the better!",
        (("plays", 0), ("bestMoves", 0), ("bestTime", 0)),
    ),
    "idle-clicker": GameEntry(
        "idle-clicker",
        "Idle Clicker",
        "Idle Clicker is a game where you click to earn coins and buy upgrades that "
        "automatically generate more coins for you.",
        (("coins", 0), ("cps", 0), ("clicks", 0)),
    ),
    "card-battle": GameEntry(
        "card-battle",
        "Card Battle",
        "Card Battle is a strategic card game where you battle against the computer. "
        "Choose your actions wisely to defeat your opponent!",
        (("wins", 0), ("losses", 0), ("plays", 0)),
    ),
    "reaction-speed": GameEntry(
        "reaction-speed",
        "Reaction Speed",
        "Reaction Speed tests how quickly you can respond. "
        "Wait for the green light, then click as fast as you can!",
        (("plays", 0), ("bestTime", 0)),
    ),
}

GAME_IDS: Tuple[str, ...] = tuple(GAME_REGISTRY)

POPULAR_GAMES: Tuple[str, ...] = ("rock-paper-scissors", "memory-match", "trivia-quiz")


def format_game_name(game_id: str) -> str:
    """'memory-match' -> 'Memory Match'."""
    return " ".join(word[:1].upper() + word[1:] for word in game_id.split("-"))


def get_game_info(game_id: str) -> str:
    entry = GAME_REGISTRY.get(game_id)
    if entry:
        return entry.description
    return f"{format_game_name(game_id)} is one of our fun mini-games. Try it out to learn more!"


# ============================================================================
# BADGES
# ============================================================================

def _badges(game: str, rows) -> Tuple[BadgeTemplate, ...]:
    return tuple(BadgeTemplate(bid, title, desc, game, req, icon) for bid, title, desc, req, icon in rows)


_RPS_BADGES = _badges("rock-paper-scissors", [
    ("rps_novice", "RPS Novice", "Win your first few rounds of Rock Paper Scissors", "Win 3 games", "hand"),
    ("rps_intermediate", "RPS Contender", "Show you can read your opponent", "Win 10 games", "hand"),
    ("rps_advanced", "RPS Tactician", "Rock, paper and scissors bend to your will", "Win 25 games", "medal"),
    ("rps_expert", "RPS Expert", "Fifty victories in the arena of hands", "Win 50 games", "trophy"),
    ("rps_master", "RPS Master", "The undisputed champion of Rock Paper Scissors", "Win 100 games", "crown"),
    ("rps_streak_3", "Hot Hand", "Win three rounds in a row", "Reach a 3-win streak", "flame"),
    ("rps_streak_5", "On Fire", "Win five rounds in a row", "Reach a 5-win streak", "flame"),
    ("rps_streak_10", "Unstoppable", "Win ten rounds in a row", "Reach a 10-win streak", "flame"),
    ("rps_plays_50", "RPS Regular", "Keep coming back for another round", "Play 50 games", "repeat"),
    ("rps_plays_100", "RPS Devotee", "A hundred rounds of hand-to-hand strategy", "Play 100 games", "repeat"),
])

_GUESS_BADGES = _badges("number-guess", [
    ("guess_novice", "Number Novice", "Take your first guesses", "Play 3 games", "hash"),
    ("guess_intermediate", "Number Hunter", "Getting a feel for the numbers", "Play 10 games", "hash"),
    ("guess_advanced", "Number Tracker", "The numbers can't hide for long", "Play 25 games", "target"),
    ("guess_expert", "Sharp Guesser", "Find the number quickly", "Win in 5 guesses or fewer", "target"),
    ("guess_master", "Mind Reader", "Find the number very quickly", "Win in 3 guesses or fewer", "brain"),
    ("guess_plays_50", "Guess Regular", "Fifty numbers found", "Play 50 games", "repeat"),
    ("guess_plays_100", "Guess Devotee", "A hundred numbers found", "Play 100 games", "repeat"),
    ("guess_perfect", "First Try", "Guess the number on your very first attempt", "Win in 1 guess", "sparkles"),
    ("guess_persistent", "Persistent Guesser", "Keep playing and keep improving",
     "Play 5 games and win in 7 guesses or fewer", "target"),
    ("guess_lucky", "Lucky Streak", "Find the number almost immediately", "Win in 2 guesses or fewer", "clover"),
])

_MEMORY_BADGES = _badges("memory-match", [
    ("memory_novice", "Memory Novice", "Complete the first level", "Reach level 1", "brain"),
    ("memory_intermediate", "Memory Keeper", "Your memory is getting stronger", "Reach level 2", "brain"),
    ("memory_advanced", "Memory Adept", "Pairs are starting to jump out at you", "Reach level 3", "brain"),
    ("memory_expert", "Memory Expert", "Conquer the hardest level", "Reach level 4", "medal"),
    ("memory_master", "Memory Master", "Beat the hardest level efficiently",
     "Reach level 4 with a best of 20 moves or fewer", "crown"),
    ("memory_quick", "Quick Recall", "Clear a board in few moves", "Best of 15 moves or fewer", "zap"),
    ("memory_efficient", "Efficient Mind", "Clear a board in very few moves", "Best of 12 moves or fewer", "zap"),
    ("memory_plays_25", "Memory Regular", "Twenty-five boards cleared", "Play 25 games", "repeat"),
    ("memory_plays_50", "Memory Devotee", "Fifty boards cleared", "Play 50 games", "repeat"),
    ("memory_perfect", "Photographic Memory", "Near-perfect play on the hardest level",
     "Reach level 4 with a best of 16 moves or fewer", "sparkles"),
])

_TRIVIA_BADGES = _badges("trivia-quiz", [
    ("trivia_novice", "Trivia Novice", "Answer a few questions correctly", "Score 3 points", "help-circle"),
    ("trivia_intermediate", "Trivia Buff", "Know your facts", "Score 5 points", "help-circle"),
    ("trivia_advanced", "Trivia Ace", "Get a perfect round", "Best score of 5", "medal"),
    ("trivia_expert", "Trivia Expert", "Perfect rounds are routine for you",
     "Best score of 5 and 10 games played", "trophy"),
    ("trivia_master", "Trivia Master", "A walking encyclopedia", "Best score of 5 and 25 games played", "crown"),
    ("trivia_perfect", "Perfectionist", "Prove your perfect round was no fluke",
     "Best score of 5 and 5 games played", "sparkles"),
    ("trivia_quick", "Quick Thinker", "Strong answers from the start",
     "Best score of 4 and 3 games played", "zap"),
    ("trivia_plays_25", "Trivia Regular", "Twenty-five quizzes taken", "Play 25 games", "repeat"),
    ("trivia_plays_50", "Trivia Devotee", "Fifty quizzes taken", "Play 50 games", "repeat"),
    ("trivia_knowledgeable", "Knowledgeable", "Consistently strong across many quizzes",
     "Best score of 4 and 15 games played", "book-open"),
])

_WORD_BADGES = _badges("word-unscramble", [
    ("word_novice", "Word Novice", "Unscramble your first words", "Solve 3 words", "type"),
    ("word_intermediate", "Word Finder", "Letters are falling into place", "Solve 10 words", "type"),
    ("word_advanced", "Word Smith", "A talent for tangled letters", "Solve 25 words", "medal"),
    ("word_expert", "Word Expert", "Fifty words untangled", "Solve 50 words", "trophy"),
    ("word_master", "Word Master", "No scramble can stop you", "Solve 100 words", "crown"),
    ("word_no_hints", "No Help Needed", "Solve words on your own", "Solve 10 words without using hints", "eye-off"),
    ("word_efficient", "Efficient Solver", "Use hints sparingly", "Solve 20 words using 5 hints or fewer", "zap"),
    ("word_plays_25", "Word Regular", "Twenty-five games of unscrambling", "Play 25 games", "repeat"),
    ("word_plays_50", "Word Devotee", "Fifty games of unscrambling", "Play 50 games", "repeat"),
    ("word_vocabulary", "Rich Vocabulary", "Thirty words and counting", "Solve 30 words", "book-open"),
])

_PUZZLE_BADGES = _badges("grid-puzzle", [
    ("puzzle_novice", "Puzzle Novice", "Slide your first tiles", "Play 1 game", "puzzle"),
    ("puzzle_intermediate", "Puzzle Solver", "The grid is starting to make sense", "Play 5 games", "puzzle"),
    ("puzzle_advanced", "Puzzle Adept", "Sliding tiles is second nature", "Play 15 games", "puzzle"),
    ("puzzle_expert", "Puzzle Expert", "Solve the grid with few moves", "Best of 50 moves or fewer", "medal"),
    ("puzzle_master", "Puzzle Master", "Solve the grid with very few moves", "Best of 30 moves or fewer", "crown"),
    ("puzzle_quick", "Quick Slider", "Solve the grid fast", "Best time of 60 seconds or less", "clock"),
    ("puzzle_efficient", "Efficient Slider", "Waste no moves", "Best of 40 moves or fewer", "zap"),
    ("puzzle_plays_25", "Puzzle Regular", "Twenty-five grids solved", "Play 25 games", "repeat"),
    ("puzzle_plays_50", "Puzzle Devotee", "Fifty grids solved", "Play 50 games", "repeat"),
    ("puzzle_speed_demon", "Speed Demon", "Solve the grid blazingly fast", "Best time of 45 seconds or less", "flame"),
])

_CLICKER_BADGES = _badges("idle-clicker", [
    ("clicker_novice", "Coin Collector", "Start your fortune", "Earn 100 coins", "coins"),
    ("clicker_intermediate", "Coin Hoarder", "Your pile is growing", "Earn 500 coins", "coins"),
    ("clicker_advanced", "Coin Baron", "A thousand shiny coins", "Earn 1,000 coins", "medal"),
    ("clicker_expert", "Coin Tycoon", "A serious fortune", "Earn 5,000 coins", "trophy"),
    ("clicker_master", "Coin Magnate", "Ten thousand coins in the vault", "Earn 10,000 coins", "crown"),
    ("clicker_clicks_100", "Busy Finger", "Click, click, click", "Click 100 times", "mouse-pointer"),
    ("clicker_clicks_500", "Tireless Clicker", "Your mouse deserves a break", "Click 500 times", "mouse-pointer"),
    ("clicker_cps_10", "Automation Apprentice", "Let upgrades do the work", "Reach 10 coins per second", "cpu"),
    ("clicker_cps_50", "Automation Engineer", "A well-oiled coin machine", "Reach 50 coins per second", "cpu"),
    ("clicker_cps_100", "Automation Mogul", "Coins pour in on their own", "Reach 100 coins per second", "cpu"),
])

_BATTLE_BADGES = _badges("card-battle", [
    ("battle_novice", "Battle Novice", "Win your first battles", "Win 3 battles", "swords"),
    ("battle_intermediate", "Battle Veteran", "Your deck is battle-tested", "Win 10 battles", "swords"),
    ("battle_advanced", "Battle Commander", "Victory follows your cards", "Win 25 battles", "medal"),
    ("battle_expert", "Battle Expert", "Fifty opponents defeated", "Win 50 battles", "trophy"),
    ("battle_master", "Battle Master", "Legend of the card table", "Win 100 battles", "crown"),
    ("battle_strategist", "Strategist", "Win often and lose rarely",
     "Win 15 battles with 5 losses or fewer", "shield"),
    ("battle_comeback", "Comeback Kid", "Every loss taught you something",
     "Win 10 battles after losing 10", "rotate-ccw"),
    ("battle_plays_25", "Battle Regular", "Twenty-five battles fought", "Play 25 battles", "repeat"),
    ("battle_plays_50", "Battle Devotee", "Fifty battles fought", "Play 50 battles", "repeat"),
    ("battle_undefeated", "Undefeated", "Win without ever losing", "Win 5 battles with no losses", "shield"),
])

_REACTION_BADGES = _badges("reaction-speed", [
    ("reaction_novice", "Quick Reflexes", "React in half a second", "Best time of 500 ms or less", "zap"),
    ("reaction_intermediate", "Sharp Reflexes", "React faster still", "Best time of 400 ms or less", "zap"),
    ("reaction_advanced", "Rapid Reflexes", "A blink of an eye", "Best time of 300 ms or less", "medal"),
    ("reaction_expert", "Reflex Expert", "Faster than most", "Best time of 250 ms or less", "trophy"),
    ("reaction_master", "Reflex Master", "Elite reaction speed", "Best time of 200 ms or less", "crown"),
    ("reaction_lightning", "Lightning", "Strike like lightning", "Best time of 180 ms or less", "bolt"),
    ("reaction_superhuman", "Superhuman", "Are you even human?", "Best time of 150 ms or less", "sparkles"),
    ("reaction_plays_25", "Reaction Regular", "Twenty-five reaction tests", "Play 25 games", "repeat"),
    ("reaction_plays_50", "Reaction Devotee", "Fifty reaction tests", "Play 50 games", "repeat"),
    ("reaction_consistent", "Consistent", "Reliably fast over many attempts",
     "Play 10 games with a best time of 300 ms or less", "activity"),
])

_SPECIAL_BADGES = _badges(ALL_GAMES, [
    ("gameverse_novice", "Explorer", "Try out different games", "Play 3 different games", "compass"),
    ("gameverse_intermediate", "Adventurer", "Broaden your horizons", "Play 5 different games", "compass"),
    ("gameverse_advanced", "Globetrotter", "Most of the GameVerse explored", "Play 7 different games", "map"),
    ("gameverse_expert", "Completionist", "Almost every game played", "Play 9 different games", "map"),
    ("gameverse_master", "GameVerse Master", "You've played every single game", "Play all 10 games", "crown"),
    ("gameverse_addict", "GameVerse Addict", "One more game... again", "Play 100 games in total", "flame"),
    ("badge_collector_bronze", "Bronze Collector", "Start a badge collection", "Unlock 10 badges", "award"),
    ("badge_collector_silver", "Silver Collector", "A growing trophy cabinet", "Unlock 25 badges", "award"),
    ("badge_collector_gold", "Gold Collector", "A glittering collection", "Unlock 50 badges", "award"),
    ("badge_collector_platinum", "Platinum Collector", "Few badges remain", "Unlock 75 badges", "gem"),
    ("challenge_master", "Challenge Master", "Daily challenges are your routine",
     "Complete 25 daily challenges", "calendar-check"),
])

BADGE_CATALOG: Tuple[BadgeTemplate, ...] = (
    _RPS_BADGES
    + _GUESS_BADGES
    + _MEMORY_BADGES
    + _TRIVIA_BADGES
    + _WORD_BADGES
    + _PUZZLE_BADGES
    + _CLICKER_BADGES
    + _BATTLE_BADGES
    + _REACTION_BADGES
    + _SPECIAL_BADGES
)

BADGE_IDS: Tuple[str, ...] = tuple(b.id for b in BADGE_CATALOG)


# ============================================================================
# DAILY CHALLENGES
# ============================================================================

def _challenges(rows) -> Tuple[ChallengeTemplate, ...]:
    return tuple(ChallengeTemplate(*row) for row in rows)


CHALLENGE_TEMPLATES: Tuple[ChallengeTemplate, ...] = _challenges([
    ("rps_daily_win_3", "Triple Victory", "Win 3 games of Rock Paper Scissors",
     "rock-paper-scissors", "Win 3 games", 50),
    ("rps_daily_play_5", "Hand Warm-up", "Play 5 games of Rock Paper Scissors",
     "rock-paper-scissors", "Play 5 games", 30),
    ("guess_daily_win", "Lucky Number", "Find the hidden number",
     "number-guess", "Win 1 game", 30),
    ("guess_daily_under_5", "Sharp Guess", "Find the number in 5 guesses or fewer",
     "number-guess", "Win in 5 guesses or fewer", 60),
    ("memory_daily_complete", "Memory Workout", "Complete a game of Memory Match",
     "memory-match", "Play 1 game", 30),
    ("memory_daily_level_2", "Level Up", "Reach level 2 in Memory Match",
     "memory-match", "Reach level 2", 50),
    ("trivia_daily_score_3", "Fact Finder", "Score at least 3 points in Trivia Quiz",
     "trivia-quiz", "Score 3 points", 40),
    ("trivia_daily_perfect", "Perfect Quiz", "Score 5 points in Trivia Quiz",
     "trivia-quiz", "Score 5 points", 80),
    ("word_daily_solve_3", "Word Warm-up", "Unscramble 3 words",
     "word-unscramble", "Solve 3 words", 40),
    ("word_daily_no_hints", "On Your Own", "Solve a word without using a hint",
     "word-unscramble", "Solve 1 word with no hints", 50),
    ("puzzle_daily_complete", "Slide Away", "Complete a Grid Puzzle",
     "grid-puzzle", "Play 1 game", 30),
    ("puzzle_daily_under_50", "Lean Solver", "Solve a Grid Puzzle in 50 moves or fewer",
     "grid-puzzle", "Best of 50 moves or fewer", 70),
    ("clicker_daily_100", "Pocket Change", "Earn 100 coins in Idle Clicker",
     "idle-clicker", "Earn 100 coins", 30),
    ("clicker_daily_clicks_50", "Click Sprint", "Click 50 times in Idle Clicker",
     "idle-clicker", "Click 50 times", 30),
    ("battle_daily_win", "First Blood", "Win a Card Battle",
     "card-battle", "Win 1 battle", 40),
    ("battle_daily_win_3", "Battle Streak", "Win 3 Card Battles",
     "card-battle", "Win 3 battles", 70),
    ("reaction_daily_under_400", "Quick Draw", "React in 400 ms or less",
     "reaction-speed", "Best time of 400 ms or less", 50),
    ("reaction_daily_play_5", "Reflex Training", "Play 5 rounds of Reaction Speed",
     "reaction-speed", "Play 5 games", 30),
    ("daily_play_3_games", "Variety Pack", "Play 3 different games",
     ALL_GAMES, "Play 3 different games", 60),
    ("daily_play_5_games", "Game Hopper", "Play 5 different games",
     ALL_GAMES, "Play 5 different games", 100),
    ("daily_total_plays_10", "Marathon", "Play 10 games in total",
     ALL_GAMES, "Play 10 games", 80),
    ("daily_unlock_badge", "Badge Hunter", "Unlock a badge",
     ALL_GAMES, "Unlock 1 badge", 75),
    ("daily_complete_5_challenges", "Overachiever", "Complete 5 daily challenges",
     ALL_GAMES, "Complete 5 challenges", 150),
])

CHALLENGE_IDS: Tuple[str, ...] = tuple(c.id for c in CHALLENGE_TEMPLATES)
