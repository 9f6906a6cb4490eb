"""
Game Configuration Constants Module

This module defines the rules of the three puzzle games and the names of the
storage collections they use. All game parameters are centralized here so a
rule change never has to hunt through the session code.
"""

from typing import Dict, Final, List, Sequence

# Shared letter-game rules
WORD_LENGTH: Final[int] = 5
"""
Length of every Wordle / Quordle target and guess.
"""

KEYBOARD_LETTERS: Final[str] = "QWERTYUIOPASDFGHJKLZXCVBNM"

# Grouping (Connections) rules
GROUP_SIZE: Final[int] = 4
CATEGORY_COUNT: Final[int] = 4
MAX_MISTAKES: Final[int] = 4
DIFFICULTIES: Final[List[str]] = ["easy", "medium", "hard", "tricky"]

# Wordle rules
WORDLE_MAX_GUESSES: Final[int] = 6

# Quordle rules
BOARD_COUNT: Final[int] = 4
QUORDLE_MAX_GUESSES: Final[int] = 9

# Stats and leaderboards
MIN_GAMES_FOR_RATE: Final[int] = 3
"""
Players need at least this many games to appear in rate-based rankings.
"""

LEADERBOARD_SIZE: Final[int] = 10
RECENT_GAMES: Final[int] = 10

# Transient UI messages auto-clear after this many milliseconds
MESSAGE_CLEAR_MS: Final[int] = 2000

# Storage collections, one puzzle/result pair per game
GAME_COLLECTIONS: Final[Dict[str, Dict[str, str]]] = {
    "connections": {"puzzles": "connection_games", "results": "connection_results"},
    "wordle": {"puzzles": "wordle_games", "results": "wordle_results"},
    "quordle": {"puzzles": "quordle_games", "results": "quordle_results"},
}
PLAYERS_COLLECTION: Final[str] = "players"
ADMINS_COLLECTION: Final[str] = "admins"


def validate_word_format(word: str) -> str:
    """
    Normalizes a letter-game word and checks its shape.

    Returns:
        str: The uppercase word

    Raises:
        ValueError: If the word is not exactly WORD_LENGTH letters
    """
    normalized = (word or "").strip().upper()
    if len(normalized) != WORD_LENGTH:
        raise ValueError(f"Word '{normalized}' is not {WORD_LENGTH} characters long")
    if not normalized.isalpha():
        raise ValueError(f"Word '{normalized}' contains non-alphabetic characters")
    return normalized


def validate_category_words(words: Sequence[str]) -> bool:
    """
    Checks that the words of a grouping puzzle are globally unique.

    Comparison is case-insensitive and ignores surrounding whitespace, matching
    the way players see the board.
    """
    normalized = [w.strip().lower() for w in words]
    if len(normalized) != GROUP_SIZE * CATEGORY_COUNT:
        raise ValueError(f"A puzzle needs exactly {GROUP_SIZE * CATEGORY_COUNT} words")
    if len(set(normalized)) != len(normalized):
        raise ValueError("All words must be unique (no duplicates)")
    return True
