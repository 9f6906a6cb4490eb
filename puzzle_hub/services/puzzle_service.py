"""
Puzzle Authoring Service

Validates admin-authored puzzles and saves them under a fresh short id that
players share as a link.
"""

from typing import Any, Dict, List, Optional

from ..config.game_settings import (
    BOARD_COUNT, CATEGORY_COUNT, DIFFICULTIES, GROUP_SIZE, validate_category_words,
    validate_word_format
)
from ..errors import PuzzleValidationError
from ..models.game import (
    Category, Difficulty, GroupingPuzzle, PuzzleDefinition, QuordlePuzzle, Variant, WordlePuzzle
)
from ..utils.helpers import generate_id
from ..utils.timer import iso_timestamp, now_ms
from .storage import PuzzleStore

PUZZLE_ID_LENGTH = 6


def _text(value: Any) -> str:
    """Stripped string value; anything that isn't a string counts as blank."""
    return value.strip() if isinstance(value, str) else ''


class PuzzleService:
    def __init__(self, puzzle_store: PuzzleStore, dictionary=None, rng=None):
        self.puzzle_store = puzzle_store
        self.dictionary = dictionary
        self.rng = rng

    def build_grouping(self, payload: Dict[str, Any], created_by: Optional[str]) -> GroupingPuzzle:
        raw_categories = payload.get('categories') or []
        if not isinstance(raw_categories, list) or len(raw_categories) != CATEGORY_COUNT:
            raise PuzzleValidationError(f"A puzzle needs exactly {CATEGORY_COUNT} categories")

        categories: List[Category] = []
        for i, raw in enumerate(raw_categories, start=1):
            if not isinstance(raw, dict):
                raise PuzzleValidationError(f"Category {i} must be an object")

            title = _text(raw.get('title'))
            if not title:
                raise PuzzleValidationError(f"Category {i} needs a title")

            raw_words = raw.get('words') or []
            if not isinstance(raw_words, list) or len(raw_words) != GROUP_SIZE:
                raise PuzzleValidationError(f"Category {i} needs exactly {GROUP_SIZE} words")
            words = [_text(w) for w in raw_words]
            for j, word in enumerate(words, start=1):
                if not word:
                    raise PuzzleValidationError(f"Category {i} is missing word {j}")

            difficulty = (_text(raw.get('difficulty')) or 'easy').lower()
            if difficulty not in DIFFICULTIES:
                raise PuzzleValidationError(f"Category {i} has an unknown difficulty '{difficulty}'")

            categories.append(Category(title=title, words=tuple(words), difficulty=Difficulty(difficulty)))

        try:
            validate_category_words([w for c in categories for w in c.words])
        except ValueError as e:
            raise PuzzleValidationError(str(e)) from e

        return GroupingPuzzle(categories=tuple(categories), created_by=created_by)

    def _checked_word(self, word: str, position: Optional[int] = None) -> str:
        label = f"Word {position}" if position else "Word"
        if not _text(word):
            raise PuzzleValidationError(f"Please enter {label.lower()}")
        try:
            normalized = validate_word_format(word)
        except ValueError as e:
            raise PuzzleValidationError(f"{label} must be exactly 5 letters") from e
        if self.dictionary is not None and not self.dictionary.check(normalized):
            raise PuzzleValidationError(f"{label} '{normalized}' is not a valid word")
        return normalized

    def build_wordle(self, payload: Dict[str, Any], created_by: Optional[str]) -> WordlePuzzle:
        return WordlePuzzle(target_word=self._checked_word(payload.get('targetWord')), created_by=created_by)

    def build_quordle(self, payload: Dict[str, Any], created_by: Optional[str]) -> QuordlePuzzle:
        raw_words = payload.get('targetWords') or []
        if not isinstance(raw_words, list) or len(raw_words) != BOARD_COUNT:
            raise PuzzleValidationError(f"A Quordle puzzle needs exactly {BOARD_COUNT} words")

        words = tuple(self._checked_word(w, i) for i, w in enumerate(raw_words, start=1))
        if len(set(words)) != BOARD_COUNT:
            raise PuzzleValidationError(f"All {BOARD_COUNT} words must be different")
        return QuordlePuzzle(target_words=words, created_by=created_by)

    def build(self, variant: Variant, payload: Dict[str, Any], created_by: Optional[str]) -> PuzzleDefinition:
        builders = {
            Variant.CONNECTIONS: self.build_grouping,
            Variant.WORDLE: self.build_wordle,
            Variant.QUORDLE: self.build_quordle,
        }
        return builders[variant](payload, created_by)

    def create_puzzle(self, variant: Variant, payload: Dict[str, Any], created_by: Optional[str]) -> str:
        """
        Validates and stores a new puzzle.

        Returns:
            str: The new puzzle id

        Raises:
            PuzzleValidationError: If the definition is malformed
            PersistenceFailure: If storage rejects the write
        """
        puzzle = self.build(variant, payload, created_by)

        puzzle_id = generate_id(PUZZLE_ID_LENGTH, rng=self.rng)
        while self.puzzle_store.exists(variant, puzzle_id):
            puzzle_id = generate_id(PUZZLE_ID_LENGTH, rng=self.rng)

        self.puzzle_store.put(variant, puzzle_id, puzzle, created_at=iso_timestamp(now_ms()))
        return puzzle_id
