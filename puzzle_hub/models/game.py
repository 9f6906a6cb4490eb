"""
Game Data Models

Contains the puzzle definitions, guess attempts and session state shared by
the three games. Everything here is immutable; the session core produces new
instances instead of mutating old ones.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config.game_settings import KEYBOARD_LETTERS
from ..utils.timer import Timer


class Variant(Enum):
    """The three hosted games."""
    CONNECTIONS = "connections"
    WORDLE = "wordle"
    QUORDLE = "quordle"

    @classmethod
    def parse(cls, value: str) -> "Variant":
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise ValueError(f"Unknown game: {value!r}")


class Feedback(Enum):
    """Letter evaluation status, ordered by keyboard priority."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"
    UNUSED = "unused"

    @property
    def priority(self) -> int:
        return _FEEDBACK_PRIORITY[self]


_FEEDBACK_PRIORITY = {
    Feedback.CORRECT: 3,
    Feedback.PRESENT: 2,
    Feedback.ABSENT: 1,
    Feedback.UNUSED: 0,
}


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    TRICKY = "tricky"


class Phase(Enum):
    """Session lifecycle. NOT_FOUND and LOAD_FAILED are error states of a load."""
    LOADING = "loading"
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"
    NOT_FOUND = "not_found"
    LOAD_FAILED = "load_failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.WON, Phase.LOST)


@dataclass(frozen=True)
class Category:
    """One group of four words in a Connections puzzle."""
    title: str
    words: Tuple[str, ...]
    difficulty: Difficulty

    def to_document(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "words": list(self.words),
            "difficulty": self.difficulty.value,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            title=data["title"],
            words=tuple(data["words"]),
            difficulty=Difficulty(data.get("difficulty", "easy")),
        )


@dataclass(frozen=True)
class GroupingPuzzle:
    categories: Tuple[Category, ...]
    created_by: Optional[str] = None

    @property
    def all_words(self) -> List[str]:
        return [word for category in self.categories for word in category.words]

    @property
    def target_count(self) -> int:
        return len(self.categories)

    def to_document(self) -> Dict[str, Any]:
        return {
            "categories": [c.to_document() for c in self.categories],
            "createdBy": self.created_by,
        }


@dataclass(frozen=True)
class WordlePuzzle:
    target_word: str
    created_by: Optional[str] = None

    @property
    def targets(self) -> Tuple[str, ...]:
        return (self.target_word,)

    @property
    def target_count(self) -> int:
        return 1

    def to_document(self) -> Dict[str, Any]:
        return {"targetWord": self.target_word, "createdBy": self.created_by}


@dataclass(frozen=True)
class QuordlePuzzle:
    target_words: Tuple[str, ...]
    created_by: Optional[str] = None

    @property
    def targets(self) -> Tuple[str, ...]:
        return self.target_words

    @property
    def target_count(self) -> int:
        return len(self.target_words)

    def to_document(self) -> Dict[str, Any]:
        return {"targetWords": list(self.target_words), "createdBy": self.created_by}


PuzzleDefinition = Union[GroupingPuzzle, WordlePuzzle, QuordlePuzzle]


def puzzle_from_document(variant: Variant, data: Dict[str, Any]) -> PuzzleDefinition:
    """Builds the variant's puzzle definition from a stored document."""
    created_by = data.get("createdBy")
    if variant is Variant.CONNECTIONS:
        categories = tuple(Category.from_document(c) for c in data["categories"])
        return GroupingPuzzle(categories=categories, created_by=created_by)
    if variant is Variant.WORDLE:
        return WordlePuzzle(target_word=data["targetWord"].upper(), created_by=created_by)
    return QuordlePuzzle(
        target_words=tuple(w.upper() for w in data["targetWords"]),
        created_by=created_by,
    )


@dataclass(frozen=True)
class GuessAttempt:
    """
    One entry of the solve path.

    Letter games fill `feedback` with one row per board; the grouping game
    fills `matched` and, on a match, the category it found.
    """
    content: Tuple[str, ...]
    timestamp_ms: int
    feedback: Tuple[Tuple[Feedback, ...], ...] = ()
    matched: Optional[bool] = None
    category: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    one_away: bool = False
    solved_boards: Tuple[int, ...] = ()

    @property
    def word(self) -> str:
        return "".join(self.content)

    def to_document(self, variant: Variant) -> Dict[str, Any]:
        if variant is Variant.CONNECTIONS:
            doc: Dict[str, Any] = {
                "type": "correct" if self.matched else "mistake",
                "words": list(self.content),
                "timestamp": self.timestamp_ms,
            }
            if self.matched:
                doc["category"] = self.category
                doc["difficulty"] = self.difficulty.value if self.difficulty else None
            else:
                doc["oneAway"] = self.one_away
            return doc

        rows = [[f.value for f in row] for row in self.feedback]
        if variant is Variant.WORDLE:
            return {"word": self.word, "feedback": rows[0], "timestamp": self.timestamp_ms}
        return {
            "word": self.word,
            "feedbacks": rows,
            "solvedBoards": list(self.solved_boards),
            "timestamp": self.timestamp_ms,
        }

    @classmethod
    def from_document(cls, variant: Variant, data: Dict[str, Any]) -> "GuessAttempt":
        timestamp = int(data.get("timestamp") or 0)
        if variant is Variant.CONNECTIONS:
            difficulty = data.get("difficulty")
            return cls(
                content=tuple(data.get("words", ())),
                timestamp_ms=timestamp,
                matched=data.get("type") == "correct",
                category=data.get("category"),
                difficulty=Difficulty(difficulty) if difficulty else None,
                one_away=bool(data.get("oneAway", False)),
            )
        if variant is Variant.WORDLE:
            rows = [data.get("feedback", [])]
        else:
            rows = data.get("feedbacks", [])
        return cls(
            content=(data.get("word", ""),),
            timestamp_ms=timestamp,
            feedback=tuple(tuple(Feedback(f) for f in row) for row in rows),
            solved_boards=tuple(data.get("solvedBoards", ())),
        )


def initial_keyboard() -> Dict[str, Feedback]:
    return {letter: Feedback.UNUSED for letter in KEYBOARD_LETTERS}


@dataclass(frozen=True)
class SessionState:
    """
    Immutable snapshot of one play-through.

    `found` lists sub-target indices (categories or boards) in the order they
    were resolved; `revealed` lists the ones shown only because the game was
    lost.
    """
    variant: Variant
    puzzle_id: Optional[str] = None
    phase: Phase = Phase.LOADING
    puzzle: Optional[PuzzleDefinition] = None
    attempts: Tuple[GuessAttempt, ...] = ()
    found: Tuple[int, ...] = ()
    revealed: Tuple[int, ...] = ()
    mistakes: int = 0
    selection: Tuple[str, ...] = ()
    remaining_words: Tuple[str, ...] = ()
    keyboard: Dict[str, Feedback] = field(default_factory=initial_keyboard)
    timer: Timer = field(default_factory=Timer)
    load_token: int = 0

    @property
    def terminal(self) -> bool:
        return self.phase.is_terminal

    @property
    def won(self) -> bool:
        return self.phase is Phase.WON

    @property
    def guess_count(self) -> int:
        return len(self.attempts)

    @property
    def solved_count(self) -> int:
        return len(self.found)
