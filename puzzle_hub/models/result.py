"""
Result Data Models

A ResultRecord is the terminal projection of a session. It is written once and
never updated; the stats service only ever reads batches of them.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .game import GuessAttempt, Variant

UNKNOWN_COMPLETION = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ResultRecord:
    """Persisted outcome of one completed session."""
    variant: Variant
    game_id: str
    user_id: str
    user_name: str
    completed_at: str
    time_seconds: int
    won: bool
    mistakes: Optional[int] = None
    guess_count: Optional[int] = None
    solved_count: Optional[int] = None
    categories_found: Optional[int] = None
    target_words: Tuple[str, ...] = ()
    solve_path: Tuple[GuessAttempt, ...] = ()

    @property
    def completed_datetime(self) -> datetime:
        """
        Parses completed_at, treating a trailing Z as UTC.

        Records with a missing or unreadable date sort as the oldest.
        """
        value = (self.completed_at or "").replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return UNKNOWN_COMPLETION
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @property
    def is_perfect(self) -> bool:
        """Quordle calls a game with every board solved a perfect game."""
        if self.variant is Variant.QUORDLE:
            return self.solved_count == 4
        return self.won

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "gameId": self.game_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "completedAt": self.completed_at,
            "timeSeconds": self.time_seconds,
            "won": self.won,
            "solvePath": [a.to_document(self.variant) for a in self.solve_path],
        }
        if self.variant is Variant.CONNECTIONS:
            doc["mistakes"] = self.mistakes
            doc["categoriesFound"] = self.categories_found
        elif self.variant is Variant.WORDLE:
            doc["guessCount"] = self.guess_count
            doc["targetWord"] = self.target_words[0] if self.target_words else None
        else:
            doc["guessCount"] = self.guess_count
            doc["solvedCount"] = self.solved_count
            doc["targetWords"] = list(self.target_words)
        return doc

    @classmethod
    def from_document(cls, variant: Variant, data: Dict[str, Any]) -> "ResultRecord":
        if variant is Variant.WORDLE:
            targets = (data["targetWord"],) if data.get("targetWord") else ()
        else:
            targets = tuple(data.get("targetWords") or ())
        return cls(
            variant=variant,
            game_id=data.get("gameId", ""),
            user_id=data.get("userId", ""),
            user_name=data.get("userName", ""),
            completed_at=data.get("completedAt", ""),
            time_seconds=int(data.get("timeSeconds") or 0),
            won=bool(data.get("won", False)),
            mistakes=data.get("mistakes"),
            guess_count=data.get("guessCount"),
            solved_count=data.get("solvedCount"),
            categories_found=data.get("categoriesFound"),
            target_words=targets,
            solve_path=tuple(
                GuessAttempt.from_document(variant, a) for a in data.get("solvePath") or ()
            ),
        )
