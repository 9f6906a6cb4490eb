"""
Puzzle Rules

One descriptor per game. The session core is written once against this
interface; each descriptor supplies the attempt budget, the guess
precondition, the evaluator, the end-of-turn message and the result record
builder for its game.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..config.game_settings import (
    BOARD_COUNT, GROUP_SIZE, MAX_MISTAKES, QUORDLE_MAX_GUESSES, WORD_LENGTH,
    WORDLE_MAX_GUESSES
)
from ..models.game import (
    Feedback, GroupingPuzzle, GuessAttempt, PuzzleDefinition, SessionState, Variant
)
from ..models.result import ResultRecord
from ..models.user import PlayerIdentity
from .feedback import classify, is_one_away, is_solved, match_category, update_keyboard

# (text, kind) where kind is one of success / error / info
Message = Tuple[str, str]


@dataclass(frozen=True)
class Evaluation:
    """What one accepted guess changes in the session."""
    attempt: GuessAttempt
    found: Tuple[int, ...]
    mistakes: int
    keyboard: Dict[str, Feedback]
    remaining_words: Tuple[str, ...]


@dataclass(frozen=True)
class PuzzleRules:
    variant: Variant
    budget: int
    counts_mistakes: bool
    uses_dictionary: bool
    check_guess: Callable[[SessionState, Tuple[str, ...]], Optional[str]]
    evaluate: Callable[[SessionState, Tuple[str, ...], int], Evaluation]
    turn_message: Callable[[SessionState, GuessAttempt], Optional[Message]]
    build_record: Callable[[SessionState, PlayerIdentity, str, int], ResultRecord]

    def budget_used(self, state: SessionState) -> int:
        return state.mistakes if self.counts_mistakes else state.guess_count

    def budget_remaining(self, state: SessionState) -> int:
        return max(self.budget - self.budget_used(state), 0)

    def is_won(self, puzzle: PuzzleDefinition, found: Sequence[int]) -> bool:
        return len(found) == puzzle.target_count

    def is_exhausted(self, state: SessionState) -> bool:
        return self.budget_used(state) >= self.budget

    def normalize(self, guess) -> Tuple[str, ...]:
        """
        Grouping guesses are word lists; letter guesses are one uppercase word.

        A guess of the wrong shape normalizes to an empty tuple, which the
        variant's check rejects without using an attempt.
        """
        if self.variant is Variant.CONNECTIONS:
            if guess is None:
                return ()
            if not isinstance(guess, (list, tuple)) or not all(isinstance(w, str) for w in guess):
                return ()
            return tuple(guess)
        if guess is None:
            return ("",)
        if not isinstance(guess, str):
            return ()
        return (guess.strip().upper(),)


# Connections

def _check_grouping(state: SessionState, content: Tuple[str, ...]) -> Optional[str]:
    if len(content) != GROUP_SIZE or len(set(content)) != GROUP_SIZE:
        return f"Select exactly {GROUP_SIZE} words"
    if any(word not in state.remaining_words for word in content):
        return "Those words are not on the board"
    return None


def _evaluate_grouping(state: SessionState, content: Tuple[str, ...], at_ms: int) -> Evaluation:
    puzzle: GroupingPuzzle = state.puzzle  # type: ignore[assignment]
    index = match_category(content, puzzle.categories)

    if index is not None:
        category = puzzle.categories[index]
        attempt = GuessAttempt(
            content=content,
            timestamp_ms=at_ms,
            matched=True,
            category=category.title,
            difficulty=category.difficulty,
        )
        remaining = tuple(w for w in state.remaining_words if w not in content)
        return Evaluation(attempt, state.found + (index,), state.mistakes, state.keyboard, remaining)

    attempt = GuessAttempt(
        content=content,
        timestamp_ms=at_ms,
        matched=False,
        one_away=is_one_away(content, puzzle.categories, state.found),
    )
    return Evaluation(attempt, state.found, state.mistakes + 1, state.keyboard, state.remaining_words)


def _grouping_message(state: SessionState, attempt: GuessAttempt) -> Optional[Message]:
    if state.won:
        return "Congratulations! You won! 🎊", "success"
    if state.terminal:
        return "Game Over! Better luck next time!", "error"
    if attempt.matched:
        return "Correct! 🎉", "success"
    remaining = MAX_MISTAKES - state.mistakes
    if attempt.one_away:
        return f"So close! One away! 🤏 {remaining} mistakes remaining.", "error"
    return f"Nope! {remaining} mistakes remaining.", "error"


def _grouping_record(state: SessionState, player: PlayerIdentity,
                     completed_at: str, time_seconds: int) -> ResultRecord:
    return ResultRecord(
        variant=Variant.CONNECTIONS,
        game_id=state.puzzle_id or "",
        user_id=player.user_id,
        user_name=player.user_name,
        completed_at=completed_at,
        time_seconds=time_seconds,
        won=state.mistakes < MAX_MISTAKES,
        mistakes=state.mistakes,
        categories_found=len(state.found),
        solve_path=state.attempts,
    )


# Wordle and Quordle

def _check_letters(state: SessionState, content: Tuple[str, ...]) -> Optional[str]:
    if not content:
        return "Guess must be a single word"
    word = content[0]
    if len(word) != WORD_LENGTH:
        return f"Word must be {WORD_LENGTH} letters"
    if not word.isalpha():
        return "Guess must contain only letters"
    return None


def _evaluate_letters(state: SessionState, content: Tuple[str, ...], at_ms: int) -> Evaluation:
    word = content[0]
    targets = state.puzzle.targets  # type: ignore[union-attr]
    rows = tuple(classify(word, target) for target in targets)

    newly_solved = tuple(
        index for index, row in enumerate(rows)
        if index not in state.found and is_solved(row)
    )
    attempt = GuessAttempt(
        content=(word,),
        timestamp_ms=at_ms,
        feedback=rows,
        solved_boards=newly_solved if len(targets) > 1 else (),
    )
    keyboard = update_keyboard(state.keyboard, word, rows)
    return Evaluation(attempt, state.found + newly_solved, state.mistakes, keyboard, state.remaining_words)


def _wordle_message(state: SessionState, attempt: GuessAttempt) -> Optional[Message]:
    if state.won:
        return "Congratulations! You won! 🎉", "success"
    if state.terminal:
        return f"Game Over! The word was {state.puzzle.target_word}", "error"  # type: ignore[union-attr]
    return None


def _quordle_message(state: SessionState, attempt: GuessAttempt) -> Optional[Message]:
    solved = state.solved_count
    if state.won:
        return f"Congratulations! You solved all {BOARD_COUNT} words! 🎉", "success"
    if state.terminal:
        return f"Game Over! You solved {solved}/{BOARD_COUNT} boards", "error"
    if solved > 0:
        return f"{solved}/{BOARD_COUNT} boards solved!", "success"
    return None


def _wordle_record(state: SessionState, player: PlayerIdentity,
                   completed_at: str, time_seconds: int) -> ResultRecord:
    return ResultRecord(
        variant=Variant.WORDLE,
        game_id=state.puzzle_id or "",
        user_id=player.user_id,
        user_name=player.user_name,
        completed_at=completed_at,
        time_seconds=time_seconds,
        won=state.won,
        guess_count=state.guess_count,
        target_words=state.puzzle.targets,  # type: ignore[union-attr]
        solve_path=state.attempts,
    )


def _quordle_record(state: SessionState, player: PlayerIdentity,
                    completed_at: str, time_seconds: int) -> ResultRecord:
    return ResultRecord(
        variant=Variant.QUORDLE,
        game_id=state.puzzle_id or "",
        user_id=player.user_id,
        user_name=player.user_name,
        completed_at=completed_at,
        time_seconds=time_seconds,
        won=state.solved_count == BOARD_COUNT,
        guess_count=state.guess_count,
        solved_count=state.solved_count,
        target_words=state.puzzle.targets,  # type: ignore[union-attr]
        solve_path=state.attempts,
    )


CONNECTIONS_RULES = PuzzleRules(
    variant=Variant.CONNECTIONS,
    budget=MAX_MISTAKES,
    counts_mistakes=True,
    uses_dictionary=False,
    check_guess=_check_grouping,
    evaluate=_evaluate_grouping,
    turn_message=_grouping_message,
    build_record=_grouping_record,
)

WORDLE_RULES = PuzzleRules(
    variant=Variant.WORDLE,
    budget=WORDLE_MAX_GUESSES,
    counts_mistakes=False,
    uses_dictionary=True,
    check_guess=_check_letters,
    evaluate=_evaluate_letters,
    turn_message=_wordle_message,
    build_record=_wordle_record,
)

QUORDLE_RULES = PuzzleRules(
    variant=Variant.QUORDLE,
    budget=QUORDLE_MAX_GUESSES,
    counts_mistakes=False,
    uses_dictionary=True,
    check_guess=_check_letters,
    evaluate=_evaluate_letters,
    turn_message=_quordle_message,
    build_record=_quordle_record,
)

RULES: Dict[Variant, PuzzleRules] = {
    Variant.CONNECTIONS: CONNECTIONS_RULES,
    Variant.WORDLE: WORDLE_RULES,
    Variant.QUORDLE: QUORDLE_RULES,
}


def get_rules(variant: Variant) -> PuzzleRules:
    return RULES[variant]
