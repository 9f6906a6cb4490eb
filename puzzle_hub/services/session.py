"""
Session State Machine

A play-through moves LOADING -> ACTIVE -> WON | LOST, or from LOADING into
NOT_FOUND / LOAD_FAILED. The transitions below are pure: they take a
SessionState and return the next one together with the effects the caller
has to carry out (persisting a result, showing a message). The
SessionStateMachine class wraps them with the two blocking collaborators,
puzzle storage and the dictionary, and serialises submissions.
"""

import random
import threading
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..config.game_settings import GROUP_SIZE, MESSAGE_CLEAR_MS
from ..errors import LoadError, NotFoundError
from ..models.game import (
    GroupingPuzzle, GuessAttempt, Phase, PuzzleDefinition, SessionState, Variant
)
from ..models.result import ResultRecord
from ..models.user import PlayerIdentity
from ..utils.helpers import shuffle_words
from ..utils.timer import iso_timestamp, now_ms
from .rules import PuzzleRules, get_rules


@dataclass(frozen=True)
class PersistResult:
    """Terminal projection to append to the result store."""
    record: ResultRecord


@dataclass(frozen=True)
class ResultSkipped:
    """Terminal entry without a player identity; nothing is persisted."""
    puzzle_id: Optional[str]
    won: bool


@dataclass(frozen=True)
class ShowMessage:
    text: str
    kind: str = "info"
    duration_ms: int = MESSAGE_CLEAR_MS


Effect = Union[PersistResult, ResultSkipped, ShowMessage]
Transition = Tuple[SessionState, Tuple[Effect, ...]]

NOT_FOUND_MESSAGE = "Game not found!"
LOAD_ERROR_MESSAGE = "Error loading game."
INVALID_WORD_MESSAGE = "Not a valid word!"
BUSY_MESSAGE = "Still checking your last guess"


# Loading

def begin_load(state: SessionState, puzzle_id: str) -> SessionState:
    """Resets everything and invalidates any load still in flight."""
    return SessionState(
        variant=state.variant,
        puzzle_id=puzzle_id,
        phase=Phase.LOADING,
        load_token=state.load_token + 1,
    )


def finish_load(state: SessionState,
                token: int,
                puzzle: PuzzleDefinition,
                rng: Optional[random.Random] = None) -> Transition:
    if token != state.load_token or state.phase is not Phase.LOADING:
        return state, ()

    remaining: Tuple[str, ...] = ()
    if isinstance(puzzle, GroupingPuzzle):
        remaining = tuple(shuffle_words(puzzle.all_words, rng))

    return replace(state, phase=Phase.ACTIVE, puzzle=puzzle, remaining_words=remaining), ()


def fail_load(state: SessionState, token: int, error: Exception) -> Transition:
    if token != state.load_token or state.phase is not Phase.LOADING:
        return state, ()

    if isinstance(error, NotFoundError):
        return replace(state, phase=Phase.NOT_FOUND), (ShowMessage(NOT_FOUND_MESSAGE, "error"),)
    return replace(state, phase=Phase.LOAD_FAILED), (ShowMessage(LOAD_ERROR_MESSAGE, "error"),)


# Grouping auxiliaries

def _start_clock(state: SessionState, at_ms: int) -> SessionState:
    if state.phase is not Phase.ACTIVE or state.timer.started:
        return state
    return replace(state, timer=state.timer.start(at_ms))


def toggle(state: SessionState, word: str, at_ms: int) -> SessionState:
    """Adds or removes a word from the pending selection, at most four at once."""
    if state.phase is not Phase.ACTIVE or state.variant is not Variant.CONNECTIONS:
        return state
    if word not in state.remaining_words:
        return state

    state = _start_clock(state, at_ms)
    if word in state.selection:
        return replace(state, selection=tuple(w for w in state.selection if w != word))
    if len(state.selection) < GROUP_SIZE:
        return replace(state, selection=state.selection + (word,))
    return state


def deselect_all(state: SessionState) -> SessionState:
    if state.phase is not Phase.ACTIVE:
        return state
    return replace(state, selection=())


def shuffle(state: SessionState, rng: Optional[random.Random] = None) -> SessionState:
    """Reorders the remaining words for display; nothing else changes."""
    if state.phase is not Phase.ACTIVE or not state.remaining_words:
        return state
    return replace(state, remaining_words=tuple(shuffle_words(state.remaining_words, rng)))


# Guessing

def check_guess(state: SessionState, content: Tuple[str, ...]) -> Optional[str]:
    """Rejection message for a guess that may not be scored, else None."""
    if state.phase is not Phase.ACTIVE:
        return "Game is not in progress"
    return get_rules(state.variant).check_guess(state, content)


def apply_guess(state: SessionState,
                content: Tuple[str, ...],
                at_ms: int,
                player: Optional[PlayerIdentity] = None) -> Transition:
    """
    Scores an accepted guess.

    Exactly one attempt is appended. Reaching the win predicate or
    exhausting the budget makes the state terminal; that transition stops
    the timer and emits the single result effect for the session.
    """
    if state.phase is not Phase.ACTIVE:
        return state, ()

    rules = get_rules(state.variant)
    state = _start_clock(state, at_ms)
    evaluation = rules.evaluate(state, content, at_ms)

    state = replace(
        state,
        attempts=state.attempts + (evaluation.attempt,),
        found=evaluation.found,
        mistakes=evaluation.mistakes,
        keyboard=evaluation.keyboard,
        remaining_words=evaluation.remaining_words,
        selection=(),
    )

    if rules.is_won(state.puzzle, state.found):
        state = replace(state, phase=Phase.WON, timer=state.timer.stop(at_ms))
    elif rules.is_exhausted(state):
        unsolved = tuple(i for i in range(state.puzzle.target_count) if i not in state.found)
        state = replace(
            state,
            phase=Phase.LOST,
            revealed=unsolved,
            remaining_words=(),
            timer=state.timer.stop(at_ms),
        )

    effects: List[Effect] = []
    message = rules.turn_message(state, evaluation.attempt)
    if message is not None:
        effects.append(ShowMessage(*message))
    if state.terminal:
        effects.append(_terminal_effect(rules, state, at_ms, player))
    return state, tuple(effects)


def _terminal_effect(rules: PuzzleRules,
                     state: SessionState,
                     at_ms: int,
                     player: Optional[PlayerIdentity]) -> Effect:
    if player is None:
        return ResultSkipped(puzzle_id=state.puzzle_id, won=state.won)
    record = rules.build_record(state, player, iso_timestamp(at_ms), state.timer.elapsed(at_ms))
    return PersistResult(record)


def replay_solve_path(variant: Variant,
                      puzzle: PuzzleDefinition,
                      attempts: Sequence[GuessAttempt]) -> Tuple[GuessAttempt, ...]:
    """Re-scores a stored solve path against its puzzle."""
    rules = get_rules(variant)
    state = SessionState(variant=variant, phase=Phase.ACTIVE, puzzle=puzzle)
    if isinstance(puzzle, GroupingPuzzle):
        state = replace(state, remaining_words=tuple(puzzle.all_words))

    replayed = []
    for attempt in attempts:
        if state.terminal:
            break
        state, _ = apply_guess(state, attempt.content, attempt.timestamp_ms)
        replayed.append(state.attempts[-1])
    return tuple(replayed)


@dataclass(frozen=True)
class Turn:
    """Outcome of one submit call."""
    accepted: bool
    effects: Tuple[Effect, ...] = ()
    reason: Optional[str] = None


class SessionStateMachine:
    """
    One player's session for one variant.

    Submissions are serialised with a non-blocking lock: a submit that
    arrives while the previous guess is still being validated against the
    dictionary is ignored. Loads bump a token so a slow, superseded load
    cannot overwrite the state of a newer one.
    """

    def __init__(self,
                 variant: Variant,
                 puzzle_store,
                 dictionary=None,
                 player: Optional[PlayerIdentity] = None,
                 clock: Callable[[], int] = now_ms,
                 rng: Optional[random.Random] = None):
        self.variant = variant
        self.rules = get_rules(variant)
        self.puzzle_store = puzzle_store
        self.dictionary = dictionary
        self.player = player
        self.clock = clock
        self.rng = rng
        self._state = SessionState(variant=variant)
        self._state_lock = threading.RLock()
        self._validating = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_validating(self) -> bool:
        return self._validating.locked()

    def load(self, puzzle_id: str) -> Tuple[Effect, ...]:
        """
        Fetches the puzzle and activates the session.

        Raises NotFoundError or LoadError when the fetch fails and this load
        is still the current one; the session is left in the matching error
        phase.
        """
        with self._state_lock:
            self._state = begin_load(self._state, puzzle_id)
            token = self._state.load_token

        try:
            puzzle = self.puzzle_store.get(self.variant, puzzle_id)
        except (NotFoundError, LoadError) as e:
            with self._state_lock:
                self._state, effects = fail_load(self._state, token, e)
                current = self._state.load_token == token
            if current:
                raise
            return effects

        with self._state_lock:
            self._state, effects = finish_load(self._state, token, puzzle, self.rng)
        return effects

    def reload(self) -> Tuple[Effect, ...]:
        """Play again: same puzzle, fresh state and timer."""
        return self.load(self._state.puzzle_id)

    def toggle(self, word: str) -> SessionState:
        with self._state_lock:
            self._state = toggle(self._state, word, self.clock())
            return self._state

    def deselect_all(self) -> SessionState:
        with self._state_lock:
            self._state = deselect_all(self._state)
            return self._state

    def shuffle(self) -> SessionState:
        with self._state_lock:
            self._state = shuffle(self._state, self.rng)
            return self._state

    def submit(self, guess=None) -> Turn:
        """
        Submits a guess; grouping sessions default to the pending selection.

        Rejections consume no attempt. A submit on a finished session is a
        no-op.
        """
        if not self._validating.acquire(blocking=False):
            return Turn(False, (ShowMessage(BUSY_MESSAGE, "info"),), "busy")

        try:
            with self._state_lock:
                state = self._state
                if state.terminal:
                    return Turn(False, (), "finished")

                state = _start_clock(state, self.clock())
                self._state = state
                if guess is None and self.variant is Variant.CONNECTIONS:
                    guess = state.selection
                content = self.rules.normalize(guess)

                rejection = check_guess(state, content)
                if rejection is not None:
                    return Turn(False, (ShowMessage(rejection, "error"),), rejection)
                token = state.load_token

            if self.rules.uses_dictionary and self.dictionary is not None:
                if not self.dictionary.check(content[0]):
                    return Turn(False, (ShowMessage(INVALID_WORD_MESSAGE, "error"),),
                                INVALID_WORD_MESSAGE)

            with self._state_lock:
                if self._state.load_token != token or self._state.phase is not Phase.ACTIVE:
                    return Turn(False, (), "superseded")
                self._state, effects = apply_guess(self._state, content, self.clock(), self.player)
            return Turn(True, effects)
        finally:
            self._validating.release()
