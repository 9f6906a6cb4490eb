"""
Game Service

Hosts the live play-throughs of all three games. Each session wraps a
SessionStateMachine; this service runs the effects the machine emits:

- PersistResult: append the record, fire-and-forget (failures are logged)
- ResultSkipped: log that an anonymous session finished
- ShowMessage: handed back to the caller for display

Listeners registered with add_listener are called with every new session
view, which is how the WebSocket layer pushes state to subscribers.
"""

import random
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import NotFoundError, PersistenceFailure
from ..models.game import GroupingPuzzle, Phase, Variant
from ..models.result import ResultRecord
from ..utils.game_logger import game_logger
from ..utils.helpers import format_time
from ..utils.timer import now_ms
from .session import PersistResult, ResultSkipped, SessionStateMachine, ShowMessage, Turn
from .storage import PuzzleStore, ResultStore

Listener = Callable[[str, Dict[str, Any]], None]


class GameService:
    """
    Session registry and effect runner.

    This class handles:
    - Session creation with unique session ids
    - Routing player operations to the right state machine
    - Result persistence without blocking the terminal transition
    - Session views that never expose an answer before the game ends
    """

    def __init__(self,
                 puzzles: PuzzleStore,
                 results: ResultStore,
                 dictionary=None,
                 profiles=None,
                 persist_async: bool = True,
                 clock: Callable[[], int] = now_ms,
                 rng: Optional[random.Random] = None,
                 session_idle_seconds: Optional[int] = None):
        self.puzzles = puzzles
        self.results = results
        self.dictionary = dictionary
        self.profiles = profiles
        self.persist_async = persist_async
        self.clock = clock
        self.rng = rng
        self.sessions: Dict[str, SessionStateMachine] = {}
        self.session_idle_seconds = session_idle_seconds
        self._last_seen: Dict[str, int] = {}
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, session_id: str) -> None:
        if not self._listeners:
            return
        view = self.describe(session_id)
        for listener in self._listeners:
            listener(session_id, view)

    # Session lifecycle

    def create_session(self, variant: Variant, puzzle_id: str,
                       player_id: Optional[str] = None) -> Tuple[str, List[ShowMessage]]:
        """
        Starts a play-through of a stored puzzle.

        Args:
            variant: Which game
            puzzle_id: Stored puzzle id
            player_id: Profile id of the player, if one is selected

        Returns:
            Tuple of (session_id, messages)

        Raises:
            NotFoundError: If the puzzle (or player profile) does not exist
            LoadError: If storage is unreachable
        """
        player = None
        if player_id:
            profile = self.profiles.get_player(player_id) if self.profiles else None
            if profile is None:
                raise NotFoundError(f"Player {player_id} not found")
            player = profile.identity

        machine = SessionStateMachine(
            variant,
            self.puzzles,
            dictionary=self.dictionary,
            player=player,
            clock=self.clock,
            rng=self.rng,
        )
        effects = machine.load(puzzle_id)

        self.prune_idle_sessions()
        session_id = str(uuid.uuid4())
        with self._lock:
            self.sessions[session_id] = machine
            self._last_seen[session_id] = self.clock()

        game_logger.log_game_event(
            session_id, 'session_created', player.user_id if player else None,
            variant=variant.value, puzzle_id=puzzle_id
        )
        return session_id, self._run_effects(session_id, effects)

    def get_session(self, session_id: str) -> SessionStateMachine:
        with self._lock:
            machine = self.sessions.get(session_id)
            if machine is not None:
                self._last_seen[session_id] = self.clock()
        if machine is None:
            raise NotFoundError("Session not found")
        return machine

    def close_session(self, session_id: str) -> bool:
        with self._lock:
            self._last_seen.pop(session_id, None)
            return self.sessions.pop(session_id, None) is not None

    def prune_idle_sessions(self) -> int:
        """
        Drops sessions nobody has touched within the idle timeout.

        Players who close the tab never call close_session, so finished and
        abandoned sessions alike are evicted here. Returns the number dropped.
        """
        if not self.session_idle_seconds:
            return 0
        cutoff = self.clock() - self.session_idle_seconds * 1000
        with self._lock:
            expired = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
            for session_id in expired:
                self.sessions.pop(session_id, None)
                del self._last_seen[session_id]

        for session_id in expired:
            game_logger.log_game_event(session_id, 'session_expired')
        return len(expired)

    def active_session_count(self) -> int:
        with self._lock:
            return len(self.sessions)

    # Player operations

    def submit(self, session_id: str, guess=None) -> Turn:
        machine = self.get_session(session_id)
        turn = machine.submit(guess)
        if turn.accepted:
            self._run_effects(session_id, turn.effects)
            self._notify(session_id)
        return turn

    def toggle(self, session_id: str, word: str) -> None:
        self.get_session(session_id).toggle(word)
        self._notify(session_id)

    def shuffle(self, session_id: str) -> None:
        self.get_session(session_id).shuffle()
        self._notify(session_id)

    def deselect_all(self, session_id: str) -> None:
        self.get_session(session_id).deselect_all()
        self._notify(session_id)

    def reload(self, session_id: str) -> List[ShowMessage]:
        """Play again: same puzzle, every counter and the timer reset."""
        machine = self.get_session(session_id)
        effects = machine.reload()
        game_logger.log_game_event(session_id, 'session_reloaded', puzzle_id=machine.state.puzzle_id)
        messages = self._run_effects(session_id, effects)
        self._notify(session_id)
        return messages

    # Effects

    def _run_effects(self, session_id: str, effects) -> List[ShowMessage]:
        messages: List[ShowMessage] = []
        for effect in effects:
            if isinstance(effect, ShowMessage):
                messages.append(effect)
            elif isinstance(effect, PersistResult):
                game_logger.log_game_event(
                    session_id, 'game_won' if effect.record.won else 'game_lost',
                    effect.record.user_id,
                    game_id=effect.record.game_id,
                    time_seconds=effect.record.time_seconds
                )
                self._persist(session_id, effect.record)
            elif isinstance(effect, ResultSkipped):
                game_logger.log_game_event(
                    session_id, 'result_skipped', None,
                    game_id=effect.puzzle_id, won=effect.won, reason='no player selected'
                )
        return messages

    def _persist(self, session_id: str, record: ResultRecord) -> None:
        def write():
            try:
                record_id = self.results.append(record)
            except PersistenceFailure as e:
                game_logger.log_persistence_failure(session_id, record.game_id, e)
                return
            game_logger.log_game_event(
                session_id, 'result_saved', record.user_id,
                game_id=record.game_id, record_id=record_id
            )

        if self.persist_async:
            threading.Thread(target=write, daemon=True).start()
        else:
            write()

    # Views

    def describe(self, session_id: str) -> Dict[str, Any]:
        """
        Player-facing view of a session.

        The answer (target words, unsolved categories) only appears once the
        session is terminal.
        """
        machine = self.get_session(session_id)
        state = machine.state
        rules = machine.rules
        at_ms = self.clock()
        elapsed = state.timer.elapsed(at_ms)

        view: Dict[str, Any] = {
            'session_id': session_id,
            'variant': state.variant.value,
            'puzzle_id': state.puzzle_id,
            'phase': state.phase.value,
            'game_over': state.terminal,
            'won': state.won,
            'guess_count': state.guess_count,
            'mistakes': state.mistakes,
            'solved_count': state.solved_count,
            'budget': rules.budget,
            'remaining': rules.budget_remaining(state),
            'timer_started': state.timer.started,
            'elapsed_seconds': elapsed,
            'elapsed': format_time(elapsed),
            'attempts': [a.to_document(state.variant) for a in state.attempts],
            'player': None,
            'is_validating': machine.is_validating,
            'answer': None,
        }
        if machine.player is not None:
            view['player'] = {'id': machine.player.user_id, 'name': machine.player.user_name}

        if state.phase is Phase.LOADING or state.puzzle is None:
            return view

        if isinstance(state.puzzle, GroupingPuzzle):
            categories = state.puzzle.categories
            view['remaining_words'] = list(state.remaining_words)
            view['selection'] = list(state.selection)
            view['found_categories'] = [categories[i].to_document() for i in state.found]
            view['revealed_categories'] = (
                [categories[i].to_document() for i in state.revealed] if state.terminal else []
            )
        else:
            view['keyboard'] = {letter: status.value for letter, status in state.keyboard.items()}
            view['solved_boards'] = list(state.found)
            view['board_count'] = state.puzzle.target_count
            if state.terminal:
                targets = list(state.puzzle.targets)
                view['answer'] = targets[0] if state.variant is Variant.WORDLE else targets
        return view
