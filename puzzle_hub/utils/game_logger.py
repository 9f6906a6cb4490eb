"""
Game Logger Module for the Puzzle Server

This module provides comprehensive logging for player actions, server
responses and game events across the Connections, Wordle and Quordle games.
"""

import logging
import json
from collections import Counter
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from ..config.app_config import Config
from .helpers import get_user_identity


class GameLogger:
    """
    Centralized logging system for the puzzle server.

    Features:
    - Player action tracking with IP/player identification
    - Server response logging
    - Game event logging (wins, losses, persisted results)
    - JSON structured logs for easy parsing
    """

    # Game events that end up in the health summary
    OUTCOME_ACTIONS = ('game_won', 'game_lost', 'result_saved', 'result_skipped', 'persist_result')

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = getattr(logging, str(level).upper(), logging.INFO)

        # Setup main game logger
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Setup the main game logger with file handler."""
        logger = logging.getLogger('puzzle_hub')
        logger.setLevel(self.level)

        # Prevent duplicate handlers
        if logger.handlers:
            logger.handlers.clear()

        # File handler for detailed logs, one file per day
        file_handler = logging.FileHandler(self._log_file(), encoding='utf-8')
        file_handler.setLevel(self.level)

        # Console handler for only important messages (WARNING and above)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)

        file_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_formatter = logging.Formatter(
            '%(levelname)s: %(message)s'
        )

        file_handler.setFormatter(file_formatter)
        console_handler.setFormatter(console_formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        return logger

    def _log_file(self) -> Path:
        return self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"

    @staticmethod
    def _system_user(session_id: Optional[str] = None) -> Dict[str, Any]:
        """Identity for entries raised by the server itself, not a request."""
        return {'user_ip': 'system', 'session_id': session_id, 'username': None}

    def _create_log_entry(self,
                          event_type: str,
                          action: str,
                          user_info: Dict[str, Any],
                          details: Dict[str, Any]) -> str:
        """Create a structured log entry."""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details
        }
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def log_user_action(self,
                        request,
                        action: str,
                        session_id: Optional[str] = None,
                        **kwargs):
        """
        Log player actions with full context.

        Args:
            request: Flask request object
            action: Type of action (e.g., 'create_session', 'submit_guess', 'toggle_word')
            session_id: Session identifier if applicable
            **kwargs: Additional details to log
        """
        user_info = get_user_identity(request)

        details = {
            'session_id': session_id,
            'endpoint': getattr(request, 'endpoint', None),
            'method': getattr(request, 'method', None),
            'url': getattr(request, 'url', None),
            **kwargs
        }

        log_message = self._create_log_entry('USER_ACTION', action, user_info, details)
        self.logger.info(log_message)

    def log_server_response(self,
                            request,
                            action: str,
                            success: bool,
                            response_data: Dict[str, Any],
                            session_id: Optional[str] = None,
                            **kwargs):
        """
        Log server responses with full context.

        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client
            session_id: Session identifier if applicable
            **kwargs: Additional details to log
        """
        user_info = get_user_identity(request)

        safe_response = self._sanitize_response_data(response_data)

        details = {
            'session_id': session_id,
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': safe_response,
            **kwargs
        }

        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        log_message = self._create_log_entry(event_type, action, user_info, details)

        if success:
            self.logger.info(log_message)
        else:
            self.logger.error(log_message)

    def log_game_event(self,
                       session_id: Optional[str],
                       event: str,
                       user_id: Optional[str] = None,
                       **kwargs):
        """
        Log game-specific events (wins, losses, saved results).

        Args:
            session_id: Session identifier
            event: Type of game event (e.g., 'game_won', 'game_lost', 'result_saved')
            user_id: Player id if known
            **kwargs: Additional game details
        """
        user_info = {'user_ip': None, 'session_id': session_id, 'username': user_id}

        details = {
            'session_id': session_id,
            **kwargs
        }

        log_message = self._create_log_entry('GAME_EVENT', event, user_info, details)
        self.logger.info(log_message)

    def log_error(self,
                  request,
                  error: Exception,
                  action: str,
                  session_id: Optional[str] = None):
        """
        Log errors with full context.

        Args:
            request: Flask request object
            error: Exception that occurred
            action: Action that was being performed
            session_id: Session identifier if applicable
        """
        user_info = get_user_identity(request)

        details = {
            'session_id': session_id,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }

        log_message = self._create_log_entry('ERROR', action, user_info, details)
        self.logger.error(log_message)

    def log_persistence_failure(self,
                                session_id: Optional[str],
                                game_id: Optional[str],
                                error: Exception):
        """Result records are fire-and-forget; a failed append ends here."""
        details = {
            'session_id': session_id,
            'game_id': game_id,
            'error_type': type(error).__name__,
            'error_message': str(error),
        }
        user_info = self._system_user(session_id)
        log_message = self._create_log_entry('ERROR', 'persist_result', user_info, details)
        self.logger.error(log_message)

    def log_dictionary_fallback(self, word: str, error: Exception):
        """The dictionary could not be reached and the word was let through."""
        details = {
            'word': word,
            'error_type': type(error).__name__,
            'error_message': str(error),
        }
        user_info = self._system_user()
        log_message = self._create_log_entry('WARNING', 'dictionary_fallback', user_info, details)
        self.logger.warning(log_message)

    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Remove or mask sensitive data from response logs."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = data.copy()

        if 'token' in sanitized:
            sanitized['token'] = '***'

        # Keep essential session info but limit verbosity
        if 'state' in sanitized and isinstance(sanitized['state'], dict):
            state = sanitized['state']
            sanitized['state'] = {
                'phase': state.get('phase'),
                'guess_count': state.get('guess_count'),
                'mistakes': state.get('mistakes'),
                'solved_count': state.get('solved_count'),
                'answer_revealed': state.get('answer') is not None
            }

        return sanitized

    def get_log_stats(self) -> Dict[str, Any]:
        """
        Counts today's entries by event type and game outcome.

        Used by the health endpoint; lines that are not JSON entries (for
        example tracebacks) are counted as unparsed.
        """
        log_file = self._log_file()
        if not log_file.exists():
            return {'error': 'No log file found for today'}

        event_types: Counter = Counter()
        outcomes: Counter = Counter()
        unparsed = 0
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    parts = line.rstrip('\n').split(' | ', 2)
                    if len(parts) < 3:
                        unparsed += 1 if line.strip() else 0
                        continue
                    try:
                        entry = json.loads(parts[2])
                    except json.JSONDecodeError:
                        unparsed += 1
                        continue
                    if not isinstance(entry, dict):
                        unparsed += 1
                        continue
                    event_types[entry.get('event_type') or 'unknown'] += 1
                    if entry.get('action') in self.OUTCOME_ACTIONS:
                        outcomes[entry['action']] += 1
        except OSError as e:
            return {'error': f'Failed to get stats: {str(e)}'}

        return {
            'log_file': str(log_file),
            'file_size_mb': round(log_file.stat().st_size / (1024 * 1024), 2),
            'total_entries': sum(event_types.values()),
            'by_event_type': dict(event_types),
            'outcomes': {action: outcomes[action] for action in self.OUTCOME_ACTIONS},
            'unparsed_lines': unparsed
        }


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
