"""
Utilities Package

Contains utility functions, decorators, the session timer and the logger.
"""

from .decorators import require_admin, bearer_token
from .helpers import get_user_identity, format_time, shuffle_words, generate_id
from .timer import Timer, now_ms, iso_timestamp
from .game_logger import game_logger

__all__ = [
    'require_admin', 'bearer_token', 'get_user_identity', 'format_time', 'shuffle_words',
    'generate_id', 'Timer', 'now_ms', 'iso_timestamp', 'game_logger'
]
