"""
Helper Functions

Contains utility functions used throughout the application.
"""

import random
import string
from typing import Dict, List, Optional, Sequence

_ID_ALPHABET = string.ascii_lowercase + string.digits


def get_user_identity(request_obj=None) -> Dict[str, Optional[str]]:
    """Extract user identity information from request."""
    if request_obj is None:
        from flask import request
        request_obj = request

    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'
    headers = getattr(request_obj, 'headers', None) or {}
    view_args = getattr(request_obj, 'view_args', None) or {}

    return {
        'user_ip': user_ip,
        'session_id': view_args.get('session_id'),
        'username': headers.get('X-Player-Name'),
    }


def format_time(seconds: int) -> str:
    """Formats whole seconds as m:ss."""
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}:{secs:02d}"


def shuffle_words(words: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """Returns a shuffled copy; the input is left untouched."""
    shuffled = list(words)
    (rng or random).shuffle(shuffled)
    return shuffled


def generate_id(length: int, prefix: str = "", rng: Optional[random.Random] = None) -> str:
    """Short random base-36 identifier, e.g. puzzle ids and player ids."""
    chooser = rng or random
    return prefix + "".join(chooser.choice(_ID_ALPHABET) for _ in range(length))
