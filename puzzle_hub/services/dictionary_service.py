"""
Dictionary Service

Checks guesses against the Free Dictionary API. Answers are cached for the
life of the process, valid and invalid alike. When the API cannot be
reached the word is accepted and nothing is cached, so an outage never
blocks play.
"""

import threading
from typing import Optional, Set

import requests

from ..config.game_settings import WORD_LENGTH
from ..errors import DictionaryUnavailable
from ..utils.game_logger import game_logger


class ValidationCache:
    """Process-wide word cache keyed by uppercase word. Entries never expire."""

    def __init__(self):
        self._valid: Set[str] = set()
        self._invalid: Set[str] = set()
        self._lock = threading.Lock()

    def get(self, word: str) -> Optional[bool]:
        with self._lock:
            if word in self._valid:
                return True
            if word in self._invalid:
                return False
            return None

    def put(self, word: str, valid: bool) -> None:
        with self._lock:
            (self._valid if valid else self._invalid).add(word)

    def clear(self) -> None:
        with self._lock:
            self._valid.clear()
            self._invalid.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._valid) + len(self._invalid)


class DictionaryService:
    def __init__(self,
                 api_url: str,
                 timeout: float = 5.0,
                 cache: Optional[ValidationCache] = None,
                 http: Optional[requests.Session] = None):
        self.api_url = api_url if api_url.endswith('/') else api_url + '/'
        self.timeout = timeout
        self.cache = cache if cache is not None else ValidationCache()
        self.http = http or requests.Session()

    def lookup(self, word: str) -> bool:
        """
        Asks the API directly.

        A 404 means the word does not exist. Connection problems, timeouts
        and any other non-success status (rate limiting, server errors) raise
        DictionaryUnavailable so the answer is never cached.
        """
        try:
            response = self.http.get(self.api_url + word.lower(), timeout=self.timeout)
        except requests.RequestException as e:
            raise DictionaryUnavailable(f"Dictionary lookup failed: {e}") from e

        if response.status_code == 404:
            return False
        if not response.ok:
            raise DictionaryUnavailable(f"Dictionary returned {response.status_code}")
        return True

    def check(self, word: str) -> bool:
        """True if the word should be accepted as a guess."""
        upper = word.upper()

        cached = self.cache.get(upper)
        if cached is not None:
            return cached

        if len(upper) != WORD_LENGTH or not upper.isalpha():
            self.cache.put(upper, False)
            return False

        try:
            valid = self.lookup(upper)
        except DictionaryUnavailable as e:
            game_logger.log_dictionary_fallback(upper, e)
            return True

        self.cache.put(upper, valid)
        return valid

    def clear_cache(self) -> None:
        self.cache.clear()
