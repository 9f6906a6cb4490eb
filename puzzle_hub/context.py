"""
Application Context

Everything a request needs, built once by the application factory and kept
on the Flask app: storage, the dictionary with its process-wide cache,
player profiles, admin auth and the session registry.
"""

from dataclasses import dataclass
from typing import Optional

from flask import current_app

from .services.auth_service import AuthService
from .services.dictionary_service import DictionaryService
from .services.game_service import GameService
from .services.profile_service import ProfileService
from .services.puzzle_service import PuzzleService
from .services.storage import (
    DocumentStore, MemoryDocumentStore, MongoDocumentStore, PuzzleStore, ResultStore
)

EXTENSION_KEY = 'puzzle_hub'


@dataclass
class AppContext:
    store: DocumentStore
    puzzles: PuzzleStore
    results: ResultStore
    dictionary: DictionaryService
    profiles: ProfileService
    auth: AuthService
    authoring: PuzzleService
    games: GameService

    def close(self) -> None:
        self.store.close()


def build_context(config_class,
                  store: Optional[DocumentStore] = None,
                  dictionary: Optional[DictionaryService] = None) -> AppContext:
    """
    Wires the services together from a Config class.

    Args:
        config_class: Configuration class (or object with the same attributes)
        store: Backend to use instead of the configured one
        dictionary: Dictionary service to use instead of the HTTP one
    """
    if store is None:
        if config_class.STORAGE_BACKEND == 'memory':
            store = MemoryDocumentStore()
        else:
            if not config_class.MONGO_URI:
                raise ValueError("MONGO_URI must be set when STORAGE_BACKEND is 'mongo'")
            store = MongoDocumentStore(config_class.MONGO_URI, config_class.MONGO_DB_NAME)

    if dictionary is None:
        dictionary = DictionaryService(
            config_class.DICTIONARY_API_URL,
            timeout=config_class.DICTIONARY_TIMEOUT_SECONDS,
        )

    puzzles = PuzzleStore(store)
    results = ResultStore(store)
    profiles = ProfileService(store)
    auth = AuthService(store, config_class.JWT_SECRET, config_class.JWT_EXPIRATION_DAYS)
    auth.seed_admin(config_class.ADMIN_USERNAME, config_class.ADMIN_PASSWORD)

    return AppContext(
        store=store,
        puzzles=puzzles,
        results=results,
        dictionary=dictionary,
        profiles=profiles,
        auth=auth,
        authoring=PuzzleService(puzzles, dictionary),
        games=GameService(
            puzzles,
            results,
            dictionary=dictionary,
            profiles=profiles,
            persist_async=config_class.PERSIST_ASYNC,
            session_idle_seconds=config_class.SESSION_IDLE_TIMEOUT_SECONDS,
        ),
    )


def get_context() -> AppContext:
    """The context of the running app."""
    return current_app.extensions[EXTENSION_KEY]
