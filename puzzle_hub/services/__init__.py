"""
Services Package

Contains the puzzle core (feedback, rules, session, stats) and the service
classes around it.
"""

from .auth_service import AuthService
from .dictionary_service import DictionaryService, ValidationCache
from .game_service import GameService
from .profile_service import ProfileService
from .puzzle_service import PuzzleService
from .session import PersistResult, ResultSkipped, SessionStateMachine, ShowMessage, Turn
from .stats_service import StatsAggregator
from .storage import DocumentStore, MemoryDocumentStore, MongoDocumentStore, PuzzleStore, ResultStore

__all__ = [
    'AuthService', 'DictionaryService', 'ValidationCache', 'GameService', 'ProfileService',
    'PuzzleService', 'PersistResult', 'ResultSkipped', 'SessionStateMachine', 'ShowMessage',
    'Turn', 'StatsAggregator', 'DocumentStore', 'MemoryDocumentStore', 'MongoDocumentStore',
    'PuzzleStore', 'ResultStore'
]
