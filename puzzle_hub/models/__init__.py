"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import (
    Variant, Feedback, Difficulty, Phase, Category, GroupingPuzzle, WordlePuzzle,
    QuordlePuzzle, PuzzleDefinition, GuessAttempt, SessionState, puzzle_from_document
)
from .result import ResultRecord
from .user import PlayerIdentity, PlayerProfile, AdminUser

__all__ = [
    'Variant', 'Feedback', 'Difficulty', 'Phase', 'Category', 'GroupingPuzzle',
    'WordlePuzzle', 'QuordlePuzzle', 'PuzzleDefinition', 'GuessAttempt', 'SessionState',
    'puzzle_from_document', 'ResultRecord', 'PlayerIdentity', 'PlayerProfile', 'AdminUser'
]
