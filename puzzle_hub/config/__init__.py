"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- game_settings.py: Game rules and constants (business logic)
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .game_settings import (
    WORD_LENGTH, GROUP_SIZE, CATEGORY_COUNT, MAX_MISTAKES, WORDLE_MAX_GUESSES,
    BOARD_COUNT, QUORDLE_MAX_GUESSES, validate_word_format, validate_category_words
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Game rules
    'WORD_LENGTH', 'GROUP_SIZE', 'CATEGORY_COUNT', 'MAX_MISTAKES', 'WORDLE_MAX_GUESSES',
    'BOARD_COUNT', 'QUORDLE_MAX_GUESSES', 'validate_word_format', 'validate_category_words'
]
