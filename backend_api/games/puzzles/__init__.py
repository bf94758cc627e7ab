"""
Puzzle engines, scoring and grid logic.

Exports:
- EngineRegistry and get_engine for resolving per-game-type engines
- calculate_score, the single scoring entry point
- shuffle_connections and move_item ordering helpers
- CrosswordLayout and CrosswordGrid for the interactive crossword
- the puzzle error taxonomy

These modules are framework-agnostic and can be reused by views, services
or local preview sessions without importing request objects or models.
"""

from .crossword import CrosswordGrid, CrosswordLayout
from .engines import BaseEngine, Engine
from .exceptions import (
    ConfigurationError,
    ConflictError,
    GuessValidationError,
    NetworkError,
    PuzzleError,
    ReviewModeError,
)
from .feedback import compute_letter_feedback, mask_answer
from .registry import EngineRegistry, get_engine
from .scoring import calculate_score
from .shuffling import has_solved_window, move_item, shuffle_connections

__all__ = [
    "BaseEngine",
    "ConfigurationError",
    "ConflictError",
    "CrosswordGrid",
    "CrosswordLayout",
    "Engine",
    "EngineRegistry",
    "GuessValidationError",
    "NetworkError",
    "PuzzleError",
    "ReviewModeError",
    "calculate_score",
    "compute_letter_feedback",
    "get_engine",
    "has_solved_window",
    "mask_answer",
    "move_item",
    "shuffle_connections",
]
