"""
Daily puzzle games app.

Re-exports the engine registry and scoring entry point so callers can import
from games directly, e.g.:

    from games import get_engine, calculate_score
"""

# PUBLIC_INTERFACE
from .puzzles import (
    EngineRegistry,
    calculate_score,
    get_engine,
)

__all__ = [
    "EngineRegistry",
    "calculate_score",
    "get_engine",
]
