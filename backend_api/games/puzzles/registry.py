from __future__ import annotations

from typing import Dict, Tuple, Type

from .engines import (
    BaseEngine,
    ConnectionsEngine,
    CrosswordEngine,
    MatchTheWordEngine,
    VerseScrambleEngine,
    WhoAmIEngine,
    WordleEngine,
    WordSearchEngine,
)


# PUBLIC_INTERFACE
class EngineRegistry:
    """Registry mapping game type identifiers to engine classes."""

    _registry: Dict[str, Type[BaseEngine]] = {
        "wordle": WordleEngine,
        "wordle_advanced": WordleEngine,
        "wordle_bank": WordleEngine,
        "connections": ConnectionsEngine,
        "crossword": CrosswordEngine,
        "match_the_word": MatchTheWordEngine,
        "verse_scramble": VerseScrambleEngine,
        "who_am_i": WhoAmIEngine,
        "word_search": WordSearchEngine,
    }

    @classmethod
    def get(cls, game_type: str) -> Type[BaseEngine]:
        """Return an engine class for a given game type, or raise KeyError."""
        key = (game_type or "").strip().lower()
        if key not in cls._registry:
            raise KeyError(f"Unknown game type: {game_type!r}")
        return cls._registry[key]

    @classmethod
    def register(cls, game_type: str, engine_cls: Type[BaseEngine]) -> None:
        """Register or override an engine class for a given game type."""
        key = (game_type or "").strip().lower()
        if not key:
            raise ValueError("game_type must be a non-empty string")
        cls._registry[key] = engine_cls

    @classmethod
    def game_types(cls) -> Tuple[str, ...]:
        return tuple(cls._registry)


# PUBLIC_INTERFACE
def get_engine(game_type: str) -> BaseEngine:
    """Instantiate the engine for ``game_type``.

    Example:
        engine = get_engine("wordle")
        result = engine.check({"solution": "FAITH"}, "faint")
    """
    return EngineRegistry.get(game_type)()
