from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..models import GameProgress, GameSubmission, PuzzleDefinition
from ..puzzles import GuessValidationError

logger = logging.getLogger(__name__)

# Keys that could carry answer material; never persisted in progress.
RESERVED_PROGRESS_KEYS = frozenset({
    "solution",
    "solutions",
    "answer",
    "verse",
    "verses",
    "assignedSolution",
    "assignedVerse",
    "categories",
    "pairs",
})


# PUBLIC_INTERFACE
def load_progress(user_id: str, puzzle: PuzzleDefinition) -> Optional[Dict[str, Any]]:
    """Saved in-progress state for (user, puzzle), or None."""
    row = GameProgress.objects.filter(user_id=user_id, puzzle=puzzle).first()
    return row.state if row is not None else None


# PUBLIC_INTERFACE
def save_progress(user_id: str, puzzle: PuzzleDefinition, state: Mapping[str, Any]) -> Optional[GameProgress]:
    """Upsert the state snapshot, dropping any reserved keys.

    A save arriving after the attempt was submitted is ignored and returns
    None, so a late debounced write cannot resurrect finished progress.
    """
    if not isinstance(state, Mapping):
        raise GuessValidationError("Progress state must be an object.")
    if GameSubmission.objects.filter(user_id=user_id, puzzle=puzzle).exists():
        logger.debug("Ignoring progress save for submitted puzzle %s user=%s", puzzle.pk, user_id)
        return None
    stripped = sorted(k for k in state if k in RESERVED_PROGRESS_KEYS)
    if stripped:
        logger.warning("Stripped reserved progress keys %s for user=%s puzzle=%s", stripped, user_id, puzzle.pk)
    clean = {k: v for k, v in state.items() if k not in RESERVED_PROGRESS_KEYS}
    row, _ = GameProgress.objects.update_or_create(
        user_id=user_id, puzzle=puzzle, defaults={"state": clean}
    )
    return row


# PUBLIC_INTERFACE
def clear_progress(user_id: str, puzzle: PuzzleDefinition) -> int:
    """Delete saved progress; returns the number of rows removed."""
    deleted, _ = GameProgress.objects.filter(user_id=user_id, puzzle=puzzle).delete()
    return deleted
