from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction

from ..models import GameSubmission, PuzzleAssignment, PuzzleDefinition
from ..puzzles import ReviewModeError, get_engine

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def get_puzzle(game_id: int) -> PuzzleDefinition:
    """Fetch a puzzle definition; raises PuzzleDefinition.DoesNotExist."""
    return PuzzleDefinition.objects.get(pk=game_id)


# PUBLIC_INTERFACE
def resolve_assignment(
    user_id: str, puzzle: PuzzleDefinition, rng: Optional[random.Random] = None
) -> PuzzleAssignment:
    """Return the user's assignment for ``puzzle``, creating it on first access.

    The first call picks a variant (or a bank subset), prepares the content and
    derives the client-safe shape, including any tile order, so every later
    call sees the same game. Concurrent first calls converge on a single row:
    the loser of the unique-constraint race re-reads the winner's assignment.

    Raises:
        ConfigurationError: the puzzle has no usable variants.
    """
    existing = PuzzleAssignment.objects.filter(user_id=user_id, puzzle=puzzle).first()
    if existing is not None:
        return existing

    engine = get_engine(puzzle.game_type)
    rng = rng or random.Random()
    indexes, content = engine.select(puzzle.variants or [], rng)
    client_data = engine.client_data(content, rng)
    try:
        with transaction.atomic():
            assignment = PuzzleAssignment.objects.create(
                user_id=user_id,
                puzzle=puzzle,
                variant_indexes=indexes,
                content=content,
                client_data=client_data,
            )
    except IntegrityError:
        logger.info("Assignment race for user=%s puzzle=%s; using the stored row", user_id, puzzle.pk)
        return PuzzleAssignment.objects.get(user_id=user_id, puzzle=puzzle)
    logger.info(
        "Assigned %s puzzle %s to user=%s variants=%s", puzzle.game_type, puzzle.pk, user_id, indexes
    )
    return assignment


# PUBLIC_INTERFACE
def client_safe_game(user_id: str, puzzle: PuzzleDefinition) -> Dict[str, Any]:
    """Payload a player may see: metadata plus the assignment's client data.

    Never contains the solution, verses, categories or pairs.
    """
    assignment = resolve_assignment(user_id, puzzle)
    engine = get_engine(puzzle.game_type)
    return {
        "id": puzzle.pk,
        "title": puzzle.title,
        "type": puzzle.game_type,
        "date": puzzle.date.isoformat(),
        "maxMistakes": engine.max_mistakes,
        "data": assignment.client_data,
    }


# PUBLIC_INTERFACE
def check_answer(user_id: str, puzzle: PuzzleDefinition, guess: Any) -> Dict[str, Any]:
    """Check one guess against the user's own assignment.

    Raises GuessValidationError for malformed guesses; these never count as
    mistakes. Once the user has submitted, the game is in review mode and
    checking raises ReviewModeError.
    """
    if GameSubmission.objects.filter(user_id=user_id, puzzle=puzzle).exists():
        raise ReviewModeError("Game already submitted.")
    assignment = resolve_assignment(user_id, puzzle)
    result = get_engine(puzzle.game_type).check(assignment.content, guess)
    logger.debug("Checked guess user=%s puzzle=%s correct=%s", user_id, puzzle.pk, result.get("correct"))
    return result


# PUBLIC_INTERFACE
def review_payload(user_id: str, puzzle: PuzzleDefinition) -> Optional[Dict[str, Any]]:
    """The assigned solution, but only once the user has submitted."""
    if not GameSubmission.objects.filter(user_id=user_id, puzzle=puzzle).exists():
        return None
    assignment = resolve_assignment(user_id, puzzle)
    return get_engine(puzzle.game_type).reveal(assignment.content)
