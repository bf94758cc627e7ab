from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone

from ..models import GameSubmission, PuzzleDefinition
from ..puzzles import get_engine
from .assignment import resolve_assignment
from .progress import clear_progress

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    submission: GameSubmission
    created: bool
    updated: bool


def _score(puzzle: PuzzleDefinition, content, time_taken_secs: int, mistakes: Any, data: Mapping[str, Any]):
    engine = get_engine(puzzle.game_type)
    mistakes, facts = engine.derive_facts(content, mistakes, data)
    return mistakes, engine.score(time_taken_secs, mistakes, facts)


# PUBLIC_INTERFACE
def submit_game(
    user_id: str,
    puzzle: PuzzleDefinition,
    time_taken_secs: int,
    mistakes: int = 0,
    submission_data: Optional[Mapping[str, Any]] = None,
    started_at: Optional[datetime] = None,
) -> SubmissionOutcome:
    """Record a finished attempt and clear its progress.

    Mistakes and scoring facts are recomputed from ``submission_data``
    against the user's assignment; any client score is ignored. A repeat
    submission replaces the stored one only when its score is strictly
    higher; otherwise the existing record is returned unchanged.
    """
    data = dict(submission_data or {})
    time_taken_secs = max(0, int(time_taken_secs or 0))
    assignment = resolve_assignment(user_id, puzzle)
    mistakes, score = _score(puzzle, assignment.content, time_taken_secs, mistakes, data)
    fields = {
        "started_at": started_at,
        "completed_at": timezone.now(),
        "time_taken_secs": time_taken_secs,
        "mistakes": mistakes,
        "score": score,
        "submission_data": data,
    }

    outcome = None
    with transaction.atomic():
        existing = GameSubmission.objects.select_for_update().filter(user_id=user_id, puzzle=puzzle).first()
        if existing is None:
            try:
                with transaction.atomic():
                    submission = GameSubmission.objects.create(user_id=user_id, puzzle=puzzle, **fields)
                outcome = SubmissionOutcome(submission, created=True, updated=False)
            except IntegrityError:
                existing = GameSubmission.objects.select_for_update().get(user_id=user_id, puzzle=puzzle)
        if outcome is None:
            if score > existing.score:
                for name, value in fields.items():
                    setattr(existing, name, value)
                existing.save()
                outcome = SubmissionOutcome(existing, created=False, updated=True)
            else:
                outcome = SubmissionOutcome(existing, created=False, updated=False)

    clear_progress(user_id, puzzle)
    logger.info(
        "Submission user=%s puzzle=%s score=%s created=%s updated=%s",
        user_id, puzzle.pk, outcome.submission.score, outcome.created, outcome.updated,
    )
    return outcome


# PUBLIC_INTERFACE
def get_submission(user_id: str, puzzle: PuzzleDefinition) -> Optional[GameSubmission]:
    return GameSubmission.objects.filter(user_id=user_id, puzzle=puzzle).first()


# PUBLIC_INTERFACE
def recalculate_submission(submission: GameSubmission, save: bool = True) -> Tuple[int, int]:
    """Re-run scoring for a stored submission; returns (old score, new score)."""
    puzzle = submission.puzzle
    assignment = resolve_assignment(submission.user_id, puzzle)
    old = submission.score
    mistakes, new = _score(
        puzzle, assignment.content, submission.time_taken_secs, submission.mistakes, submission.submission_data or {}
    )
    if save and (new != old or mistakes != submission.mistakes):
        submission.score = new
        submission.mistakes = mistakes
        submission.save(update_fields=["score", "mistakes", "updated_at"])
    return old, new
