from __future__ import annotations

import functools
import logging
import random
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from django.db import DatabaseError

from .. import services
from ..models import PuzzleDefinition
from ..puzzles import ConfigurationError, NetworkError, ReviewModeError, get_engine
from ..serializers import GameSubmissionSerializer

logger = logging.getLogger(__name__)


def _transient(func):
    """Report database failures to the session as NetworkError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.warning("%s failed: %s", func.__name__, exc)
            raise NetworkError(str(exc)) from exc

    return wrapper


# PUBLIC_INTERFACE
class ServiceBackend:
    """Authoritative backend: in-process calls into ``games.services``."""

    def _puzzle(self, game_id) -> PuzzleDefinition:
        try:
            return services.get_puzzle(game_id)
        except PuzzleDefinition.DoesNotExist:
            raise ConfigurationError()

    @_transient
    def get_game(self, user_id, game_id) -> Dict[str, Any]:
        return services.client_safe_game(user_id, self._puzzle(game_id))

    @_transient
    def get_submission(self, user_id, game_id) -> Optional[Dict[str, Any]]:
        submission = services.get_submission(user_id, self._puzzle(game_id))
        return GameSubmissionSerializer(submission).data if submission is not None else None

    @_transient
    def get_review(self, user_id, game_id) -> Optional[Dict[str, Any]]:
        return services.review_payload(user_id, self._puzzle(game_id))

    @_transient
    def load_progress(self, user_id, game_id) -> Optional[Dict[str, Any]]:
        return services.load_progress(user_id, self._puzzle(game_id))

    @_transient
    def save_progress(self, user_id, game_id, state) -> None:
        services.save_progress(user_id, self._puzzle(game_id), state)

    @_transient
    def clear_progress(self, user_id, game_id) -> None:
        services.clear_progress(user_id, self._puzzle(game_id))

    @_transient
    def check(self, user_id, game_id, guess) -> Dict[str, Any]:
        return services.check_answer(user_id, self._puzzle(game_id), guess)

    @_transient
    def submit(self, user_id, game_id, started_at=None, time_taken_secs=0, mistakes=0, submission_data=None):
        outcome = services.submit_game(
            user_id,
            self._puzzle(game_id),
            time_taken_secs=time_taken_secs,
            mistakes=mistakes,
            submission_data=submission_data,
            started_at=started_at,
        )
        return GameSubmissionSerializer(outcome.submission).data


# PUBLIC_INTERFACE
class LocalPreviewBackend:
    """Sample/preview play held entirely in memory.

    Nothing is written to the database, but selection, checking and scoring
    run through the same engines as the authoritative path, so a preview
    behaves exactly like the real game.

    ``puzzles`` maps a game id to ``(game_type, variants)``.
    """

    def __init__(self, puzzles: Mapping[Any, Tuple[str, Sequence[Any]]], rng: Optional[random.Random] = None):
        self.puzzles = dict(puzzles)
        self.rng = rng or random.Random()
        self._assignments: Dict[Tuple[str, Any], Tuple[Dict[str, Any], Dict[str, Any]]] = {}
        self._progress: Dict[Tuple[str, Any], Dict[str, Any]] = {}
        self._submissions: Dict[Tuple[str, Any], Dict[str, Any]] = {}

    def _game(self, game_id):
        if game_id not in self.puzzles:
            raise ConfigurationError()
        game_type, variants = self.puzzles[game_id]
        return game_type, get_engine(game_type), variants

    def _assignment(self, user_id, game_id):
        key = (user_id, game_id)
        if key not in self._assignments:
            _, engine, variants = self._game(game_id)
            _, content = engine.select(list(variants), self.rng)
            self._assignments[key] = (content, engine.client_data(content, self.rng))
        return self._assignments[key]

    def get_game(self, user_id, game_id) -> Dict[str, Any]:
        game_type, engine, _ = self._game(game_id)
        _, client_data = self._assignment(user_id, game_id)
        return {"id": game_id, "type": game_type, "maxMistakes": engine.max_mistakes, "data": client_data}

    def get_submission(self, user_id, game_id):
        return self._submissions.get((user_id, game_id))

    def get_review(self, user_id, game_id):
        if (user_id, game_id) not in self._submissions:
            return None
        _, engine, _ = self._game(game_id)
        content, _ = self._assignment(user_id, game_id)
        return engine.reveal(content)

    def load_progress(self, user_id, game_id):
        return self._progress.get((user_id, game_id))

    def save_progress(self, user_id, game_id, state) -> None:
        clean = {k: v for k, v in state.items() if k not in services.RESERVED_PROGRESS_KEYS}
        self._progress[(user_id, game_id)] = clean

    def clear_progress(self, user_id, game_id) -> None:
        self._progress.pop((user_id, game_id), None)

    def check(self, user_id, game_id, guess) -> Dict[str, Any]:
        _, engine, _ = self._game(game_id)
        if (user_id, game_id) in self._submissions:
            raise ReviewModeError("Game already submitted.")
        content, _ = self._assignment(user_id, game_id)
        return engine.check(content, guess)

    def submit(
        self,
        user_id,
        game_id,
        started_at: Optional[datetime] = None,
        time_taken_secs: int = 0,
        mistakes: int = 0,
        submission_data=None,
    ) -> Dict[str, Any]:
        _, engine, _ = self._game(game_id)
        content, _ = self._assignment(user_id, game_id)
        data = dict(submission_data or {})
        time_taken_secs = max(0, int(time_taken_secs or 0))
        mistakes, facts = engine.derive_facts(content, mistakes, data)
        score = engine.score(time_taken_secs, mistakes, facts)
        key = (user_id, game_id)
        existing = self._submissions.get(key)
        if existing is None or score > existing["score"]:
            self._submissions[key] = {
                "gameId": game_id,
                "startedAt": started_at.isoformat() if started_at else None,
                "timeTakenSeconds": time_taken_secs,
                "mistakes": mistakes,
                "score": score,
                "submissionData": data,
            }
        return self._submissions[key]
