"""
Per-view game session: instructions, play, terminal state and submission.

A GameLifecycle owns every resource of one open game view: the debounced
progress saver, the in-flight guard for answer checks and the delayed
completion timer. It talks to a backend (see ``games.session.backends``) and
never to the database directly, so the same state machine drives both
persisted play and local preview.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from ..puzzles import NetworkError
from .debounce import Debouncer

logger = logging.getLogger(__name__)

INSTRUCTIONS = "instructions"
PLAYING = "playing"
WON = "won"
LOST = "lost"
SUBMITTED = "submitted"

STARTED_AT_KEY = "startedAt"

DEFAULT_DEBOUNCE_SECS = 1.0
DEFAULT_COMPLETION_DELAY_SECS = 2.5


class InvalidTransition(RuntimeError):
    """An action was attempted in a state that does not allow it."""


# PUBLIC_INTERFACE
class GameLifecycle:
    """State machine ``instructions -> playing -> won|lost -> submitted``.

    Usage:
        session = GameLifecycle(ServiceBackend(), user_id, game_id, on_complete=done)
        session.load()
        session.start()
        session.update_state({"guesses": ["FAINT"]})
        result = session.check("FAITH")
        session.finish(won=True, mistakes=1, submission_data={"guesses": [...]})
    """

    def __init__(
        self,
        backend,
        user_id: str,
        game_id: Any,
        on_complete: Optional[Callable[[], None]] = None,
        debounce_secs: float = DEFAULT_DEBOUNCE_SECS,
        completion_delay_secs: float = DEFAULT_COMPLETION_DELAY_SECS,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.backend = backend
        self.user_id = user_id
        self.game_id = game_id
        self.on_complete = on_complete
        self.completion_delay_secs = completion_delay_secs
        self._timer_factory = timer_factory
        self._clock = clock

        self.state = INSTRUCTIONS
        self.game: Optional[Dict[str, Any]] = None
        self.progress: Dict[str, Any] = {}
        self.submission: Optional[Dict[str, Any]] = None
        self.review: Optional[Dict[str, Any]] = None
        self.started_at: Optional[datetime] = None
        self.closed = False

        self._saver = Debouncer(debounce_secs, self._persist_progress, timer_factory=timer_factory)
        self._check_guard = threading.Lock()
        self._completion_timer = None
        self._completed = False

    @property
    def is_review(self) -> bool:
        return self.state == SUBMITTED

    @property
    def is_checking(self) -> bool:
        return self._check_guard.locked()

    def _require(self, *states: str) -> None:
        if self.state not in states:
            raise InvalidTransition(f"Cannot do that while the game is {self.state}.")

    # PUBLIC_INTERFACE
    def load(self) -> str:
        """Fetch the game and decide the initial state.

        A stored submission jumps straight to read-only review; a persisted
        start timestamp resumes play; anything else shows instructions.
        ConfigurationError propagates: the game view cannot be shown.
        """
        self.game = self.backend.get_game(self.user_id, self.game_id)
        submission = self.backend.get_submission(self.user_id, self.game_id)
        if submission is not None:
            self.submission = submission
            self.review = self.backend.get_review(self.user_id, self.game_id)
            self.state = SUBMITTED
            return self.state

        self.progress = dict(self.backend.load_progress(self.user_id, self.game_id) or {})
        started = self.progress.get(STARTED_AT_KEY)
        if started:
            self.started_at = parse_datetime(started)
            self.state = PLAYING
            logger.debug("Resuming game %s for user=%s", self.game_id, self.user_id)
        else:
            self.state = INSTRUCTIONS
        return self.state

    # PUBLIC_INTERFACE
    def start(self) -> None:
        """Leave instructions and start the clock."""
        self._require(INSTRUCTIONS)
        self.started_at = self._clock()
        self.state = PLAYING
        self.progress[STARTED_AT_KEY] = self.started_at.isoformat()
        self._persist_progress()

    # PUBLIC_INTERFACE
    def update_state(self, blob: Mapping[str, Any]) -> None:
        """Replace the in-progress snapshot and schedule a debounced save."""
        if self.closed or self.state != PLAYING:
            return
        progress = dict(blob)
        if self.started_at is not None:
            progress[STARTED_AT_KEY] = self.started_at.isoformat()
        self.progress = progress
        self._saver.trigger()

    def _persist_progress(self) -> None:
        if self.state != PLAYING:
            return
        try:
            self.backend.save_progress(self.user_id, self.game_id, dict(self.progress))
        except NetworkError:
            # Retried by the next debounce tick
            logger.warning("Progress save failed for game %s user=%s", self.game_id, self.user_id)

    # PUBLIC_INTERFACE
    def check(self, guess: Any) -> Optional[Dict[str, Any]]:
        """Verify one guess; returns None if a check is already in flight.

        GuessValidationError and NetworkError propagate so the caller can
        show them inline; neither changes local state.
        """
        self._require(PLAYING)
        if not self._check_guard.acquire(blocking=False):
            return None
        try:
            return self.backend.check(self.user_id, self.game_id, guess)
        finally:
            self._check_guard.release()

    def elapsed_secs(self) -> int:
        if self.started_at is None:
            return 0
        return max(0, int((self._clock() - self.started_at).total_seconds()))

    # PUBLIC_INTERFACE
    def finish(self, won: bool, mistakes: int = 0, submission_data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Enter won/lost, then clear progress, submit once and schedule completion.

        If the submission raises NetworkError the session stays in won/lost
        and ``finish`` may be called again.
        """
        self._require(PLAYING, WON, LOST)
        if self.state == PLAYING:
            self.state = WON if won else LOST
            self._saver.cancel()
        self.backend.clear_progress(self.user_id, self.game_id)
        self.submission = self.backend.submit(
            self.user_id,
            self.game_id,
            started_at=self.started_at,
            time_taken_secs=self.elapsed_secs(),
            mistakes=mistakes,
            submission_data=dict(submission_data or {}),
        )
        self.state = SUBMITTED
        self.review = self.backend.get_review(self.user_id, self.game_id)
        self._schedule_completion()
        return self.submission

    def _schedule_completion(self) -> None:
        if self._completion_timer is not None or self.on_complete is None:
            return
        self._completion_timer = self._timer_factory(self.completion_delay_secs, self._fire_completion)
        self._completion_timer.daemon = True
        self._completion_timer.start()

    def _fire_completion(self) -> None:
        if self._completed:
            return
        self._completed = True
        self.on_complete()

    # PUBLIC_INTERFACE
    def close(self) -> None:
        """Stop accepting input. A pending save or completion still fires."""
        self.closed = True
