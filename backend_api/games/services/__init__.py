"""Game domain services: assignment, progress and submissions.

These functions hold the authoritative logic that HTTP views, management
commands and in-process sessions share, keeping transport concerns out of
the core game mechanics.
"""

from .assignment import check_answer, client_safe_game, get_puzzle, resolve_assignment, review_payload
from .integrity import record_integrity_report
from .progress import RESERVED_PROGRESS_KEYS, clear_progress, load_progress, save_progress
from .submissions import SubmissionOutcome, get_submission, recalculate_submission, submit_game

__all__ = [
    "RESERVED_PROGRESS_KEYS",
    "SubmissionOutcome",
    "check_answer",
    "clear_progress",
    "client_safe_game",
    "get_puzzle",
    "get_submission",
    "load_progress",
    "recalculate_submission",
    "record_integrity_report",
    "resolve_assignment",
    "review_payload",
    "save_progress",
    "submit_game",
]
