from __future__ import annotations

from django.db import models
from django.utils import timezone

from .puzzles import EngineRegistry


# PUBLIC_INTERFACE
class TimeStampedModel(models.Model):
    """Abstract base model providing created/updated timestamps.

    Notes:
        Keep this abstract model free of any logic that would access the Django
        app registry or execute queries at module import time. Only field
        declarations and Meta options are allowed here so that importing this
        module does not trigger AppRegistryNotReady during Django startup.
    """
    created_at = models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")
    updated_at = models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")

    class Meta:
        abstract = True


GAME_TYPE_CHOICES = [(t, t.replace("_", " ").title()) for t in EngineRegistry.game_types()]


# PUBLIC_INTERFACE
class PuzzleDefinition(TimeStampedModel):
    """Published content for one daily game.

    Fields:
    - title: display title
    - game_type: engine identifier (wordle, connections, crossword, ...)
    - date: the day this game is played
    - variants: JSON list of interchangeable variants, or the item bank for
      bank games (one category / pair per entry)
    """
    title = models.CharField(max_length=128, blank=True, default="")
    game_type = models.CharField(max_length=32, choices=GAME_TYPE_CHOICES, db_index=True)
    date = models.DateField(default=timezone.localdate, db_index=True)
    variants = models.JSONField(default=list, help_text="Interchangeable variants or bank items.")

    class Meta:
        ordering = ["date", "id"]
        verbose_name = "Puzzle Definition"
        verbose_name_plural = "Puzzle Definitions"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.game_type} #{self.pk} ({self.date})"


# PUBLIC_INTERFACE
class PuzzleAssignment(TimeStampedModel):
    """Which variant (or bank subset) a user was dealt for a puzzle.

    Created once on first access and never changed afterwards. ``content``
    holds the solution and must never be serialized to the client; only
    ``client_data`` is.
    """
    user_id = models.CharField(max_length=64, db_index=True)
    puzzle = models.ForeignKey(PuzzleDefinition, on_delete=models.CASCADE, related_name="assignments")
    variant_indexes = models.JSONField(default=list, help_text="Indexes into the puzzle's variants.")
    content = models.JSONField(help_text="Assigned solution content. Server-side only.")
    client_data = models.JSONField(help_text="Client-safe derived shape, fixed at assignment time.")

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user_id", "puzzle"], name="unique_assignment_per_user"),
        ]
        verbose_name = "Puzzle Assignment"
        verbose_name_plural = "Puzzle Assignments"

    def __str__(self) -> str:  # pragma: no cover
        return f"Assignment {self.user_id} -> puzzle {self.puzzle_id} {self.variant_indexes}"


# PUBLIC_INTERFACE
class GameProgress(TimeStampedModel):
    """Resumable in-progress UI state for (user, puzzle); deleted on completion."""
    user_id = models.CharField(max_length=64, db_index=True)
    puzzle = models.ForeignKey(PuzzleDefinition, on_delete=models.CASCADE, related_name="progress")
    state = models.JSONField(default=dict)

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(fields=["user_id", "puzzle"], name="unique_progress_per_user"),
        ]
        verbose_name = "Game Progress"
        verbose_name_plural = "Game Progress"

    def __str__(self) -> str:  # pragma: no cover
        return f"Progress {self.user_id} puzzle {self.puzzle_id}"


# PUBLIC_INTERFACE
class GameSubmission(TimeStampedModel):
    """The scored record of a finished attempt; one per (user, puzzle).

    Fields:
    - started_at: when the player left the instructions screen
    - completed_at: when the attempt was recorded
    - time_taken_secs: reported elapsed play time
    - mistakes: mistakes as recomputed by the engine
    - score: server-computed score
    - submission_data: game-type-specific facts sent by the client
    """
    user_id = models.CharField(max_length=64, db_index=True)
    puzzle = models.ForeignKey(PuzzleDefinition, on_delete=models.CASCADE, related_name="submissions")
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(default=timezone.now)
    time_taken_secs = models.PositiveIntegerField(default=0)
    mistakes = models.PositiveIntegerField(default=0)
    score = models.PositiveIntegerField(default=0)
    submission_data = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-completed_at"]
        constraints = [
            models.UniqueConstraint(fields=["user_id", "puzzle"], name="unique_submission_per_user"),
        ]
        verbose_name = "Game Submission"
        verbose_name_plural = "Game Submissions"

    def __str__(self) -> str:  # pragma: no cover
        return f"Submission {self.user_id} puzzle {self.puzzle_id}: {self.score}"


# PUBLIC_INTERFACE
class IntegrityReport(TimeStampedModel):
    """Advisory anti-cheat signal reported by a client.

    Best-effort only: nothing in answer checking or scoring reads these.
    """
    user_id = models.CharField(max_length=64, db_index=True)
    puzzle = models.ForeignKey(
        PuzzleDefinition, on_delete=models.SET_NULL, null=True, blank=True, related_name="integrity_reports"
    )
    signal = models.CharField(max_length=64, help_text="Heuristic that fired, e.g. devtools_dimensions.")
    details = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Integrity Report"
        verbose_name_plural = "Integrity Reports"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.signal} by {self.user_id}"
