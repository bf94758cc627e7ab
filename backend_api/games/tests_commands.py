from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from games import services
from games.models import GameProgress, GameSubmission, PuzzleDefinition
from games.seed_data import SAMPLE_PUZZLES


class ManagementCommandTests(TestCase):
    def call(self, *args):
        out = StringIO()
        call_command(*args, stdout=out)
        return out.getvalue()

    def test_seed_games_is_idempotent(self):
        self.assertIn(f"Seeded {len(SAMPLE_PUZZLES)} puzzles", self.call("seed_games"))
        self.assertIn("already present", self.call("seed_games"))
        self.assertEqual(PuzzleDefinition.objects.count(), len(SAMPLE_PUZZLES))
        self.call("seed_games", "--date", "2030-01-01")
        self.assertEqual(PuzzleDefinition.objects.count(), 2 * len(SAMPLE_PUZZLES))

    def test_seeded_puzzles_are_playable(self):
        self.call("seed_games")
        for puzzle in PuzzleDefinition.objects.all():
            payload = services.client_safe_game("alice", puzzle)
            self.assertEqual(payload["type"], puzzle.game_type)

    def test_cleanup_progress(self):
        puzzle = PuzzleDefinition.objects.create(title="w", game_type="wordle", variants=[{"solution": "FAITH"}])
        services.submit_game("alice", puzzle, time_taken_secs=5, submission_data={"guesses": ["FAITH"]})
        GameProgress.objects.create(user_id="alice", puzzle=puzzle, state={})
        GameProgress.objects.create(user_id="bob", puzzle=puzzle, state={})

        self.assertIn("Would delete 1", self.call("cleanup_progress", "--dry-run"))
        self.assertEqual(GameProgress.objects.count(), 2)
        self.call("cleanup_progress")
        self.assertEqual(list(GameProgress.objects.values_list("user_id", flat=True)), ["bob"])

    def test_recalculate_scores(self):
        puzzle = PuzzleDefinition.objects.create(title="w", game_type="wordle", variants=[{"solution": "FAITH"}])
        services.submit_game("alice", puzzle, time_taken_secs=5, submission_data={"guesses": ["FAITH"]})
        GameSubmission.objects.update(score=1)

        self.call("recalculate_scores", "--dry-run")
        self.assertEqual(GameSubmission.objects.get().score, 1)
        out = self.call("recalculate_scores", "--game", str(puzzle.id))
        self.assertIn("1 -> 60", out)
        self.assertEqual(GameSubmission.objects.get().score, 60)
