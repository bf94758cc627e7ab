import json
import random
from unittest import mock

from django.test import TestCase

from games import services
from games.models import GameProgress, GameSubmission, PuzzleAssignment, PuzzleDefinition
from games.puzzles import ConfigurationError, GuessValidationError, ReviewModeError
from games.seed_data import SAMPLE_PUZZLES


def sample(game_type):
    return next(s for s in SAMPLE_PUZZLES if s["game_type"] == game_type)


class AssignmentResolverTests(TestCase):
    def setUp(self):
        self.wordle = PuzzleDefinition.objects.create(**sample("wordle"))
        self.connections = PuzzleDefinition.objects.create(**sample("connections"))

    def test_assignment_is_stable(self):
        first = services.resolve_assignment("alice", self.wordle)
        second = services.resolve_assignment("alice", self.wordle, rng=random.Random(99))
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.content, second.content)
        self.assertEqual(
            services.client_safe_game("alice", self.wordle)["data"],
            services.client_safe_game("alice", self.wordle)["data"],
        )
        self.assertEqual(PuzzleAssignment.objects.filter(user_id="alice").count(), 1)

    def test_tile_order_survives_reload(self):
        first = services.client_safe_game("alice", self.connections)
        again = services.client_safe_game("alice", self.connections)
        self.assertEqual(first["data"]["words"], again["data"]["words"])

    def test_bank_subset(self):
        assignment = services.resolve_assignment("bob", self.connections, rng=random.Random(5))
        self.assertEqual(len(assignment.variant_indexes), 4)
        self.assertEqual(len(assignment.content["categories"]), 4)

    def test_payload_never_contains_the_solution(self):
        payload = services.client_safe_game("alice", self.wordle)
        solution = services.resolve_assignment("alice", self.wordle).content["solution"]
        self.assertNotIn(solution, json.dumps(payload))
        self.assertEqual(payload["type"], "wordle")
        self.assertEqual(payload["maxMistakes"], 6)

        payload = services.client_safe_game("alice", self.connections)
        for category in services.resolve_assignment("alice", self.connections).content["categories"]:
            self.assertNotIn(category["name"], json.dumps(payload))

    def test_unplayable_puzzles(self):
        empty = PuzzleDefinition.objects.create(title="Empty", game_type="wordle", variants=[])
        with self.assertRaises(ConfigurationError):
            services.resolve_assignment("alice", empty)
        small = PuzzleDefinition.objects.create(
            title="Small", game_type="connections", variants=sample("connections")["variants"][:3]
        )
        with self.assertRaises(ConfigurationError):
            services.resolve_assignment("alice", small)
        self.assertFalse(PuzzleAssignment.objects.filter(puzzle__in=[empty, small]).exists())

    def test_review_payload_only_after_submission(self):
        self.assertIsNone(services.review_payload("alice", self.wordle))
        services.submit_game("alice", self.wordle, time_taken_secs=10, submission_data={"guesses": []})
        review = services.review_payload("alice", self.wordle)
        self.assertIn(review["solution"], {"FAITH", "GRACE", "PSALM"})

    def test_checks_are_refused_once_submitted(self):
        solution = services.resolve_assignment("alice", self.wordle).content["solution"]
        self.assertTrue(services.check_answer("alice", self.wordle, solution)["correct"])
        services.submit_game("alice", self.wordle, time_taken_secs=10, submission_data={"guesses": [solution]})
        with self.assertRaises(ReviewModeError):
            services.check_answer("alice", self.wordle, solution)
        # Other players are unaffected
        self.assertIn("correct", services.check_answer("bob", self.wordle, solution))


class ProgressStoreTests(TestCase):
    def setUp(self):
        self.puzzle = PuzzleDefinition.objects.create(**sample("verse_scramble"))

    def test_save_load_clear(self):
        self.assertIsNone(services.load_progress("alice", self.puzzle))
        services.save_progress("alice", self.puzzle, {"order": ["a"]})
        services.save_progress("alice", self.puzzle, {"order": ["b"]})
        self.assertEqual(services.load_progress("alice", self.puzzle), {"order": ["b"]})
        self.assertEqual(GameProgress.objects.count(), 1)
        self.assertEqual(services.clear_progress("alice", self.puzzle), 1)
        self.assertIsNone(services.load_progress("alice", self.puzzle))

    def test_reserved_keys_are_stripped(self):
        with self.assertLogs("games.services.progress", level="WARNING"):
            services.save_progress("alice", self.puzzle, {"order": [], "verse": "x", "assignedVerse": "y"})
        self.assertEqual(services.load_progress("alice", self.puzzle), {"order": []})

    def test_state_must_be_an_object(self):
        with self.assertRaises(GuessValidationError):
            services.save_progress("alice", self.puzzle, ["not", "a", "dict"])

    def test_late_save_after_submission_is_ignored(self):
        services.submit_game("alice", self.puzzle, time_taken_secs=10)
        self.assertIsNone(services.save_progress("alice", self.puzzle, {"order": []}))
        self.assertFalse(GameProgress.objects.exists())


class SubmissionTests(TestCase):
    def setUp(self):
        self.puzzle = PuzzleDefinition.objects.create(
            title="Daily Word", game_type="wordle", variants=[{"solution": "FAITH"}]
        )

    def submit(self, guesses, mistakes=0):
        return services.submit_game(
            "alice", self.puzzle, time_taken_secs=30, mistakes=mistakes, submission_data={"guesses": guesses}
        )

    def test_server_recomputes_score(self):
        outcome = self.submit(["FAINT", "GRACE", "FAITH"], mistakes=0)
        self.assertTrue(outcome.created)
        self.assertEqual(outcome.submission.mistakes, 2)
        self.assertEqual(outcome.submission.score, 40)

    def test_missing_guess_list_scores_nothing(self):
        outcome = services.submit_game("eve", self.puzzle, time_taken_secs=5, mistakes=0, submission_data={})
        self.assertEqual(outcome.submission.score, 0)
        self.assertEqual(outcome.submission.mistakes, 6)

    def test_identical_resubmission_keeps_one_row(self):
        self.submit(["FAITH"])
        outcome = self.submit(["FAITH"])
        self.assertFalse(outcome.created)
        self.assertFalse(outcome.updated)
        self.assertEqual(GameSubmission.objects.count(), 1)

    def test_worse_score_does_not_overwrite(self):
        self.submit(["FAITH"])
        outcome = self.submit(["FAINT", "FAITH"])
        self.assertFalse(outcome.updated)
        self.assertEqual(GameSubmission.objects.get().score, 60)

    def test_better_score_overwrites(self):
        self.submit(["FAINT", "FAITH"])
        outcome = self.submit(["FAITH"])
        self.assertTrue(outcome.updated)
        self.assertEqual(GameSubmission.objects.get().score, 60)

    def test_submission_clears_progress(self):
        services.save_progress("alice", self.puzzle, {"guesses": ["FAINT"]})
        self.submit(["FAINT", "FAITH"])
        self.assertFalse(GameProgress.objects.exists())

    def test_recalculate(self):
        outcome = self.submit(["FAITH"])
        GameSubmission.objects.filter(pk=outcome.submission.pk).update(score=5)
        submission = GameSubmission.objects.get()
        self.assertEqual(services.recalculate_submission(submission), (5, 60))
        self.assertEqual(GameSubmission.objects.get().score, 60)


class ConcurrentFirstAccessTests(TestCase):
    """The lookup misses because another tab inserted the row in between."""

    def setUp(self):
        self.puzzle = PuzzleDefinition.objects.create(
            title="Daily Word", game_type="wordle", variants=[{"solution": "FAITH"}]
        )

    def test_assignment_race_returns_the_stored_row(self):
        winner = services.resolve_assignment("alice", self.puzzle)
        stale = PuzzleAssignment.objects.none()
        with mock.patch.object(PuzzleAssignment.objects, "filter", return_value=stale):
            with self.assertLogs("games.services.assignment", level="INFO") as logs:
                loser = services.resolve_assignment("alice", self.puzzle, rng=random.Random(7))
        self.assertIn("Assignment race", logs.output[0])
        self.assertEqual(loser.pk, winner.pk)
        self.assertEqual(loser.client_data, winner.client_data)
        self.assertEqual(PuzzleAssignment.objects.filter(user_id="alice", puzzle=self.puzzle).count(), 1)

    def racing_submit(self, guesses):
        real_lookup = GameSubmission.objects.select_for_update
        calls = []

        def lookup(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                return GameSubmission.objects.none()
            return real_lookup(*args, **kwargs)

        with mock.patch.object(GameSubmission.objects, "select_for_update", side_effect=lookup):
            outcome = services.submit_game(
                "alice", self.puzzle, time_taken_secs=30, submission_data={"guesses": guesses}
            )
        self.assertEqual(len(calls), 2)
        return outcome

    def test_submission_race_keeps_a_better_stored_score(self):
        first = services.submit_game("alice", self.puzzle, time_taken_secs=30, submission_data={"guesses": ["FAITH"]})
        outcome = self.racing_submit(["FAINT", "FAITH"])
        self.assertFalse(outcome.created)
        self.assertFalse(outcome.updated)
        self.assertEqual(outcome.submission.pk, first.submission.pk)
        self.assertEqual(GameSubmission.objects.get().score, 60)

    def test_submission_race_overwrites_with_a_better_score(self):
        services.submit_game("alice", self.puzzle, time_taken_secs=30, submission_data={"guesses": ["FAINT", "FAITH"]})
        outcome = self.racing_submit(["FAITH"])
        self.assertFalse(outcome.created)
        self.assertTrue(outcome.updated)
        self.assertEqual(GameSubmission.objects.count(), 1)
        self.assertEqual(GameSubmission.objects.get().score, 60)
