from django.urls import reverse
from rest_framework.test import APITestCase

from games.models import GameProgress, GameSubmission, IntegrityReport, PuzzleDefinition
from games.seed_data import SAMPLE_PUZZLES


class GameFlowTests(APITestCase):
    def setUp(self):
        self.puzzle = PuzzleDefinition.objects.create(
            title="Daily Word", game_type="wordle", variants=[{"solution": "FAITH"}]
        )
        self.client.credentials(HTTP_X_USER_ID="player-1")

    def submit(self, guesses):
        return self.client.post(
            reverse('submit-game'),
            {
                "gameId": self.puzzle.id,
                "timeTakenSeconds": 30,
                "mistakes": 0,
                "score": 9999,
                "submissionData": {"guesses": guesses},
            },
            format="json",
        )

    def test_health(self):
        resp = self.client.get(reverse('Health'))
        self.assertEqual(resp.status_code, 200)

    def test_game_types(self):
        resp = self.client.get(reverse('game-types'))
        self.assertEqual(resp.status_code, 200)
        self.assertIn("crossword", resp.json())

    def test_daily_games_lists_metadata_only(self):
        resp = self.client.get(reverse('daily-games'))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([g["id"] for g in data], [self.puzzle.id])
        self.assertNotIn("variants", data[0])
        self.assertEqual(self.client.get(reverse('daily-games'), {"date": "nope"}).status_code, 400)

    def test_game_detail_is_client_safe(self):
        resp = self.client.get(reverse('game-detail', kwargs={"game_id": self.puzzle.id}))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["data"], {"wordLength": 5})
        self.assertIsNone(data["submission"])
        self.assertIsNone(data["solution"])
        self.assertNotIn("FAITH", resp.content.decode())

    def test_user_id_is_required(self):
        self.client.credentials()
        resp = self.client.get(reverse('game-detail', kwargs={"game_id": self.puzzle.id}))
        self.assertEqual(resp.status_code, 401)

    def test_unplayable_game(self):
        empty = PuzzleDefinition.objects.create(title="Empty", game_type="wordle", variants=[])
        resp = self.client.get(reverse('game-detail', kwargs={"game_id": empty.id}))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "No puzzle available.")
        resp = self.client.get(reverse('game-detail', kwargs={"game_id": 9999}))
        self.assertEqual(resp.status_code, 404)

    def test_check_answer(self):
        url = reverse('check-answer', kwargs={"game_id": self.puzzle.id})
        resp = self.client.post(url, {"guess": "faint"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {
            "correct": False,
            "result": ["correct", "correct", "correct", "absent", "present"],
        })
        resp = self.client.post(url, {"guess": "fai"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.json())
        self.assertEqual(self.client.post(url, {}, format="json").status_code, 400)

    def test_check_answer_after_submission_is_a_conflict(self):
        self.submit(["FAITH"])
        url = reverse('check-answer', kwargs={"game_id": self.puzzle.id})
        resp = self.client.post(url, {"guess": "faith"}, format="json")
        self.assertEqual(resp.status_code, 409)
        self.assertIn("error", resp.json())

    def test_progress_endpoints(self):
        url = reverse('game-progress', kwargs={"game_id": self.puzzle.id})
        self.assertIsNone(self.client.get(url).json()["state"])
        resp = self.client.put(url, {"state": {"guesses": ["FAINT"], "solution": "FAITH"}}, format="json")
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(self.client.get(url).json()["state"], {"guesses": ["FAINT"]})
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertIsNone(self.client.get(url).json()["state"])

    def test_submit_ignores_client_score_and_reveals_solution(self):
        resp = self.submit(["FAINT", "FAITH"])
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["score"], 50)
        self.assertEqual(resp.json()["mistakes"], 1)

        detail = self.client.get(reverse('game-detail', kwargs={"game_id": self.puzzle.id})).json()
        self.assertEqual(detail["submission"]["score"], 50)
        self.assertEqual(detail["solution"], {"solution": "FAITH"})

        resp = self.client.get(reverse('game-submission', kwargs={"game_id": self.puzzle.id}))
        self.assertEqual(resp.json()["submission"]["score"], 50)

    def test_resubmission_keeps_the_better_score(self):
        self.assertEqual(self.submit(["FAITH"]).status_code, 201)
        resp = self.submit(["FAITH"])
        self.assertEqual(resp.status_code, 200)
        resp = self.submit(["FAINT", "FAITH"])
        self.assertEqual(resp.json()["score"], 60)
        self.assertEqual(GameSubmission.objects.count(), 1)
        self.assertEqual(GameSubmission.objects.get().score, 60)

    def test_submit_clears_progress(self):
        url = reverse('game-progress', kwargs={"game_id": self.puzzle.id})
        self.client.put(url, {"state": {"guesses": ["FAINT"]}}, format="json")
        self.submit(["FAINT", "FAITH"])
        self.assertFalse(GameProgress.objects.exists())

    def test_submit_without_guesses_scores_nothing(self):
        resp = self.client.post(
            reverse('submit-game'),
            {"gameId": self.puzzle.id, "timeTakenSeconds": 5, "mistakes": 0, "submissionData": {}},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["score"], 0)

    def test_found_lists_of_the_wrong_type_are_not_server_errors(self):
        cases = {
            "connections": ("foundGroups", 0),
            "match_the_word": ("foundPairs", 0),
            # Nothing found; only the time bonus remains
            "word_search": ("foundWords", 30),
        }
        for game_type, (key, expected) in cases.items():
            puzzle = PuzzleDefinition.objects.create(
                **next(s for s in SAMPLE_PUZZLES if s["game_type"] == game_type)
            )
            resp = self.client.post(
                reverse('submit-game'),
                {"gameId": puzzle.id, "timeTakenSeconds": 3, "submissionData": {key: 3}},
                format="json",
            )
            self.assertEqual(resp.status_code, 201, game_type)
            self.assertEqual(resp.json()["score"], expected, game_type)

    def test_submit_unknown_game(self):
        resp = self.client.post(reverse('submit-game'), {"gameId": 9999, "timeTakenSeconds": 1}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_integrity_report(self):
        resp = self.client.post(
            reverse('integrity-report'),
            {"gameId": self.puzzle.id, "signal": "devtools_dimensions", "details": "outer-inner > 160"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        report = IntegrityReport.objects.get()
        self.assertEqual(report.user_id, "player-1")
        self.assertEqual(report.puzzle, self.puzzle)
