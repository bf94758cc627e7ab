from datetime import datetime, timedelta, timezone

from django.test import SimpleTestCase, TestCase

from games.models import PuzzleDefinition
from games.puzzles import NetworkError, ReviewModeError
from games.session import Debouncer, GameLifecycle, InvalidTransition, LocalPreviewBackend, ServiceBackend
from games.session import lifecycle
from games.seed_data import SAMPLE_PUZZLES

START = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeTimer:
    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.fired = True
            self.function()


class FakeTimers:
    def __init__(self):
        self.created = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.created.append(timer)
        return timer

    def live(self, interval=None):
        return [
            t for t in self.created
            if t.started and not t.cancelled and not t.fired and (interval is None or t.interval == interval)
        ]


class FakeClock:
    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now


class DebouncerTests(SimpleTestCase):
    def setUp(self):
        self.calls = []
        self.timers = FakeTimers()
        self.debouncer = Debouncer(1.0, lambda: self.calls.append(1), timer_factory=self.timers)

    def test_rapid_triggers_coalesce(self):
        for _ in range(5):
            self.debouncer.trigger()
        self.assertEqual(len(self.timers.live()), 1)
        for timer in self.timers.created:
            timer.fire()
        self.assertEqual(self.calls, [1])
        self.assertFalse(self.debouncer.pending)

    def test_stale_timer_does_not_fire(self):
        self.debouncer.trigger()
        first = self.timers.created[0]
        self.debouncer.trigger()
        first.function()
        self.assertEqual(self.calls, [])

    def test_flush_and_cancel(self):
        self.assertFalse(self.debouncer.flush())
        self.debouncer.trigger()
        self.assertTrue(self.debouncer.flush())
        self.assertEqual(self.calls, [1])
        self.debouncer.trigger()
        self.debouncer.cancel()
        self.timers.created[-1].function()
        self.assertEqual(self.calls, [1])


class FlakyBackend(LocalPreviewBackend):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_saves = False
        self.fail_submits = 0

    def save_progress(self, user_id, game_id, state):
        if self.fail_saves:
            raise NetworkError("offline")
        super().save_progress(user_id, game_id, state)

    def submit(self, *args, **kwargs):
        if self.fail_submits:
            self.fail_submits -= 1
            raise NetworkError("offline")
        return super().submit(*args, **kwargs)


class GameLifecycleTests(SimpleTestCase):
    def setUp(self):
        self.backend = FlakyBackend({1: ("wordle", [{"solution": "FAITH"}])})
        self.timers = FakeTimers()
        self.clock = FakeClock()
        self.completions = []

    def session(self):
        return GameLifecycle(
            self.backend,
            "player-1",
            1,
            on_complete=lambda: self.completions.append(True),
            timer_factory=self.timers,
            clock=self.clock,
        )

    def test_starts_on_instructions_and_records_start(self):
        session = self.session()
        self.assertEqual(session.load(), lifecycle.INSTRUCTIONS)
        self.assertEqual(session.game["data"], {"wordLength": 5})
        self.assertIsNone(self.backend.load_progress("player-1", 1))
        session.start()
        self.assertEqual(session.state, lifecycle.PLAYING)
        self.assertEqual(self.backend.load_progress("player-1", 1), {"startedAt": START.isoformat()})

    def test_resume_from_persisted_start(self):
        first = self.session()
        first.load()
        first.start()
        first.close()
        second = self.session()
        self.assertEqual(second.load(), lifecycle.PLAYING)
        self.assertEqual(second.started_at, START)

    def test_progress_saves_are_debounced(self):
        session = self.session()
        session.load()
        session.start()
        session.update_state({"guesses": ["FAINT"]})
        session.update_state({"guesses": ["FAINT", "GRACE"], "solution": "FAITH"})
        live = self.timers.live(1.0)
        self.assertEqual(len(live), 1)
        live[0].fire()
        saved = self.backend.load_progress("player-1", 1)
        self.assertEqual(saved["guesses"], ["FAINT", "GRACE"])
        self.assertNotIn("solution", saved)

    def test_failed_save_is_retried_on_next_tick(self):
        session = self.session()
        session.load()
        session.start()
        self.backend.fail_saves = True
        session.update_state({"guesses": ["FAINT"]})
        with self.assertLogs("games.session.lifecycle", level="WARNING"):
            self.timers.live(1.0)[0].fire()
        self.backend.fail_saves = False
        session.update_state({"guesses": ["FAINT", "GRACE"]})
        self.timers.live(1.0)[0].fire()
        self.assertEqual(self.backend.load_progress("player-1", 1)["guesses"], ["FAINT", "GRACE"])

    def test_check_requires_playing(self):
        session = self.session()
        session.load()
        with self.assertRaises(InvalidTransition):
            session.check("FAITH")

    def test_check_in_flight_guard(self):
        session = self.session()
        session.load()
        session.start()
        nested = []
        original = self.backend.check

        def reentrant(user_id, game_id, guess):
            nested.append(session.check(guess))
            return original(user_id, game_id, guess)

        self.backend.check = reentrant
        result = session.check("FAINT")
        self.assertEqual(nested, [None])
        self.assertEqual(result["result"], ["correct", "correct", "correct", "absent", "present"])
        self.assertFalse(session.is_checking)

    def test_finish_clears_progress_submits_and_completes_once(self):
        session = self.session()
        session.load()
        session.start()
        session.update_state({"guesses": ["FAINT"]})
        pending_save = self.timers.live(1.0)[0]
        self.clock.now = START + timedelta(seconds=42)

        submission = session.finish(won=True, mistakes=1, submission_data={"guesses": ["FAINT", "FAITH"]})

        self.assertEqual(session.state, lifecycle.SUBMITTED)
        self.assertTrue(pending_save.cancelled)
        self.assertIsNone(self.backend.load_progress("player-1", 1))
        self.assertEqual(submission["score"], 50)
        self.assertEqual(submission["timeTakenSeconds"], 42)
        self.assertEqual(session.review, {"solution": "FAITH"})

        self.assertEqual(self.completions, [])
        completion = self.timers.live(lifecycle.DEFAULT_COMPLETION_DELAY_SECS)
        self.assertEqual(len(completion), 1)
        completion[0].fire()
        completion[0].fire()
        self.assertEqual(self.completions, [True])

    def test_submission_network_error_keeps_terminal_state(self):
        session = self.session()
        session.load()
        session.start()
        self.backend.fail_submits = 1
        with self.assertRaises(NetworkError):
            session.finish(won=False, submission_data={"guesses": ["FAINT"]})
        self.assertEqual(session.state, lifecycle.LOST)
        session.finish(won=False, submission_data={"guesses": ["FAINT"]})
        self.assertEqual(session.state, lifecycle.SUBMITTED)
        self.assertEqual(session.submission["score"], 0)

    def test_finished_game_opens_in_review(self):
        session = self.session()
        session.load()
        session.start()
        session.finish(won=True, submission_data={"guesses": ["FAITH"]})
        reopened = self.session()
        self.assertEqual(reopened.load(), lifecycle.SUBMITTED)
        self.assertTrue(reopened.is_review)
        self.assertEqual(reopened.submission["score"], 60)
        with self.assertRaises(InvalidTransition):
            reopened.start()


def _single(game_type):
    """A sample puzzle reduced so that every player gets identical content."""
    variants = next(s["variants"] for s in SAMPLE_PUZZLES if s["game_type"] == game_type)
    if game_type == "connections":
        return variants[:4]
    if game_type == "match_the_word":
        return variants[:6]
    return variants[:1]


GUESSES = {
    "wordle": ["FAINT", "faith", "GRACE"],
    "who_am_i": ["J", "z", "T"],
    "verse_scramble": [
        "In the beginning God created the heaven and the earth".split(),
        "the In beginning God created the heaven and the earth".split(),
    ],
    "connections": [["LOVE", "JOY", "PEACE", "PATIENCE"], ["LOVE", "JOY", "PEACE", "MARK"]],
    "match_the_word": [{"word": "David", "match": "Shepherd King"}, {"word": "David", "match": "Lawgiver"}],
    "word_search": [
        {"start": {"row": 1, "col": 4}, "end": {"row": 1, "col": 0}},
        {"start": {"row": 4, "col": 0}, "end": {"row": 4, "col": 2}},
    ],
}

SUBMISSIONS = {
    "wordle": {"guesses": ["FAINT", "FAITH"]},
    "who_am_i": {"guessedLetters": list("JOHNTEBAPISZ")},
    "verse_scramble": {"order": GUESSES["verse_scramble"][0]},
    "connections": {"foundGroups": ["Fruits of the Spirit", "Gospels"]},
    "match_the_word": {"foundPairs": ["David", "Moses"]},
    "word_search": {"foundWords": ["FAITH", "JOY"]},
    "crossword": {"grid": [["L", "O", "V", "E", None], ["A", None, None, None, None],
                           ["M", "A", "N", "N", "E"], ["B", None, None, None, None]]},
}


class LocalAndServerAgreementTests(TestCase):
    def test_checks_and_scores_match(self):
        puzzles = {}
        for game_type in SUBMISSIONS:
            puzzle = PuzzleDefinition.objects.create(title=game_type, game_type=game_type, variants=_single(game_type))
            puzzles[puzzle.pk] = (game_type, puzzle.variants)
        local = LocalPreviewBackend(puzzles)
        server = ServiceBackend()

        for game_id, (game_type, _) in puzzles.items():
            for guess in GUESSES.get(game_type, []):
                self.assertEqual(
                    local.check("p", game_id, guess), server.check("p", game_id, guess), f"{game_type} {guess}"
                )
            local_sub = local.submit("p", game_id, time_taken_secs=75, mistakes=1, submission_data=SUBMISSIONS[game_type])
            server_sub = server.submit("p", game_id, time_taken_secs=75, mistakes=1, submission_data=SUBMISSIONS[game_type])
            self.assertEqual(local_sub["score"], server_sub["score"], game_type)
            self.assertEqual(local_sub["mistakes"], server_sub["mistakes"], game_type)
            for backend in (local, server):
                with self.assertRaises(ReviewModeError, msg=game_type):
                    backend.check("p", game_id, "anything")
