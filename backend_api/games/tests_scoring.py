from django.test import SimpleTestCase

from games.puzzles import calculate_score
from games.puzzles import scoring

FACTS = {
    "wordle": {},
    "connections": {"categoriesFound": 3},
    "crossword": {"correctCells": 20, "totalCells": 25},
    "match_the_word": {"foundPairsCount": 5},
    "verse_scramble": {"completed": True},
    "who_am_i": {"solved": True},
    "word_search": {"wordsFound": 4, "totalWords": 4},
}

MISTAKES = range(0, 12)
TIMES = [0, 5, 10, 15, 30, 59, 60, 61, 120, 300, 600, 1800, 3600, 100000]


class ScoringFormulaTests(SimpleTestCase):
    def test_reference_values(self):
        self.assertEqual(scoring.score_wordle(0), 60)
        self.assertEqual(scoring.score_wordle(5), 10)
        self.assertEqual(scoring.score_wordle(6), 0)
        self.assertEqual(scoring.score_connections(4, 0), 80)
        self.assertEqual(scoring.score_crossword(10, 10, 0), 100)
        self.assertEqual(scoring.score_match_the_word(6, 1), 110)
        self.assertEqual(scoring.score_verse_scramble(True, 0, 0), 100)
        self.assertEqual(scoring.score_who_am_i(True, 0, 0), 100)
        self.assertEqual(scoring.score_word_search(4, 4, 0), 90)

    def test_crossword_rounds_half_up(self):
        # 3/4 * 70 == 52.5
        self.assertEqual(scoring.score_crossword(3, 4, 1800), 53)

    def test_unfinished_games_score_nothing(self):
        self.assertEqual(scoring.score_verse_scramble(False, 0, 0), 0)
        self.assertEqual(scoring.score_who_am_i(False, 0, 0), 0)
        self.assertEqual(scoring.score_crossword(0, 0, 10**6), 0)

    def test_unknown_family(self):
        with self.assertRaises(KeyError):
            calculate_score("sudoku", 0, 0, {})

    def test_non_negative_and_monotonic(self):
        for game_type, facts in FACTS.items():
            for time_taken in TIMES:
                previous = None
                for mistakes in MISTAKES:
                    score = calculate_score(game_type, time_taken, mistakes, facts)
                    self.assertGreaterEqual(score, 0, game_type)
                    if previous is not None:
                        self.assertLessEqual(score, previous, f"{game_type} mistakes={mistakes}")
                    previous = score
            for mistakes in MISTAKES:
                previous = None
                for time_taken in TIMES:
                    score = calculate_score(game_type, time_taken, mistakes, facts)
                    if previous is not None:
                        self.assertLessEqual(score, previous, f"{game_type} time={time_taken}")
                    previous = score
