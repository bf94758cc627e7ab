import random

from django.test import SimpleTestCase

from games.puzzles import ConfigurationError, GuessValidationError, compute_letter_feedback, get_engine, mask_answer
from games.puzzles.engines import ConnectionsEngine, WordleEngine
from games.seed_data import SAMPLE_PUZZLES


def sample_variants(game_type):
    return next(s["variants"] for s in SAMPLE_PUZZLES if s["game_type"] == game_type)


class LetterFeedbackTests(SimpleTestCase):
    def test_faint_against_faith(self):
        self.assertEqual(
            compute_letter_feedback("FAITH", "FAINT"),
            ["correct", "correct", "correct", "absent", "present"],
        )

    def test_exact_guess_is_all_correct(self):
        self.assertEqual(compute_letter_feedback("GRACE", "GRACE"), ["correct"] * 5)

    def test_repeated_letters_are_not_double_counted(self):
        self.assertEqual(
            compute_letter_feedback("APPLE", "PAPAL"),
            ["present", "present", "correct", "absent", "present"],
        )
        self.assertEqual(
            compute_letter_feedback("FAITH", "TTTTT"),
            ["absent", "absent", "absent", "correct", "absent"],
        )

    def test_mask_keeps_punctuation_and_spaces(self):
        self.assertEqual(mask_answer("Mary-Jane 2"), "____-____ _")


class WordleEngineTests(SimpleTestCase):
    def setUp(self):
        self.engine = get_engine("wordle")
        self.content = self.engine.prepare({"solution": "faith"})

    def test_client_data_only_has_length(self):
        self.assertEqual(self.engine.client_data(self.content, random.Random(0)), {"wordLength": 5})

    def test_check_normalizes_case(self):
        result = self.engine.check(self.content, "faint")
        self.assertFalse(result["correct"])
        self.assertEqual(result["result"][:3], ["correct", "correct", "correct"])
        self.assertTrue(self.engine.check(self.content, "Faith")["correct"])

    def test_malformed_guesses(self):
        with self.assertRaises(GuessValidationError):
            self.engine.check(self.content, "FAI")
        with self.assertRaises(GuessValidationError):
            self.engine.check(self.content, "FA1TH")

    def test_derive_facts_counts_wrong_guesses(self):
        mistakes, facts = self.engine.derive_facts(self.content, 0, {"guesses": ["FAINT", "GRACE", "FAITH"]})
        self.assertEqual((mistakes, facts), (2, {"solved": True}))
        mistakes, facts = self.engine.derive_facts(self.content, 0, {"guesses": ["FAINT"]})
        self.assertEqual(mistakes, 6)
        self.assertFalse(facts["solved"])

    def test_missing_guess_list_is_unsolved(self):
        for data in ({}, {"guesses": "FAITH"}, {"guesses": None}):
            self.assertEqual(self.engine.derive_facts(self.content, 0, data), (6, {"solved": False}))

    def test_aliases_share_the_engine(self):
        self.assertIsInstance(get_engine("wordle_bank"), WordleEngine)
        self.assertIsInstance(get_engine("wordle_advanced"), WordleEngine)
        with self.assertRaises(KeyError):
            get_engine("sudoku")

    def test_empty_variants_are_a_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            self.engine.select([], random.Random(0))


class ConnectionsEngineTests(SimpleTestCase):
    def setUp(self):
        self.engine = get_engine("connections")
        self.indexes, self.content = self.engine.select(sample_variants("connections"), random.Random(3))

    def test_deals_four_categories_from_the_bank(self):
        self.assertEqual(len(self.indexes), 4)
        self.assertEqual(self.indexes, sorted(self.indexes))
        self.assertEqual(len(self.content["categories"]), 4)

    def test_client_data_hides_category_names(self):
        data = self.engine.client_data(self.content, random.Random(0))
        self.assertEqual(set(data), {"words"})
        self.assertEqual(len(data["words"]), 16)
        names = [c["name"] for c in self.content["categories"]]
        self.assertFalse(any(name in data["words"] for name in names))

    def test_check_names_group_only_when_correct(self):
        group = self.content["categories"][0]
        result = self.engine.check(self.content, [w.lower() for w in group["words"]])
        self.assertEqual(result, {"correct": True, "category": group["name"], "words": group["words"]})

        mixed = group["words"][:3] + self.content["categories"][1]["words"][:1]
        self.assertEqual(self.engine.check(self.content, mixed), {"correct": False})

    def test_malformed_selection(self):
        words = self.content["categories"][0]["words"]
        with self.assertRaises(GuessValidationError):
            self.engine.check(self.content, words[:3])
        with self.assertRaises(GuessValidationError):
            self.engine.check(self.content, words[:3] + ["NOT-A-WORD"])

    def test_bank_too_small(self):
        with self.assertRaises(ConfigurationError):
            ConnectionsEngine().select(sample_variants("connections")[:3], random.Random(0))

    def test_derive_facts_counts_known_groups(self):
        names = [c["name"] for c in self.content["categories"][:2]]
        _, facts = self.engine.derive_facts(self.content, 1, {"foundGroups": names + ["Made Up"]})
        self.assertEqual(facts, {"categoriesFound": 2})

    def test_found_groups_that_are_not_a_list_count_as_none(self):
        for value in (3, "Made Up", {"name": "x"}):
            _, facts = self.engine.derive_facts(self.content, 0, {"foundGroups": value})
            self.assertEqual(facts, {"categoriesFound": 0})


class OtherEngineTests(SimpleTestCase):
    def test_who_am_i(self):
        engine = get_engine("who_am_i")
        content = engine.prepare({"answer": "John the Baptist", "hint": "Wilderness"})
        data = engine.client_data(content, random.Random(0))
        self.assertEqual(data["maskedAnswer"], "____ ___ _______")
        self.assertEqual(data["wordLength"], 16)
        self.assertEqual(engine.check(content, "h"), {"correct": True, "positions": [2, 6]})
        self.assertEqual(engine.check(content, "z"), {"correct": False, "positions": []})
        with self.assertRaises(GuessValidationError):
            engine.check(content, "ab")

    def test_verse_scramble(self):
        engine = get_engine("verse_scramble")
        content = engine.prepare({"verse": "The Lord is my shepherd", "reference": "Psalm 23:1"})
        data = engine.client_data(content, random.Random(0))
        self.assertNotIn("reference", data)
        self.assertEqual(sorted(data["scrambledWords"]), sorted(content["verse"].split()))
        self.assertNotEqual(data["scrambledWords"], content["verse"].split())
        self.assertTrue(engine.check(content, ["The", "Lord", "is", "my", "shepherd"])["correct"])
        self.assertFalse(engine.check(content, ["Lord", "The", "is", "my", "shepherd"])["correct"])
        with self.assertRaises(GuessValidationError):
            engine.check(content, ["The", "Lord", "is", "my"])

    def test_match_the_word(self):
        engine = get_engine("match_the_word")
        indexes, content = engine.select(sample_variants("match_the_word"), random.Random(0))
        self.assertEqual(len(indexes), 6)
        pair = content["pairs"][0]
        other = content["pairs"][1]
        self.assertTrue(engine.check(content, pair)["correct"])
        self.assertFalse(engine.check(content, {"word": pair["word"], "match": other["match"]})["correct"])
        _, facts = engine.derive_facts(content, 0, {"foundPairs": [pair["word"], "Nobody"]})
        self.assertEqual(facts, {"foundPairsCount": 1})

    def test_word_search_reads_both_ways(self):
        engine = get_engine("word_search")
        content = engine.prepare(sample_variants("word_search")[0])
        forward = engine.check(content, {"start": {"row": 0, "col": 0}, "end": {"row": 0, "col": 3}})
        self.assertEqual(forward["word"], "LOVE")
        self.assertEqual(len(forward["cells"]), 4)
        backward = engine.check(content, {"start": {"row": 0, "col": 3}, "end": {"row": 0, "col": 0}})
        self.assertEqual(backward["word"], "LOVE")
        self.assertEqual(
            engine.check(content, {"start": {"row": 4, "col": 0}, "end": {"row": 4, "col": 4}}),
            {"correct": False},
        )

    def test_word_search_rejects_crooked_or_outside_selections(self):
        engine = get_engine("word_search")
        content = engine.prepare(sample_variants("word_search")[0])
        with self.assertRaises(GuessValidationError):
            engine.check(content, {"start": {"row": 0, "col": 0}, "end": {"row": 1, "col": 2}})
        with self.assertRaises(GuessValidationError):
            engine.check(content, {"start": {"row": 0, "col": 0}, "end": {"row": 0, "col": 9}})

    def test_crossword_whole_grid_check(self):
        engine = get_engine("crossword")
        content = engine.prepare(sample_variants("crossword")[0])
        solution = engine.reveal(content)["solution"]
        self.assertEqual(engine.check(content, solution), {"correct": True})
        wrong = [list(row) for row in solution]
        wrong[2][4] = "E"
        self.assertEqual(engine.check(content, wrong), {"correct": False})
        mistakes, facts = engine.derive_facts(content, 0, {"grid": wrong})
        self.assertEqual(facts, {"correctCells": 10, "totalCells": 11})
        self.assertEqual(mistakes, 1)

    def test_found_lists_that_are_not_lists_count_as_empty(self):
        match = get_engine("match_the_word")
        _, content = match.select(sample_variants("match_the_word"), random.Random(0))
        self.assertEqual(match.derive_facts(content, 0, {"foundPairs": 3})[1], {"foundPairsCount": 0})
        search = get_engine("word_search")
        content = search.prepare(sample_variants("word_search")[0])
        _, facts = search.derive_facts(content, 0, {"foundWords": "LOVE"})
        self.assertEqual(facts["wordsFound"], 0)

    def test_crossword_client_data_has_no_answers(self):
        engine = get_engine("crossword")
        content = engine.prepare(sample_variants("crossword")[0])
        data = engine.client_data(content, random.Random(0))
        for clue in data["acrossClues"] + data["downClues"]:
            self.assertNotIn("answer", clue)
        self.assertEqual(data["acrossClues"][1]["length"], 5)
