import random

from django.test import SimpleTestCase

from games.puzzles import has_solved_window, move_item, shuffle_connections

CATEGORIES = [
    ["LOVE", "JOY", "PEACE", "PATIENCE"],
    ["MATTHEW", "MARK", "LUKE", "JOHN"],
    ["FROGS", "LOCUSTS", "HAIL", "BOILS"],
    ["JORDAN", "NILE", "EUPHRATES", "TIGRIS"],
]
WORDS = [w for cat in CATEGORIES for w in cat]


class ConnectionsShuffleTests(SimpleTestCase):
    def test_unshuffled_order_is_solved(self):
        self.assertTrue(has_solved_window(WORDS, CATEGORIES))

    def test_shuffle_hides_groups(self):
        rng = random.Random(2024)
        safe = 0
        for _ in range(1000):
            order = shuffle_connections(WORDS, CATEGORIES, rng=rng)
            self.assertEqual(sorted(order), sorted(WORDS))
            if not has_solved_window(order, CATEGORIES):
                safe += 1
        self.assertGreaterEqual(safe, 950)

    def test_gives_up_after_bounded_attempts(self):
        words = CATEGORIES[0]
        with self.assertLogs("games.puzzles.shuffling", level="WARNING"):
            order = shuffle_connections(words, [words], rng=random.Random(0), max_attempts=5)
        self.assertEqual(sorted(order), sorted(words))


class MoveItemTests(SimpleTestCase):
    def test_moves(self):
        items = ["a", "b", "c", "d"]
        self.assertEqual(move_item(items, 0, 2), ["b", "c", "a", "d"])
        self.assertEqual(move_item(items, 3, 0), ["d", "a", "b", "c"])
        self.assertEqual(move_item(items, 1, 1), items)
        self.assertEqual(move_item(items, 0, 99), ["b", "c", "d", "a"])
        self.assertEqual(items, ["a", "b", "c", "d"])

    def test_bad_source(self):
        with self.assertRaises(IndexError):
            move_item(["a"], 3, 0)
