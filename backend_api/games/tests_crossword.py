from django.test import SimpleTestCase

from games.puzzles import CrosswordGrid, CrosswordLayout, GuessValidationError, ReviewModeError
from games.puzzles.crossword import ACROSS, DOWN
from games.seed_data import SAMPLE_PUZZLES

PUZZLE = next(s for s in SAMPLE_PUZZLES if s["game_type"] == "crossword")["variants"][0]

# L O V E #
# A # # # #
# M A N N A
# B # # # #
ANSWERS = {
    (0, 0): "L", (0, 1): "O", (0, 2): "V", (0, 3): "E",
    (1, 0): "A",
    (2, 0): "M", (2, 1): "A", (2, 2): "N", (2, 3): "N", (2, 4): "A",
    (3, 0): "B",
}


def fill(grid, entries):
    for (row, col), letter in entries.items():
        grid.active_cell = (row, col)
        grid.type_letter(letter)


class CrosswordLayoutTests(SimpleTestCase):
    def setUp(self):
        self.layout = CrosswordLayout.from_puzzle(PUZZLE)

    def test_cells(self):
        self.assertEqual(self.layout.total_cells, 11)
        self.assertTrue(self.layout.cells[1][1].is_black)
        self.assertEqual(self.layout.cells[0][0].number, 1)
        self.assertEqual(self.layout.cells[2][0].number, 2)

    def test_solution_grid(self):
        solution = self.layout.solution_grid()
        self.assertEqual(solution[2], ["M", "A", "N", "N", "A"])
        self.assertIsNone(solution[3][4])

    def test_client_view_has_lengths_only(self):
        view = self.layout.client_view()
        self.assertEqual(view["downClues"][0]["length"], 4)
        self.assertNotIn("answer", view["downClues"][0])
        # A layout rebuilt from the client view has the same topology
        rebuilt = CrosswordLayout.from_puzzle(view)
        self.assertEqual(rebuilt.total_cells, 11)


class CrosswordNavigationTests(SimpleTestCase):
    def setUp(self):
        self.layout = CrosswordLayout.from_puzzle(PUZZLE)
        self.grid = CrosswordGrid(self.layout, solution=self.layout.solution_grid())

    def test_click_same_cell_toggles_direction(self):
        self.assertTrue(self.grid.click_cell(0, 0))
        self.assertEqual(self.grid.direction, ACROSS)
        self.grid.click_cell(0, 0)
        self.assertEqual(self.grid.direction, DOWN)
        self.grid.click_cell(0, 0)
        self.assertEqual(self.grid.direction, ACROSS)

    def test_click_prefers_direction_with_a_clue(self):
        self.grid.click_cell(1, 0)
        self.assertEqual(self.grid.direction, DOWN)
        # Only an across clue passes through (0, 2)
        self.grid.click_cell(0, 2)
        self.assertEqual(self.grid.direction, ACROSS)
        self.grid.click_cell(0, 2)
        self.assertEqual(self.grid.direction, ACROSS)

    def test_black_cells_cannot_be_selected(self):
        self.assertFalse(self.grid.click_cell(1, 1))
        self.assertIsNone(self.grid.active_cell)

    def test_clue_click(self):
        self.grid.select_clue(DOWN, 1)
        self.assertEqual(self.grid.active_cell, (0, 0))
        self.assertEqual(self.grid.direction, DOWN)
        self.assertEqual(self.grid.highlighted_cells, [(0, 0), (1, 0), (2, 0), (3, 0)])

    def test_next_clue_wraps(self):
        self.grid.click_cell(0, 0)
        self.grid.next_clue()
        self.assertEqual(self.grid.active_cell, (2, 0))
        self.grid.next_clue()
        self.assertEqual(self.grid.active_cell, (0, 0))
        self.grid.handle_key("Tab", shift=True)
        self.assertEqual(self.grid.active_cell, (2, 0))

    def test_arrow_keys_stay_on_fillable_cells(self):
        self.grid.click_cell(0, 0)
        self.assertTrue(self.grid.handle_key("ArrowDown"))
        self.assertEqual(self.grid.active_cell, (1, 0))
        self.assertFalse(self.grid.handle_key("ArrowRight"))
        self.assertEqual(self.grid.active_cell, (1, 0))
        self.grid.click_cell(0, 3)
        self.assertFalse(self.grid.move("ArrowRight"))


class CrosswordTypingTests(SimpleTestCase):
    def setUp(self):
        self.layout = CrosswordLayout.from_puzzle(PUZZLE)
        self.completions = []
        self.grid = CrosswordGrid(
            self.layout,
            solution=self.layout.solution_grid(),
            on_complete=lambda: self.completions.append(True),
        )

    def test_typing_advances_without_wrapping(self):
        self.grid.click_cell(0, 0)
        for letter in "love":
            self.grid.type_letter(letter)
        self.assertEqual(self.grid.grid[0][:4], ["L", "O", "V", "E"])
        self.assertEqual(self.grid.active_cell, (0, 3))

    def test_typing_needs_a_single_letter(self):
        self.grid.click_cell(0, 0)
        with self.assertRaises(GuessValidationError):
            self.grid.type_letter("7")

    def test_backspace(self):
        self.grid.click_cell(0, 0)
        for letter in "LOVE":
            self.grid.type_letter(letter)
        self.grid.backspace()
        self.assertIsNone(self.grid.grid[0][3])
        self.assertEqual(self.grid.active_cell, (0, 3))
        self.grid.backspace()
        self.assertIsNone(self.grid.grid[0][2])
        self.assertEqual(self.grid.active_cell, (0, 2))

    def test_completion_fires_exactly_once(self):
        fill(self.grid, ANSWERS)
        self.assertTrue(self.grid.completed)
        self.assertEqual(self.completions, [True])
        self.grid.click_cell(0, 0)
        self.assertFalse(self.grid.type_letter("X"))
        self.assertEqual(self.grid.grid[0][0], "L")
        self.assertEqual(self.completions, [True])

    def test_one_wrong_cell_does_not_complete(self):
        entries = dict(ANSWERS)
        entries[(2, 4)] = "E"
        fill(self.grid, entries)
        self.assertTrue(self.grid.is_filled())
        self.assertFalse(self.grid.completed)
        self.assertEqual(self.completions, [])
        self.assertEqual(self.grid.incorrect_cells(), [(2, 4)])

    def test_remote_oracle_only_called_when_full(self):
        calls = []

        def oracle(grid):
            calls.append(grid)
            return True

        grid = CrosswordGrid(self.layout, completion_check=oracle)
        partial = dict(list(ANSWERS.items())[:-1])
        fill(grid, partial)
        self.assertEqual(calls, [])
        fill(grid, {(3, 0): "B"})
        self.assertEqual(len(calls), 1)
        self.assertTrue(grid.completed)

    def test_resumed_correct_grid_is_completed_silently(self):
        solved = self.layout.solution_grid()
        grid = CrosswordGrid(
            self.layout,
            solution=solved,
            initial_grid=solved,
            on_complete=lambda: self.completions.append(True),
        )
        self.assertTrue(grid.completed)
        self.assertEqual(self.completions, [])
        grid.active_cell = (0, 0)
        self.assertFalse(grid.type_letter("X"))
        self.assertEqual(self.completions, [])


class CrosswordReviewTests(SimpleTestCase):
    def setUp(self):
        layout = CrosswordLayout.from_puzzle(PUZZLE)
        submitted = layout.empty_grid()
        for (row, col), letter in ANSWERS.items():
            submitted[row][col] = letter
        submitted[0][1] = "A"
        self.grid = CrosswordGrid(layout, solution=layout.solution_grid(), initial_grid=submitted, review=True)

    def test_mutations_rejected(self):
        self.grid.active_cell = (0, 0)
        with self.assertRaises(ReviewModeError):
            self.grid.type_letter("L")
        with self.assertRaises(ReviewModeError):
            self.grid.backspace()
        self.assertFalse(self.grid.click_cell(2, 0))
        self.assertFalse(self.grid.next_clue())

    def test_incorrect_overlay(self):
        self.assertEqual(self.grid.incorrect_cells(), [(0, 1)])
        self.assertFalse(self.grid.completed)
