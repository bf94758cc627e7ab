"""Crossword layout, solution checks and the interactive grid.

``CrosswordLayout`` is built once per puzzle from its clue lists and works
with or without answers: the authoritative side builds it from the full
variant, the client from the answer-free view that carries ``length``.

``CrosswordGrid`` is the interactive state machine. It knows the active cell
and direction, advances the cursor as letters are typed and reports
completion exactly once. It never needs the answers itself: completion is
decided by a ``completion_check`` callable, either a local comparison with a
known solution (preview and review) or a call to the authoritative verifier.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .exceptions import ConfigurationError, GuessValidationError, ReviewModeError

ACROSS = "across"
DOWN = "down"
DIRECTIONS = (ACROSS, DOWN)

Grid = List[List[Optional[str]]]
Position = Tuple[int, int]

_ARROWS = {
    "ArrowUp": (-1, 0),
    "ArrowDown": (1, 0),
    "ArrowLeft": (0, -1),
    "ArrowRight": (0, 1),
    "up": (-1, 0),
    "down": (1, 0),
    "left": (0, -1),
    "right": (0, 1),
}


def _other(direction: str) -> str:
    return DOWN if direction == ACROSS else ACROSS


@dataclass(frozen=True)
class Clue:
    number: int
    clue: str
    row: int
    col: int
    direction: str
    length: int
    answer: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], direction: str) -> "Clue":
        try:
            answer = data.get("answer")
            answer = str(answer).strip().upper() if answer else None
            length = len(answer) if answer else int(data["length"])
            return cls(
                number=int(data["number"]),
                clue=str(data.get("clue", "")),
                row=int(data["row"]),
                col=int(data["col"]),
                direction=direction,
                length=length,
                answer=answer,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Malformed {direction} clue: {exc}") from exc

    def cells(self) -> List[Position]:
        if self.direction == ACROSS:
            return [(self.row, self.col + i) for i in range(self.length)]
        return [(self.row + i, self.col) for i in range(self.length)]

    def to_client_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "clue": self.clue,
            "row": self.row,
            "col": self.col,
            "direction": self.direction,
            "length": self.length,
        }


@dataclass
class CellInfo:
    row: int
    col: int
    is_black: bool = True
    number: Optional[int] = None
    across_clue: Optional[int] = None
    down_clue: Optional[int] = None

    def clue_number(self, direction: str) -> Optional[int]:
        return self.across_clue if direction == ACROSS else self.down_clue


# PUBLIC_INTERFACE
class CrosswordLayout:
    """Cell metadata and clue lookup for one puzzle."""

    def __init__(self, rows: int, cols: int, across: Sequence[Clue], down: Sequence[Clue]):
        if rows <= 0 or cols <= 0:
            raise ConfigurationError("Crossword must have at least one row and column.")
        self.rows = rows
        self.cols = cols
        self.clue_lists: Dict[str, List[Clue]] = {ACROSS: list(across), DOWN: list(down)}
        self.clues: Dict[str, Dict[int, Clue]] = {
            d: {c.number: c for c in self.clue_lists[d]} for d in DIRECTIONS
        }
        self.cells: List[List[CellInfo]] = [
            [CellInfo(r, c) for c in range(cols)] for r in range(rows)
        ]
        for direction in DIRECTIONS:
            for clue in self.clue_lists[direction]:
                self._place(clue)

    @classmethod
    def from_puzzle(cls, data: Mapping[str, Any]) -> "CrosswordLayout":
        try:
            rows = int(data["rows"])
            cols = int(data["cols"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Crossword needs integer rows and cols: {exc}") from exc
        across = [Clue.from_dict(c, ACROSS) for c in data.get("acrossClues") or []]
        down = [Clue.from_dict(c, DOWN) for c in data.get("downClues") or []]
        if not across and not down:
            raise ConfigurationError("Crossword has no clues.")
        return cls(rows, cols, across, down)

    def _place(self, clue: Clue) -> None:
        if clue.length <= 0:
            raise ConfigurationError(f"Clue {clue.number} {clue.direction} is empty.")
        for r, c in clue.cells():
            if not self.in_bounds(r, c):
                raise ConfigurationError(
                    f"Clue {clue.number} {clue.direction} runs outside the {self.rows}x{self.cols} grid."
                )
            cell = self.cells[r][c]
            cell.is_black = False
            if clue.direction == ACROSS:
                cell.across_clue = clue.number
            else:
                cell.down_clue = clue.number
        start = self.cells[clue.row][clue.col]
        start.number = start.number or clue.number

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_fillable(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and not self.cells[row][col].is_black

    def fillable_cells(self) -> Iterator[Position]:
        for r in range(self.rows):
            for c in range(self.cols):
                if not self.cells[r][c].is_black:
                    yield r, c

    @property
    def total_cells(self) -> int:
        return sum(1 for _ in self.fillable_cells())

    def clue_at(self, row: int, col: int, direction: str) -> Optional[Clue]:
        if not self.is_fillable(row, col):
            return None
        number = self.cells[row][col].clue_number(direction)
        if number is None:
            return None
        return self.clues[direction].get(number)

    def empty_grid(self) -> Grid:
        return [[None] * self.cols for _ in range(self.rows)]

    def solution_grid(self) -> Grid:
        """Letters keyed by position, laid out from every clue's answer."""
        solution = self.empty_grid()
        for direction in DIRECTIONS:
            for clue in self.clue_lists[direction]:
                if not clue.answer:
                    raise ConfigurationError("Crossword answers are not available.")
                for (r, c), letter in zip(clue.cells(), clue.answer):
                    if solution[r][c] not in (None, letter):
                        raise ConfigurationError(
                            f"Clue {clue.number} {clue.direction} disagrees with a crossing answer at ({r}, {c})."
                        )
                    solution[r][c] = letter
        return solution

    def client_view(self) -> Dict[str, Any]:
        """Grid topology and clues without any answer letters."""
        return {
            "rows": self.rows,
            "cols": self.cols,
            "acrossClues": [c.to_client_dict() for c in self.clue_lists[ACROSS]],
            "downClues": [c.to_client_dict() for c in self.clue_lists[DOWN]],
        }


def _normalize_entry(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().upper()
    return text[-1:] or None


# PUBLIC_INTERFACE
def normalize_grid(layout: CrosswordLayout, grid: Any) -> Grid:
    """Validate a submitted grid's shape and normalize its entries.

    Black cells are always blanked; empty strings become None.
    """
    if not isinstance(grid, (list, tuple)) or len(grid) != layout.rows:
        raise GuessValidationError(f"Grid must have {layout.rows} rows.")
    result = layout.empty_grid()
    for r, row in enumerate(grid):
        if not isinstance(row, (list, tuple)) or len(row) != layout.cols:
            raise GuessValidationError(f"Grid rows must have {layout.cols} cells.")
        for c, value in enumerate(row):
            if layout.is_fillable(r, c):
                result[r][c] = _normalize_entry(value)
    return result


# PUBLIC_INTERFACE
def count_correct_cells(layout: CrosswordLayout, solution: Grid, grid: Grid) -> int:
    return sum(1 for r, c in layout.fillable_cells() if grid[r][c] and grid[r][c] == solution[r][c])


# PUBLIC_INTERFACE
def grid_matches(layout: CrosswordLayout, solution: Grid, grid: Grid) -> bool:
    """True when every non-black cell holds the solution letter."""
    return all(grid[r][c] == solution[r][c] for r, c in layout.fillable_cells())


# PUBLIC_INTERFACE
def incorrect_cells(layout: CrosswordLayout, solution: Grid, grid: Grid) -> List[Position]:
    """Filled cells whose letter differs from the solution."""
    return [
        (r, c)
        for r, c in layout.fillable_cells()
        if grid[r][c] and grid[r][c] != solution[r][c]
    ]


# PUBLIC_INTERFACE
class CrosswordGrid:
    """Interactive crossword state: entries, cursor and direction.

    Parameters:
        layout: the puzzle's CrosswordLayout.
        completion_check: called with the grid once every fillable cell is
            filled; returns True when the grid is correct. Defaults to a
            local comparison when ``solution`` is given.
        solution: known solution grid (preview/review only).
        initial_grid: resumed entries.
        review: read-only mode; mutations raise ReviewModeError.
        on_complete: fired exactly once when the grid becomes correct through
            input. A resumed grid that is already correct starts out
            ``completed`` without firing it.
        on_cell_change: fired as ``(row, col, letter_or_None)`` after each write.
    """

    def __init__(
        self,
        layout: CrosswordLayout,
        completion_check: Optional[Callable[[Grid], bool]] = None,
        solution: Optional[Grid] = None,
        initial_grid: Optional[Sequence[Sequence[Optional[str]]]] = None,
        review: bool = False,
        on_complete: Optional[Callable[[], None]] = None,
        on_cell_change: Optional[Callable[[int, int, Optional[str]], None]] = None,
    ):
        self.layout = layout
        self.solution = solution
        if completion_check is None and solution is not None:
            completion_check = lambda grid: grid_matches(layout, solution, grid)  # noqa: E731
        self._completion_check = completion_check
        self.review = review
        self.on_complete = on_complete
        self.on_cell_change = on_cell_change
        self.grid: Grid = normalize_grid(layout, initial_grid) if initial_grid else layout.empty_grid()
        self.active_cell: Optional[Position] = None
        self.direction: str = ACROSS
        self.completed = False
        self._check_completion(notify=False)

    # -------------------------
    # Derived state
    # -------------------------

    @property
    def active_clue(self) -> Optional[Clue]:
        if self.active_cell is None:
            return None
        return self.layout.clue_at(*self.active_cell, self.direction)

    @property
    def highlighted_cells(self) -> List[Position]:
        """Cells of the active word."""
        clue = self.active_clue
        return clue.cells() if clue else []

    def is_filled(self) -> bool:
        return all(self.grid[r][c] for r, c in self.layout.fillable_cells())

    def incorrect_cells(self) -> List[Position]:
        if self.solution is None:
            return []
        return incorrect_cells(self.layout, self.solution, self.grid)

    # -------------------------
    # Navigation
    # -------------------------

    def _activate(self, row: int, col: int) -> None:
        self.active_cell = (row, col)
        cell = self.layout.cells[row][col]
        if cell.clue_number(self.direction) is None and cell.clue_number(_other(self.direction)) is not None:
            self.direction = _other(self.direction)

    def click_cell(self, row: int, col: int) -> bool:
        """Select a cell; clicking the active cell toggles direction when possible."""
        if self.review or not self.layout.is_fillable(row, col):
            return False
        cell = self.layout.cells[row][col]
        if self.active_cell == (row, col):
            flipped = _other(self.direction)
            if cell.clue_number(flipped) is not None:
                self.direction = flipped
        self._activate(row, col)
        return True

    def click_clue(self, clue: Clue) -> bool:
        if self.review:
            return False
        self.direction = clue.direction
        self._activate(clue.row, clue.col)
        return True

    def select_clue(self, direction: str, number: int) -> bool:
        clue = self.layout.clues.get(direction, {}).get(number)
        if clue is None:
            return False
        return self.click_clue(clue)

    def next_clue(self, reverse: bool = False) -> bool:
        """Jump to the next clue in the current direction's list, wrapping around."""
        if self.review:
            return False
        clue_list = self.layout.clue_lists[self.direction]
        if not clue_list:
            return False
        current = self.active_clue
        numbers = [c.number for c in clue_list]
        index = numbers.index(current.number) if current and current.number in numbers else -1
        step = -1 if reverse else 1
        return self.click_clue(clue_list[(index + step) % len(clue_list)])

    def move(self, key: str) -> bool:
        """Arrow-key move by one cell, only onto an in-bounds fillable cell."""
        if self.review or self.active_cell is None or key not in _ARROWS:
            return False
        dr, dc = _ARROWS[key]
        row, col = self.active_cell[0] + dr, self.active_cell[1] + dc
        if not self.layout.is_fillable(row, col):
            return False
        self._activate(row, col)
        return True

    # -------------------------
    # Mutation
    # -------------------------

    def _ensure_editable(self) -> bool:
        if self.review:
            raise ReviewModeError("Grid is read-only in review mode.")
        return self.active_cell is not None and not self.completed

    def _write(self, row: int, col: int, value: Optional[str]) -> None:
        self.grid[row][col] = value
        if self.on_cell_change:
            self.on_cell_change(row, col, value)
        self._check_completion()

    def _step(self, offset: int) -> Optional[Position]:
        cells = self.highlighted_cells
        if self.active_cell not in cells:
            return None
        index = cells.index(self.active_cell) + offset
        if 0 <= index < len(cells):
            return cells[index]
        return None

    def type_letter(self, letter: str) -> bool:
        """Write a letter into the active cell and advance within the active word."""
        if not self._ensure_editable():
            return False
        value = (letter or "").strip().upper()
        if len(value) != 1 or not value.isalpha():
            raise GuessValidationError("Only single letters can be entered.")
        row, col = self.active_cell
        next_cell = self._step(1)
        self._write(row, col, value)
        if next_cell is not None:
            self.active_cell = next_cell
        return True

    def backspace(self) -> bool:
        """Clear the active cell, or step back and clear when it is already empty."""
        if not self._ensure_editable():
            return False
        row, col = self.active_cell
        if self.grid[row][col]:
            self._write(row, col, None)
            return True
        previous = self._step(-1)
        if previous is None:
            return False
        self.active_cell = previous
        self._write(previous[0], previous[1], None)
        return True

    def handle_key(self, key: str, shift: bool = False) -> bool:
        """Dispatch a keyboard event the way the grid widget receives it."""
        if key in _ARROWS:
            return self.move(key)
        if key in ("Enter", "Tab"):
            return self.next_clue(reverse=shift)
        if key == "Backspace":
            return self.backspace()
        if len(key) == 1 and key.isalpha():
            return self.type_letter(key)
        return False

    # -------------------------
    # Completion
    # -------------------------

    def _check_completion(self, notify: bool = True) -> None:
        if self.completed or self.review or self._completion_check is None:
            return
        if not self.is_filled():
            return
        if self._completion_check([list(row) for row in self.grid]):
            self.completed = True
            if notify and self.on_complete:
                self.on_complete()

    def snapshot(self) -> Dict[str, Any]:
        """Progress-safe state: entries and cursor only."""
        return {
            "grid": [list(row) for row in self.grid],
            "activeCell": list(self.active_cell) if self.active_cell else None,
            "direction": self.direction,
        }
