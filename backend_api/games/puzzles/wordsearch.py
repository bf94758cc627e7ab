from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .exceptions import GuessValidationError


@dataclass(frozen=True)
class Cell:
    row: int
    col: int

    def to_dict(self):
        return {"row": self.row, "col": self.col}


def _bounds(grid: Sequence[Sequence[str]]) -> Tuple[int, int]:
    rows = len(grid)
    cols = len(grid[0]) if rows else 0
    return rows, cols


# PUBLIC_INTERFACE
def line_cells(start: Cell, end: Cell) -> Optional[List[Cell]]:
    """Cells on the straight line from ``start`` to ``end`` inclusive.

    Horizontal, vertical and 45 degree diagonals are allowed; any other angle
    returns None.
    """
    dr = end.row - start.row
    dc = end.col - start.col
    steps = max(abs(dr), abs(dc))
    if steps == 0:
        return [start]
    if dr != 0 and dc != 0 and abs(dr) != abs(dc):
        return None
    r_step = dr // steps if dr else 0
    c_step = dc // steps if dc else 0
    return [Cell(start.row + i * r_step, start.col + i * c_step) for i in range(steps + 1)]


# PUBLIC_INTERFACE
def read_line(grid: Sequence[Sequence[str]], start: Cell, end: Cell) -> Tuple[str, List[Cell]]:
    """Read the letters under a straight selection.

    Raises GuessValidationError if the selection leaves the grid or is not a
    straight line.
    """
    rows, cols = _bounds(grid)
    for cell in (start, end):
        if not (0 <= cell.row < rows and 0 <= cell.col < cols):
            raise GuessValidationError("Selection is outside the grid.")
    cells = line_cells(start, end)
    if cells is None:
        raise GuessValidationError("Selection must be a straight line.")
    word = "".join(str(grid[c.row][c.col]).upper() for c in cells)
    return word, cells


# PUBLIC_INTERFACE
def match_word(candidate: str, words: Sequence[str]) -> Optional[str]:
    """Return the listed word matched by ``candidate`` read forward or backward."""
    listed = {w.strip().upper(): w for w in words}
    if candidate in listed:
        return listed[candidate]
    reversed_candidate = candidate[::-1]
    if reversed_candidate in listed:
        return listed[reversed_candidate]
    return None
