"""Grid representation and helper utilities."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from ..core.constants import Direction
from ..core.exceptions import ConfigurationError, PlacementError
from ..core.models import AvailabilityMask, Cell, WordEntry
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


class WordSearchGrid:
    """Encapsulates the letter grid and the mask that constrains it."""

    def __init__(self, mask: AvailabilityMask, cells: Optional[List[List[Cell]]] = None) -> None:
        self.mask = mask
        self.bounds = mask.bounds
        if self.bounds.rows <= 0 or self.bounds.cols <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {self.bounds.rows}x{self.bounds.cols}"
            )
        if cells is None:
            cells = [[Cell() for _ in range(self.bounds.cols)] for _ in range(self.bounds.rows)]
        elif len(cells) != self.bounds.rows or any(len(row) != self.bounds.cols for row in cells):
            raise ConfigurationError("Initial grid does not match the availability mask dimensions")
        self.cells: List[List[Cell]] = cells

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self.bounds.rows

    @property
    def cols(self) -> int:
        return self.bounds.cols

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def is_available(self, row: int, col: int) -> bool:
        return self.mask.is_available(row, col)

    @property
    def available_count(self) -> int:
        return self.mask.available_count

    def footprint(self, row: int, col: int, direction: Direction, length: int) -> List[Tuple[int, int]]:
        dr, dc = direction.step
        return [(row + dr * i, col + dc * i) for i in range(length)]

    def empty_available_cells(self) -> List[Tuple[int, int]]:
        return [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if self.mask.is_available(r, c) and self.cells[r][c].is_empty()
        ]

    def word_letter_count(self) -> int:
        return sum(cell.is_word_letter for row in self.cells for cell in row)

    def iter_cells(self) -> Iterable[Tuple[int, int, Cell]]:
        for r, row in enumerate(self.cells):
            for c, cell in enumerate(row):
                yield r, c, cell

    def read(self, row: int, col: int, direction: Direction, length: int) -> str:
        """Return the letters along a footprint, ``?`` marking empty cells."""

        return "".join(
            self.cells[r][c].letter or "?" for r, c in self.footprint(row, col, direction, length)
        )

    # ------------------------------------------------------------------
    # Word placement
    # ------------------------------------------------------------------
    def place_word(self, entry: WordEntry, row: int, col: int, direction: Direction) -> int:
        """Commit ``entry`` at the given start and return the newly filled cell count."""

        text = entry.word.upper()
        if entry.id is None:
            raise PlacementError(f"Word {text!r} has no identifier")
        coords = self.footprint(row, col, direction, len(text))

        for index, (r, c) in enumerate(coords):
            if not self.bounds.contains(r, c):
                raise PlacementError("Word extends outside grid")
            if not self.mask.is_available(r, c):
                raise PlacementError("Word overlaps unavailable cell")
            existing = self.cells[r][c].letter
            if existing and existing != text[index]:
                raise PlacementError("Letter conflict")

        # All checks passed, mutate grid
        newly_filled = 0
        for index, (r, c) in enumerate(coords):
            cell = self.cells[r][c]
            if cell.letter is None:
                newly_filled += 1
            cell.letter = text[index]
            cell.is_word_letter = True
            if entry.id not in cell.word_ids:
                cell.word_ids.append(entry.id)

        entry.word = text
        entry.mark_placed(row, col, direction)
        return newly_filled

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def to_jsonable(self) -> List[List[dict]]:
        return [
            [
                {
                    "letter": cell.letter,
                    "is_word_letter": cell.is_word_letter,
                    "word_ids": list(cell.word_ids),
                }
                for cell in row
            ]
            for row in self.cells
        ]

    def letters(self) -> List[str]:
        return ["".join(cell.letter or " " for cell in row) for row in self.cells]
