"""Data models supporting the word-search generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .constants import Bounds, Direction


ProgressCallback = Callable[[str], None]


@dataclass
class Cell:
    """Represents a grid cell with metadata."""

    letter: Optional[str] = None
    is_word_letter: bool = False
    word_ids: List[int] = field(default_factory=list)

    def is_empty(self) -> bool:
        return self.letter is None


@dataclass
class WordEntry:
    """A word of the puzzle, placed or not."""

    word: str
    hint: str = ""
    id: Optional[int] = None
    placed: bool = False
    start_row: Optional[int] = None
    start_col: Optional[int] = None
    direction: Optional[Direction] = None
    source: str = "user"

    @property
    def length(self) -> int:
        return len(self.word)

    @property
    def cells(self) -> List[Tuple[int, int]]:
        if not self.placed or self.direction is None:
            return []
        dr, dc = self.direction.step
        return [
            (self.start_row + dr * i, self.start_col + dc * i)  # type: ignore[operator]
            for i in range(self.length)
        ]

    def mark_placed(self, row: int, col: int, direction: Direction) -> None:
        self.placed = True
        self.start_row = row
        self.start_col = col
        self.direction = direction


@dataclass(frozen=True)
class CandidatePosition:
    """A legal start position for a word, scored by reused letters."""

    row: int
    col: int
    direction: Direction
    overlap: int


class AvailabilityMask:
    """Immutable boolean matrix of cells that may hold a character."""

    def __init__(self, rows: Sequence[Sequence[bool]]) -> None:
        self._rows: Tuple[Tuple[bool, ...], ...] = tuple(
            tuple(bool(value) for value in row) for row in rows
        )
        widths = {len(row) for row in self._rows}
        if len(widths) > 1:
            raise ValueError("Availability mask rows must all have the same width")
        width = widths.pop() if widths else 0
        self.bounds = Bounds(rows=len(self._rows), cols=width)
        self.available_count = sum(value for row in self._rows for value in row)

    def is_available(self, row: int, col: int) -> bool:
        return self.bounds.contains(row, col) and self._rows[row][col]

    def to_rows(self) -> List[List[bool]]:
        return [list(row) for row in self._rows]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AvailabilityMask):
            return NotImplemented
        return self._rows == other._rows

    def __repr__(self) -> str:
        return (
            f"AvailabilityMask({self.bounds.rows}x{self.bounds.cols}, "
            f"available={self.available_count})"
        )
