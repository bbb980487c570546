"""Shared constants and enumerations for the word-search generator."""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


DEFAULT_ALPHABET = string.ascii_uppercase

# Red-channel values below this are treated as dark, i.e. usable by the puzzle.
DEFAULT_LUMINANCE_THRESHOLD = 128


class Direction(str, Enum):
    """Word directions supported by the grid."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL_DOWN = "diagonal-down"
    DIAGONAL_UP = "diagonal-up"

    @property
    def step(self) -> Tuple[int, int]:
        return DIRECTION_STEPS[self]


DIRECTION_STEPS = {
    Direction.HORIZONTAL: (0, 1),
    Direction.VERTICAL: (1, 0),
    Direction.DIAGONAL_DOWN: (1, 1),
    Direction.DIAGONAL_UP: (-1, 1),
}

ALL_DIRECTIONS: Tuple[Direction, ...] = tuple(Direction)


class CoverageState(str, Enum):
    """Terminal states of the coverage-driven generation loop."""

    DONE = "done"
    STALLED = "stalled"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols
