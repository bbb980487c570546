"""Exhaustive search for legal word positions on a masked grid.

Every ``(row, col)`` of the grid is tried as a start, not only cells next to
existing letters, so sparse or oddly shaped masks are searched as thoroughly as
dense ones. A position is legal when each cell of the footprint is inside the
grid, available in the mask, and either empty or already holding the letter
the word needs there. The overlap of a position is the number of such
pre-matching cells; higher overlap means the word crosses more existing words.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence

from ..core.constants import ALL_DIRECTIONS, Direction
from ..core.models import CandidatePosition
from .grid import WordSearchGrid


def overlap_at(word: str, row: int, col: int, direction: Direction, grid: WordSearchGrid) -> Optional[int]:
    """Return the overlap of ``word`` at a start, or ``None`` when illegal."""

    dr, dc = direction.step
    overlap = 0
    for index, letter in enumerate(word):
        r, c = row + dr * index, col + dc * index
        if not grid.is_available(r, c):
            return None
        existing = grid.cells[r][c].letter
        if existing is None:
            continue
        if existing != letter:
            return None
        overlap += 1
    return overlap


def find_valid_positions(word: str, direction: Direction, grid: WordSearchGrid) -> List[CandidatePosition]:
    """Enumerate every legal start of ``word`` along ``direction``.

    Results are ordered by descending overlap; the scan order (row-major) is
    kept among equal overlaps.
    """

    text = word.upper()
    if not text:
        return []
    positions: List[CandidatePosition] = []
    for row in range(grid.rows):
        for col in range(grid.cols):
            overlap = overlap_at(text, row, col, direction, grid)
            if overlap is not None:
                positions.append(CandidatePosition(row, col, direction, overlap))
    positions.sort(key=lambda pos: pos.overlap, reverse=True)
    return positions


def find_all_positions(
    word: str,
    grid: WordSearchGrid,
    directions: Iterable[Direction] = ALL_DIRECTIONS,
) -> List[CandidatePosition]:
    """Merge candidates across directions and re-rank them by overlap."""

    merged: List[CandidatePosition] = []
    for direction in directions:
        merged.extend(find_valid_positions(word, direction, grid))
    merged.sort(key=lambda pos: pos.overlap, reverse=True)
    return merged


def best_tier(candidates: Sequence[CandidatePosition], word_length: int) -> List[CandidatePosition]:
    """Return the highest-overlap candidates that would still write a new letter."""

    useful = [pos for pos in candidates if pos.overlap < word_length]
    if not useful:
        return []
    top = max(pos.overlap for pos in useful)
    return [pos for pos in useful if pos.overlap == top]


def choose_position(
    candidates: Sequence[CandidatePosition],
    word_length: int,
    rng: random.Random,
) -> Optional[CandidatePosition]:
    """Pick uniformly at random among the best-scoring useful candidates.

    A candidate whose overlap equals the word length adds nothing to the grid
    (the word is already spelled there), so it is never selected.
    """

    tier = best_tier(candidates, word_length)
    if not tier:
        return None
    return rng.choice(tier)


__all__ = [
    "best_tier",
    "choose_position",
    "find_all_positions",
    "find_valid_positions",
    "overlap_at",
]
