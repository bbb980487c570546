"""Pretty-print helpers for word-search grids."""

from __future__ import annotations

import sys
from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine.generator import PuzzleResult
    from ..engine.grid import WordSearchGrid


def cell_symbol(cell, reveal: bool = False) -> str:
    if cell.letter is None:
        return "."
    if reveal and not cell.is_word_letter:
        return cell.letter.lower()
    return cell.letter


def format_grid(grid: WordSearchGrid, *, reveal: bool = False) -> str:
    """Render the grid one row per line.

    With ``reveal`` the noise letters are lowercased so the placed words stand
    out against the image silhouette.
    """

    return "\n".join(
        " ".join(cell_symbol(grid.cell(r, c), reveal) for c in range(grid.cols))
        for r in range(grid.rows)
    )


def pretty_print_grid(grid: WordSearchGrid, *, label: str | None = None, reveal: bool = False, stream=None) -> None:
    """Print the puzzle grid in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_grid(grid, reveal=reveal), file=stream)


def print_puzzle_stats(result: PuzzleResult, *, stream=None) -> None:
    """Print the revealed grid followed by placement statistics."""

    stream = stream or sys.stdout
    print(format_grid(result.grid, reveal=True), file=stream)

    grid = result.grid
    total_cells = grid.rows * grid.cols
    available = grid.available_count
    word_letters = grid.word_letter_count()

    print(file=stream)
    print("--- Grid ---", file=stream)
    print(f"  Size:          {grid.rows} x {grid.cols} ({total_cells} cells)", file=stream)
    print(f"  Available:     {available} ({available / total_cells * 100:.0f}%)", file=stream)
    if available:
        print(f"  Word letters:  {word_letters} ({word_letters / available * 100:.0f}% of available)", file=stream)

    placed = result.placed_words
    lengths = Counter(entry.length for entry in placed)
    print(file=stream)
    print("--- Words ---", file=stream)
    print(f"  Placed:        {len(placed)}/{len(result.words)}", file=stream)
    print(f"  Loop:          {result.coverage.state.value} after {result.coverage.iterations} iterations", file=stream)
    if lengths:
        dist_parts = [f"{length}:{count}" for length, count in sorted(lengths.items())]
        print(f"  Distribution:  {' '.join(dist_parts)}", file=stream)
    unplaced = [entry.word for entry in result.words if not entry.placed]
    if unplaced:
        print(f"  Unplaced:      {', '.join(unplaced)}", file=stream)

    if result.validation_messages:
        print(file=stream)
        print("--- Validation ---", file=stream)
        for msg in result.validation_messages:
            print(f"  {msg}", file=stream)

    if result.seed is not None:
        print(file=stream)
        print(f"Seed: {result.seed}", file=stream)
