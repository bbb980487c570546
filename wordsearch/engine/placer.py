"""Batch placement of known words."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from ..core.models import CandidatePosition, ProgressCallback, WordEntry
from ..utils.logger import get_logger
from .grid import WordSearchGrid
from .search import choose_position, find_all_positions


LOGGER = get_logger(__name__)


class WordPlacer:
    """Places words longest-first, each at a best-overlap legal position."""

    def __init__(
        self,
        grid: WordSearchGrid,
        rng: random.Random,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.grid = grid
        self.rng = rng
        self.progress = progress

    def try_place(self, entry: WordEntry) -> Optional[CandidatePosition]:
        """Place a single word in any direction; return the chosen position.

        The grid is left untouched when no useful position exists.
        """

        candidates = find_all_positions(entry.word, self.grid)
        position = choose_position(candidates, entry.length, self.rng)
        if position is None:
            LOGGER.debug("No position for %s (%d legal, all full overlap)", entry.word, len(candidates))
            return None
        self.grid.place_word(entry, position.row, position.col, position.direction)
        LOGGER.debug(
            "Placed %s at (%s,%s) %s with %s overlaps",
            entry.word,
            position.row,
            position.col,
            position.direction.value,
            position.overlap,
        )
        return position

    def place(self, words: Sequence[WordEntry]) -> List[WordEntry]:
        """Place every unplaced entry of ``words``; return them in placement order.

        Entries that cannot be placed keep ``placed=False`` and are not retried.
        """

        total = len(words)
        placed_count = sum(1 for entry in words if entry.placed)
        pending = sorted((entry for entry in words if not entry.placed), key=lambda e: e.length, reverse=True)
        LOGGER.info("Placing %d unplaced words out of %d", len(pending), total)

        newly_placed: List[WordEntry] = []
        for entry in pending:
            if self.try_place(entry) is None:
                LOGGER.info("Failed to place word: %s", entry.word)
                continue
            newly_placed.append(entry)
            placed_count += 1
            self._report(f"Placing words... ({placed_count}/{total})")

        LOGGER.info("Placed %d new words, total placed: %d/%d", len(newly_placed), placed_count, total)
        return newly_placed

    def _report(self, label: str) -> None:
        if self.progress is not None:
            self.progress(label)
