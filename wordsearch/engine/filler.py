"""Random letter fill for available cells left empty after placement."""

from __future__ import annotations

import random
from typing import Optional

from ..core.constants import DEFAULT_ALPHABET
from ..core.models import ProgressCallback
from ..utils.logger import get_logger
from .grid import WordSearchGrid


LOGGER = get_logger(__name__)


class SpaceFiller:
    """Assigns one uniform-random letter to every empty available cell."""

    def __init__(
        self,
        rng: random.Random,
        alphabet: str = DEFAULT_ALPHABET,
        progress: Optional[ProgressCallback] = None,
        progress_interval: int = 50,
    ) -> None:
        if not alphabet:
            raise ValueError("Fill alphabet must not be empty")
        self.rng = rng
        self.alphabet = alphabet.upper()
        self.progress = progress
        self.progress_interval = max(1, progress_interval)

    def fill(self, grid: WordSearchGrid) -> int:
        """Fill the grid in place and return the number of cells written."""

        targets = grid.empty_available_cells()
        total = len(targets)
        LOGGER.info("Filling %d empty available cells with random letters", total)

        for count, (row, col) in enumerate(targets, start=1):
            cell = grid.cell(row, col)
            cell.letter = self.rng.choice(self.alphabet)
            cell.is_word_letter = False
            if self.progress is not None and (count % self.progress_interval == 0 or count == total):
                self.progress(f"Filling spaces... ({count}/{total})")
        return total
