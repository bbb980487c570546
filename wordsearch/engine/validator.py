"""Deterministic rule validation for generated puzzles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from ..core.exceptions import ValidationError
from ..core.models import WordEntry
from .grid import WordSearchGrid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


class PuzzleValidator:
    """Runs deterministic validation over the final grid."""

    def validate(self, grid: WordSearchGrid, words: Sequence[WordEntry]) -> ValidationResult:
        messages: List[str] = []
        try:
            self._check_mask_containment(grid)
            self._check_full_coverage(grid)
            self._check_placements(grid, words)
        except ValidationError as exc:
            messages.append(str(exc))
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=messages)
        return ValidationResult(ok=True, messages=[])

    def _check_mask_containment(self, grid: WordSearchGrid) -> None:
        for r, c, cell in grid.iter_cells():
            if grid.is_available(r, c):
                continue
            if cell.is_word_letter or cell.word_ids:
                raise ValidationError(f"Word letter in unavailable cell ({r},{c})")

    def _check_full_coverage(self, grid: WordSearchGrid) -> None:
        for r, c, cell in grid.iter_cells():
            if not cell.letter:
                raise ValidationError(f"Cell ({r},{c}) left empty")
            if len(cell.letter) != 1 or not cell.letter.isupper():
                raise ValidationError(f"Invalid letter {cell.letter!r} at ({r},{c})")

    def _check_placements(self, grid: WordSearchGrid, words: Sequence[WordEntry]) -> None:
        for entry in words:
            if not entry.placed:
                continue
            for index, (r, c) in enumerate(entry.cells):
                if not grid.is_available(r, c):
                    raise ValidationError(f"{entry.word} leaves the mask at ({r},{c})")
                cell = grid.cell(r, c)
                if cell.letter != entry.word[index]:
                    raise ValidationError(
                        f"{entry.word} expects {entry.word[index]} at ({r},{c}), found {cell.letter}"
                    )
                if entry.id not in cell.word_ids:
                    raise ValidationError(f"Cell ({r},{c}) does not record {entry.word}")
