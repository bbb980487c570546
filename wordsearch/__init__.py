"""Word-search generator that lays puzzles over image-derived masks.

This package exposes the public API surface via:

- ``wordsearch.engine.generator.PuzzleGenerator``: orchestrates placement,
  coverage top-up and random fill.
- ``wordsearch.io.mask`` helpers: turn a thresholded image into the
  availability mask and the initial grid.
- ``wordsearch.data.supplier`` suppliers: sources of additional words.
"""

from .engine.generator import GeneratorConfig, PaperConfig, PuzzleGenerator, PuzzleResult, PuzzleSession
from .io.mask import grid_from_mask, load_mask

__all__ = [
    "GeneratorConfig",
    "PaperConfig",
    "PuzzleGenerator",
    "PuzzleResult",
    "PuzzleSession",
    "grid_from_mask",
    "load_mask",
]

__version__ = "0.1.0"
