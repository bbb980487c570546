"""Main word-search generator orchestration.

Phases run strictly one after another, each the only writer of the grid:
  1. Place the pre-supplied words, longest first.
  2. Top up coverage with batches requested from the word supplier.
  3. Fill every still-empty available cell with a random letter.
  4. Validate the finished puzzle.
"""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..core.constants import DEFAULT_ALPHABET, DEFAULT_LUMINANCE_THRESHOLD, CoverageState
from ..core.exceptions import (ConfigurationError, GenerationCancelled, SupplierFailure,
                               ValidationError)
from ..core.models import ProgressCallback, WordEntry
from ..data.normalization import clean_word
from ..data.supplier import SuppliedWord, WordSupplier
from ..io.hints import HintWriter, TemplateHintWriter, attach_hints
from ..io.mask import ImageSource, load_mask
from ..utils.logger import get_logger
from .filler import SpaceFiller
from .grid import WordSearchGrid
from .placer import WordPlacer
from .validator import PuzzleValidator


LOGGER = get_logger(__name__)

WordInput = Union[str, SuppliedWord, WordEntry]


@dataclass
class PaperConfig:
    """Paper size and character density that determine the grid dimensions."""

    paper_width_mm: float = 210.0
    paper_height_mm: float = 297.0
    cell_size_mm: float = 7.0

    def grid_dimensions(self) -> Tuple[int, int]:
        """Return ``(width, height)`` in cells."""

        if self.cell_size_mm <= 0:
            raise ConfigurationError(f"Cell size must be positive, got {self.cell_size_mm}")
        width = int(self.paper_width_mm // self.cell_size_mm)
        height = int(self.paper_height_mm // self.cell_size_mm)
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f"Grid dimensions not set: paper {self.paper_width_mm}x{self.paper_height_mm}mm "
                f"at {self.cell_size_mm}mm per character gives {width}x{height}"
            )
        return width, height


@dataclass
class GeneratorConfig:
    coverage_fraction: float = 0.85
    max_iterations: int = 50
    batch_size: int = 5
    fill_alphabet: str = DEFAULT_ALPHABET
    min_word_length: int = 3
    seed: Optional[int] = None
    fill_progress_interval: int = 50
    threshold: int = DEFAULT_LUMINANCE_THRESHOLD

    def validate(self) -> None:
        if not 0.0 <= self.coverage_fraction <= 1.0:
            raise ConfigurationError("coverage_fraction must be between 0 and 1")
        if self.max_iterations < 0:
            raise ConfigurationError("max_iterations must not be negative")
        if self.batch_size <= 0:
            raise ConfigurationError("batch_size must be positive")
        if not self.fill_alphabet.isascii() or not self.fill_alphabet.isalpha():
            raise ConfigurationError("fill_alphabet must be a non-empty string of letters")
        if self.min_word_length < 1:
            raise ConfigurationError("min_word_length must be at least 1")


class CancellationToken:
    """Set by whoever owns the session to abandon an in-flight generation."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise GenerationCancelled("Generation session was reset")


class PuzzleSession:
    """Owns the lifecycle of consecutive generations.

    Starting a generation hands out a fresh token; :meth:`reset` cancels it so
    that a supplier call still in flight cannot touch the discarded grid.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._token: Optional[CancellationToken] = None

    def start(self) -> CancellationToken:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._token = CancellationToken()
            return self._token

    def reset(self) -> None:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._token = None

    @property
    def active(self) -> bool:
        with self._lock:
            return self._token is not None and not self._token.cancelled


@dataclass
class CoverageReport:
    state: CoverageState
    iterations: int
    placed_characters: int
    target: float
    available_cells: int
    supplier_calls: int = 0
    supplier_failures: int = 0

    @property
    def coverage(self) -> float:
        return self.placed_characters / self.available_cells if self.available_cells else 0.0


@dataclass
class PuzzleResult:
    """Finished puzzle.

    ``words`` lists the pre-supplied words placed in the first pass (longest
    first), then the pre-supplied words that found no position, then the
    supplier words in the order the coverage loop placed them.
    """

    grid: WordSearchGrid
    words: List[WordEntry]
    coverage: CoverageReport
    validation_messages: List[str] = field(default_factory=list)
    seed: Optional[int] = None

    @property
    def placed_words(self) -> List[WordEntry]:
        return [entry for entry in self.words if entry.placed]

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "width": self.grid.cols,
            "height": self.grid.rows,
            "grid": self.grid.to_jsonable(),
            "mask": self.grid.mask.to_rows(),
            "words": [
                {
                    "id": entry.id,
                    "word": entry.word,
                    "hint": entry.hint,
                    "placed": entry.placed,
                    "start": [entry.start_row, entry.start_col] if entry.placed else None,
                    "direction": entry.direction.value if entry.direction else None,
                    "source": entry.source,
                }
                for entry in self.words
            ],
            "coverage": {
                "state": self.coverage.state.value,
                "iterations": self.coverage.iterations,
                "placed_characters": self.coverage.placed_characters,
                "available_cells": self.coverage.available_cells,
                "ratio": round(self.coverage.coverage, 4),
            },
            "validation": self.validation_messages,
            "seed": self.seed,
        }


class CoverageDrivenGenerator:
    """Requests supplier batches and places them until coverage is reached.

    The loop is bounded by ``max_iterations``, never removes a placed word,
    and stops early once a whole batch fails to place.
    """

    def __init__(
        self,
        placer: WordPlacer,
        supplier: Optional[WordSupplier],
        config: GeneratorConfig,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.placer = placer
        self.grid = placer.grid
        self.supplier = supplier
        self.config = config
        self.token = token or CancellationToken()
        self.progress = progress

    def run(self, words: List[WordEntry]) -> CoverageReport:
        """Extend ``words`` in place with newly placed supplier words."""

        available = self.grid.available_count
        target = self.config.coverage_fraction * available
        placed_chars = sum(entry.length for entry in words if entry.placed)
        known = {entry.word for entry in words}
        next_id = max((entry.id for entry in words if entry.id is not None), default=-1) + 1
        calls = failures = 0
        iteration = 0

        LOGGER.info("Starting iterative placement: %d/%d characters", placed_chars, available)
        while True:
            if placed_chars >= target:
                state = CoverageState.DONE
                break
            if iteration >= self.config.max_iterations:
                state = CoverageState.EXHAUSTED
                break
            if self.supplier is None:
                state = CoverageState.STALLED
                break

            label = f"Iteration {iteration + 1}"
            LOGGER.info("%s: %d spaces remaining", label, available - placed_chars)
            self._report(f"{label}: Generating {self.config.batch_size} words...")
            batch = self._request_batch(self.supplier)
            calls += 1
            if batch is None:
                failures += 1
                batch = []
            self.token.raise_if_cancelled()

            placed_this_iteration = 0
            for supplied in batch:
                text = clean_word(supplied.word)
                if len(text) < self.config.min_word_length or text in known:
                    continue
                entry = WordEntry(word=text, hint=supplied.hint, id=next_id, source=supplied.source)
                if self.placer.try_place(entry) is None:
                    continue
                next_id += 1
                known.add(text)
                words.append(entry)
                placed_this_iteration += 1
                placed_chars += entry.length

            LOGGER.info("%s complete: placed %d words", label, placed_this_iteration)
            if placed_this_iteration == 0:
                LOGGER.info("No words placed this iteration, stopping")
                state = CoverageState.STALLED
                break
            self._report(
                f"{label}: Placed {placed_this_iteration} words ({placed_chars}/{available})"
            )
            iteration += 1

        report = CoverageReport(
            state=state,
            iterations=iteration,
            placed_characters=placed_chars,
            target=target,
            available_cells=available,
            supplier_calls=calls,
            supplier_failures=failures,
        )
        LOGGER.info(
            "Coverage loop %s after %d iterations: %d/%d characters (%.1f%%)",
            state.value,
            iteration,
            placed_chars,
            available,
            report.coverage * 100,
        )
        return report

    def _request_batch(self, supplier: WordSupplier) -> Optional[List[SuppliedWord]]:
        try:
            return list(supplier.generate(self.config.batch_size))
        except Exception as exc:
            LOGGER.warning("Word supplier failed, treating batch as empty: %s", exc)
            return None

    def _report(self, label: str) -> None:
        if self.progress is not None:
            self.progress(label)


class PuzzleGenerator:
    """High-level orchestrator: placement, coverage top-up, fill, validation."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        supplier: Optional[WordSupplier] = None,
        progress: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
        hint_writer: Optional[HintWriter] = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.config.validate()
        self.rng = random.Random(self.config.seed)
        self.supplier = supplier
        self.progress = progress
        self.token = token or CancellationToken()
        self.hint_writer = hint_writer
        self.validator = PuzzleValidator()

    # ------------------------------------------------------------------
    # Public entrypoints
    # ------------------------------------------------------------------
    def generate_from_image(
        self,
        source: ImageSource,
        paper: PaperConfig,
        words: Sequence[WordInput] = (),
    ) -> PuzzleResult:
        width, height = paper.grid_dimensions()
        LOGGER.info("Grid dimensions: %dx%d", width, height)
        self._report("Analyzing image for available positions...")
        _, grid = load_mask(
            source,
            width,
            height,
            self.rng,
            threshold=self.config.threshold,
            alphabet=self.config.fill_alphabet,
        )
        return self.generate(grid, words)

    def generate(self, grid: WordSearchGrid, words: Sequence[WordInput] = ()) -> PuzzleResult:
        """Run every phase on ``grid`` (mutated in place) and return the result."""

        self.token.raise_if_cancelled()
        entries = self._prepare_entries(words)
        LOGGER.info(
            "Starting puzzle generation: %dx%d grid, %d available cells, %d words",
            grid.cols,
            grid.rows,
            grid.available_count,
            len(entries),
        )

        placer = WordPlacer(grid, self.rng, progress=self.progress)
        self._report("Placing words...")
        placed_first = placer.place(entries)
        self.token.raise_if_cancelled()

        ordered = placed_first + [entry for entry in entries if not entry.placed]
        supplied: List[WordEntry] = list(ordered)
        coverage = CoverageDrivenGenerator(
            placer, self.supplier, self.config, token=self.token, progress=self.progress
        ).run(supplied)

        if not entries and coverage.supplier_calls and coverage.supplier_calls == coverage.supplier_failures:
            raise SupplierFailure("Word supplier failed and no words were provided")

        self.token.raise_if_cancelled()
        SpaceFiller(
            self.rng,
            alphabet=self.config.fill_alphabet,
            progress=self.progress,
            progress_interval=self.config.fill_progress_interval,
        ).fill(grid)

        if self.hint_writer is not None:
            attach_hints(supplied, self.hint_writer, fallback=TemplateHintWriter())

        validation = self.validator.validate(grid, supplied)
        if not validation.ok:
            raise ValidationError(f"Puzzle validation failed: {validation.messages}")

        placed_total = sum(1 for entry in supplied if entry.placed)
        LOGGER.info(
            "Puzzle generation completed: %d/%d words placed, %d word letters",
            placed_total,
            len(supplied),
            grid.word_letter_count(),
        )
        self._report("Complete!")
        return PuzzleResult(
            grid=grid,
            words=supplied,
            coverage=coverage,
            validation_messages=validation.messages,
            seed=self.config.seed,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _prepare_entries(self, words: Sequence[WordInput]) -> List[WordEntry]:
        entries: List[WordEntry] = []
        seen: set[str] = set()
        for item in words:
            if isinstance(item, WordEntry):
                word, hint, source = item.word, item.hint, item.source
            elif isinstance(item, SuppliedWord):
                word, hint, source = item.word, item.hint, item.source
            else:
                word, hint, source = item, "", "user"
            text = clean_word(word)
            if not text:
                LOGGER.warning("Skipping word without letters: %r", word)
                continue
            if text in seen:
                LOGGER.warning("Skipping duplicate word: %s", text)
                continue
            seen.add(text)
            entries.append(WordEntry(word=text, hint=hint, id=len(entries), source=source))
        return entries

    def _report(self, label: str) -> None:
        if self.progress is not None:
            self.progress(label)
