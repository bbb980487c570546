"""Availability mask ingestion.

A thresholded picture is downsampled to exactly one pixel per grid cell. Dark
samples (red channel below the threshold) become available cells; every light
sample is decorated immediately with a random noise letter that no word may
ever claim. Both outputs come out of the same pass over the pixels.
"""

from __future__ import annotations

import base64
import binascii
import io
import random
from pathlib import Path
from typing import BinaryIO, Iterable, List, Sequence, Tuple, Union

from PIL import Image, UnidentifiedImageError

from ..core.constants import DEFAULT_ALPHABET, DEFAULT_LUMINANCE_THRESHOLD
from ..core.exceptions import ConfigurationError, ImageDecodeError
from ..core.models import AvailabilityMask, Cell
from ..engine.grid import WordSearchGrid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

ImageSource = Union[str, Path, bytes, BinaryIO]


def load_mask(
    source: ImageSource,
    width: int,
    height: int,
    rng: random.Random,
    threshold: int = DEFAULT_LUMINANCE_THRESHOLD,
    alphabet: str = DEFAULT_ALPHABET,
) -> Tuple[AvailabilityMask, WordSearchGrid]:
    """Rasterize ``source`` to ``width x height`` and build the mask and grid."""

    if width <= 0 or height <= 0:
        raise ConfigurationError(f"Grid dimensions must be positive, got {width}x{height}")

    image = _decode(source)
    # The source is already binarized upstream, so red stands in for luminance.
    red = image.convert("RGB").resize((width, height), Image.Resampling.BILINEAR).getchannel("R")
    samples = red.tobytes()

    available_rows: List[List[bool]] = []
    for y in range(height):
        row = samples[y * width:(y + 1) * width]
        available_rows.append([value < threshold for value in row])

    mask, grid = grid_from_mask(available_rows, rng, alphabet)
    total = width * height
    LOGGER.info(
        "Image analysis complete: %d/%d cells available (%.1f%%)",
        mask.available_count,
        total,
        mask.available_count / total * 100,
    )
    return mask, grid


def grid_from_mask(
    available_rows: Sequence[Sequence[bool]],
    rng: random.Random,
    alphabet: str = DEFAULT_ALPHABET,
) -> Tuple[AvailabilityMask, WordSearchGrid]:
    """Build the mask and an initial grid with noise in unavailable cells."""

    mask = AvailabilityMask(available_rows)
    if mask.bounds.rows <= 0 or mask.bounds.cols <= 0:
        raise ConfigurationError("Availability mask is empty")

    letters = alphabet.upper()
    cells: List[List[Cell]] = []
    for r in range(mask.bounds.rows):
        row: List[Cell] = []
        for c in range(mask.bounds.cols):
            if mask.is_available(r, c):
                row.append(Cell())
            else:
                row.append(Cell(letter=rng.choice(letters), is_word_letter=False))
        cells.append(row)
    return mask, WordSearchGrid(mask, cells)


def mask_from_ascii(lines: Iterable[str], available: str = "#") -> List[List[bool]]:
    """Parse a text picture where ``available`` marks usable cells.

    Blank lines are ignored and short lines are padded with unavailable cells.
    """

    rows = [line.rstrip("\r\n") for line in lines]
    rows = [line for line in rows if line.strip()]
    width = max((len(line) for line in rows), default=0)
    return [[char in available for char in line.ljust(width)] for line in rows]


def _decode(source: ImageSource) -> Image.Image:
    if isinstance(source, str) and source.startswith("data:"):
        _, _, encoded = source.partition(",")
        try:
            source = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageDecodeError(f"Invalid image data URL: {exc}") from exc
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        with Image.open(source) as image:
            image.load()
            return image.copy()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"Failed to load threshold image: {exc}") from exc


__all__ = ["grid_from_mask", "load_mask", "mask_from_ascii"]
