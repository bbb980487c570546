import io
import random
import tempfile
import unittest
from pathlib import Path

from PIL import Image

from wordsearch.core.constants import Direction
from wordsearch.core.exceptions import ConfigurationError, ImageDecodeError, PlacementError
from wordsearch.core.models import AvailabilityMask, WordEntry
from wordsearch.engine.grid import WordSearchGrid
from wordsearch.io.mask import grid_from_mask, load_mask, mask_from_ascii


def _png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class MaskIngestionTests(unittest.TestCase):
    def test_dark_pixels_become_available_cells(self) -> None:
        image = Image.new("RGB", (4, 2), "white")
        image.putpixel((0, 0), (0, 0, 0))
        image.putpixel((1, 1), (10, 200, 200))

        mask, grid = load_mask(_png_bytes(image), 4, 2, random.Random(3))

        self.assertEqual(mask.available_count, 2)
        self.assertTrue(mask.is_available(0, 0))
        self.assertTrue(mask.is_available(1, 1))
        self.assertFalse(mask.is_available(0, 1))
        self.assertIsNone(grid.cell(0, 0).letter)
        self.assertIsNone(grid.cell(1, 1).letter)

    def test_unavailable_cells_receive_noise_letters(self) -> None:
        image = Image.new("RGB", (3, 3), "white")
        image.putpixel((1, 1), (0, 0, 0))
        _, grid = load_mask(_png_bytes(image), 3, 3, random.Random(1))

        for r, c, cell in grid.iter_cells():
            if (r, c) == (1, 1):
                continue
            self.assertIsNotNone(cell.letter)
            self.assertIn(cell.letter, "ABCDEFGHIJKLMNOPQRSTUVWXYZ")
            self.assertFalse(cell.is_word_letter)
            self.assertEqual(cell.word_ids, [])

    def test_image_is_downsampled_to_grid_size(self) -> None:
        image = Image.new("RGB", (40, 20), "white")
        for x in range(20):
            for y in range(20):
                image.putpixel((x, y), (0, 0, 0))

        mask, grid = load_mask(_png_bytes(image), 4, 2, random.Random(0))

        self.assertEqual((grid.rows, grid.cols), (2, 4))
        self.assertEqual(mask.to_rows(), [[True, True, False, False], [True, True, False, False]])

    def test_data_url_source_is_decoded(self) -> None:
        import base64

        image = Image.new("RGB", (2, 2), "black")
        url = "data:image/png;base64," + base64.b64encode(_png_bytes(image)).decode("ascii")
        mask, _ = load_mask(url, 2, 2, random.Random(0))
        self.assertEqual(mask.available_count, 4)

    def test_path_source_is_decoded(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "mask.png"
            Image.new("L", (2, 1), 0).save(path)
            mask, _ = load_mask(path, 2, 1, random.Random(0))
        self.assertEqual(mask.available_count, 2)

    def test_undecodable_bytes_raise_image_decode_error(self) -> None:
        with self.assertRaises(ImageDecodeError):
            load_mask(b"definitely not an image", 3, 3, random.Random(0))

    def test_missing_file_raises_image_decode_error(self) -> None:
        with self.assertRaises(ImageDecodeError):
            load_mask(Path("/nonexistent/mask.png"), 3, 3, random.Random(0))

    def test_bad_data_url_raises_image_decode_error(self) -> None:
        with self.assertRaises(ImageDecodeError):
            load_mask("data:image/png;base64,!!!", 3, 3, random.Random(0))

    def test_zero_dimensions_raise_configuration_error(self) -> None:
        image = Image.new("RGB", (2, 2), "black")
        with self.assertRaises(ConfigurationError):
            load_mask(_png_bytes(image), 0, 2, random.Random(0))

    def test_mask_from_ascii_pads_short_lines(self) -> None:
        rows = mask_from_ascii(["##.", "#", "", ".#"])
        self.assertEqual(rows, [[True, True, False], [True, False, False], [False, True, False]])


class GridTests(unittest.TestCase):
    def setUp(self) -> None:
        _, self.grid = grid_from_mask(mask_from_ascii(["###", "###", "#.#"]), random.Random(0))

    def test_place_word_marks_cells(self) -> None:
        entry = WordEntry(word="cat", id=7)
        filled = self.grid.place_word(entry, 0, 0, Direction.HORIZONTAL)

        self.assertEqual(filled, 3)
        self.assertTrue(entry.placed)
        self.assertEqual(entry.word, "CAT")
        self.assertEqual((entry.start_row, entry.start_col, entry.direction), (0, 0, Direction.HORIZONTAL))
        for col, letter in enumerate("CAT"):
            cell = self.grid.cell(0, col)
            self.assertEqual(cell.letter, letter)
            self.assertTrue(cell.is_word_letter)
            self.assertEqual(cell.word_ids, [7])

    def test_overlapping_word_shares_cell(self) -> None:
        self.grid.place_word(WordEntry(word="CAT", id=0), 0, 0, Direction.HORIZONTAL)
        filled = self.grid.place_word(WordEntry(word="CAR", id=1), 0, 0, Direction.VERTICAL)

        self.assertEqual(filled, 2)
        self.assertEqual(self.grid.cell(0, 0).word_ids, [0, 1])
        self.assertEqual(self.grid.cell(0, 0).letter, "C")

    def test_conflicting_letter_is_rejected_without_mutation(self) -> None:
        self.grid.place_word(WordEntry(word="CAT", id=0), 0, 0, Direction.HORIZONTAL)
        before = self.grid.letters()
        with self.assertRaises(PlacementError):
            self.grid.place_word(WordEntry(word="DOG", id=1), 0, 0, Direction.VERTICAL)
        self.assertEqual(self.grid.letters(), before)

    def test_unavailable_cell_is_rejected(self) -> None:
        with self.assertRaises(PlacementError):
            self.grid.place_word(WordEntry(word="CAT", id=0), 0, 1, Direction.VERTICAL)

    def test_out_of_bounds_is_rejected(self) -> None:
        with self.assertRaises(PlacementError):
            self.grid.place_word(WordEntry(word="CAT", id=0), 0, 0, Direction.DIAGONAL_UP)

    def test_empty_available_cells_skip_mask_noise(self) -> None:
        self.assertEqual(len(self.grid.empty_available_cells()), 8)
        self.assertNotIn((2, 1), self.grid.empty_available_cells())

    def test_mismatched_initial_cells_raise(self) -> None:
        mask = AvailabilityMask([[True, True]])
        with self.assertRaises(ConfigurationError):
            WordSearchGrid(mask, cells=[[]])

    def test_read_reports_footprint_letters(self) -> None:
        self.grid.place_word(WordEntry(word="AB", id=0), 2, 0, Direction.DIAGONAL_UP)
        self.assertEqual(self.grid.read(2, 0, Direction.DIAGONAL_UP, 3), "AB?")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
