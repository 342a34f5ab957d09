import unittest

import chess
import numpy as np
from PIL import Image

from chessreel.config import LIGHT_SQUARE_COLOR, DARK_SQUARE_COLOR
from chessreel.errors import EncodingError
from chessreel.fen_renderer import render_board
from chessreel.palette import FIXED_COLORS, TRANSPARENT_SLOT_COLOR, Palette
from chessreel.sprites import draw_piece_sprites


def _strip(colors, mode="RGB"):
    img = Image.new(mode, (len(colors), 1))
    img.putdata(list(colors))
    return img


class TestFixedPalette(unittest.TestCase):
    def test_layout(self):
        palette = Palette.fixed()
        self.assertEqual(len(palette.colors), 21)
        self.assertEqual(len(palette), 22)
        self.assertEqual(palette.transparent_index, 21)
        self.assertEqual(palette.colors[0], LIGHT_SQUARE_COLOR)
        self.assertEqual(palette.colors[1], DARK_SQUARE_COLOR)

    def test_exact_colors_map_to_their_index(self):
        indexed = Palette.fixed().quantize(_strip(FIXED_COLORS))
        self.assertEqual(indexed.tolist(), list(range(len(FIXED_COLORS))))

    def test_rgb_values_include_sentinel_slot(self):
        values = Palette.fixed().rgb_values()
        self.assertEqual(len(values), 22 * 3)
        self.assertEqual(tuple(values[-3:]), TRANSPARENT_SLOT_COLOR)


class TestQuantize(unittest.TestCase):
    def test_nearest_by_manhattan_distance(self):
        palette = Palette([(0, 0, 0), (100, 100, 100), (250, 0, 0)])
        indexed = palette.quantize(_strip([(10, 10, 10), (90, 120, 95), (200, 30, 0)]))
        self.assertEqual(indexed.tolist(), [0, 1, 2])

    def test_manhattan_not_euclidean(self):
        # (60, 0, 0) -> (0,0,0): 60; -> (40,40,40): 20+40+40 = 100
        palette = Palette([(0, 0, 0), (40, 40, 40)])
        self.assertEqual(palette.quantize(_strip([(60, 0, 0)])).tolist(), [0])
        # (90, 0, 0): L1 distances 90 vs 120, though (30, 30, 30) is closer in L2
        palette = Palette([(0, 0, 0), (30, 30, 30)])
        self.assertEqual(palette.quantize(_strip([(90, 0, 0)])).tolist(), [0])

    def test_ties_prefer_lowest_index(self):
        palette = Palette([(0, 0, 0), (10, 0, 0)])
        self.assertEqual(palette.quantize(_strip([(5, 0, 0)])).tolist(), [0])
        palette = Palette([(10, 0, 0), (0, 0, 0)])
        self.assertEqual(palette.quantize(_strip([(5, 0, 0)])).tolist(), [0])

    def test_sentinel_never_chosen(self):
        palette = Palette.fixed()
        indexed = palette.quantize(_strip([TRANSPARENT_SLOT_COLOR, (255, 255, 255)]))
        self.assertNotIn(palette.transparent_index, indexed.tolist())
        self.assertEqual(indexed.tolist()[1], 20)

    def test_alpha_ignored(self):
        indexed = Palette.fixed().quantize(_strip([(255, 206, 158, 0), (209, 139, 71, 128)], mode="RGBA"))
        self.assertEqual(indexed.tolist(), [0, 1])

    def test_frame_shape_and_dtype(self):
        img = render_board(chess.Board(), draw_piece_sprites())
        indexed = Palette.fixed().quantize(img)
        self.assertEqual(indexed.shape, (400 * 400,))
        self.assertEqual(indexed.dtype, np.uint8)
        self.assertLess(int(indexed.max()), 21)
        # top-left pixel is the light a8 square, outside the rook outline
        self.assertEqual(int(indexed[0]), 0)


class TestAdaptivePalette(unittest.TestCase):
    def test_bucketed_first_seen_order(self):
        first = _strip([(10, 10, 10), (20, 20, 20), (200, 0, 0)])
        second = _strip([(12, 12, 12), (0, 0, 250), (10, 10, 10)])
        palette = Palette.from_images([first, second])
        self.assertEqual(palette.colors, ((10, 10, 10), (200, 0, 0), (0, 0, 250)))
        self.assertEqual(palette.transparent_index, 3)

    def test_board_colors(self):
        img = render_board(chess.Board(), draw_piece_sprites())
        palette = Palette.from_images([img])
        self.assertEqual(palette.colors[0], LIGHT_SQUARE_COLOR)
        self.assertIn(DARK_SQUARE_COLOR, palette.colors)
        self.assertLessEqual(len(palette), 256)
        indexed = palette.quantize(img)
        self.assertNotIn(palette.transparent_index, set(indexed.tolist()))

    def test_palette_size_limit(self):
        Palette([(i, 0, 0) for i in range(255)])
        with self.assertRaises(EncodingError):
            Palette([(i, 0, 0) for i in range(256)])
        with self.assertRaises(EncodingError):
            Palette([])


if __name__ == "__main__":
    unittest.main()
