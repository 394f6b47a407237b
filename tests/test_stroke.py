# tests/test_stroke.py
# Unit tests for services/stroke_service.py: stamping, connectivity, clear

import math
import unittest

import numpy as np
from PIL import Image

from maskstudio.models.errors import ExportFailureError, GeometryUnavailableError
from maskstudio.models.mask_model import DrawEvent, DrawEventKind, Point
from maskstudio.services.stroke_service import MaskSurface, StrokeRenderer


def start(x, y):
    return DrawEvent(DrawEventKind.START, x, y)


def move(x, y):
    return DrawEvent(DrawEventKind.MOVE, x, y)


def end(x=0.0, y=0.0):
    return DrawEvent(DrawEventKind.END, x, y)


class TestMaskSurface(unittest.TestCase):
    """Буфер маски: инициализация, очистка, освобождение."""

    def test_new_surface_is_all_keep(self):
        surface = MaskSurface(800, 400)
        self.assertEqual(surface.pixels.shape, (400, 800))
        self.assertEqual(surface.pixels.dtype, np.uint8)
        self.assertEqual(int(surface.pixels.max()), 0)

    def test_zero_size_rejected(self):
        with self.assertRaises(GeometryUnavailableError):
            MaskSurface(0, 10)

    def test_released_surface_is_unavailable(self):
        surface = MaskSurface(10, 10)
        surface.release()
        self.assertTrue(surface.released)
        with self.assertRaises(ExportFailureError):
            _ = surface.pixels

    def test_load_image_thresholds_and_resizes(self):
        mask = Image.new("L", (20, 10), 0)
        mask.paste(255, (0, 0, 10, 10))
        surface = MaskSurface(40, 20)
        surface.load_image(mask)
        self.assertEqual(int(surface.pixels[5, 5]), 255)
        self.assertEqual(int(surface.pixels[5, 35]), 0)
        self.assertTrue(set(np.unique(surface.pixels)).issubset({0, 255}))

    def test_segment_with_zero_length_is_a_disc(self):
        surface = MaskSurface(50, 50)
        surface.stamp_segment(Point(25, 25), Point(25, 25), 5)
        self.assertEqual(int(surface.pixels[25, 25]), 255)
        self.assertEqual(int(surface.pixels[25, 35]), 0)


class TestStrokeRenderer(unittest.TestCase):
    """Штрих = диски в точках + капсулы между ними."""

    def setUp(self):
        self.surface = MaskSurface(800, 400)
        self.renderer = StrokeRenderer(self.surface)

    def test_single_tap_is_disc_of_brush_diameter(self):
        self.renderer.handle(start(100, 100), 30)
        self.renderer.handle(end(100, 100), 30)
        arr = self.surface.pixels

        self.assertTrue(set(np.unique(arr)).issubset({0, 255}))
        self.assertEqual(int(arr[100, 100]), 255)
        self.assertEqual(int(arr[99, 99]), 255)
        self.assertEqual(int(arr[100, 114]), 255)
        self.assertEqual(int(arr[100, 85]), 255)
        self.assertEqual(int(arr[100, 116]), 0)
        self.assertEqual(int(arr[100, 84]), 0)
        self.assertEqual(int(arr[0, 0]), 0)

        rows, cols = np.nonzero(arr)
        dist = np.hypot(cols + 0.5 - 100, rows + 0.5 - 100)
        self.assertLessEqual(float(dist.max()), 15.0)
        expected_area = math.pi * 15 ** 2
        self.assertLess(abs(len(rows) - expected_area), 0.1 * expected_area)

    def test_fast_movement_leaves_no_gap(self):
        self.renderer.handle(start(50, 50), 10)
        self.renderer.handle(move(250, 50), 10)
        arr = self.surface.pixels
        self.assertTrue(np.all(arr[49:51, 50:250] == 255))

    def test_diagonal_segment_is_connected(self):
        self.renderer.handle(start(20, 20), 8)
        self.renderer.handle(move(300, 200), 8)
        arr = self.surface.pixels
        for t in np.linspace(0.0, 1.0, 200):
            x = 20 + t * 280
            y = 20 + t * 180
            with self.subTest(t=float(t)):
                self.assertEqual(int(arr[int(y), int(x)]), 255)

    def test_move_without_start_is_ignored(self):
        changed = self.renderer.handle(move(100, 100), 30)
        self.assertFalse(changed)
        self.assertEqual(int(self.surface.pixels.max()), 0)

    def test_new_stroke_is_not_connected_to_previous(self):
        self.renderer.handle(start(50, 50), 10)
        self.renderer.handle(end(50, 50), 10)
        self.renderer.handle(start(250, 50), 10)
        self.assertEqual(int(self.surface.pixels[50, 150]), 0)

    def test_start_resets_previous_point(self):
        self.renderer.handle(start(50, 50), 10)
        self.renderer.handle(move(60, 50), 10)
        self.renderer.handle(start(250, 50), 10)
        self.assertEqual(self.renderer.prev_point, Point(250, 50))
        self.assertEqual(int(self.surface.pixels[50, 150]), 0)

    def test_end_resets_state(self):
        self.renderer.handle(start(50, 50), 10)
        self.renderer.handle(end(), 10)
        self.assertFalse(self.renderer.drawing)
        self.assertIsNone(self.renderer.prev_point)

    def test_brush_change_does_not_touch_existing_strokes(self):
        self.renderer.handle(start(100, 100), 10)
        self.renderer.handle(end(), 10)
        before = self.surface.pixels.copy()
        self.renderer.handle(start(500, 100), 80)
        self.assertTrue(np.array_equal(self.surface.pixels[:, :300], before[:, :300]))

    def test_clear_resets_every_pixel(self):
        self.renderer.handle(start(100, 100), 50)
        self.renderer.handle(move(400, 300), 50)
        self.renderer.clear()
        self.assertEqual(int(self.surface.pixels.max()), 0)

    def test_stamps_are_clipped_at_edges(self):
        self.renderer.handle(start(0, 0), 30)
        self.renderer.handle(move(799, 399), 30)
        self.renderer.handle(start(-200, -200), 30)
        arr = self.surface.pixels
        self.assertEqual(int(arr[0, 0]), 255)
        self.assertEqual(int(arr[399, 799]), 255)


if __name__ == "__main__":
    unittest.main()
