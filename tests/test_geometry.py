# tests/test_geometry.py
# Unit tests for services/geometry_service.py: display size, coordinate mapping

import unittest

from maskstudio.config import EditorConfig
from maskstudio.models.errors import GeometryUnavailableError
from maskstudio.models.mask_model import BoundingRect, DisplayGeometry, Point
from maskstudio.services.geometry_service import GeometryService


class TestComputeDisplaySize(unittest.TestCase):
    """Вписывание исходника в бокс 800×600."""

    def setUp(self):
        self.geo = GeometryService()

    def test_landscape_scenario(self):
        self.assertEqual(self.geo.compute_display_size(2000, 1000), DisplayGeometry(800, 400))

    def test_portrait_scenario(self):
        self.assertEqual(self.geo.compute_display_size(300, 800), DisplayGeometry(225, 600))

    def test_small_image_is_not_upscaled(self):
        self.assertEqual(self.geo.compute_display_size(500, 400), DisplayGeometry(500, 400))
        self.assertEqual(self.geo.compute_display_size(400, 400), DisplayGeometry(400, 400))

    def test_near_square_landscape_respects_height_bound(self):
        # width-led branch alone would give 800x700
        size = self.geo.compute_display_size(800, 700)
        self.assertEqual(size.height, 600)
        self.assertLessEqual(size.width, 800)
        self.assertAlmostEqual(size.width / size.height, 800 / 700, delta=0.01)

    def test_bounds_and_ratio_hold_for_many_sizes(self):
        sides = [120, 480, 640, 799, 800, 1024, 1920, 3000]
        for w in sides:
            for h in sides:
                with self.subTest(w=w, h=h):
                    dw, dh = self.geo.compute_display_size(w, h).size
                    self.assertLessEqual(dw, 800)
                    self.assertLessEqual(dh, 600)
                    ratio = w / h
                    tolerance = 0.5 * (1 + ratio) / dh + 1e-9
                    self.assertLessEqual(abs(dw / dh - ratio), tolerance)
                    if w <= 800 and h <= 600:
                        self.assertEqual((dw, dh), (w, h))
                    else:
                        self.assertTrue(dw == 800 or dh == 600)

    def test_zero_height_is_unavailable(self):
        with self.assertRaises(GeometryUnavailableError):
            self.geo.compute_display_size(100, 0)
        with self.assertRaises(ValueError):
            self.geo.compute_display_size(0, 100)

    def test_custom_bounds_from_config(self):
        geo = GeometryService(EditorConfig(max_width=400, max_height=300))
        self.assertEqual(geo.compute_display_size(2000, 1000), DisplayGeometry(400, 200))


class TestCoordinateMapping(unittest.TestCase):
    """Пересчёт экранных координат в координаты подложки и обратно."""

    def setUp(self):
        self.geo = GeometryService()
        self.rect = BoundingRect(left=10, top=20, width=400, height=200)

    def test_scales_by_backing_over_rendered_size(self):
        point = self.geo.to_backing_coords(110, 70, self.rect, 800, 400)
        self.assertEqual(point, Point(200.0, 100.0))

    def test_identity_when_sizes_match(self):
        rect = BoundingRect(0, 0, 800, 400)
        self.assertEqual(self.geo.to_backing_coords(37, 41, rect, 800, 400), Point(37.0, 41.0))

    def test_empty_rect_gives_no_mapping(self):
        empty = BoundingRect(0, 0, 0, 200)
        self.assertIsNone(self.geo.to_backing_coords(10, 10, empty, 800, 400))
        self.assertIsNone(self.geo.to_backing_coords(10, 10, self.rect, 0, 400))
        self.assertIsNone(self.geo.to_display_coords(Point(1, 1), empty, 800, 400))

    def test_round_trip(self):
        original = Point(123.4, 56.7)
        cx, cy = self.geo.to_display_coords(original, self.rect, 800, 400)
        back = self.geo.to_backing_coords(cx, cy, self.rect, 800, 400)
        self.assertAlmostEqual(back.x, original.x, places=6)
        self.assertAlmostEqual(back.y, original.y, places=6)


class TestLayout(unittest.TestCase):
    """Размещение поверхности внутри виджета."""

    def setUp(self):
        self.geo = GeometryService()

    def test_fit_scale_never_upscales(self):
        self.assertEqual(self.geo.fit_scale(DisplayGeometry(400, 300), 1200, 900), 1.0)

    def test_layout_rect_is_centered_and_scaled(self):
        rect = self.geo.layout_rect(DisplayGeometry(800, 400), 400, 400)
        self.assertEqual(rect, BoundingRect(left=0, top=100, width=400, height=200))

    def test_fit_scale_with_empty_area(self):
        self.assertEqual(self.geo.fit_scale(DisplayGeometry(800, 400), 0, 0), 1.0)


if __name__ == "__main__":
    unittest.main()
