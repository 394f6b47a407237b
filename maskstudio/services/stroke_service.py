"""Рендеринг штрихов кисти на бинарную поверхность маски.

Принципы:
- SRP: поверхность (`MaskSurface`) хранит пиксели, рендерер (`StrokeRenderer`)
  знает только о состоянии штриха (`drawing`, `prev_point`).
- Каждая точка штриха = диск + капсула до предыдущей точки, поэтому быстрые
  движения не дают разрывов, а одиночное касание оставляет видимую метку.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
from PIL import Image

from maskstudio.models.errors import ExportFailureError, GeometryUnavailableError
from maskstudio.models.mask_model import EDIT, KEEP, DrawEvent, DrawEventKind, Point

logger = logging.getLogger(__name__)


class MaskSurface:
    """Растровый буфер маски (uint8, H×W): 0 = сохранить, 255 = редактировать."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise GeometryUnavailableError(f"Некорректный размер поверхности: {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self._pixels: Optional[np.ndarray] = np.full((self._height, self._width), KEEP, dtype=np.uint8)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def released(self) -> bool:
        return self._pixels is None

    @property
    def pixels(self) -> np.ndarray:
        """Живой массив пикселей.

        Raises:
            ExportFailureError: если поверхность уже освобождена.
        """
        if self._pixels is None:
            raise ExportFailureError("Поверхность маски недоступна")
        return self._pixels

    def release(self) -> None:
        self._pixels = None

    def clear(self) -> None:
        """Заливает всю поверхность цветом «сохранить»."""
        self.pixels.fill(KEEP)

    def edit_fraction(self) -> float:
        """Доля пикселей «редактировать» в [0, 1]."""
        arr = self.pixels
        return float(np.count_nonzero(arr == EDIT)) / arr.size

    def load_image(self, image: Image.Image) -> None:
        """Перерисовывает поверхность из готовой маски (масштаб под размер поверхности)."""
        gray = image.convert("L")
        if gray.size != self.size:
            gray = gray.resize(self.size, Image.Resampling.NEAREST)
        arr = np.asarray(gray, dtype=np.uint8)
        self.pixels[...] = np.where(arr >= 128, EDIT, KEEP).astype(np.uint8)

    def stamp_disc(self, center: Point, radius: float) -> None:
        """Заполненный диск радиуса `radius` с центром в `center`.

        Пиксель (col, row) закрашивается, если его центр (col+0.5, row+0.5)
        лежит не дальше `radius` от `center`.
        """
        window = self._window(center.x, center.y, center.x, center.y, radius)
        if window is None:
            return
        rows, cols = window
        cy = rows[:, None] + 0.5
        cx = cols[None, :] + 0.5
        inside = (cx - center.x) ** 2 + (cy - center.y) ** 2 <= radius * radius
        self._paint(rows, cols, inside)

    def stamp_segment(self, start: Point, end: Point, radius: float) -> None:
        """Капсула: отрезок `start`–`end` толщиной 2*radius с круглыми концами."""
        window = self._window(min(start.x, end.x), min(start.y, end.y),
                              max(start.x, end.x), max(start.y, end.y), radius)
        if window is None:
            return
        rows, cols = window
        py = rows[:, None] + 0.5
        px = cols[None, :] + 0.5

        dx = end.x - start.x
        dy = end.y - start.y
        seg_len_sq = dx * dx + dy * dy
        if seg_len_sq == 0:
            dist_sq = (px - start.x) ** 2 + (py - start.y) ** 2
        else:
            # project each pixel onto the segment, clamp t to [0, 1]
            t = np.clip(((px - start.x) * dx + (py - start.y) * dy) / seg_len_sq, 0.0, 1.0)
            near_x = start.x + t * dx
            near_y = start.y + t * dy
            dist_sq = (px - near_x) ** 2 + (py - near_y) ** 2
        self._paint(rows, cols, dist_sq <= radius * radius)

    # ---- Internals ----
    def _window(self, x0: float, y0: float, x1: float, y1: float, radius: float):
        # bounding box with radius margin, clipped to the surface
        col_start = max(0, int(math.floor(x0 - radius)))
        col_end = min(self._width, int(math.ceil(x1 + radius)) + 1)
        row_start = max(0, int(math.floor(y0 - radius)))
        row_end = min(self._height, int(math.ceil(y1 + radius)) + 1)
        if col_start >= col_end or row_start >= row_end:
            return None
        return np.arange(row_start, row_end), np.arange(col_start, col_end)

    def _paint(self, rows: np.ndarray, cols: np.ndarray, inside: np.ndarray) -> None:
        region = self.pixels[rows[0]:rows[-1] + 1, cols[0]:cols[-1] + 1]
        region[inside] = EDIT


class StrokeRenderer:
    """Потребляет `DrawEvent` и рисует путь кисти на `MaskSurface`.

    Размер кисти — это диаметр: диск радиуса `brush_radius / 2` в каждой точке
    и отрезок шириной `brush_radius` между соседними точками.
    """

    def __init__(self, surface: MaskSurface) -> None:
        self.surface = surface
        self.drawing: bool = False
        self.prev_point: Optional[Point] = None

    def handle(self, event: DrawEvent, brush_radius: int) -> bool:
        """Обрабатывает событие; возвращает True, если пиксели могли измениться."""
        if event.kind == DrawEventKind.START:
            self.drawing = True
            self.prev_point = None
            logger.debug("Stroke start at (%.1f, %.1f)", event.x, event.y)
            self._process(event.point, brush_radius)
            return True

        if event.kind == DrawEventKind.MOVE:
            if not self.drawing:
                return False
            self._process(event.point, brush_radius)
            return True

        if self.drawing:
            logger.debug("Stroke end at (%.1f, %.1f)", event.x, event.y)
        self.drawing = False
        self.prev_point = None
        return False

    def clear(self) -> None:
        self.surface.clear()
        logger.debug("Mask cleared")

    def _process(self, point: Point, brush_radius: int) -> None:
        half = brush_radius / 2.0
        self.surface.stamp_disc(point, half)
        if self.prev_point is not None:
            self.surface.stamp_segment(self.prev_point, point, half)
        self.prev_point = point
