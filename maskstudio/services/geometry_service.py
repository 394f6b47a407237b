"""Геометрия: размер отображения и пересчёт координат указателя в координаты подложки.

Принципы:
- SRP: только арифметика размеров и координат, без доступа к UI и пикселям.
- Без деления на ноль: нулевые размеры означают «масштаба нет», а не падение.
"""
from __future__ import annotations

from typing import Optional, Tuple

from maskstudio.config import EditorConfig
from maskstudio.models.errors import GeometryUnavailableError
from maskstudio.models.mask_model import BoundingRect, DisplayGeometry, Point


class GeometryService:
    def __init__(self, config: Optional[EditorConfig] = None) -> None:
        cfg = config or EditorConfig()
        self.max_width = cfg.max_width
        self.max_height = cfg.max_height

    def compute_display_size(self, src_w: int, src_h: int) -> DisplayGeometry:
        """Вписывает изображение в бокс `max_width`×`max_height` с сохранением пропорций.

        Изображение никогда не увеличивается сверх исходного размера. Сначала
        ограничивается ведущая сторона (ширина для альбомной ориентации, высота
        для портретной и квадратной), затем, если вторая сторона всё ещё выходит
        за свою границу, размер довписывается по ней.

        Raises:
            GeometryUnavailableError: если одна из сторон нулевая или отрицательная.
        """
        if src_w <= 0 or src_h <= 0:
            raise GeometryUnavailableError(f"Некорректные размеры изображения: {src_w}x{src_h}")

        ratio = src_w / src_h
        if ratio > 1:
            width = min(float(self.max_width), float(src_w))
            height = width / ratio
        else:
            height = min(float(self.max_height), float(src_h))
            width = height * ratio

        # near-square landscape images (e.g. 800x700) overflow the height bound
        if height > self.max_height:
            height = float(self.max_height)
            width = height * ratio
        if width > self.max_width:
            width = float(self.max_width)
            height = width / ratio

        return DisplayGeometry(width=max(1, int(round(width))), height=max(1, int(round(height))))

    def to_backing_coords(
        self,
        client_x: float,
        client_y: float,
        rect: BoundingRect,
        backing_w: int,
        backing_h: int,
    ) -> Optional[Point]:
        """Переводит экранные координаты в координаты подложки.

        Returns:
            Точку в пикселях подложки либо None, если масштаб недоступен
            (пустой прямоугольник или нулевая подложка).
        """
        if rect.is_empty or backing_w <= 0 or backing_h <= 0:
            return None
        scale_x = backing_w / rect.width
        scale_y = backing_h / rect.height
        return Point((client_x - rect.left) * scale_x, (client_y - rect.top) * scale_y)

    def to_display_coords(
        self,
        point: Point,
        rect: BoundingRect,
        backing_w: int,
        backing_h: int,
    ) -> Optional[Tuple[float, float]]:
        """Обратное преобразование: точка подложки -> экранные координаты."""
        if rect.is_empty or backing_w <= 0 or backing_h <= 0:
            return None
        scale_x = backing_w / rect.width
        scale_y = backing_h / rect.height
        return rect.left + point.x / scale_x, rect.top + point.y / scale_y

    def fit_scale(self, geometry: DisplayGeometry, avail_w: int, avail_h: int) -> float:
        """Масштаб отрисовки поверхности в виджете: не больше 1, целиком в доступной области."""
        if geometry.width <= 0 or geometry.height <= 0 or avail_w <= 0 or avail_h <= 0:
            return 1.0
        return min(1.0, avail_w / geometry.width, avail_h / geometry.height)

    def layout_rect(self, geometry: DisplayGeometry, avail_w: int, avail_h: int) -> BoundingRect:
        """Прямоугольник поверхности в виджете: вписан и отцентрован."""
        scale = self.fit_scale(geometry, avail_w, avail_h)
        width = max(1, int(geometry.width * scale))
        height = max(1, int(geometry.height * scale))
        left = max(0, (avail_w - width) // 2)
        top = max(0, (avail_h - height) // 2)
        return BoundingRect(left=left, top=top, width=width, height=height)
