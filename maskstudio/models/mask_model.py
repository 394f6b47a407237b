"""Модели данных редактора масок: геометрия, события рисования, кисть, артефакт маски.

Принципы:
- SRP: только структуры данных и простые инварианты, без логики рендеринга.
- Чистый код: значения неизменяемы, изменение = новый экземпляр (`dataclasses.replace`).
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from PIL import Image

from maskstudio.models.errors import InvalidInputError


# Цвета маски: чёрный = сохранить, белый = редактировать
KEEP = 0
EDIT = 255


@dataclass(frozen=True)
class Point:
    """Точка в координатах подложки (backing resolution)."""
    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5


@dataclass(frozen=True)
class BoundingRect:
    """Прямоугольник поверхности на экране (аналог getBoundingClientRect)."""
    left: float
    top: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class DisplayGeometry:
    """Размер отображения с сохранением пропорций, вписанный в ограничивающий бокс."""
    width: int
    height: int

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


class DrawEventKind(str, Enum):
    START = "start"
    MOVE = "move"
    END = "end"


@dataclass(frozen=True)
class DrawEvent:
    """Единое событие рисования независимо от источника ввода (мышь или касание)."""
    kind: DrawEventKind
    x: float
    y: float

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class BrushConfig:
    """Размер кисти (диаметр штампа в пикселях подложки) и его допустимые границы."""
    radius: int = 30
    min_radius: int = 5
    max_radius: int = 100

    def with_radius(self, radius: int) -> BrushConfig:
        """Возвращает копию с новым размером.

        Raises:
            InvalidInputError: если размер вне [min_radius, max_radius].
        """
        value = int(radius)
        if value < self.min_radius or value > self.max_radius:
            raise InvalidInputError(
                f"Размер кисти должен быть в диапазоне {self.min_radius}–{self.max_radius}px"
            )
        return replace(self, radius=value)

    def stepped(self, delta: int) -> BrushConfig:
        """Сдвигает размер на `delta` с ограничением по границам (кнопки −/+)."""
        value = max(self.min_radius, min(self.max_radius, self.radius + int(delta)))
        return replace(self, radius=value)


class MaskMode(str, Enum):
    DRAW = "draw"
    UPLOAD = "upload"


class MaskPhase(str, Enum):
    EDITING = "editing"
    FINALIZED = "finalized"


class MaskOrigin(str, Enum):
    DRAWN = "drawn"
    UPLOADED = "uploaded"


class SessionState(str, Enum):
    NO_IMAGE = "no_image"
    EDITOR_OPEN = "editor_open"
    EDITOR_CLOSED = "editor_closed"
    AWAITING_UPLOAD = "awaiting_upload"


@dataclass(frozen=True)
class MaskArtifact:
    """Готовая бинарная маска: байты PNG (или загруженного файла) и размеры.

    Fields:
        data: Байты изображения маски без потерь.
        width: Ширина, px.
        height: Высота, px.
        mime_type: MIME-тип данных.
        filename: Имя файла для передачи во внешний сервис.
        origin: Нарисована в редакторе или загружена пользователем.
        preview: Декодированная маска для предпросмотра.
    """
    data: bytes
    width: int
    height: int
    mime_type: str = "image/png"
    filename: str = "mask.png"
    origin: MaskOrigin = MaskOrigin.DRAWN
    preview: Optional[Image.Image] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class SubmissionBundle:
    """То, что уходит внешнему сервису редактирования: изображение, маска и промпт."""
    image_bytes: bytes
    image_mime_type: str
    image_name: str
    mask: MaskArtifact
    prompt: str
