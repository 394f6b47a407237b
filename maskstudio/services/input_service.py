"""Унификация ввода: мышь/перо и касания сводятся к одному потоку `DrawEvent`.

Принципы:
- Источники ввода — маленький тегированный вариант (`PointerInput | TouchInput`),
  рендерер видит только `DrawEvent` и не дублирует логику под каждый источник.
- Для касаний отслеживается только первичный контакт; мультитач игнорируется.
- Пока идёт штрих, стандартные жесты платформы (прокрутка, зум) подавляются.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from maskstudio.models.mask_model import BoundingRect, DrawEvent, DrawEventKind, Point
from maskstudio.services.geometry_service import GeometryService

logger = logging.getLogger(__name__)


class PointerPhase(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


class TouchPhase(str, Enum):
    START = "start"
    MOVE = "move"
    END = "end"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PointerInput:
    phase: PointerPhase
    client_x: float
    client_y: float


@dataclass(frozen=True)
class TouchPoint:
    identifier: int
    client_x: float
    client_y: float


@dataclass(frozen=True)
class TouchInput:
    """Событие касания.

    `touches` — контакты, которые остаются на поверхности после события
    (для END/CANCEL снятый палец в списке отсутствует).
    """
    phase: TouchPhase
    touches: Sequence[TouchPoint] = ()


RawInput = Union[PointerInput, TouchInput]


@dataclass(frozen=True)
class UnifiedEvent:
    """Результат трансляции: событие рисования (или None) и флаг подавления жеста."""
    event: Optional[DrawEvent]
    suppress_default: bool = False


_IGNORED = UnifiedEvent(None, False)


class InputUnifier:
    def __init__(self, geometry: Optional[GeometryService] = None) -> None:
        self._geometry = geometry or GeometryService()
        self._active: bool = False
        self._primary_touch: Optional[int] = None
        self._last_point: Optional[Point] = None

    @property
    def active(self) -> bool:
        return self._active

    def reset(self) -> None:
        self._active = False
        self._primary_touch = None
        self._last_point = None

    def translate(self, raw: RawInput, rect: BoundingRect, backing_w: int, backing_h: int) -> UnifiedEvent:
        """Переводит сырое событие устройства в `UnifiedEvent`."""
        if isinstance(raw, PointerInput):
            return self._translate_pointer(raw, rect, backing_w, backing_h)
        if isinstance(raw, TouchInput):
            return self._translate_touch(raw, rect, backing_w, backing_h)
        raise TypeError(f"Неизвестный источник ввода: {type(raw).__name__}")

    # ---- Pointer ----
    def _translate_pointer(self, raw: PointerInput, rect: BoundingRect, bw: int, bh: int) -> UnifiedEvent:
        if raw.phase == PointerPhase.DOWN:
            point = self._geometry.to_backing_coords(raw.client_x, raw.client_y, rect, bw, bh)
            if point is None:
                return _IGNORED
            return self._begin(point)

        if raw.phase == PointerPhase.MOVE:
            point = self._geometry.to_backing_coords(raw.client_x, raw.client_y, rect, bw, bh)
            if point is None:
                return UnifiedEvent(None, self._active)
            if self._active:
                self._last_point = point
            return UnifiedEvent(DrawEvent(DrawEventKind.MOVE, point.x, point.y), self._active)

        # UP / LEAVE
        return self._finish()

    # ---- Touch ----
    def _translate_touch(self, raw: TouchInput, rect: BoundingRect, bw: int, bh: int) -> UnifiedEvent:
        if raw.phase == TouchPhase.START:
            if self._active or not raw.touches:
                # second finger while a stroke is active
                logger.debug("Ignoring extra touch contact")
                return UnifiedEvent(None, True)
            primary = raw.touches[0]
            point = self._geometry.to_backing_coords(primary.client_x, primary.client_y, rect, bw, bh)
            if point is None:
                return UnifiedEvent(None, True)
            self._primary_touch = primary.identifier
            return self._begin(point)

        primary = self._find_primary(raw.touches)

        if raw.phase == TouchPhase.MOVE:
            if not self._active or primary is None:
                return UnifiedEvent(None, True)
            point = self._geometry.to_backing_coords(primary.client_x, primary.client_y, rect, bw, bh)
            if point is None:
                return UnifiedEvent(None, True)
            self._last_point = point
            return UnifiedEvent(DrawEvent(DrawEventKind.MOVE, point.x, point.y), True)

        # END / CANCEL: the stroke ends only when the primary contact is lifted
        if primary is not None:
            return UnifiedEvent(None, True)
        finished = self._finish()
        return UnifiedEvent(finished.event, True)

    # ---- Helpers ----
    def _find_primary(self, touches: Sequence[TouchPoint]) -> Optional[TouchPoint]:
        if self._primary_touch is None:
            return None
        for touch in touches:
            if touch.identifier == self._primary_touch:
                return touch
        return None

    def _begin(self, point: Point) -> UnifiedEvent:
        self._active = True
        self._last_point = point
        return UnifiedEvent(DrawEvent(DrawEventKind.START, point.x, point.y), True)

    def _finish(self) -> UnifiedEvent:
        if not self._active:
            return _IGNORED
        last = self._last_point or Point(0.0, 0.0)
        self.reset()
        return UnifiedEvent(DrawEvent(DrawEventKind.END, last.x, last.y), True)
