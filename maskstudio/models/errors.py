"""Иерархия ошибок редактора масок.

Принципы:
- Все ошибки локальны и восстановимы: сервисы поднимают, контроллер ловит и показывает.
- Наследование от встроенных исключений сохраняет совместимость с кодом,
  который ловит `ValueError` / `RuntimeError`.
"""
from __future__ import annotations


class MaskStudioError(Exception):
    """Базовая ошибка приложения; сообщение предназначено для пользователя."""


class InvalidInputError(MaskStudioError, ValueError):
    """Неверный ввод: не изображение, нет промпта/изображения/маски, кисть вне диапазона."""


class GeometryUnavailableError(MaskStudioError, ValueError):
    """Нулевые размеры: масштаб вычислить нельзя, рисование отключено."""


class DecodeFailureError(MaskStudioError, ValueError):
    """Байты не удалось декодировать как изображение."""


class ExportFailureError(MaskStudioError, RuntimeError):
    """Растровую поверхность не удалось сериализовать в PNG."""
