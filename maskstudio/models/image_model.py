"""Модели данных для исходного изображения.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель исходного изображения и его метаданные.

    Fields:
        name: Имя файла (или условное имя для данных из памяти).
        raw_bytes: Исходные байты файла; уходят во внешний сервис без перекодирования.
        mime_type: MIME-тип, например "image/png".
        pil_image: Декодированное изображение PIL (RGBA).
        width: Ширина, px.
        height: Высота, px.
        path: Путь к исходному файлу, если изображение пришло с диска.
    """
    name: str
    raw_bytes: bytes
    mime_type: str
    pil_image: Image.Image
    width: int
    height: int
    path: Optional[Path] = None

    @property
    def size_bytes(self) -> int:
        return len(self.raw_bytes)
