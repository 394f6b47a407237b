"""Загрузка изображений (с диска или из памяти) и управление временными дескрипторами.

Принципы:
- SRP: класс отвечает только за проверку типа, декодирование и упаковку метаданных.
- Ресурсы: `ImageHandle` освобождается ровно один раз, на любом пути выхода.
"""
from __future__ import annotations

import io
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from maskstudio.models.errors import DecodeFailureError, InvalidInputError
from maskstudio.models.image_model import ImageData

logger = logging.getLogger(__name__)


class ImageHandle:
    """Временный дескриптор байтов изображения в памяти (аналог object URL).

    Освобождение идемпотентно: повторный `release()` ничего не делает.
    """

    def __init__(self, data: bytes, name: str = "image") -> None:
        self.name = name
        self._stream: Optional[io.BytesIO] = io.BytesIO(data)
        self.release_count = 0

    @property
    def released(self) -> bool:
        return self._stream is None

    @property
    def stream(self) -> io.BytesIO:
        if self._stream is None:
            raise DecodeFailureError(f"Дескриптор уже освобождён: {self.name}")
        self._stream.seek(0)
        return self._stream

    def release(self) -> None:
        if self._stream is None:
            return
        self._stream.close()
        self._stream = None
        self.release_count += 1
        logger.debug("Released image handle %s", self.name)

    def __enter__(self) -> ImageHandle:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.release()


class ImageService:
    @staticmethod
    def guess_mime_type(file_path: str | Path) -> str:
        """MIME-тип по расширению файла; неизвестное расширение -> application/octet-stream."""
        mime, _enc = mimetypes.guess_type(str(file_path))
        return mime or "application/octet-stream"

    @staticmethod
    def is_image_type(mime_type: Optional[str]) -> bool:
        return bool(mime_type) and mime_type.lower().startswith("image/")

    def open_handle(self, data: bytes, mime_type: str, name: str = "image") -> ImageHandle:
        """Проверяет тип и создаёт дескриптор, не декодируя данные.

        Raises:
            InvalidInputError: если MIME-тип не image/* или данных нет.
        """
        if not self.is_image_type(mime_type):
            raise InvalidInputError(f"Файл не является изображением: {name}")
        if not data:
            raise InvalidInputError(f"Пустой файл: {name}")
        return ImageHandle(data, name=name)

    def decode(self, handle: ImageHandle, mime_type: str, path: Optional[Path] = None) -> ImageData:
        """Полностью декодирует изображение; по возвращении пиксели и размеры готовы.

        Raises:
            DecodeFailureError: если байты не распознаны как изображение.
        """
        stream = handle.stream
        try:
            with Image.open(stream) as opened:
                opened.load()
                pil_image = opened.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise DecodeFailureError(f"Не удалось декодировать изображение: {handle.name}") from exc

        width, height = pil_image.size
        return ImageData(
            name=handle.name,
            raw_bytes=stream.getvalue(),
            mime_type=mime_type,
            pil_image=pil_image,
            width=width,
            height=height,
            path=path,
        )

    def load_bytes(self, data: bytes, mime_type: str, name: str = "image", path: Optional[Path] = None) -> ImageData:
        """Декодирует изображение из памяти; дескриптор освобождается сразу."""
        with self.open_handle(data, mime_type, name) as handle:
            return self.decode(handle, mime_type, path=path)

    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` (в режиме RGBA), размерами и исходными байтами.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            InvalidInputError: если расширение не соответствует изображению.
            DecodeFailureError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")
        return self.load_bytes(path.read_bytes(), self.guess_mime_type(path), name=path.name, path=path)
