"""Экспорт поверхности маски в PNG и вспомогательные преобразования артефакта.

Принципы:
- Только сжатие без потерь: размытые края смещают границу области редактирования.
- Сервис не мутирует поверхность; экспорт — моментальный снимок.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from typing import Optional

import numpy as np
from PIL import Image

from maskstudio.models.errors import ExportFailureError, InvalidInputError
from maskstudio.models.mask_model import EDIT, MaskArtifact, MaskOrigin
from maskstudio.services.image_service import ImageService
from maskstudio.services.stroke_service import MaskSurface

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<payload>.*)$", re.DOTALL)


class ExportService:
    def __init__(self, image_service: Optional[ImageService] = None) -> None:
        self._image_service = image_service or ImageService()

    def export(self, surface: MaskSurface) -> MaskArtifact:
        """Сериализует поверхность в PNG (L, 8 бит) того же размера.

        Raises:
            ExportFailureError: если поверхность недоступна или PNG не записался.
        """
        pixels = surface.pixels
        try:
            image = Image.fromarray(np.array(pixels, dtype=np.uint8, copy=True))
            buf = io.BytesIO()
            image.save(buf, format="PNG")
        except (OSError, ValueError) as exc:
            raise ExportFailureError("Не удалось сохранить маску в PNG") from exc

        edit_share = float(np.count_nonzero(pixels == EDIT)) / pixels.size
        logger.info("Mask exported: %dx%d, edit area %.1f%%", surface.width, surface.height, edit_share * 100)
        return MaskArtifact(
            data=buf.getvalue(),
            width=surface.width,
            height=surface.height,
            origin=MaskOrigin.DRAWN,
            preview=image,
        )

    def from_upload(self, data: bytes, mime_type: str, name: str = "mask.png") -> MaskArtifact:
        """Принимает готовую маску пользователя без изменений (байты передаются как есть).

        Raises:
            InvalidInputError: не изображение.
            DecodeFailureError: байты не декодируются.
        """
        decoded = self._image_service.load_bytes(data, mime_type, name=name)
        return MaskArtifact(
            data=bytes(data),
            width=decoded.width,
            height=decoded.height,
            mime_type=mime_type,
            filename=name,
            origin=MaskOrigin.UPLOADED,
            preview=decoded.pil_image,
        )

    def decode_preview(self, artifact: MaskArtifact) -> Image.Image:
        if artifact.preview is not None:
            return artifact.preview
        return self._image_service.load_bytes(artifact.data, artifact.mime_type, name=artifact.filename).pil_image

    @staticmethod
    def to_data_url(artifact: MaskArtifact) -> str:
        payload = base64.b64encode(artifact.data).decode("ascii")
        return f"data:{artifact.mime_type};base64,{payload}"

    def from_data_url(
        self, data_url: str, filename: str = "mask.png", origin: MaskOrigin = MaskOrigin.UPLOADED
    ) -> MaskArtifact:
        """Разбирает `data:<mime>;base64,<payload>` в артефакт маски.

        `origin` указывает, откуда пришла строка: по умолчанию это готовая маска
        пользователя, для снимка холста передаётся `MaskOrigin.DRAWN`.

        Raises:
            InvalidInputError: если строка не является base64 data URL изображения.
        """
        match = _DATA_URL_RE.match(data_url.strip())
        if match is None:
            raise InvalidInputError("Некорректный data URL маски")
        mime_type = match.group("mime") or "image/png"
        try:
            data = base64.b64decode(match.group("payload"), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidInputError("Некорректные base64-данные маски") from exc
        artifact = self.from_upload(data, mime_type, name=filename)
        return MaskArtifact(
            data=artifact.data,
            width=artifact.width,
            height=artifact.height,
            mime_type=artifact.mime_type,
            filename=filename,
            origin=origin,
            preview=artifact.preview,
        )

    @staticmethod
    def overlay_preview(source: Image.Image, mask: Image.Image, opacity: float = 0.5) -> Image.Image:
        """Полупрозрачная маска поверх исходника (в размере маски), результат RGB."""
        base = source.convert("RGB")
        if base.size != mask.size:
            base = base.resize(mask.size, Image.Resampling.LANCZOS)
        overlay = mask.convert("RGB")
        return Image.blend(base, overlay, max(0.0, min(1.0, opacity)))
