"""Сессия маски: агрегат, связывающий исходное изображение с его маской.

Состояния: NoImage -> EditorOpen | EditorClosed(has_mask) в режиме рисования,
AwaitingUpload в режиме загрузки готовой маски.

Принципы:
- Все изменения сначала валидируются, потом применяются: ошибка оставляет
  сессию в прежнем состоянии.
- Временный дескриптор исходника освобождается ровно один раз: при замене
  изображения или закрытии сессии, в том числе на путях с ошибками.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image

from maskstudio.config import EditorConfig
from maskstudio.models.errors import InvalidInputError
from maskstudio.models.image_model import ImageData
from maskstudio.models.mask_model import (
    BoundingRect,
    BrushConfig,
    DisplayGeometry,
    DrawEvent,
    DrawEventKind,
    MaskArtifact,
    MaskMode,
    MaskPhase,
    SessionState,
    SubmissionBundle,
)
from maskstudio.services.export_service import ExportService
from maskstudio.services.geometry_service import GeometryService
from maskstudio.services.image_service import ImageHandle, ImageService
from maskstudio.services.input_service import InputUnifier, RawInput, UnifiedEvent
from maskstudio.services.stroke_service import MaskSurface, StrokeRenderer

logger = logging.getLogger(__name__)


class MaskSession:
    """Всё изменяемое состояние редактора живёт здесь и передаётся обработчикам явно."""

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        image_service: Optional[ImageService] = None,
        geometry_service: Optional[GeometryService] = None,
        export_service: Optional[ExportService] = None,
    ) -> None:
        self.config = config or EditorConfig()
        self._images = image_service or ImageService()
        self._geometry = geometry_service or GeometryService(self.config)
        self._exporter = export_service or ExportService(self._images)
        self._unifier = InputUnifier(self._geometry)

        self.source: Optional[ImageData] = None
        self.geometry: Optional[DisplayGeometry] = None
        self.surface: Optional[MaskSurface] = None
        self.renderer: Optional[StrokeRenderer] = None
        self.brush: BrushConfig = self.config.brush()
        self.mode: MaskMode = MaskMode.DRAW
        self.phase: MaskPhase = MaskPhase.EDITING
        self.editor_open: bool = False
        self.drawn_mask: Optional[MaskArtifact] = None
        self.uploaded_mask: Optional[MaskArtifact] = None
        self.prompt: str = self.config.default_prompt

        self._source_handle: Optional[ImageHandle] = None
        self._display_source: Optional[Image.Image] = None

    # ---- State ----
    @property
    def state(self) -> SessionState:
        if self.source is None:
            return SessionState.NO_IMAGE
        if self.mode == MaskMode.UPLOAD:
            return SessionState.AWAITING_UPLOAD
        return SessionState.EDITOR_OPEN if self.editor_open else SessionState.EDITOR_CLOSED

    @property
    def has_mask(self) -> bool:
        return self.drawn_mask is not None

    @property
    def can_draw(self) -> bool:
        return (
            self.mode == MaskMode.DRAW
            and self.editor_open
            and self.surface is not None
            and not self.surface.released
        )

    @property
    def active_mask(self) -> Optional[MaskArtifact]:
        """Маска активного режима: нарисованная и загруженная взаимоисключающие."""
        return self.drawn_mask if self.mode == MaskMode.DRAW else self.uploaded_mask

    # ---- Source image ----
    def supply_image(self, data: bytes, mime_type: str, name: str = "image", path: Optional[Path] = None) -> ImageData:
        """Принимает новое исходное изображение.

        Пересчитывает геометрию, создаёт чистую поверхность, сбрасывает прежние маски
        и в режиме рисования открывает редактор. При ошибке предыдущее изображение
        и маска остаются нетронутыми.

        Raises:
            InvalidInputError: не изображение или пустые данные.
            DecodeFailureError: байты не декодируются.
            GeometryUnavailableError: нулевые размеры.
        """
        handle = self._images.open_handle(data, mime_type, name)
        try:
            image = self._images.decode(handle, mime_type, path=path)
            geometry = self._geometry.compute_display_size(image.width, image.height)
            surface = MaskSurface(geometry.width, geometry.height)
            display_source = image.pil_image.resize(geometry.size, Image.Resampling.LANCZOS)
        except BaseException:
            handle.release()
            raise

        self._release_source()
        self.source = image
        self.geometry = geometry
        self.surface = surface
        self.renderer = StrokeRenderer(surface)
        self._source_handle = handle
        self._display_source = display_source
        self._unifier.reset()
        self.drawn_mask = None
        self.uploaded_mask = None
        self.phase = MaskPhase.EDITING
        self.editor_open = self.mode == MaskMode.DRAW

        logger.info(
            "Source image %s accepted: %dx%d -> display %dx%d",
            name, image.width, image.height, geometry.width, geometry.height,
        )
        return image

    def supply_image_file(self, file_path: str | Path) -> ImageData:
        """То же, что `supply_image`, но байты читаются с диска.

        Raises:
            FileNotFoundError: если файла нет.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")
        return self.supply_image(path.read_bytes(), self._images.guess_mime_type(path), name=path.name, path=path)

    # ---- Mode / brush / prompt ----
    def set_mode(self, mode: MaskMode | str) -> None:
        new_mode = MaskMode(mode)
        if new_mode == MaskMode.DRAW and self.source is None:
            raise InvalidInputError("Сначала загрузите изображение")

        self._end_stroke()
        self.mode = new_mode
        if new_mode == MaskMode.DRAW:
            self._open_editor()
        else:
            self.editor_open = False

    def set_brush_radius(self, radius: int) -> BrushConfig:
        self.brush = self.brush.with_radius(radius)
        return self.brush

    def step_brush(self, direction: int) -> BrushConfig:
        """Кнопки −/+: шаг `brush_step` с ограничением по границам."""
        step = self.config.brush_step if direction > 0 else -self.config.brush_step
        self.brush = self.brush.stepped(step)
        return self.brush

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    # ---- Drawing ----
    def handle_input(self, raw: RawInput, rect: BoundingRect) -> UnifiedEvent:
        """Сырое событие устройства -> `DrawEvent` -> пиксели поверхности."""
        if not self.can_draw:
            return UnifiedEvent(None, False)
        unified = self._unifier.translate(raw, rect, self.surface.width, self.surface.height)
        if unified.event is not None:
            self.renderer.handle(unified.event, self.brush.radius)
        return unified

    def handle_draw_event(self, event: DrawEvent) -> bool:
        """Событие рисования уже в координатах подложки; False, если рисование недоступно."""
        if not self.can_draw:
            return False
        return self.renderer.handle(event, self.brush.radius)

    def clear_mask(self) -> None:
        """Сбрасывает поверхность в «сохранить»; только при открытом редакторе."""
        if self.renderer is None or self.surface is None:
            raise InvalidInputError("Нет изображения для маски")
        if not self.can_draw:
            raise InvalidInputError("Редактор маски не открыт")
        self.renderer.clear()

    # ---- Editor lifecycle ----
    def generate_mask(self) -> MaskArtifact:
        """Замораживает поверхность в PNG, сохраняет её как маску и закрывает редактор.

        Raises:
            InvalidInputError: редактор не открыт.
            ExportFailureError: поверхность недоступна; редактор остаётся открытым.
        """
        if self.mode != MaskMode.DRAW or not self.editor_open or self.surface is None:
            raise InvalidInputError("Редактор маски не открыт")
        artifact = self._exporter.export(self.surface)

        self._end_stroke()
        self.drawn_mask = artifact
        self.editor_open = False
        self.phase = MaskPhase.FINALIZED
        return artifact

    def reopen_editor(self) -> None:
        """EditorClosed -> EditorOpen с сохранением нарисованного."""
        if self.source is None:
            raise InvalidInputError("Сначала загрузите изображение")
        if self.mode != MaskMode.DRAW:
            raise InvalidInputError("Редактор доступен только в режиме рисования")
        self._open_editor()

    def supply_mask_file(self, data: bytes, mime_type: str, name: str = "mask.png") -> MaskArtifact:
        """Принимает готовую маску (режим загрузки) без изменений.

        Raises:
            InvalidInputError: не режим загрузки или не изображение.
            DecodeFailureError: байты не декодируются.
        """
        if self.mode != MaskMode.UPLOAD:
            raise InvalidInputError("Загрузка маски доступна только в режиме загрузки")
        artifact = self._exporter.from_upload(data, mime_type, name=name)
        self.uploaded_mask = artifact
        logger.info("Uploaded mask %s accepted: %dx%d", name, artifact.width, artifact.height)
        return artifact

    def supply_mask_path(self, file_path: str | Path) -> MaskArtifact:
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")
        return self.supply_mask_file(path.read_bytes(), self._images.guess_mime_type(path), name=path.name)

    # ---- Submission ----
    def build_submission(self, prompt: Optional[str] = None) -> SubmissionBundle:
        """Собирает изображение, активную маску и промпт для внешнего сервиса.

        Raises:
            InvalidInputError: нет промпта, изображения или маски.
        """
        text = (self.prompt if prompt is None else prompt).strip()
        if not text:
            raise InvalidInputError("Введите описание правки")
        if self.source is None:
            raise InvalidInputError("Загрузите изображение")
        mask = self.active_mask
        if mask is None:
            raise InvalidInputError("Нужны и изображение, и маска")
        return SubmissionBundle(
            image_bytes=self.source.raw_bytes,
            image_mime_type=self.source.mime_type,
            image_name=self.source.name,
            mask=mask,
            prompt=text,
        )

    # ---- Preview ----
    def mask_image(self) -> Optional[Image.Image]:
        if self.surface is None or self.surface.released:
            return None
        return Image.fromarray(self.surface.pixels.copy())

    def render_preview(self) -> Optional[Image.Image]:
        """Исходник в размере отображения с полупрозрачной маской поверх."""
        if self._display_source is None:
            return None
        mask = self.mask_image()
        if mask is None or not self.editor_open:
            return self._display_source.convert("RGB")
        return self._exporter.overlay_preview(self._display_source, mask, self.config.overlay_opacity)

    def mask_preview(self) -> Optional[Image.Image]:
        mask = self.active_mask
        if mask is None:
            return None
        return self._exporter.decode_preview(mask)

    # ---- Teardown ----
    def close(self) -> None:
        """Освобождает дескриптор и поверхность; сессия возвращается в NoImage."""
        self._end_stroke()
        self._release_source()
        self.source = None
        self.geometry = None
        self.drawn_mask = None
        self.uploaded_mask = None
        self.editor_open = False
        self.phase = MaskPhase.EDITING
        logger.info("Mask session closed")

    def __enter__(self) -> MaskSession:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    # ---- Helpers ----
    def _open_editor(self) -> None:
        if self.surface is None or self.surface.released:
            self._rebuild_surface()
        self.editor_open = True
        self.phase = MaskPhase.EDITING

    def _rebuild_surface(self) -> None:
        # surface lost (e.g. released) but a drawn mask exists: redraw it
        if self.geometry is None:
            return
        surface = MaskSurface(self.geometry.width, self.geometry.height)
        if self.drawn_mask is not None:
            surface.load_image(self._exporter.decode_preview(self.drawn_mask))
        self.surface = surface
        self.renderer = StrokeRenderer(surface)

    def _end_stroke(self) -> None:
        self._unifier.reset()
        if self.renderer is not None and self.renderer.drawing:
            self.renderer.handle(DrawEvent(DrawEventKind.END, 0.0, 0.0), self.brush.radius)

    def _release_source(self) -> None:
        if self._source_handle is not None:
            self._source_handle.release()
            self._source_handle = None
        if self.surface is not None:
            self.surface.release()
        self.surface = None
        self.renderer = None
        self._display_source = None
