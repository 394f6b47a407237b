"""Контроллер приложения: оркестрация UI и сессии маски.

SOLID:
- SRP: класс управляет связями между UI и сессией (без логики рисования и экспорта).
- DIP: внешний сервис отправки подключается через `submit_handler`.
Clean Code:
- Обработчики компактны; ошибки сессии показываются пользователю в одном месте (`_guard`).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from tkinter import filedialog, TclError
from typing import Callable, Optional

import customtkinter as ctk

from maskstudio.models.errors import MaskStudioError
from maskstudio.models.mask_model import MaskMode, SubmissionBundle
from maskstudio.services.input_service import PointerInput
from maskstudio.services.session_service import MaskSession
from maskstudio.ui.bottom_bar import BottomBar
from maskstudio.ui.mask_canvas import MaskCanvas
from maskstudio.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

_IMAGE_FILETYPES = (
    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.webp"),
    ("All files", "*.*"),
)


@dataclass
class AppController:
    """Связывает элементы UI с сессией маски.

    Ответственности:
    - Бинд событий (UI -> контроллер).
    - Загрузка исходника и маски через `MaskSession`.
    - Перевод событий мыши в штрихи и обновление превью.
    - Передача готового набора (изображение, маска, промпт) внешнему обработчику.
    """
    canvas: MaskCanvas
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk
    session: MaskSession = field(default_factory=MaskSession)
    submit_handler: Optional[Callable[[SubmissionBundle], None]] = None

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами.

        Компоненты UI ничего не знают друг о друге, общаются через контроллер.
        """
        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_mode_change = self._handle_mode_change
        self.sidebar.on_open_mask = self._handle_open_mask
        self.sidebar.on_edit_mask = self._handle_edit_mask
        self.sidebar.on_prompt_change = self._handle_prompt_change
        self.sidebar.on_submit = self._handle_submit

        self.canvas.on_pointer = self._handle_pointer

        # Bottom bar bindings
        self.bottom.on_brush_change = self._handle_brush_change
        self.bottom.on_brush_step = self._handle_brush_step
        self.bottom.on_clear = self._handle_clear
        self.bottom.on_generate = self._handle_generate

        self.window.protocol("WM_DELETE_WINDOW", self._handle_close)
        self._refresh()

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        file_path = self._ask_open("Выберите изображение")
        if not file_path:
            return
        if not self._guard(lambda: self.session.supply_image_file(file_path)):
            return
        self.sidebar.set_image_info(self.session.source, self.session.geometry)
        self._refresh()

    def _handle_open_mask(self) -> None:
        file_path = self._ask_open("Выберите маску")
        if not file_path:
            return
        if not self._guard(lambda: self.session.supply_mask_path(file_path)):
            return
        self._refresh()

    def _handle_mode_change(self, mode: MaskMode) -> None:
        if not self._guard(lambda: self.session.set_mode(mode)):
            # keep the selector in sync with the unchanged session
            self.sidebar.set_mode_value(self.session.mode, self.session.source is not None, self.session.editor_open)
            return
        self._refresh()

    def _handle_edit_mask(self) -> None:
        if not self._guard(self.session.reopen_editor):
            return
        self._refresh()

    def _handle_pointer(self, raw: PointerInput) -> bool:
        unified = self.session.handle_input(raw, self.canvas.surface_rect())
        if unified.event is not None:
            self.canvas.set_preview(self.session.render_preview(), self.session.geometry)
        return unified.suppress_default

    def _handle_brush_change(self, radius: int) -> None:
        self._guard(lambda: self.session.set_brush_radius(radius))

    def _handle_brush_step(self, direction: int) -> None:
        brush = self.session.step_brush(direction)
        self.bottom.set_brush_radius(brush.radius)

    def _handle_clear(self) -> None:
        if not self._guard(self.session.clear_mask):
            return
        self._refresh()

    def _handle_generate(self) -> None:
        if not self._guard(self.session.generate_mask):
            return
        self._refresh()

    def _handle_prompt_change(self, prompt: str) -> None:
        self.session.set_prompt(prompt)
        self.sidebar.clear_status()

    def _handle_submit(self) -> None:
        self.session.set_prompt(self.sidebar.get_prompt())
        try:
            bundle = self.session.build_submission()
        except MaskStudioError as exc:
            self._report(exc)
            return
        handler = self.submit_handler or self._save_submission
        handler(bundle)

    def _handle_close(self) -> None:
        self.session.close()
        self.window.destroy()

    # ---- Helpers ----
    def _guard(self, action: Callable[[], object]) -> bool:
        """Выполняет действие сессии; ошибку логирует и показывает, состояние не меняется."""
        try:
            action()
        except (MaskStudioError, OSError) as exc:
            self._report(exc)
            return False
        self.sidebar.clear_status()
        return True

    def _report(self, exc: Exception) -> None:
        logger.warning("%s: %s", type(exc).__name__, exc)
        self.sidebar.show_error(str(exc))

    def _ask_open(self, title: str) -> str:
        try:
            return filedialog.askopenfilename(title=title, filetypes=_IMAGE_FILETYPES)
        except TclError:
            # Silent fail if dialog cannot open
            return ""

    def _save_submission(self, bundle: SubmissionBundle) -> None:
        """Обработчик по умолчанию: сохраняет маску PNG по выбранному пути."""
        try:
            target = filedialog.asksaveasfilename(
                title="Сохранить маску",
                defaultextension=".png",
                initialfile=bundle.mask.filename,
                filetypes=(("PNG", "*.png"),),
            )
        except TclError:
            return
        if not target:
            return
        if not self._guard(lambda: Path(target).write_bytes(bundle.mask.data)):
            return
        logger.info(
            "Submission ready: image %s (%d bytes), mask %dx%d, prompt %r",
            bundle.image_name, len(bundle.image_bytes), bundle.mask.width, bundle.mask.height, bundle.prompt,
        )
        self.sidebar.show_info(f"Маска сохранена: {target}")

    def _refresh(self) -> None:
        session = self.session
        has_image = session.source is not None
        self.canvas.set_preview(session.render_preview(), session.geometry)
        self.canvas.set_drawing_enabled(session.can_draw)
        self.bottom.set_editor_enabled(session.can_draw)
        self.bottom.set_brush_radius(session.brush.radius)
        self.sidebar.set_mode_value(session.mode, has_image, session.editor_open)
        self.sidebar.set_mask_preview(None if session.can_draw else session.mask_preview())
        self.sidebar.set_submit_enabled(has_image and session.active_mask is not None)
