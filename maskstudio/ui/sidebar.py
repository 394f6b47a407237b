"""Боковая панель: исходное изображение, режим маски, промпт и отправка.

Принципы:
- SRP: управляет только UI параметров, не содержит логики маски.
- ISP: отдаёт значения через компактные методы `get_*`, события через `on_*`.
"""
from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk
from PIL import Image

from maskstudio.models.image_model import ImageData
from maskstudio.models.mask_model import DisplayGeometry, MaskMode

_MODE_LABELS = {MaskMode.UPLOAD: "Загрузить маску", MaskMode.DRAW: "Нарисовать маску"}
_LABEL_TO_MODE = {label: mode for mode, label in _MODE_LABELS.items()}

_INSTRUCTIONS = (
    "• Рисуйте белой кистью, чтобы создать маску\n"
    "• Белые области будут изменены\n"
    "• Чёрные области останутся без изменений\n"
    "• Размер кисти — ползунок внизу\n"
    "• «Очистить маску» — начать заново\n"
    "• «Использовать маску» — закончить"
)

_PREVIEW_BOX = (248, 186)


class Sidebar(ctk.CTkFrame):
    """Панель с блоками: файл, информация, маска, промпт, статус."""
    def __init__(self, master: ctk.CTk, default_prompt: str = "", **kwargs) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_mode_change: Optional[Callable[[MaskMode], None]] = None
        self.on_open_mask: Optional[Callable[[], None]] = None
        self.on_edit_mask: Optional[Callable[[], None]] = None
        self.on_prompt_change: Optional[Callable[[str], None]] = None
        self.on_submit: Optional[Callable[[], None]] = None

        # File section
        self._title = ctk.CTkLabel(self, text="Изображение", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть изображение…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 6), sticky="ew")

        self._name_val = ctk.StringVar(value="—")
        self._dims_val = ctk.StringVar(value="—")
        self._info_name = ctk.CTkLabel(self, textvariable=self._name_val, wraplength=250, anchor="w", justify="left")
        self._info_dims = ctk.CTkLabel(self, textvariable=self._dims_val, anchor="w", justify="left")
        self._info_name.grid(row=2, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_dims.grid(row=3, column=0, padx=8, pady=(0, 8), sticky="ew")

        # Mask section
        self._mask_title = ctk.CTkLabel(self, text="Маска", font=ctk.CTkFont(size=16, weight="bold"))
        self._mask_title.grid(row=4, column=0, padx=8, pady=(8, 4), sticky="w")

        self._mode_buttons = ctk.CTkSegmentedButton(
            self, values=[_MODE_LABELS[MaskMode.UPLOAD], _MODE_LABELS[MaskMode.DRAW]], command=self._emit_mode_change
        )
        self._mode_buttons.set(_MODE_LABELS[MaskMode.DRAW])
        self._mode_buttons.grid(row=5, column=0, padx=8, pady=(0, 6), sticky="ew")

        self._open_mask_btn = ctk.CTkButton(self, text="Выбрать файл маски…", command=self._emit_open_mask)
        self._edit_mask_btn = ctk.CTkButton(self, text="Редактировать маску", command=self._emit_edit_mask)

        self._mask_preview = ctk.CTkLabel(self, text="", width=_PREVIEW_BOX[0], height=_PREVIEW_BOX[1])
        self._mask_preview_image: Optional[ctk.CTkImage] = None

        self._instructions = ctk.CTkLabel(self, text=_INSTRUCTIONS, anchor="w", justify="left", wraplength=250)
        self._instructions.grid(row=9, column=0, padx=8, pady=(4, 8), sticky="ew")

        # Prompt section
        self._prompt_title = ctk.CTkLabel(self, text="Описание правки", font=ctk.CTkFont(size=16, weight="bold"))
        self._prompt_title.grid(row=10, column=0, padx=8, pady=(8, 4), sticky="w")
        self._prompt_box = ctk.CTkTextbox(self, height=96, wrap="word")
        self._prompt_box.insert("1.0", default_prompt)
        self._prompt_box.grid(row=11, column=0, padx=8, pady=(0, 6), sticky="ew")
        self._prompt_box.bind("<KeyRelease>", self._emit_prompt_change)

        self._submit_btn = ctk.CTkButton(self, text="Отправить", command=self._emit_submit)
        self._submit_btn.grid(row=12, column=0, padx=8, pady=(0, 6), sticky="ew")

        # filler
        self.grid_rowconfigure(99, weight=1)

        # Status
        self._status_val = ctk.StringVar(value="")
        self._status = ctk.CTkLabel(self, textvariable=self._status_val, wraplength=250, anchor="w", justify="left")
        self._status.grid(row=100, column=0, padx=8, pady=(4, 8), sticky="ew")

        self.set_mode_value(MaskMode.DRAW, has_image=False, editor_open=False)

    # ---- Public API ----
    def set_image_info(self, image_data: Optional[ImageData], geometry: Optional[DisplayGeometry]) -> None:
        if image_data is None:
            self._name_val.set("—")
            self._dims_val.set("—")
            return
        self._name_val.set(f"Файл: {image_data.name} ({self._format_size(image_data.size_bytes)})")
        display = f" → {geometry.width}×{geometry.height}" if geometry is not None else ""
        self._dims_val.set(f"Размер: {image_data.width}×{image_data.height}{display}")

    def set_mode_value(self, mode: MaskMode, has_image: bool, editor_open: bool) -> None:
        """Синхронизирует переключатель режима и видимость кнопок маски."""
        self._mode_buttons.set(_MODE_LABELS[mode])
        if mode == MaskMode.UPLOAD:
            self._open_mask_btn.grid(row=6, column=0, padx=8, pady=(0, 6), sticky="ew")
            self._edit_mask_btn.grid_remove()
        else:
            self._open_mask_btn.grid_remove()
            if has_image and not editor_open:
                self._edit_mask_btn.grid(row=6, column=0, padx=8, pady=(0, 6), sticky="ew")
            else:
                self._edit_mask_btn.grid_remove()

    def set_mask_preview(self, image: Optional[Image.Image]) -> None:
        if image is None:
            self._mask_preview.grid_remove()
            self._mask_preview_image = None
            return
        w, h = image.size
        scale = min(_PREVIEW_BOX[0] / max(1, w), _PREVIEW_BOX[1] / max(1, h))
        size = (max(1, int(w * scale)), max(1, int(h * scale)))
        self._mask_preview_image = ctk.CTkImage(light_image=image, dark_image=image, size=size)
        self._mask_preview.configure(image=self._mask_preview_image)
        self._mask_preview.grid(row=7, column=0, padx=8, pady=(0, 6))

    def set_submit_enabled(self, enabled: bool) -> None:
        self._submit_btn.configure(state="normal" if enabled else "disabled")

    def get_prompt(self) -> str:
        return self._prompt_box.get("1.0", "end").strip()

    def show_error(self, message: str) -> None:
        self._status.configure(text_color="#dc2626")
        self._status_val.set(message)

    def show_info(self, message: str) -> None:
        self._status.configure(text_color=("gray10", "gray90"))
        self._status_val.set(message)

    def clear_status(self) -> None:
        self._status_val.set("")

    # ---- Events ----
    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _emit_mode_change(self, value: str) -> None:
        mode = _LABEL_TO_MODE.get(value)
        if mode is not None and self.on_mode_change:
            self.on_mode_change(mode)

    def _emit_open_mask(self) -> None:
        if self.on_open_mask:
            self.on_open_mask()

    def _emit_edit_mask(self) -> None:
        if self.on_edit_mask:
            self.on_edit_mask()

    def _emit_prompt_change(self, _event: object) -> None:
        if self.on_prompt_change:
            self.on_prompt_change(self.get_prompt())

    def _emit_submit(self) -> None:
        if self.on_submit:
            self.on_submit()

    def _format_size(self, size_bytes: Optional[int]) -> str:
        if size_bytes is None:
            return "—"
        thresholds = [("Б", 1024), ("КБ", 1024**2), ("МБ", 1024**3)]
        for label, limit in thresholds:
            if size_bytes < limit:
                if label == "Б":
                    return f"{size_bytes} {label}"
                value = size_bytes / (limit // 1024)
                return f"{value:.1f} {label}"
        return f"{size_bytes / 1024**3:.1f} ГБ"
