"""Холст редактора маски: исходник с полупрозрачной маской и ввод кистью.

Принципы:
- SRP: отвечает только за отображение и перевод событий Tk в `PointerInput`.
- Чистый код: рисование и состояние штриха живут в сессии, виджет их не хранит.
"""
from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from maskstudio.models.mask_model import BoundingRect, DisplayGeometry
from maskstudio.services.geometry_service import GeometryService
from maskstudio.services.input_service import PointerInput, PointerPhase


class MaskCanvas(ctk.CTkFrame):
    """Канва с исходником и маской, вписанными в доступную область."""
    def __init__(self, master: ctk.CTk | tk.Misc, geometry_service: Optional[GeometryService] = None, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg(), cursor="arrow")
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._geometry_service = geometry_service or GeometryService()
        self._preview: Optional[Image.Image] = None
        self._geometry: Optional[DisplayGeometry] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None
        self._rect: BoundingRect = BoundingRect(0, 0, 0, 0)
        self._drawing_enabled: bool = False

        # returns True when the platform default must be suppressed
        self.on_pointer: Optional[Callable[[PointerInput], bool]] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)

        # Brush input with left mouse button
        self._canvas.bind("<ButtonPress-1>", lambda e: self._emit(PointerPhase.DOWN, e))
        self._canvas.bind("<B1-Motion>", lambda e: self._emit(PointerPhase.MOVE, e))
        self._canvas.bind("<ButtonRelease-1>", lambda e: self._emit(PointerPhase.UP, e))
        self._canvas.bind("<Leave>", lambda e: self._emit(PointerPhase.LEAVE, e))

        # Scroll gestures are swallowed while a stroke is in progress
        self._canvas.bind("<MouseWheel>", self._on_scroll)      # Windows/macOS
        self._canvas.bind("<Button-4>", self._on_scroll)        # Linux scroll up
        self._canvas.bind("<Button-5>", self._on_scroll)        # Linux scroll down

        self._stroke_active: bool = False

    # ---- Public API ----
    def set_preview(self, image: Optional[Image.Image], geometry: Optional[DisplayGeometry]) -> None:
        """Устанавливает кадр для отображения (в размере подложки) и перерисовывает."""
        self._preview = image
        self._geometry = geometry
        self._render()

    def set_drawing_enabled(self, enabled: bool) -> None:
        self._drawing_enabled = enabled
        self._canvas.configure(cursor="crosshair" if enabled else "arrow")
        if not enabled:
            self._stroke_active = False

    def surface_rect(self) -> BoundingRect:
        """Прямоугольник поверхности маски в координатах канвы."""
        return self._rect

    # ---- Internals ----
    def _emit(self, phase: PointerPhase, event: tk.Event) -> Optional[str]:
        if not self._drawing_enabled or self.on_pointer is None:
            return None
        if phase == PointerPhase.DOWN:
            self._canvas.focus_set()
        suppress = self.on_pointer(PointerInput(phase, float(event.x), float(event.y)))
        self._stroke_active = phase in (PointerPhase.DOWN, PointerPhase.MOVE) and suppress
        return "break" if suppress else None

    def _on_scroll(self, _event: tk.Event) -> Optional[str]:
        return "break" if self._stroke_active else None

    def _on_canvas_resize(self, _event: tk.Event) -> None:
        if self._preview is None:
            return
        self._render()

    def _render(self) -> None:
        self._canvas.delete("all")
        if self._preview is None or self._geometry is None:
            self._rect = BoundingRect(0, 0, 0, 0)
            return

        canvas_w = int(self._canvas.winfo_width())
        canvas_h = int(self._canvas.winfo_height())
        rect = self._geometry_service.layout_rect(self._geometry, canvas_w, canvas_h)
        self._rect = rect

        frame = self._preview
        if frame.size != (int(rect.width), int(rect.height)):
            frame = frame.resize((int(rect.width), int(rect.height)), Image.Resampling.LANCZOS)
        self._tk_image = ImageTk.PhotoImage(frame)
        self._canvas.create_image(rect.left, rect.top, image=self._tk_image, anchor="nw")

    def _get_canvas_bg(self) -> str:
        # CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"
