from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, brush_min: int = 5, brush_max: int = 100, brush_value: int = 30, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_brush_change: Optional[Callable[[int], None]] = None
        self.on_brush_step: Optional[Callable[[int], None]] = None
        self.on_clear: Optional[Callable[[], None]] = None
        self.on_generate: Optional[Callable[[], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(3, weight=1)  # slider stretches

        # Brush controls
        self._brush_label = ctk.CTkLabel(self, text="Кисть")
        self._brush_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="w")

        self._minus_btn = ctk.CTkButton(self, text="−", width=32, command=lambda: self._emit_step(-1))
        self._minus_btn.grid(row=0, column=1, padx=(0, 4), pady=8)
        self._plus_btn = ctk.CTkButton(self, text="+", width=32, command=lambda: self._emit_step(1))
        self._plus_btn.grid(row=0, column=2, padx=(0, 6), pady=8)

        self._brush_value = ctk.StringVar(value=f"{brush_value}px")
        steps = max(1, brush_max - brush_min)
        self._brush_slider = ctk.CTkSlider(
            self, from_=brush_min, to=brush_max, number_of_steps=steps, command=self._on_slider_change
        )
        self._brush_slider.set(brush_value)
        self._brush_slider.grid(row=0, column=3, padx=6, pady=8, sticky="ew")
        self._brush_value_label = ctk.CTkLabel(self, textvariable=self._brush_value, width=56, anchor="w")
        self._brush_value_label.grid(row=0, column=4, padx=(6, 12), pady=8, sticky="w")

        # Mask actions
        self._clear_btn = ctk.CTkButton(
            self, text="Очистить маску", fg_color="#b91c1c", hover_color="#991b1b", command=self._emit_clear
        )
        self._clear_btn.grid(row=0, column=5, padx=6, pady=8, sticky="e")
        self._generate_btn = ctk.CTkButton(
            self, text="Использовать маску", fg_color="#15803d", hover_color="#166534", command=self._emit_generate
        )
        self._generate_btn.grid(row=0, column=6, padx=(6, 10), pady=8, sticky="e")

    # public API (sync from controller)
    def set_brush_radius(self, radius: int) -> None:
        self._brush_slider.set(radius)
        self._brush_value.set(f"{radius}px")

    def set_editor_enabled(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        for widget in (self._minus_btn, self._plus_btn, self._brush_slider, self._clear_btn, self._generate_btn):
            widget.configure(state=state)

    # events
    def _on_slider_change(self, value: float) -> None:
        radius = int(round(value))
        self._brush_value.set(f"{radius}px")
        if self.on_brush_change:
            self.on_brush_change(radius)

    def _emit_step(self, direction: int) -> None:
        if self.on_brush_step:
            self.on_brush_step(direction)

    def _emit_clear(self) -> None:
        if self.on_clear:
            self.on_clear()

    def _emit_generate(self) -> None:
        if self.on_generate:
            self.on_generate()
