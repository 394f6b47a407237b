from typing import Callable, Optional

import customtkinter as ctk

from maskstudio.config import EditorConfig
from maskstudio.controllers.app_controller import AppController
from maskstudio.models.mask_model import SubmissionBundle
from maskstudio.services.geometry_service import GeometryService
from maskstudio.services.session_service import MaskSession
from maskstudio.ui.bottom_bar import BottomBar
from maskstudio.ui.mask_canvas import MaskCanvas
from maskstudio.ui.sidebar import Sidebar


class MaskStudioApp(ctk.CTk):
    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        submit_handler: Optional[Callable[[SubmissionBundle], None]] = None,
    ) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        cfg = config or EditorConfig()
        geometry = GeometryService(cfg)

        self.title("Mask Studio")
        self.minsize(cfg.max_width // 2 + 320, cfg.max_height // 2 + 120)

        # root layout: left canvas, right sidebar
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)

        self._canvas = MaskCanvas(self, geometry_service=geometry)
        self._canvas.grid(row=0, column=0, sticky="nsew", padx=(12, 6), pady=(12, 6))

        self._sidebar = Sidebar(self, default_prompt=cfg.default_prompt)
        self._sidebar.grid(row=0, column=1, sticky="ns", padx=(6, 12), pady=(12, 6))

        self._bottom = BottomBar(self, brush_min=cfg.brush_min, brush_max=cfg.brush_max, brush_value=cfg.brush_default)
        self._bottom.grid(row=1, column=0, columnspan=2, sticky="ew", padx=12, pady=(0, 12))

        self._controller = AppController(
            canvas=self._canvas,
            sidebar=self._sidebar,
            bottom=self._bottom,
            window=self,
            session=MaskSession(cfg, geometry_service=geometry),
            submit_handler=submit_handler,
        )
        self._controller.bind_events()
