"""Настройки редактора масок.

Значения по умолчанию совпадают с поведением веб-версии редактора (бокс 800×600,
кисть 5–100px, шаг 5px). Переопределения читаются из переменных окружения
`MASKSTUDIO_*`; некорректные значения логируются и игнорируются.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Callable, Mapping, Optional, TypeVar

from maskstudio.models.mask_model import BrushConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class EditorConfig:
    max_width: int = 800
    max_height: int = 600
    brush_min: int = 5
    brush_max: int = 100
    brush_default: int = 30
    brush_step: int = 5
    overlay_opacity: float = 0.5
    default_prompt: str = "A sunlit indoor lounge area with a pool containing a flamingo"
    log_level: str = "INFO"

    def brush(self) -> BrushConfig:
        """Начальная конфигурация кисти."""
        return BrushConfig(radius=self.brush_default, min_radius=self.brush_min, max_radius=self.brush_max)


def _read(environ: Mapping[str, str], key: str, parse: Callable[[str], T], default: T) -> T:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        logger.warning("Invalid value %s=%r, using %r", key, raw, default)
        return default


def load_config(environ: Optional[Mapping[str, str]] = None) -> EditorConfig:
    """Собирает `EditorConfig` из значений по умолчанию и переменных окружения."""
    env = os.environ if environ is None else environ
    base = EditorConfig()

    max_width = _read(env, "MASKSTUDIO_MAX_WIDTH", int, base.max_width)
    max_height = _read(env, "MASKSTUDIO_MAX_HEIGHT", int, base.max_height)
    if max_width <= 0 or max_height <= 0:
        logger.warning("Display box must be positive, got %sx%s", max_width, max_height)
        max_width, max_height = base.max_width, base.max_height

    brush_default = _read(env, "MASKSTUDIO_BRUSH_DEFAULT", int, base.brush_default)
    brush_default = max(base.brush_min, min(base.brush_max, brush_default))

    opacity = _read(env, "MASKSTUDIO_OVERLAY_OPACITY", float, base.overlay_opacity)
    opacity = max(0.0, min(1.0, opacity))

    log_level = _read(env, "MASKSTUDIO_LOG_LEVEL", str.upper, base.log_level)
    if not isinstance(logging.getLevelName(log_level), int):
        logger.warning("Unknown log level %r, using INFO", log_level)
        log_level = base.log_level

    return replace(
        base,
        max_width=max_width,
        max_height=max_height,
        brush_default=brush_default,
        overlay_opacity=opacity,
        log_level=log_level,
    )
