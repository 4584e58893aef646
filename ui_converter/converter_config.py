"""Configuration helpers for the UI converter."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

from ui_converter.source_tree import coerce_bool
from ui_converter.templates import ToggleStyle

SCROLL_DIRECTIONS = ("vertical", "horizontal")
MIN_EXTENT_CM = 0.1
MAX_EXTENT_CM = 10000.0


@dataclass
class ConverterSettings:
    """Host-selected options surfaced to the conversion orchestrator."""

    footprint: Tuple[float, float] = (30.0, 30.0)
    preserve_aspect_ratio: bool = True
    toggle_style: ToggleStyle = ToggleStyle.CHECKBOX
    scroll_direction: str = "vertical"
    show_control_backing: bool = True
    show_collapsible_content: bool = False
    collapsible_cell_size: Tuple[float, float] = (10.0, 10.0)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ConverterSettings":
        """Create settings from a JSON-compatible mapping, keeping defaults for bad values."""
        defaults = cls()

        def _extent(value: Any, fallback: Tuple[float, float]) -> Tuple[float, float]:
            if isinstance(value, dict):
                value = (value.get("width"), value.get("height"))
            try:
                width, height = (float(item) for item in value)
            except (TypeError, ValueError):
                return fallback
            if not (math.isfinite(width) and math.isfinite(height)):
                return fallback
            if width <= 0.0 or height <= 0.0:
                return fallback
            return (
                max(MIN_EXTENT_CM, min(width, MAX_EXTENT_CM)),
                max(MIN_EXTENT_CM, min(height, MAX_EXTENT_CM)),
            )

        direction = str(payload.get("scroll_direction") or defaults.scroll_direction).strip().lower()
        if direction not in SCROLL_DIRECTIONS:
            direction = defaults.scroll_direction

        return cls(
            footprint=_extent(payload.get("footprint"), defaults.footprint),
            preserve_aspect_ratio=coerce_bool(payload.get("preserve_aspect_ratio"), defaults.preserve_aspect_ratio),
            toggle_style=ToggleStyle.from_token(payload.get("toggle_style"), defaults.toggle_style),
            scroll_direction=direction,
            show_control_backing=coerce_bool(payload.get("show_control_backing"), defaults.show_control_backing),
            show_collapsible_content=coerce_bool(
                payload.get("show_collapsible_content"), defaults.show_collapsible_content
            ),
            collapsible_cell_size=_extent(payload.get("collapsible_cell_size"), defaults.collapsible_cell_size),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "footprint": list(self.footprint),
            "preserve_aspect_ratio": self.preserve_aspect_ratio,
            "toggle_style": self.toggle_style.value,
            "scroll_direction": self.scroll_direction,
            "show_control_backing": self.show_control_backing,
            "show_collapsible_content": self.show_collapsible_content,
            "collapsible_cell_size": list(self.collapsible_cell_size),
        }


def load_converter_settings(settings_path: Path) -> ConverterSettings:
    """Read converter settings from JSON, falling back to defaults if the file is unusable."""
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return ConverterSettings()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return ConverterSettings()
    if not isinstance(data, dict):
        return ConverterSettings()
    return ConverterSettings.from_payload(data)
