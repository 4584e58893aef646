"""Pure geometry helpers for projecting 2D layout rectangles into scene space."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

Size2 = Tuple[float, float]


class GeometryError(ValueError):
    """Raised when a rectangle cannot be projected (zero-sized parent)."""


@dataclass(frozen=True)
class LayoutRect:
    """Resolved layout box in pixels, relative to the parent's content box."""

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def size(self) -> Size2:
        return self.width, self.height

    @property
    def center(self) -> Size2:
        return self.left + self.width / 2.0, self.top + self.height / 2.0

    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0


@dataclass(frozen=True)
class ResolvedGeometry:
    target_size: Size2
    local_scale: Size2
    local_position: Size2


def _require_extent(size: Size2, label: str) -> None:
    width, height = size
    for value in (width, height):
        if not math.isfinite(value) or math.isclose(value, 0.0, abs_tol=1e-12):
            raise GeometryError(f"{label} must be non-zero on both axes, got {size!r}")


def resolve_geometry(
    source_rect: LayoutRect,
    parent_source_size: Size2,
    native_size: Size2,
    target_parent_size: Size2,
) -> ResolvedGeometry:
    """Project one element into its parent's converted frame.

    The returned position uses a parent-local convention where ``±0.5`` are the
    parent's edges; the Y component is flipped (source Y-down, target Y-up).
    """

    _require_extent(parent_source_size, "parent source size")
    _require_extent(target_parent_size, "target parent size")
    _require_extent(native_size, "native size")
    parent_w, parent_h = parent_source_size
    target_parent_w, target_parent_h = target_parent_size
    native_w, native_h = native_size

    ratio_x = source_rect.width / parent_w
    ratio_y = source_rect.height / parent_h
    target_w = ratio_x * target_parent_w
    target_h = ratio_y * target_parent_h

    center_x, center_y = source_rect.center
    distance_x = center_x - parent_w / 2.0
    distance_y = parent_h / 2.0 - center_y

    convert_x = target_parent_w / parent_w
    convert_y = target_parent_h / parent_h
    position_x = (distance_x * convert_x) / (target_parent_w / 2.0) * 0.5
    position_y = (distance_y * convert_y) / (target_parent_h / 2.0) * 0.5

    return ResolvedGeometry(
        target_size=(target_w, target_h),
        local_scale=(target_w / native_w, target_h / native_h),
        local_position=(position_x, position_y),
    )


def preserve_aspect_footprint(width: float, source_size: Size2) -> Size2:
    """Return ``(width, width * h / w)`` for the source root size."""

    _require_extent(source_size, "source root size")
    source_w, source_h = source_size
    return width, width * (source_h / source_w)
