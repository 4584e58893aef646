"""In-memory model of the resolved 2D UI tree handed to the converter."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ui_converter.geometry import LayoutRect

LOGGER = logging.getLogger("SpatialUIConverter.SourceTree")


class SourceTreeError(ValueError):
    """Raised when a source tree payload is structurally invalid."""


class ElementKind(Enum):
    LABEL = "label"
    BUTTON = "button"
    TOGGLE = "toggle"
    SLIDER = "slider"
    SLIDER_INT = "slider-int"
    TEXT_FIELD = "text-field"
    SCROLL_VIEW = "scroll-view"
    FOLDOUT = "foldout"
    CONTAINER = "element"
    UNCLASSIFIED = "unclassified"

    @classmethod
    def from_token(cls, value: Any) -> "ElementKind":
        token = str(value or "").strip().lower().replace("_", "-")
        for kind in cls:
            if kind.value == token:
                return kind
        return cls.UNCLASSIFIED

    @property
    def is_control(self) -> bool:
        return self in _CONTROL_KINDS


_CONTROL_KINDS = frozenset(
    {
        ElementKind.LABEL,
        ElementKind.BUTTON,
        ElementKind.TOGGLE,
        ElementKind.SLIDER,
        ElementKind.SLIDER_INT,
        ElementKind.TEXT_FIELD,
    }
)


class FontStyle(Enum):
    NORMAL = "normal"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_AND_ITALIC = "bold-and-italic"

    @classmethod
    def from_token(cls, value: Any) -> "FontStyle":
        token = str(value or "").strip().lower().replace("_", "-").replace(" ", "-")
        if token in {"bold-italic", "bolditalic", "bold-and-italic", "boldanditalic"}:
            return cls.BOLD_AND_ITALIC
        for style in cls:
            if style.value == token:
                return style
        return cls.NORMAL


@dataclass(frozen=True)
class TextStyle:
    font_size: float = 12.0
    color: Any = "#000000"
    font_style: FontStyle = FontStyle.NORMAL
    has_background: bool = False
    visible: bool = True


@dataclass(eq=False)
class SourceElement:
    """Immutable-by-convention snapshot of one resolved UI element."""

    kind: ElementKind
    name: str = ""
    rect: LayoutRect = field(default_factory=LayoutRect)
    style: TextStyle = field(default_factory=TextStyle)
    text: str = ""
    value: Any = None
    low: float = 0.0
    high: float = 1.0
    show_input_field: bool = False
    expanded: bool = False
    parts: Dict[str, "SourceElement"] = field(default_factory=dict)
    children: List["SourceElement"] = field(default_factory=list)
    parent: Optional["SourceElement"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self
        for part in self.parts.values():
            if part.parent is None:
                part.parent = self

    @property
    def size(self) -> Tuple[float, float]:
        return self.rect.size

    @property
    def parent_size(self) -> Tuple[float, float]:
        if self.parent is None:
            raise SourceTreeError(f"Element {self.display_name()!r} has no parent to measure against")
        return self.parent.size

    def has_children(self) -> bool:
        return bool(self.children)

    def part(self, key: str) -> Optional["SourceElement"]:
        return self.parts.get(key)

    def content_area(self) -> "SourceElement":
        """Element whose children are converted for scroll/foldout kinds."""

        return self.parts.get("content") or self

    def display_name(self, fallback: Optional[str] = None) -> str:
        if self.name:
            return self.name
        return fallback or self.kind.value


def _float(value: Any, fallback: float) -> float:
    if value is None:
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return number


_TRUE_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_TOKENS = frozenset({"0", "false", "no", "off", ""})


def coerce_bool(value: Any, fallback: bool) -> bool:
    """Read a JSON flag; strings like ``"false"`` or ``"off"`` are False."""

    if value is None:
        return fallback
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
        return fallback
    return bool(value)


def _rect_from_payload(raw: Any) -> LayoutRect:
    if raw is None:
        return LayoutRect()
    if isinstance(raw, (list, tuple)) and len(raw) == 4:
        left, top, width, height = raw
        raw = {"left": left, "top": top, "width": width, "height": height}
    if not isinstance(raw, Mapping):
        raise SourceTreeError(f"Layout rect must be a mapping or 4-item list, got {type(raw).__name__}")
    width = _float(raw.get("width"), 0.0)
    height = _float(raw.get("height"), 0.0)
    if width < 0.0 or height < 0.0:
        raise SourceTreeError(f"Layout rect cannot have a negative size: {width}x{height}")
    return LayoutRect(
        left=_float(raw.get("left", raw.get("x")), 0.0),
        top=_float(raw.get("top", raw.get("y")), 0.0),
        width=width,
        height=height,
    )


def _style_from_payload(raw: Any) -> TextStyle:
    if not isinstance(raw, Mapping):
        return TextStyle()
    defaults = TextStyle()
    font_size = _float(raw.get("font_size"), defaults.font_size)
    return TextStyle(
        font_size=max(0.0, font_size),
        color=raw.get("color", defaults.color),
        font_style=FontStyle.from_token(raw.get("font_style")),
        has_background=coerce_bool(raw.get("background"), defaults.has_background),
        visible=coerce_bool(raw.get("visible"), defaults.visible),
    )


def _value_for(kind: ElementKind, raw: Any, low: float) -> Any:
    if kind in (ElementKind.SLIDER, ElementKind.SLIDER_INT):
        return _float(raw, low)
    if kind in (ElementKind.TOGGLE, ElementKind.FOLDOUT):
        return coerce_bool(raw, False)
    return raw


def element_from_payload(payload: Mapping[str, Any]) -> SourceElement:
    """Build a :class:`SourceElement` tree from a JSON-compatible mapping."""

    if not isinstance(payload, Mapping):
        raise SourceTreeError(f"Element payload must be a mapping, got {type(payload).__name__}")
    raw_children = payload.get("children")
    raw_parts = payload.get("parts")
    if raw_children is None:
        raw_children = []
    if raw_parts is None:
        raw_parts = {}
    if not isinstance(raw_children, list):
        raise SourceTreeError("'children' must be a list")
    if not isinstance(raw_parts, Mapping):
        raise SourceTreeError("'parts' must be a mapping")
    kind = ElementKind.from_token(payload.get("kind"))
    if kind is ElementKind.UNCLASSIFIED and payload.get("kind"):
        LOGGER.debug("Unsupported element kind %r will be converted as a container", payload.get("kind"))
    low = _float(payload.get("low"), 0.0)
    high = _float(payload.get("high"), 1.0)
    return SourceElement(
        kind=kind,
        name=str(payload.get("name") or ""),
        rect=_rect_from_payload(payload.get("rect")),
        style=_style_from_payload(payload.get("style")),
        text=str(payload.get("text") or ""),
        value=_value_for(kind, payload.get("value"), low),
        low=low,
        high=high,
        show_input_field=coerce_bool(payload.get("show_input_field"), False),
        expanded=coerce_bool(payload.get("expanded"), False),
        parts={str(key): element_from_payload(part) for key, part in raw_parts.items()},
        children=[element_from_payload(child) for child in raw_children],
    )


def load_source_tree(path: Path) -> SourceElement:
    """Read a resolved UI tree exported by the host as JSON."""

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SourceTreeError(f"Source tree {path} is not valid JSON: {exc}") from exc
    if isinstance(raw, Mapping) and "root" in raw:
        raw = raw["root"]
    return element_from_payload(raw)
