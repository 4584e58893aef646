"""Library of native 3D templates and their authored sizes.

Each template is instantiated as a fresh :class:`SceneNode` carrying the
template's depth scale/offset and its named sub-parts. Native sizes are the
denominators used when deriving local scale and are never mutated.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ui_converter.scene_node import SceneNode, Transform

LOGGER = logging.getLogger("SpatialUIConverter.Templates")
DEFAULT_TEMPLATES_PATH = Path(__file__).with_name("templates.json")

BACKPLATE = "backplate"
LABEL = "label"
BUTTON = "button"
SLIDER = "slider"
SLIDER_INT = "slider_int"
TEXT_INPUT = "text_input"
CONTAINER = "container"
SCROLL_VIEW = "scroll_view"


class TemplateLibraryError(ValueError):
    """Raised when a template definition is malformed."""


class ToggleStyle(Enum):
    CHECKBOX = "checkbox"
    BUTTON = "button"
    RADIO = "radio"
    SWITCH = "switch"

    @classmethod
    def from_token(cls, value: Any, fallback: Optional["ToggleStyle"] = None) -> "ToggleStyle":
        token = str(value or "").strip().lower()
        for style in cls:
            if style.value == token:
                return style
        return fallback if fallback is not None else cls.CHECKBOX

    @property
    def template_key(self) -> str:
        return f"toggle_{self.value}"


@dataclass(frozen=True)
class TemplatePart:
    name: str
    kind: str


@dataclass(frozen=True)
class TemplateSpec:
    key: str
    asset: str
    kind: str
    native_size: Tuple[float, float]
    depth_scale: float = 1.0
    depth_offset: float = 0.0
    parts: Tuple[TemplatePart, ...] = field(default_factory=tuple)

    def instantiate(self, name: str) -> SceneNode:
        node = SceneNode(
            name=name,
            kind=self.kind,
            template=self.asset,
            transform=Transform(position=(0.0, 0.0, self.depth_offset), scale=(1.0, 1.0, self.depth_scale)),
        )
        for part in self.parts:
            node.add_child(SceneNode(name=part.name, kind=part.kind))
        return node


# Plain engine objects that need no authored asset.
BUILTIN_TEMPLATES: Dict[str, TemplateSpec] = {
    CONTAINER: TemplateSpec(key=CONTAINER, asset="", kind="container", native_size=(100.0, 100.0)),
    SCROLL_VIEW: TemplateSpec(
        key=SCROLL_VIEW,
        asset="ScrollingObjectCollection",
        kind="scroll-view",
        native_size=(25.0, 25.0),
        parts=(TemplatePart(name="Container", kind="scroll-container"),),
    ),
}

REQUIRED_TEMPLATES: Tuple[str, ...] = (BACKPLATE, BUTTON, LABEL, SLIDER)
OPTIONAL_TEMPLATES: Tuple[str, ...] = (SLIDER_INT, TEXT_INPUT)


class TemplateLibrary:
    """Keyed lookup of template specs; built-ins are always present."""

    def __init__(self, templates: Mapping[str, TemplateSpec]) -> None:
        self._templates: Dict[str, TemplateSpec] = dict(BUILTIN_TEMPLATES)
        self._templates.update(templates)

    def lookup(self, key: str) -> Optional[TemplateSpec]:
        return self._templates.get(key)

    def missing(self, keys: Iterable[str]) -> Tuple[str, ...]:
        return tuple(key for key in keys if key not in self._templates)

    def keys(self) -> Tuple[str, ...]:
        return tuple(sorted(self._templates))

    def without(self, *keys: str) -> "TemplateLibrary":
        """Copy of the library with ``keys`` removed (built-ins included)."""

        library = TemplateLibrary({})
        library._templates = {key: spec for key, spec in self._templates.items() if key not in keys}
        return library


def _native_size(key: str, raw: Any) -> Tuple[float, float]:
    try:
        width, height = (float(value) for value in raw)
    except (TypeError, ValueError) as exc:
        raise TemplateLibraryError(f"Template '{key}' needs a two-item native_size, got {raw!r}") from exc
    for value in (width, height):
        if not math.isfinite(value) or value <= 0.0:
            raise TemplateLibraryError(f"Template '{key}' native_size must be positive, got {raw!r}")
    return width, height


def template_from_payload(key: str, payload: Mapping[str, Any]) -> TemplateSpec:
    if not isinstance(payload, Mapping):
        raise TemplateLibraryError(f"Template '{key}' must be a mapping")
    parts = []
    for raw_part in payload.get("parts") or ():
        if not isinstance(raw_part, Mapping) or not raw_part.get("name"):
            raise TemplateLibraryError(f"Template '{key}' has a part without a name: {raw_part!r}")
        parts.append(TemplatePart(name=str(raw_part["name"]), kind=str(raw_part.get("kind") or "part")))
    try:
        depth_scale = float(payload.get("depth_scale", 1.0))
        depth_offset = float(payload.get("depth_offset", 0.0))
    except (TypeError, ValueError) as exc:
        raise TemplateLibraryError(f"Template '{key}' has a non-numeric depth value") from exc
    return TemplateSpec(
        key=key,
        asset=str(payload.get("asset") or key),
        kind=str(payload.get("kind") or key),
        native_size=_native_size(key, payload.get("native_size")),
        depth_scale=depth_scale,
        depth_offset=depth_offset,
        parts=tuple(parts),
    )


def load_template_library(path: Optional[Path] = None) -> TemplateLibrary:
    """Load template definitions from JSON (defaults to the shipped ``templates.json``)."""

    source = path or DEFAULT_TEMPLATES_PATH
    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise TemplateLibraryError(f"Template library {source} is not valid JSON: {exc}") from exc
    entries = raw.get("templates") if isinstance(raw, Mapping) else None
    if not isinstance(entries, Mapping):
        raise TemplateLibraryError(f"Template library {source} has no 'templates' mapping")
    templates = {str(key): template_from_payload(str(key), entry) for key, entry in entries.items()}
    LOGGER.debug("Loaded %d templates from %s", len(templates), source)
    return TemplateLibrary(templates)
