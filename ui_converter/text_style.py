"""Text appearance rules shared by labels, controls and input fields."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from PyQt6.QtGui import QColor

from ui_converter.source_tree import FontStyle, SourceElement

# Control text inherits transform scale: source size 12 renders as 0.04.
CONTROL_FONT_REFERENCE_SIZE = 12.0
CONTROL_FONT_REFERENCE_POINT = 0.04

RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class TextAppearance:
    text: str
    font_size: float
    color: RGBA
    bold: bool = False
    italic: bool = False
    vertical_alignment: str = "middle"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "font_size": round(self.font_size, 6),
            "color": list(self.color),
            "bold": self.bold,
            "italic": self.italic,
            "vertical_alignment": self.vertical_alignment,
        }


def _qcolor_from_sequence(values: Sequence[Any]) -> QColor:
    try:
        numbers = [float(value) for value in values]
    except (TypeError, ValueError):
        return QColor()
    if len(numbers) == 3:
        numbers.append(1.0 if all(value <= 1.0 for value in numbers) else 255.0)
    if len(numbers) != 4:
        return QColor()
    if all(0.0 <= value <= 1.0 for value in numbers):
        return QColor.fromRgbF(*numbers)
    red, green, blue, alpha = (max(0, min(int(round(value)), 255)) for value in numbers)
    return QColor(red, green, blue, alpha)


def resolve_color(value: Any, default: str = "black") -> RGBA:
    """Normalise a style color (hex, SVG name or RGBA sequence) to 0-255 RGBA."""

    if isinstance(value, QColor):
        color = QColor(value)
    elif isinstance(value, (list, tuple)):
        color = _qcolor_from_sequence(value)
    elif value is None:
        color = QColor()
    else:
        color = QColor(str(value).strip())
    if not color.isValid():
        color = QColor(default)
    return color.red(), color.green(), color.blue(), color.alpha()


def control_font_size(source_font_size: float) -> float:
    """Font size for text inside a control's icon cluster."""

    return CONTROL_FONT_REFERENCE_POINT * (source_font_size / CONTROL_FONT_REFERENCE_SIZE)


def text_block_font_size(source_font_size: float, footprint_height: float) -> float:
    """Font size for free-standing text blocks, which do not inherit node scale."""

    return source_font_size * footprint_height


def appearance_for(element: SourceElement, font_size: float, *, text: Optional[str] = None) -> TextAppearance:
    style = element.style
    font_style = style.font_style
    return TextAppearance(
        text=element.text if text is None else text,
        font_size=font_size,
        color=resolve_color(style.color),
        bold=font_style in (FontStyle.BOLD, FontStyle.BOLD_AND_ITALIC),
        italic=font_style in (FontStyle.ITALIC, FontStyle.BOLD_AND_ITALIC),
    )
