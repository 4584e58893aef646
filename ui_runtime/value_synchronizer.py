"""Two-way binding between a converted slider and its numeric value field."""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from ui_runtime.event_bindings import IDLE_TICK, SLIDER_MOVED, TEXT_EDITED, EventRegistry, Subscription

LOGGER = logging.getLogger("SpatialUIConverter.Runtime")

# Continuous values are shown with at most this many decimals.
DISPLAY_PRECISION = 6


class SliderModel:
    """Normalised slider state; notifies ``registry`` when the value changes."""

    def __init__(
        self,
        value: float = 0.0,
        *,
        step_divisions: Optional[int] = None,
        registry: Optional[EventRegistry] = None,
    ) -> None:
        self._value = _clamp(float(value), 0.0, 1.0)
        self.step_divisions = step_divisions
        self.registry = registry

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, new_value: float) -> None:
        self._value = _clamp(float(new_value), 0.0, 1.0)
        if self.registry is not None:
            self.registry.emit(SLIDER_MOVED, self._value, source=self)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"value": round(self._value, 6)}
        if self.step_divisions is not None:
            payload["step_divisions"] = self.step_divisions
        return payload


class InputFieldModel:
    """Editable text field state; notifies ``registry`` on every text change."""

    def __init__(self, text: str = "", *, registry: Optional[EventRegistry] = None) -> None:
        self._text = text
        self.focused = False
        self.registry = registry

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, new_text: str) -> None:
        self._text = new_text
        if self.registry is not None:
            self.registry.emit(TEXT_EDITED, new_text, source=self)

    def to_payload(self) -> Dict[str, Any]:
        return {"text": self._text}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_number(value: float, stepped: bool = False) -> str:
    """Render ``value`` the way the value field displays it (no trailing ``.0``)."""

    if stepped:
        return str(_round_half_up(value))
    value = round(value, DISPLAY_PRECISION)
    if value == 0:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return repr(value)


class SliderValueSynchronizer:
    """Keeps a slider and its value field consistent without feedback loops.

    ``updating`` blocks re-entrant delivery while one side writes to the other;
    ``needs_validation`` defers normalising the field text until it loses focus.
    """

    def __init__(
        self,
        slider: SliderModel,
        field: InputFieldModel,
        low: float,
        high: float,
        stepped: bool = False,
    ) -> None:
        self.slider = slider
        self.field = field
        self.low = float(low)
        self.high = float(high)
        self.stepped = stepped
        self.updating = False
        self.needs_validation = False
        self._subscriptions: List[Subscription] = []

    def current_value(self) -> float:
        """Denormalised slider value."""

        return self.slider.value * (self.high - self.low) + self.low

    def normalize(self, value: float) -> float:
        span = self.high - self.low
        if span == 0:
            return 0.0
        return (value - self.low) / span

    def _parse(self, text: str) -> float:
        token = (text or "").strip()
        if not token:
            return self.current_value()
        try:
            value = float(token)
        except ValueError:
            LOGGER.debug("Value field text %r is not a number; keeping slider value", text)
            return self.current_value()
        if not math.isfinite(value):
            return self.current_value()
        return value

    def _canonical(self, value: float) -> float:
        value = _clamp(value, min(self.low, self.high), max(self.low, self.high))
        if self.stepped:
            value = float(_round_half_up(value))
            value = _clamp(value, min(self.low, self.high), max(self.low, self.high))
        return value

    def on_slider_moved(self, _value: object = None) -> None:
        if self.updating:
            return
        self.updating = True
        try:
            self.field.text = format_number(self.current_value(), self.stepped)
        finally:
            self.updating = False

    def on_text_edited(self, text: Optional[str] = None) -> None:
        if self.updating:
            return
        self.updating = True
        try:
            raw = self.field.text if text is None else text
            if raw != self.field.text:
                self.field.text = raw
            value = self._canonical(self._parse(raw))
            self.slider.value = self.normalize(value)
        finally:
            self.updating = False
        self.needs_validation = True

    def on_idle_tick(self, _payload: object = None) -> None:
        if self.field.focused or not self.needs_validation:
            return
        value = self._canonical(self._parse(self.field.text))
        self.updating = True
        try:
            self.field.text = format_number(value, self.stepped)
        finally:
            self.updating = False
        self.needs_validation = False

    def bind(self, registry: EventRegistry) -> List[Subscription]:
        """Subscribe to the slider, the field and the host's idle tick."""

        self.unbind()
        self.slider.registry = registry
        self.field.registry = registry
        self._subscriptions = [
            registry.subscribe(SLIDER_MOVED, self.on_slider_moved, source=self.slider),
            registry.subscribe(TEXT_EDITED, self.on_text_edited, source=self.field),
            registry.subscribe(IDLE_TICK, self.on_idle_tick),
        ]
        return list(self._subscriptions)

    def unbind(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
