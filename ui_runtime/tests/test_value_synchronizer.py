from __future__ import annotations

import pytest

from ui_runtime.event_bindings import IDLE_TICK, SLIDER_MOVED, TEXT_EDITED, EventRegistry
from ui_runtime.value_synchronizer import (
    InputFieldModel,
    SliderModel,
    SliderValueSynchronizer,
    format_number,
)


def _bound(value=5, low=0, high=10, stepped=False, text="5"):
    registry = EventRegistry()
    slider = SliderModel((value - low) / (high - low))
    field = InputFieldModel(text)
    synchronizer = SliderValueSynchronizer(slider, field, low, high, stepped)
    synchronizer.bind(registry)
    return registry, slider, field, synchronizer


def test_typed_value_moves_slider_and_idle_tick_canonicalises():
    _registry, slider, field, synchronizer = _bound()
    field.text = "7"
    assert slider.value == pytest.approx(0.7)
    assert synchronizer.needs_validation is True
    assert synchronizer.updating is False
    synchronizer.on_idle_tick()
    assert field.text == "7"
    assert synchronizer.needs_validation is False


def test_direct_call_scenario_without_registry():
    slider = SliderModel(0.5)
    field = InputFieldModel("5")
    synchronizer = SliderValueSynchronizer(slider, field, 0, 10)
    synchronizer.on_text_edited("7")
    assert slider.value == pytest.approx(0.7)
    synchronizer.on_idle_tick()
    assert field.text == "7"


@pytest.mark.parametrize("text, expected", [("3.25", 3.25), ("0", 0.0), ("10", 10.0), ("-4", 0.0), ("42", 10.0)])
def test_text_round_trips_or_clamps(text, expected):
    _registry, slider, field, synchronizer = _bound()
    field.text = text
    assert synchronizer.current_value() == pytest.approx(expected)


@pytest.mark.parametrize("text", ["", "abc", "nan", "1e999"])
def test_malformed_text_keeps_slider_value(text):
    _registry, slider, field, synchronizer = _bound(value=4, text="4")
    field.text = text
    assert synchronizer.current_value() == pytest.approx(4.0)
    synchronizer.on_idle_tick()
    assert field.text == "4"


def test_idle_tick_waits_for_focus_loss():
    _registry, _slider, field, synchronizer = _bound()
    field.focused = True
    field.text = "99"
    synchronizer.on_idle_tick()
    assert field.text == "99"
    assert synchronizer.needs_validation is True
    field.focused = False
    synchronizer.on_idle_tick()
    assert field.text == "10"


def test_host_idle_tick_event_reaches_synchronizer():
    registry, _slider, field, _synchronizer = _bound()
    field.text = "2.50"
    registry.emit(IDLE_TICK)
    assert field.text == "2.5"


def test_stepped_slider_rounds_to_integers():
    _registry, slider, field, synchronizer = _bound(value=3, stepped=True, text="3")
    field.text = "6.6"
    assert synchronizer.current_value() == pytest.approx(7.0)
    synchronizer.on_idle_tick()
    assert field.text == "7"
    slider.value = 0.449
    assert field.text == "4"


def test_slider_motion_updates_field_without_feedback():
    registry, slider, field, synchronizer = _bound(low=-5, high=5, value=0, text="0")
    seen = []
    registry.subscribe(TEXT_EDITED, seen.append, source=field)
    slider.value = 0.75
    assert field.text == "2.5"
    assert seen == ["2.5"]
    assert synchronizer.needs_validation is False
    assert slider.value == pytest.approx(0.75)


def test_guard_blocks_reentrant_delivery():
    _registry, slider, field, synchronizer = _bound()
    synchronizer.updating = True
    synchronizer.on_text_edited("9")
    synchronizer.on_slider_moved()
    assert slider.value == pytest.approx(0.5)
    assert field.text == "5"
    assert synchronizer.needs_validation is False


def test_equal_bounds_normalise_to_zero():
    slider = SliderModel(0.3)
    synchronizer = SliderValueSynchronizer(slider, InputFieldModel("1"), 1, 1)
    synchronizer.on_text_edited("5")
    assert slider.value == 0.0
    assert synchronizer.current_value() == 1.0


def test_unbind_stops_delivery():
    registry, slider, field, synchronizer = _bound()
    synchronizer.unbind()
    assert not registry.has_subscribers(SLIDER_MOVED)
    field.text = "9"
    assert slider.value == pytest.approx(0.5)


def test_format_number():
    assert format_number(7.0) == "7"
    assert format_number(0.7 * 10) == "7"
    assert format_number(2.5) == "2.5"
    assert format_number(-0.0) == "0"
    assert format_number(2.5, stepped=True) == "3"
