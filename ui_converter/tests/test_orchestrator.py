from __future__ import annotations

import logging

import pytest

from ui_converter.converter_config import ConverterSettings
from ui_converter.orchestrator import ROOT_NODE_NAME, Converter
from ui_converter.report import (
    ADVISE_COLLAPSIBLE_CELLS,
    ADVISE_DEPTH,
    ADVISE_INPUT_FIELD,
    ADVISE_LABEL_FONT,
    ADVISE_SCROLL_SIZE,
    ADVISE_SLIDER_DEPTH,
    ADVISE_VOICE_HINTS,
    FOLD_REGION_FIRST,
    NOTHING_TO_CONVERT,
    ConversionStatus,
    missing_template_message,
)
from ui_converter.source_tree import element_from_payload
from ui_converter.templates import ToggleStyle, load_template_library


def _source(children, width=100, height=100):
    return element_from_payload({"kind": "element", "rect": [0, 0, width, height], "children": children})


def _converter(settings=None, library=None):
    return Converter(settings or ConverterSettings(), library or load_template_library())


def _scroll(name):
    return {
        "kind": "scroll-view",
        "name": name,
        "rect": [0, 0, 50, 50],
        "parts": {"content": {"kind": "element", "rect": [0, 0, 50, 100]}},
    }


def test_label_scenario_converts_top_half():
    source = _source([{"kind": "label", "text": "Hi", "rect": [0, 0, 100, 50]}])
    result = _converter().convert(source)
    assert result.succeeded
    assert result.scene.name == ROOT_NODE_NAME
    assert result.scene.transform.scale == pytest.approx((3.0, 3.0, 0.01))
    label = result.scene.find("Label")
    assert label.content["size"] == pytest.approx([30.0, 15.0])
    assert label.transform.position[:2] == pytest.approx((0.0, 0.25))
    assert result.report.messages == [ADVISE_LABEL_FONT, ADVISE_DEPTH]
    assert result.report.lines()[0] == "Conversion Succeeded"


def test_expanded_foldout_fails_whole_run():
    source = _source(
        [
            {"kind": "button", "name": "Before", "rect": [0, 0, 10, 10]},
            {"kind": "foldout", "name": "Region", "expanded": True, "rect": [0, 20, 50, 10]},
        ]
    )
    result = _converter().convert(source)
    assert not result.succeeded
    assert result.report.status is ConversionStatus.FAILED
    assert result.scene is None
    assert result.report.messages[0] == FOLD_REGION_FIRST
    assert result.report.lines() == ["Conversion Failed", FOLD_REGION_FIRST]


def test_nothing_to_convert():
    result = _converter().convert(None)
    assert not result.succeeded
    assert result.report.messages == [NOTHING_TO_CONVERT]


def test_missing_required_templates_reported_per_template():
    library = load_template_library().without("button", "label")
    result = _converter(library=library).convert(_source([]))
    assert not result.succeeded
    assert result.report.messages == [missing_template_message("button"), missing_template_message("label")]


def test_missing_toggle_template_for_configured_style():
    library = load_template_library().without("toggle_switch")
    settings = ConverterSettings(toggle_style=ToggleStyle.SWITCH)
    result = _converter(settings, library).convert(_source([]))
    assert result.report.messages == [missing_template_message("toggle_switch")]
    assert _converter(ConverterSettings(), library).convert(_source([])).succeeded


def test_template_check_precedes_missing_root():
    library = load_template_library().without("slider")
    result = _converter(library=library).convert(None)
    assert result.report.messages == [missing_template_message("slider")]


def test_footprint_preserves_source_aspect_ratio():
    converter = _converter(ConverterSettings(footprint=(40.0, 999.0)))
    result = converter.convert(_source([], width=200, height=100))
    assert result.scene.content["size"] == pytest.approx([40.0, 20.0])
    assert result.scene.transform.scale[:2] == pytest.approx((4.0, 2.0))

    fixed = _converter(ConverterSettings(footprint=(40.0, 10.0), preserve_aspect_ratio=False))
    assert fixed.footprint_for(_source([], width=200, height=100)) == (40.0, 10.0)


def test_empty_source_still_gets_depth_advisory():
    result = _converter().convert(_source([]))
    assert result.succeeded
    assert result.report.messages == [ADVISE_DEPTH]
    assert result.scene.children == ()


def test_warnings_precede_advisories_and_repeat_once():
    source = _source(
        [
            _scroll("First"),
            _scroll("Second"),
            {"kind": "toggle", "name": "A", "value": True, "rect": [60, 0, 10, 10]},
            {"kind": "toggle", "name": "B", "value": True, "rect": [60, 20, 10, 10]},
            {"kind": "foldout", "name": "Region", "rect": [60, 40, 30, 10]},
            {
                "kind": "slider",
                "rect": [0, 60, 100, 20],
                "show_input_field": True,
                "value": 1,
                "parts": {
                    "input": {
                        "kind": "element",
                        "rect": [20, 0, 80, 20],
                        "parts": {
                            "drag_container": {"kind": "element", "rect": [0, 0, 60, 20]},
                            "value_field": {"kind": "text-field", "rect": [60, 0, 20, 20]},
                        },
                    }
                },
            },
            {"kind": "label", "rect": [0, 90, 100, 10]},
        ]
    )
    result = _converter().convert(source)
    messages = result.report.messages
    assert result.succeeded
    assert len(messages) == 2 + 7
    assert "only scroll vertically" in messages[0]
    assert "(A, B)" in messages[1]
    assert messages[2:] == [
        ADVISE_VOICE_HINTS,
        ADVISE_LABEL_FONT,
        ADVISE_SLIDER_DEPTH,
        ADVISE_INPUT_FIELD,
        ADVISE_SCROLL_SIZE,
        ADVISE_COLLAPSIBLE_CELLS,
        ADVISE_DEPTH,
    ]


def test_conversion_is_idempotent():
    source = _source(
        [
            {"kind": "button", "rect": [0, 0, 30, 10]},
            {"kind": "element", "rect": [10, 20, 80, 60], "children": [{"kind": "label", "rect": [5, 5, 40, 20]}]},
            _scroll("List"),
        ]
    )
    converter = _converter()
    first = converter.convert(source)
    second = converter.convert(source)
    assert first.scene is not second.scene
    assert first.scene.to_payload() == second.scene.to_payload()
    assert first.report.messages == second.report.messages


def test_failures_are_logged_on_the_given_logger(caplog):
    logger = logging.getLogger("converter-test")
    caplog.set_level(logging.ERROR, logger="converter-test")
    Converter(ConverterSettings(), load_template_library(), logger=logger).convert(None)
    assert [record.name for record in caplog.records] == ["converter-test"]
    assert "Conversion failed" in caplog.records[0].getMessage()


def test_malformed_slider_value_still_produces_a_report():
    slider = {
        "kind": "slider",
        "rect": [0, 0, 100, 20],
        "show_input_field": True,
        "value": "n/a",
        "low": 0,
        "high": 10,
        "parts": {
            "input": {
                "kind": "element",
                "rect": [20, 0, 80, 20],
                "parts": {
                    "drag_container": {"kind": "element", "rect": [0, 0, 60, 20]},
                    "value_field": {"kind": "text-field", "rect": [60, 0, 20, 20]},
                },
            }
        },
    }
    result = _converter().convert(_source([slider]))
    assert result.succeeded
    handle = result.scene.find("Slider/SliderContainer/PinchSlider")
    assert handle.content["slider"].value == 0.0
    field = result.scene.find("Slider/SliderContainer/ValueField").children[0]
    assert field.content["input"].text == "0"


def test_toggle_state_written_as_text_is_honoured():
    source = _source([{"kind": "toggle", "name": "Quiet", "value": "false", "rect": [0, 0, 10, 10]}])
    result = _converter().convert(source)
    assert result.succeeded
    assert not any("Quiet" in message for message in result.report.messages)


def test_walker_logs_under_the_converter_logger(caplog):
    caplog.set_level(logging.DEBUG, logger="SpatialUIConverter")
    source = _source([{"kind": "button", "name": "Hidden", "rect": [0, 0, 10, 10], "style": {"visible": False}}])
    _converter().convert(source)
    skipped = [record for record in caplog.records if "Skipping hidden" in record.getMessage()]
    assert [record.name for record in skipped] == ["SpatialUIConverter.Converter.Walker"]
