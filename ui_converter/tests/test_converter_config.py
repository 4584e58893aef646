from __future__ import annotations

import json

from ui_converter.converter_config import ConverterSettings, load_converter_settings
from ui_converter.templates import ToggleStyle


def test_defaults():
    settings = ConverterSettings()
    assert settings.footprint == (30.0, 30.0)
    assert settings.preserve_aspect_ratio is True
    assert settings.toggle_style is ToggleStyle.CHECKBOX
    assert settings.scroll_direction == "vertical"
    assert settings.show_control_backing is True
    assert settings.show_collapsible_content is False
    assert settings.collapsible_cell_size == (10.0, 10.0)


def test_from_payload_coerces_and_falls_back():
    settings = ConverterSettings.from_payload(
        {
            "footprint": {"width": "40", "height": 20},
            "preserve_aspect_ratio": 0,
            "toggle_style": "switch",
            "scroll_direction": "diagonal",
            "collapsible_cell_size": [0, 5],
        }
    )
    assert settings.footprint == (40.0, 20.0)
    assert settings.preserve_aspect_ratio is False
    assert settings.toggle_style is ToggleStyle.SWITCH
    assert settings.scroll_direction == "vertical"
    assert settings.collapsible_cell_size == (10.0, 10.0)


def test_from_payload_clamps_extents():
    settings = ConverterSettings.from_payload({"footprint": [0.001, 1e9], "scroll_direction": "Horizontal"})
    assert settings.footprint == (0.1, 10000.0)
    assert settings.scroll_direction == "horizontal"


def test_load_settings_round_trips_payload(tmp_path):
    path = tmp_path / "settings.json"
    original = ConverterSettings(footprint=(50.0, 25.0), toggle_style=ToggleStyle.RADIO, show_control_backing=False)
    path.write_text(json.dumps(original.to_payload()), encoding="utf-8")
    assert load_converter_settings(path) == original


def test_load_settings_defaults_on_missing_or_broken_file(tmp_path):
    assert load_converter_settings(tmp_path / "missing.json") == ConverterSettings()
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    assert load_converter_settings(broken) == ConverterSettings()
    listed = tmp_path / "list.json"
    listed.write_text("[]", encoding="utf-8")
    assert load_converter_settings(listed) == ConverterSettings()
