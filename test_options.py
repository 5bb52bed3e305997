"""
Tests for application options: presets, XML/JSON loading and validation.
"""

import json
import logging

import pytest

from terragen import ApplicationOptions, InvalidArgument, RenderMode
from terragen.compatibility import OptionsValidator

CUSTOM_XML = """<?xml version="1.0" encoding="utf-8"?>
<ApplicationOptions>
  <Preset>Custom</Preset>
  <RenderMode value="Textured" />
  <InverseUVScale x="32" y="16" />
  <ErrorConstant value="1.25" />
  <MaxSeedHeight value="55.5" />
  <Iterations value="5" />
  <CellSize x="3" y="0.5" z="4" />
  <Fullscreen value="True" />
  <ChunkSize value="16" />
  <Seed value="77" />
</ApplicationOptions>
"""


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content)
    return path


def test_default_preset():
    options = ApplicationOptions.default()

    assert options.render_mode is RenderMode.MULTITEXTURED
    assert options.uv_scale == (1.0 / 64.0, 1.0 / 64.0)
    assert options.roughness == 0.5
    assert options.max_seed_height == 100.0
    assert options.iterations == 8
    assert options.cell_size == (2.0, 1.0, 2.0)
    assert options.fullscreen is False
    assert options.chunk_size == 128
    assert options.seed is None


def test_small_terrain_preset():
    options = ApplicationOptions.small_terrain()

    assert options.roughness == 1.5
    assert options.max_seed_height == 70.0
    assert options.iterations == 7
    assert options.cell_size == (4.0, 1.0, 4.0)
    assert options.chunk_size == 128


def test_preset_lookup():
    assert ApplicationOptions.preset("SmallTerrain") == ApplicationOptions.small_terrain()
    assert ApplicationOptions.preset("small") == ApplicationOptions.small_terrain()
    assert ApplicationOptions.preset("Default") == ApplicationOptions.default()

    with pytest.raises(InvalidArgument):
        ApplicationOptions.preset("huge")


def test_custom_xml(tmp_path):
    options = ApplicationOptions.from_file(_write(tmp_path, "options.xml", CUSTOM_XML))

    assert options.render_mode is RenderMode.TEXTURED
    assert options.uv_scale == (1.0 / 32.0, 1.0 / 16.0)
    assert options.roughness == 1.25
    assert options.max_seed_height == 55.5
    assert options.iterations == 5
    assert options.cell_size == (3.0, 0.5, 4.0)
    assert options.fullscreen is True
    assert options.chunk_size == 16
    assert options.seed == 77


def test_xml_preset_overrides_values(tmp_path):
    content = CUSTOM_XML.replace("<Preset>Custom</Preset>", "<Preset>SmallTerrain</Preset>")
    options = ApplicationOptions.from_file(_write(tmp_path, "options.xml", content))

    assert options == ApplicationOptions.small_terrain()


def test_unknown_render_mode_means_no_texture(tmp_path):
    content = CUSTOM_XML.replace('value="Textured"', 'value="Wireframe"')
    options = ApplicationOptions.from_file(_write(tmp_path, "options.xml", content))

    assert options.render_mode is RenderMode.NO_TEXTURE


@pytest.mark.parametrize("content", [
    "<ApplicationOptions><Preset>Custom</Preset>",
    CUSTOM_XML.replace('<Iterations value="5" />', ""),
    CUSTOM_XML.replace('<Iterations value="5" />', '<Iterations value="five" />'),
    CUSTOM_XML.replace('<Fullscreen value="True" />', '<Fullscreen value="maybe" />'),
    CUSTOM_XML.replace("<Preset>Custom</Preset>", ""),
    "<Options />",
])
def test_malformed_xml_falls_back_to_default(tmp_path, caplog, content):
    path = _write(tmp_path, "options.xml", content)

    with caplog.at_level(logging.WARNING, logger="terragen.compatibility.options"):
        options = ApplicationOptions.from_file(path)

    assert options == ApplicationOptions.default()
    assert "Error parsing options file" in caplog.text


def test_missing_file_falls_back_to_default(tmp_path):
    assert ApplicationOptions.from_file(tmp_path / "absent.xml") == ApplicationOptions.default()


@pytest.mark.parametrize("old, new", [
    ('<Iterations value="5" />', '<Iterations value="-1" />'),
    ('<ChunkSize value="16" />', '<ChunkSize value="1" />'),
    ('<CellSize x="3" y="0.5" z="4" />', '<CellSize x="0" y="0.5" z="4" />'),
    ('<InverseUVScale x="32" y="16" />', '<InverseUVScale x="0" y="16" />'),
])
def test_out_of_range_values_raise(tmp_path, old, new):
    """Well-formed but impossible values are reported, not clamped or defaulted."""

    path = _write(tmp_path, "options.xml", CUSTOM_XML.replace(old, new))

    with pytest.raises(InvalidArgument):
        ApplicationOptions.from_file(path)


def test_json_round_trip(tmp_path):
    saved = ApplicationOptions.small_terrain().with_overrides(seed=5, chunk_size=32)
    path = _write(tmp_path, "options.json", json.dumps(saved.to_dict()))

    assert ApplicationOptions.from_file(path) == saved


def test_json_preset(tmp_path):
    path = _write(tmp_path, "options.json", json.dumps({"preset": "SmallTerrain"}))
    assert ApplicationOptions.from_file(path) == ApplicationOptions.small_terrain()


def test_malformed_json_falls_back_to_default(tmp_path):
    path = _write(tmp_path, "options.json", "{not json")
    assert ApplicationOptions.from_file(path) == ApplicationOptions.default()

    path = _write(tmp_path, "list.json", "[1, 2]")
    assert ApplicationOptions.from_file(path) == ApplicationOptions.default()

    path = _write(tmp_path, "partial.json", json.dumps({"roughness": 1.0}))
    assert ApplicationOptions.from_file(path) == ApplicationOptions.default()


def test_validator_collects_every_error():
    options = ApplicationOptions(iterations=-1, chunk_size=1, cell_size=(1.0, 0.0, 1.0))

    is_valid, errors = OptionsValidator().validate(options)
    assert not is_valid
    assert len(errors) == 3

    with pytest.raises(InvalidArgument) as excinfo:
        options.validate()
    assert len(excinfo.value.errors) == 3


def test_presets_are_valid():
    assert OptionsValidator().validate(ApplicationOptions.default()) == (True, [])
    assert OptionsValidator().validate(ApplicationOptions.small_terrain()) == (True, [])


def test_with_overrides_ignores_none():
    options = ApplicationOptions.default().with_overrides(seed=None, iterations=3)

    assert options.iterations == 3
    assert options.seed is None
    assert options.roughness == ApplicationOptions.default().roughness


def test_unknown_json_preset_means_custom(tmp_path):
    """Like <Preset> in XML, an unrecognised preset name reads the fields that follow."""

    fields = ApplicationOptions.small_terrain().with_overrides(iterations=4).to_dict()
    fields["preset"] = "Huge"
    path = _write(tmp_path, "options.json", json.dumps(fields))

    assert ApplicationOptions.from_file(path) == ApplicationOptions.small_terrain().with_overrides(iterations=4)


def test_unknown_json_preset_without_fields_falls_back(tmp_path, caplog):
    path = _write(tmp_path, "options.json", json.dumps({"preset": "Huge"}))

    with caplog.at_level(logging.WARNING, logger="terragen.compatibility.options"):
        options = ApplicationOptions.from_file(path)

    assert options == ApplicationOptions.default()
    assert "Error parsing options file" in caplog.text


def test_unknown_xml_preset_means_custom(tmp_path):
    content = CUSTOM_XML.replace("<Preset>Custom</Preset>", "<Preset>Huge</Preset>")
    options = ApplicationOptions.from_file(_write(tmp_path, "options.xml", content))

    assert options.iterations == 5
    assert options.chunk_size == 16
