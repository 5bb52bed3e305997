"""
Application options: render mode, terrain synthesis and meshing settings.

Options come from one of two presets or from a file. XML files use the
<ApplicationOptions> element layout; JSON files carry the same fields by
snake_case name. A file that cannot be parsed falls back to the default
preset with a warning. A file that parses but asks for impossible values
raises InvalidArgument.
"""

import json
import logging
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..errors import InvalidArgument
from .options_validator import OptionsValidator

log = logging.getLogger(__name__)


class RenderMode(Enum):
    """How the external material system should shade the terrain."""

    NO_TEXTURE = "NoTexture"
    TEXTURED = "Textured"
    MULTITEXTURED = "Multitextured"

    @classmethod
    def from_name(cls, name: str) -> "RenderMode":
        """Parse an XML/JSON value. Anything unrecognised means no texture."""

        for mode in cls:
            if name in (mode.value, mode.name):
                return mode
        return cls.NO_TEXTURE


@dataclass(frozen=True)
class ApplicationOptions:
    """
    Settings consumed by the terrain pipeline and its renderer.

    Attributes:
        render_mode: Material selection for the external renderer
        uv_scale: (u, v) multiplier applied to world XZ for texture coordinates
        roughness: Diamond-square range decay exponent
        max_seed_height: Corner seed range and initial displacement
        iterations: Diamond-square passes; grid side is 2 ** iterations + 1
        cell_size: (x, y, z) world scale of a grid cell and elevation
        fullscreen: Window hint for the external renderer
        chunk_size: Maximum chunk side in vertices
        seed: Random seed; None seeds from the clock
    """

    render_mode: RenderMode = RenderMode.MULTITEXTURED
    uv_scale: Tuple[float, float] = (1.0 / 64.0, 1.0 / 64.0)
    roughness: float = 0.5
    max_seed_height: float = 100.0
    iterations: int = 8
    cell_size: Tuple[float, float, float] = (2.0, 1.0, 2.0)
    fullscreen: bool = False
    chunk_size: int = 128
    seed: Optional[int] = field(default=None)

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> "ApplicationOptions":
        """Larger terrain: 257x257 points."""
        return cls()

    @classmethod
    def small_terrain(cls) -> "ApplicationOptions":
        """Smaller, rougher-decaying terrain: 129x129 points."""

        return cls(
            render_mode=RenderMode.MULTITEXTURED,
            uv_scale=(1.0 / 64.0, 1.0 / 64.0),
            roughness=1.5,
            max_seed_height=70.0,
            iterations=7,
            cell_size=(4.0, 1.0, 4.0),
            fullscreen=False,
            chunk_size=128
        )

    @classmethod
    def preset(cls, name: str) -> "ApplicationOptions":
        """Look up a preset by its file name ("Default", "SmallTerrain") or CLI name."""

        factory = cls._presets().get(name.strip().lower())
        if factory is None:
            raise InvalidArgument(f"Unknown preset: {name}")
        return factory()

    @classmethod
    def _presets(cls) -> Dict[str, Callable[[], "ApplicationOptions"]]:
        return {
            "default": cls.default,
            "smallterrain": cls.small_terrain,
            "small": cls.small_terrain,
            "small_terrain": cls.small_terrain,
        }

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> "ApplicationOptions":
        """
        Check every field.

        Returns:
            self, for chaining

        Raises:
            InvalidArgument: Listing all invalid fields.
        """

        is_valid, errors = OptionsValidator().validate(self)
        if not is_valid:
            raise InvalidArgument("Invalid options: " + "; ".join(errors), errors)
        return self

    def with_overrides(self, **changes: Any) -> "ApplicationOptions":
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["render_mode"] = self.render_mode.value
        data["uv_scale"] = list(self.uv_scale)
        data["cell_size"] = list(self.cell_size)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApplicationOptions":
        """
        Build options from a JSON-style dict.

        A "preset" key naming a known preset selects it and ignores the other
        keys, like the <Preset> element of XML files. Any other preset name
        means custom: every field is then required, except seed.
        """

        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

        factory = cls._presets().get(str(data.get("preset", "custom")).strip().lower())
        if factory is not None:
            return factory()

        uv_scale = tuple(float(v) for v in data["uv_scale"])
        cell_size = tuple(float(v) for v in data["cell_size"])
        seed = data.get("seed")

        return cls(
            render_mode=RenderMode.from_name(str(data["render_mode"])),
            uv_scale=uv_scale,
            roughness=float(data["roughness"]),
            max_seed_height=float(data["max_seed_height"]),
            iterations=_parse_int(data["iterations"]),
            cell_size=cell_size,
            fullscreen=_parse_bool(data["fullscreen"]),
            chunk_size=_parse_int(data["chunk_size"]),
            seed=None if seed is None else _parse_int(seed)
        )

    @classmethod
    def from_xml(cls, root: ET.Element) -> "ApplicationOptions":
        """Build options from a parsed <ApplicationOptions> element."""

        if root.tag != "ApplicationOptions":
            raise ValueError(f"Expected <ApplicationOptions> root, got <{root.tag}>")

        preset = root.find("Preset")
        if preset is None:
            raise KeyError("Missing element <Preset>")

        # A named preset wins over any values in the file
        preset_name = (preset.text or "").strip()
        if preset_name in ("Default", "SmallTerrain"):
            return cls.preset(preset_name)

        inverse_u = float(_xml_attr(root, "InverseUVScale", "x"))
        inverse_v = float(_xml_attr(root, "InverseUVScale", "y"))
        if inverse_u <= 0 or inverse_v <= 0:
            raise InvalidArgument(
                f"InverseUVScale must be > 0, got ({inverse_u}, {inverse_v})"
            )

        seed_element = root.find("Seed")
        seed = None
        if seed_element is not None:
            seed = _parse_int(_xml_attr(root, "Seed"))

        return cls(
            render_mode=RenderMode.from_name(_xml_attr(root, "RenderMode")),
            uv_scale=(1.0 / inverse_u, 1.0 / inverse_v),
            roughness=float(_xml_attr(root, "ErrorConstant")),
            max_seed_height=float(_xml_attr(root, "MaxSeedHeight")),
            iterations=_parse_int(_xml_attr(root, "Iterations")),
            cell_size=(
                float(_xml_attr(root, "CellSize", "x")),
                float(_xml_attr(root, "CellSize", "y")),
                float(_xml_attr(root, "CellSize", "z"))
            ),
            fullscreen=_parse_bool(_xml_attr(root, "Fullscreen")),
            chunk_size=_parse_int(_xml_attr(root, "ChunkSize")),
            seed=seed
        )

    @classmethod
    def from_file(cls, filename: Union[str, Path]) -> "ApplicationOptions":
        """
        Load options from an XML or JSON file.

        Args:
            filename: Path ending in .json for JSON, anything else is read as XML

        Returns:
            The loaded options, or the default preset if the file is missing
            or malformed

        Raises:
            InvalidArgument: If the file parses but holds out-of-range values
        """

        path = Path(filename)

        try:
            if path.suffix.lower() == ".json":
                with open(path, 'r') as f:
                    options = cls.from_dict(json.load(f))
            else:
                options = cls.from_xml(ET.parse(path).getroot())
        except InvalidArgument:
            raise
        except (OSError, ET.ParseError, KeyError, TypeError, ValueError) as e:
            log.warning("Error parsing options file %s: %s; using default options", path, e)
            return cls.default()

        log.info("Loaded options from %s", path)
        return options.validate()


def _xml_attr(root: ET.Element, tag: str, attribute: str = "value") -> str:
    element = root.find(tag)
    if element is None:
        raise KeyError(f"Missing element <{tag}>")

    value = element.get(attribute)
    if value is None:
        raise KeyError(f"Missing attribute {attribute} on <{tag}>")

    return value


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"Expected an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Expected an integer, got {value!r}")
        return int(value)
    return int(value)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value

    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"Expected true or false, got {value!r}")
