"""
Range validation for application options.

Collects every problem instead of stopping at the first, so a bad options
file reports all of its mistakes at once.
"""

import math
import numbers
from typing import Any, List, Tuple


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class OptionsValidator:
    """
    Validates ApplicationOptions values.

    Nothing is clamped: an out-of-range value is always an error.
    """

    def validate(self, options) -> Tuple[bool, List[str]]:
        """
        Validate an options object.

        Args:
            options: ApplicationOptions instance

        Returns:
            Tuple of (is_valid, error_messages)
        """

        errors = []
        errors.extend(self._validate_generation(options))
        errors.extend(self._validate_geometry(options))
        errors.extend(self._validate_seed(options))

        return len(errors) == 0, errors

    def _validate_generation(self, options) -> List[str]:
        """Diamond-square inputs."""

        errors = []

        if not _is_int(options.iterations):
            errors.append(f"iterations must be an integer, got {options.iterations!r}")
        elif options.iterations < 0:
            errors.append(f"iterations must be >= 0, got {options.iterations}")

        if not _is_number(options.roughness) or not math.isfinite(options.roughness):
            errors.append(f"roughness must be a finite number, got {options.roughness!r}")

        if not _is_number(options.max_seed_height) or not math.isfinite(options.max_seed_height):
            errors.append(f"max_seed_height must be a finite number, got {options.max_seed_height!r}")
        elif options.max_seed_height < 0:
            errors.append(f"max_seed_height must be >= 0, got {options.max_seed_height}")

        return errors

    def _validate_geometry(self, options) -> List[str]:
        """Cell size, UV scale and chunk size."""

        errors = []

        cell_size = tuple(options.cell_size)
        if len(cell_size) != 3 or not all(_is_number(v) and math.isfinite(v) for v in cell_size):
            errors.append(f"cell_size must be 3 finite numbers, got {cell_size!r}")
        else:
            if cell_size[0] <= 0 or cell_size[2] <= 0:
                errors.append(f"cell_size x and z must be > 0, got {cell_size}")
            if cell_size[1] == 0:
                errors.append("cell_size y must be non-zero")

        uv_scale = tuple(options.uv_scale)
        if len(uv_scale) != 2 or not all(_is_number(v) and math.isfinite(v) for v in uv_scale):
            errors.append(f"uv_scale must be 2 finite numbers, got {uv_scale!r}")
        elif uv_scale[0] <= 0 or uv_scale[1] <= 0:
            errors.append(f"uv_scale components must be > 0, got {uv_scale}")

        if not _is_int(options.chunk_size):
            errors.append(f"chunk_size must be an integer, got {options.chunk_size!r}")
        elif options.chunk_size < 2:
            errors.append(f"chunk_size must be >= 2, got {options.chunk_size}")

        return errors

    def _validate_seed(self, options) -> List[str]:
        if options.seed is None:
            return []
        if not _is_int(options.seed) or options.seed < 0:
            return [f"seed must be a non-negative integer, got {options.seed!r}"]
        return []
