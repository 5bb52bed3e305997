"""
Generator registry and parameter specification.

This module defines:
- ParameterSpec: Range checking and defaulting of generator parameters
- GeneratorRegistry: Selection of a generator function by name
"""

import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..engine.heightfield import HeightField
from ..errors import InvalidArgument
from .diamond_square import generate_random
from .gaussian import generate_gaussian
from .random_source import RandomSource

Bound = Optional[float]


class ParameterSpec:
    """
    Specification for generator parameters.

    Each parameter has:
    - min_val: Minimum allowed value (None for unbounded)
    - max_val: Maximum allowed value (None for unbounded)
    - default: Value used when the caller leaves it out (None for required)

    Out-of-range values are reported, never clamped.
    """

    def __init__(self, params: Dict[str, Tuple[Bound, Bound, Any]]):
        """
        Initialize parameter specification.

        Args:
            params: Dict mapping param_name -> (min_val, max_val, default)
        """
        self.params = params

    def validate(self, values: Dict[str, Any]) -> List[str]:
        """Return a list of problems with values; empty when valid."""

        errors = []
        for param_name, (min_val, max_val, default) in self.params.items():
            if param_name not in values:
                if default is None:
                    errors.append(f"Missing required parameter: {param_name}")
                continue

            value = values[param_name]
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                if not math.isfinite(value):
                    errors.append(f"{param_name} must be finite, got {value}")
                    continue
                if min_val is not None and value < min_val:
                    errors.append(f"{param_name} = {value} is below minimum {min_val}")
                if max_val is not None and value > max_val:
                    errors.append(f"{param_name} = {value} is above maximum {max_val}")

        unknown = sorted(set(values) - set(self.params))
        for param_name in unknown:
            errors.append(f"Unknown parameter: {param_name}")

        return errors

    def extract_params(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Fill in defaults and check ranges.

        Raises:
            InvalidArgument: Listing every invalid or missing parameter.
        """

        errors = self.validate(values)
        if errors:
            raise InvalidArgument("; ".join(errors), errors)

        result = {}
        for param_name, (_, _, default) in self.params.items():
            result[param_name] = values.get(param_name, default)

        return result

    def get_param_names(self) -> List[str]:
        """Get list of parameter names."""
        return list(self.params.keys())

    def get_param_ranges(self) -> Dict[str, Tuple[Bound, Bound]]:
        """Get parameter ranges (min, max) for each parameter."""
        return {name: (min_val, max_val) for name, (min_val, max_val, _) in self.params.items()}


class GeneratorRegistry:
    """
    Registry of height field generators.

    Generators are plain functions that return a HeightField. Callers pick
    one by name; stochastic generators additionally receive the injected
    random source.
    """

    def __init__(self):
        self.generators: Dict[str, Callable[..., HeightField]] = {}
        self.param_specs: Dict[str, ParameterSpec] = {}
        self.stochastic: Dict[str, bool] = {}

    def register(
        self,
        name: str,
        func: Callable[..., HeightField],
        param_spec: ParameterSpec,
        stochastic: bool = False
    ):
        """Register a generator function under name."""

        self.generators[name] = func
        self.param_specs[name] = param_spec
        self.stochastic[name] = stochastic

    def get(self, name: str) -> Callable[..., HeightField]:
        """Get generator function by name; raises KeyError if unknown."""
        return self.generators[name]

    def get_parameter_spec(self, name: str) -> ParameterSpec:
        return self.param_specs[name]

    def list_generators(self) -> List[str]:
        return list(self.generators.keys())

    def __contains__(self, name: str) -> bool:
        return name in self.generators

    def generate(
        self,
        name: str,
        parameters: Dict[str, Any],
        random_source: Optional[RandomSource] = None
    ) -> HeightField:
        """
        Run the named generator with validated parameters.

        Args:
            name: Registered generator name
            parameters: Generator keyword arguments; missing ones use defaults
            random_source: Passed through to stochastic generators

        Returns:
            The generated HeightField
        """

        func = self.get(name)
        kwargs = self.param_specs[name].extract_params(parameters)
        if self.stochastic[name]:
            kwargs["random_source"] = random_source
        return func(**kwargs)


def default_registry() -> GeneratorRegistry:
    """Registry holding the built-in diamond-square and Gaussian generators."""

    registry = GeneratorRegistry()

    registry.register(
        "diamond_square",
        generate_random,
        ParameterSpec({
            "roughness": (None, None, 1.0),
            "max_seed_height": (0.0, None, 100.0),
            "iterations": (0, None, 8)
        }),
        stochastic=True
    )

    registry.register(
        "gaussian",
        generate_gaussian,
        ParameterSpec({
            "width": (2, None, None),
            "height": (2, None, None),
            "sigma": (None, None, None),
            "amplitude": (None, None, 1.0),
            "center": (None, None, None),
            "falloff_radius": (0.0, None, None)
        })
    )

    return registry
