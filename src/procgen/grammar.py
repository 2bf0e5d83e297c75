"""
Control table for planet generation.

This module defines:
- ParameterSpec: slider ranges, defaults, clamping and range checks
- ControlRegistry: lookup of which settings group owns a control
- GENERATION_SPEC / ATMOSPHERE_SPEC / SCENE_SPEC: the interactive ranges
"""

from typing import Dict, Iterable, List, Optional, Tuple


class ParameterSpec:
    """
    Specification for a group of tunable parameters.

    Each parameter has:
    - min_val: Minimum allowed value
    - max_val: Maximum allowed value
    - default: Default value if not specified
    """

    def __init__(
        self,
        params: Dict[str, Tuple[float, float, float]],
        integers: Iterable[str] = ()
    ):
        """
        Initialize parameter specification.

        Args:
            params: Dict mapping param_name -> (min_val, max_val, default)
            integers: Names of parameters that only take whole values
        """
        self.params = params
        self.integers = frozenset(integers)

    def check(self, values: Dict[str, float]) -> Tuple[bool, List[str]]:
        """
        Validate values against the ranges.

        Returns:
            Tuple of (is_valid, error_messages)
        """

        errors = []
        for param_name, (min_val, max_val, _) in self.params.items():
            if param_name not in values:
                errors.append(f"Missing parameter: {param_name}")
                continue

            value = values[param_name]
            if not (min_val <= value <= max_val):
                errors.append(
                    f"{param_name}={value} outside [{min_val}, {max_val}]"
                )
            elif param_name in self.integers and int(value) != value:
                errors.append(f"{param_name}={value} must be a whole number")

        return len(errors) == 0, errors

    def clamp(self, name: str, value: float) -> float:
        """Clamp one value into its range, rounding integer parameters."""

        min_val, max_val, _ = self.params[name]
        value = max(min_val, min(max_val, value))
        if name in self.integers:
            return int(round(value))
        return float(value)

    def step(self, name: str, divisions: int = 50) -> float:
        """Increment used when nudging a control from the keyboard."""

        if name in self.integers:
            return 1
        min_val, max_val, _ = self.params[name]
        return (max_val - min_val) / divisions

    def normalize_params(self, values: Dict[str, float]) -> Dict[str, float]:
        """Normalize parameters to [0, 1] slider positions."""

        result = {}
        for param_name, (min_val, max_val, _) in self.params.items():
            if param_name in values:
                value = values[param_name]
                result[param_name] = (value - min_val) / (max_val - min_val)

        return result

    def get_param_names(self) -> List[str]:
        """Get list of parameter names."""
        return list(self.params.keys())


# Slider ranges of the interactive generator
GENERATION_SPEC = ParameterSpec(
    {
        "noise_strength": (0.01, 0.1, 0.05),
        "frequency": (0.5, 5.0, 1.5),
        "amplitude": (1.0, 20.0, 5.0),
        "octaves": (1, 8, 5),
        "persistence": (0.1, 1.0, 0.5),
        "planet_scale": (0.1, 2.0, 1.0),
        "flatland_threshold": (0.0, 1.0, 0.1),
        "plateau_height": (0.0, 3.0, 1.5),
    },
    integers=("octaves",)
)

ATMOSPHERE_SPEC = ParameterSpec(
    {
        "carbon": (0.0, 1.0, 0.5),
        "oxygen": (0.0, 1.0, 0.3),
        "third_gas_fraction": (0.0, 1.0, 0.2),
        "fog_thickness": (0.05, 1.0, 0.2),
    }
)

SCENE_SPEC = ParameterSpec(
    {
        "rotation_speed": (0.001, 0.1, 0.01),
        "water_scale": (0.1, 2.0, 0.5),
    }
)


class ControlRegistry:
    """
    Registry of control groups.

    Maps every control name to the settings group that owns it, so a single
    slider callback can route a value to the right change signal.
    """

    def __init__(self):
        self.specs: Dict[str, ParameterSpec] = {}
        self.name_to_group: Dict[str, str] = {}

    def register(self, group: str, spec: ParameterSpec):
        """Register a group of controls."""

        for name in spec.get_param_names():
            if name in self.name_to_group:
                raise ValueError(f"Control {name!r} already registered by {self.name_to_group[name]!r}")
            self.name_to_group[name] = group
        self.specs[group] = spec

    def group_of(self, name: str) -> str:
        """Get the group owning a control."""
        return self.name_to_group[name]

    def spec_for(self, name: str) -> ParameterSpec:
        """Get the parameter specification holding a control."""
        return self.specs[self.name_to_group[name]]

    def get(self, name: str) -> Optional[ParameterSpec]:
        group = self.name_to_group.get(name)
        return self.specs[group] if group is not None else None

    def list_controls(self) -> List[Tuple[str, str]]:
        """List all controls as (name, group) pairs, in registration order."""
        return list(self.name_to_group.items())


def default_registry() -> ControlRegistry:
    """Registry with the generation, atmosphere and scene groups."""

    registry = ControlRegistry()
    registry.register("generation", GENERATION_SPEC)
    registry.register("atmosphere", ATMOSPHERE_SPEC)
    registry.register("scene", SCENE_SPEC)
    return registry
