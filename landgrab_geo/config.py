"""
Configuration schema for the geometry engine.

Sample filtering, closure thresholds and proximity tiers are product-tuned
constants. They live here as validated, immutable configuration so hosts can
override them from YAML without touching the algorithms. The defaults
reproduce the shipped behaviour exactly.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml


@dataclass(frozen=True)
class AccumulatorConfig:
    """GPS sample filtering for the path accumulator."""

    max_accuracy_m: float = 50.0  # tracking ceiling
    one_shot_max_accuracy_m: float = 100.0  # single position lookups
    max_speed_mps: float = 50.0  # ~180 km/h, anything faster is a GPS jump
    min_movement_m: float = 5.0
    max_interval_s: float = 30.0
    stale_min_movement_m: float = 2.0

    def __post_init__(self):
        """Validate accumulator configuration."""
        for name in ("max_accuracy_m", "one_shot_max_accuracy_m", "max_speed_mps", "max_interval_s"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be > 0, got {value}")

        if self.min_movement_m < 0 or self.stale_min_movement_m < 0:
            raise ValueError(
                f"movement thresholds must be >= 0, got "
                f"min_movement_m={self.min_movement_m}, stale_min_movement_m={self.stale_min_movement_m}"
            )

        if self.stale_min_movement_m > self.min_movement_m:
            raise ValueError(
                f"stale_min_movement_m ({self.stale_min_movement_m}) must not exceed "
                f"min_movement_m ({self.min_movement_m})"
            )


@dataclass(frozen=True)
class ClosureConfig:
    """Conditions a walked loop must meet to become a claimable polygon."""

    minimum_points: int = 10
    closure_distance_m: float = 8.0
    minimum_total_distance_m: float = 60.0
    minimum_area_m2: float = 120.0

    def __post_init__(self):
        """Validate closure configuration."""
        if self.minimum_points < 3:
            raise ValueError(
                f"minimum_points must be >= 3, got {self.minimum_points}"
            )
        if self.closure_distance_m <= 0:
            raise ValueError(
                f"closure_distance_m must be > 0, got {self.closure_distance_m}"
            )
        if self.minimum_total_distance_m < 0 or self.minimum_area_m2 < 0:
            raise ValueError("minimum distance and area must be >= 0")


@dataclass(frozen=True)
class ProximityConfig:
    """
    Distance tiers for proximity warnings (meters to the nearest boundary).

    > caution_m -> SAFE, (warning_m, caution_m] -> CAUTION,
    (danger_m, warning_m] -> WARNING, <= danger_m -> DANGER
    """

    caution_m: float = 100.0
    warning_m: float = 50.0
    danger_m: float = 25.0
    circle_edge_segments: int = 36

    def __post_init__(self):
        """Validate proximity configuration."""
        if not 0 <= self.danger_m < self.warning_m < self.caution_m:
            raise ValueError(
                f"Proximity tiers must satisfy 0 <= danger < warning < caution, got "
                f"danger={self.danger_m}, warning={self.warning_m}, caution={self.caution_m}"
            )
        if self.circle_edge_segments < 3:
            raise ValueError(
                f"circle_edge_segments must be >= 3, got {self.circle_edge_segments}"
            )


def _build(cls, data: Dict[str, Any]):
    """Instantiate a config dataclass, rejecting unknown keys."""
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**data)


@dataclass(frozen=True)
class EngineConfig:
    """
    Complete engine configuration.

    Immutable after construction (frozen dataclass).
    """

    accumulator: AccumulatorConfig = field(default_factory=AccumulatorConfig)
    closure: ClosureConfig = field(default_factory=ClosureConfig)
    proximity: ProximityConfig = field(default_factory=ProximityConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """
        Build from a plain mapping (missing sections take defaults).

        Raises:
            ValueError: On unknown keys or invalid values
        """
        data = data or {}
        unknown = set(data) - {"accumulator", "closure", "proximity"}
        if unknown:
            raise ValueError(f"Unknown EngineConfig sections: {sorted(unknown)}")

        return cls(
            accumulator=_build(AccumulatorConfig, data.get("accumulator") or {}),
            closure=_build(ClosureConfig, data.get("closure") or {}),
            proximity=_build(ProximityConfig, data.get("proximity") or {}),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "EngineConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            accumulator:
              max_accuracy_m: 50
              max_speed_mps: 50
              min_movement_m: 5

            closure:
              minimum_points: 10
              closure_distance_m: 8

            proximity:
              caution_m: 100
              warning_m: 50
              danger_m: 25
        """
        return cls.from_dict(load_yaml(yaml_path))


def load_yaml(yaml_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML mapping.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If YAML is invalid or not a mapping
    """
    path = Path(yaml_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping in {yaml_path}")
    return data
