"""
Configuration schema for the claim tracker service.

Wraps the engine configuration with host settings: which player is walking,
how many raw fixes may queue up between drains, and the log level.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from landgrab_geo.config import EngineConfig, load_yaml


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


@dataclass(frozen=True)
class TrackerConfig:
    """
    Main configuration for ClaimTrackerService.

    Loaded from YAML and validated at construction.
    Immutable after construction (frozen dataclass).
    """

    owner_id: str
    engine: EngineConfig = field(default_factory=EngineConfig)
    max_pending_samples: int = 512
    nearby_radius_m: float = 500.0
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate tracker configuration."""
        if not self.owner_id:
            raise ValueError("owner_id cannot be empty")

        if self.max_pending_samples < 1:
            raise ValueError(
                f"max_pending_samples must be >= 1, got {self.max_pending_samples}"
            )

        if self.nearby_radius_m <= 0:
            raise ValueError(
                f"nearby_radius_m must be > 0, got {self.nearby_radius_m}"
            )

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of {sorted(VALID_LOG_LEVELS)}"
            )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())

    @classmethod
    def from_dict(cls, data: Dict[str, Any], owner_id: Optional[str] = None) -> "TrackerConfig":
        """
        Build from a plain mapping.

        Args:
            data: Parsed config mapping
            owner_id: Overrides `owner_id` from the mapping
        """
        data = dict(data or {})
        engine = EngineConfig.from_dict(data.pop("engine", None) or {})
        resolved_owner = owner_id or data.pop("owner_id", None)
        data.pop("owner_id", None)

        unknown = set(data) - {"max_pending_samples", "nearby_radius_m", "log_level"}
        if unknown:
            raise ValueError(f"Unknown TrackerConfig keys: {sorted(unknown)}")

        return cls(
            owner_id=resolved_owner or "",
            engine=engine,
            max_pending_samples=int(data.get("max_pending_samples", 512)),
            nearby_radius_m=float(data.get("nearby_radius_m", 500.0)),
            log_level=str(data.get("log_level", "INFO")),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path], owner_id: Optional[str] = None) -> "TrackerConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            owner_id: "player-1"
            max_pending_samples: 512
            nearby_radius_m: 500
            log_level: "INFO"

            engine:
              accumulator:
                max_accuracy_m: 50
                min_movement_m: 5
              closure:
                minimum_points: 10
                closure_distance_m: 8
              proximity:
                caution_m: 100
                warning_m: 50
                danger_m: 25
        """
        return cls.from_dict(load_yaml(yaml_path), owner_id=owner_id)
