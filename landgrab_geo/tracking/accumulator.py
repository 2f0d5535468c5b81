"""
Path Accumulator Module
=======================

Stateful filter that turns a raw GPS fix stream into a walkable Path.

Design:
- Mutable state (the Path being built)
- Immutable results (AcceptResult per sample)
- Rejection is a value, never an exception
- Checks run in a fixed order: accuracy, first sample, ordering, speed, movement
- Thread-safety via encapsulation (caller must synchronize if multi-threaded)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from landgrab_geo.config import AccumulatorConfig
from landgrab_geo.geometry.points import GeoSample, Path, haversine_m


class RejectionReason(str, Enum):
    """Why a fix was not appended to the path."""
    LOW_ACCURACY = "low_accuracy"
    IMPLAUSIBLE_SPEED = "implausible_speed"
    TOO_SOON_OR_TOO_CLOSE = "too_soon_or_too_close"
    OUT_OF_ORDER = "out_of_order"


@dataclass(frozen=True)
class AcceptResult:
    """
    Outcome of offering one sample to the accumulator.

    Attributes:
        accepted: True when the sample was appended
        reason: Rejection reason, None when accepted
        distance_from_last_m: Distance to the previous accepted sample
            (None for the first sample or an accuracy rejection)
        speed_mps: Implied speed from the previous sample, when computable
    """

    accepted: bool
    reason: Optional[RejectionReason] = None
    distance_from_last_m: Optional[float] = None
    speed_mps: Optional[float] = None

    @classmethod
    def accept(cls, distance_m: Optional[float] = None, speed_mps: Optional[float] = None) -> "AcceptResult":
        return cls(accepted=True, distance_from_last_m=distance_m, speed_mps=speed_mps)

    @classmethod
    def reject(
        cls,
        reason: RejectionReason,
        distance_m: Optional[float] = None,
        speed_mps: Optional[float] = None,
    ) -> "AcceptResult":
        return cls(accepted=False, reason=reason, distance_from_last_m=distance_m, speed_mps=speed_mps)

    def __str__(self) -> str:
        if self.accepted:
            return "accepted"
        return f"rejected ({self.reason.value})"


class PathAccumulator:
    """
    Filters fixes and appends the plausible ones to a Path.

    Usage:
        accumulator = PathAccumulator(AccumulatorConfig())

        result = accumulator.accept(sample)
        if not result.accepted:
            log(result.reason)

        accumulator.path       # accepted samples so far
        accumulator.reset()    # discard everything
    """

    def __init__(self, config: Optional[AccumulatorConfig] = None, path: Optional[Path] = None):
        self.config = config or AccumulatorConfig()
        self._path = path if path is not None else Path()

    @property
    def path(self) -> Path:
        return self._path

    def accept(self, sample: GeoSample, max_accuracy_m: Optional[float] = None) -> AcceptResult:
        """
        Offer a sample to the path.

        Args:
            sample: Candidate fix
            max_accuracy_m: Accuracy ceiling override (defaults to the
                tracking ceiling from config)

        Returns:
            AcceptResult; the path is extended only when `accepted` is True.
        """
        ceiling = self.config.max_accuracy_m if max_accuracy_m is None else max_accuracy_m
        if not sample.is_accuracy_acceptable(ceiling):
            return AcceptResult.reject(RejectionReason.LOW_ACCURACY)

        last = self._path.last
        if last is None:
            self._path.append(sample)
            return AcceptResult.accept()

        distance = haversine_m(last, sample)
        dt = sample.seconds_since(last)

        if dt < 0:
            return AcceptResult.reject(RejectionReason.OUT_OF_ORDER, distance_m=distance)
        if dt == 0:
            return AcceptResult.reject(RejectionReason.TOO_SOON_OR_TOO_CLOSE, distance_m=distance)

        speed = distance / dt
        if speed > self.config.max_speed_mps:
            return AcceptResult.reject(RejectionReason.IMPLAUSIBLE_SPEED, distance_m=distance, speed_mps=speed)

        moved_enough = distance > self.config.min_movement_m
        stale_but_moved = (
            dt > self.config.max_interval_s and distance > self.config.stale_min_movement_m
        )
        if not (moved_enough or stale_but_moved):
            return AcceptResult.reject(RejectionReason.TOO_SOON_OR_TOO_CLOSE, distance_m=distance, speed_mps=speed)

        self._path.append(sample)
        return AcceptResult.accept(distance_m=distance, speed_mps=speed)

    def reset(self) -> None:
        """Discard every accepted sample."""
        self._path.clear()

    def __len__(self) -> int:
        return len(self._path)

    def __repr__(self) -> str:
        return f"PathAccumulator(points={len(self._path)})"
