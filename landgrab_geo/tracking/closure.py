"""
Closure Evaluator Module
========================

Decides whether a walked path forms a claimable loop.

Design:
- Stateless evaluation (pure function of path + config)
- Self-intersection short-circuits every other check
- All other unmet conditions reported together, so a client can show
  "walk further" and "get closer to the start" at the same time
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from landgrab_geo.config import ClosureConfig
from landgrab_geo.geometry.area import AreaCalculator
from landgrab_geo.geometry.intersection import SelfIntersectionDetector
from landgrab_geo.geometry.points import PointLike, haversine_m, to_points


class ClosureState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    SELF_INTERSECTING = "self_intersecting"


class UnmetCondition(str, Enum):
    """A closure condition the path does not satisfy yet."""
    TOO_FEW_POINTS = "too_few_points"
    TOO_FAR_FROM_START = "too_far_from_start"
    TOO_SHORT = "too_short"
    AREA_TOO_SMALL = "area_too_small"
    SELF_INTERSECTION = "self_intersection"


@dataclass(frozen=True)
class ClosureMetrics:
    """Measurements taken while evaluating closure."""

    point_count: int
    distance_to_start_m: Optional[float]
    total_distance_m: float
    enclosed_area_m2: float

    def to_dict(self) -> dict:
        return {
            "point_count": self.point_count,
            "distance_to_start_m": self.distance_to_start_m,
            "total_distance_m": self.total_distance_m,
            "enclosed_area_m2": self.enclosed_area_m2,
        }


@dataclass(frozen=True)
class ClosureResult:
    """
    Result of a closure evaluation.

    Attributes:
        state: OPEN, CLOSED or SELF_INTERSECTING
        unmet_conditions: Conditions still failing (empty when CLOSED)
        metrics: Point count, distances and area
        intersection: First crossing segment pair when SELF_INTERSECTING
    """

    state: ClosureState
    unmet_conditions: Tuple[UnmetCondition, ...]
    metrics: ClosureMetrics
    intersection: Optional[Tuple[int, int]] = None

    @property
    def is_closed(self) -> bool:
        return self.state == ClosureState.CLOSED

    @property
    def has_self_intersection(self) -> bool:
        return self.state == ClosureState.SELF_INTERSECTING


class ClosureEvaluator:
    """
    Evaluates closure conditions against a ClosureConfig.

    Usage:
        evaluator = ClosureEvaluator(ClosureConfig())
        result = evaluator.evaluate(path)
        if result.is_closed:
            ...
    """

    def __init__(self, config: Optional[ClosureConfig] = None):
        self.config = config or ClosureConfig()

    def evaluate(self, path: Iterable[PointLike]) -> ClosureResult:
        points = to_points(path)
        count = len(points)

        distance_to_start = haversine_m(points[0], points[-1]) if count >= 2 else None
        metrics = ClosureMetrics(
            point_count=count,
            distance_to_start_m=distance_to_start,
            total_distance_m=AreaCalculator.total_path_distance(points),
            enclosed_area_m2=AreaCalculator.enclosed_area(points),
        )

        crossing = SelfIntersectionDetector.find_first_intersection(points)
        if crossing is not None:
            return ClosureResult(
                state=ClosureState.SELF_INTERSECTING,
                unmet_conditions=(UnmetCondition.SELF_INTERSECTION,),
                metrics=metrics,
                intersection=crossing,
            )

        unmet = []
        if count < self.config.minimum_points:
            unmet.append(UnmetCondition.TOO_FEW_POINTS)
        if distance_to_start is None or distance_to_start > self.config.closure_distance_m:
            unmet.append(UnmetCondition.TOO_FAR_FROM_START)
        if metrics.total_distance_m < self.config.minimum_total_distance_m:
            unmet.append(UnmetCondition.TOO_SHORT)
        if metrics.enclosed_area_m2 < self.config.minimum_area_m2:
            unmet.append(UnmetCondition.AREA_TOO_SMALL)

        return ClosureResult(
            state=ClosureState.OPEN if unmet else ClosureState.CLOSED,
            unmet_conditions=tuple(unmet),
            metrics=metrics,
        )
