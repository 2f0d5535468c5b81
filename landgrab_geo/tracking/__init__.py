"""
Tracking Layer
==============

Bounded Context: Stateful accumulation and per-sample evaluation.

Responsibilities:
- Filter GPS fixes into a Path (PathAccumulator)
- Decide closure (ClosureEvaluator)
- Check violations and proximity against territories (CollisionEngine)
- Drive one claim attempt end to end (TrackingSession)

Depends on the geometry layer; never on hosts.
"""

from landgrab_geo.tracking.accumulator import AcceptResult, PathAccumulator, RejectionReason
from landgrab_geo.tracking.closure import (
    ClosureEvaluator,
    ClosureMetrics,
    ClosureResult,
    ClosureState,
    UnmetCondition,
)
from landgrab_geo.tracking.collision import (
    CollisionEngine,
    CollisionReport,
    NearbyTerritory,
    TerritoryViolation,
    ViolationKind,
    WarningLevel,
    distance_to_boundary,
)
from landgrab_geo.tracking.session import (
    ClaimCandidate,
    ClaimNotReadyError,
    SessionEndedError,
    TrackingSession,
    TrackingStatus,
)

__all__ = [
    "AcceptResult",
    "PathAccumulator",
    "RejectionReason",
    "ClosureEvaluator",
    "ClosureMetrics",
    "ClosureResult",
    "ClosureState",
    "UnmetCondition",
    "CollisionEngine",
    "CollisionReport",
    "NearbyTerritory",
    "TerritoryViolation",
    "ViolationKind",
    "WarningLevel",
    "distance_to_boundary",
    "ClaimCandidate",
    "ClaimNotReadyError",
    "SessionEndedError",
    "TrackingSession",
    "TrackingStatus",
]
