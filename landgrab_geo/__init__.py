"""
Landgrab Geometry Engine
========================

Bounded Context: Path and territory geometry for a walk-to-claim game.

A player walks a physical loop. GPS fixes are filtered into a path; when the
path closes on itself without crossing itself or any claimed territory, the
enclosed polygon becomes a claim candidate.

Architecture:

    landgrab_geo/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── points.py      # GeoPoint, GeoSample, Path, BoundingBox, haversine
    │   ├── segments.py    # CCW test, segment crossing, ray casting
    │   ├── shapes.py      # CircleBoundary, PolygonBoundary
    │   ├── area.py        # AreaCalculator (distance, perimeter, area)
    │   ├── intersection.py# SelfIntersectionDetector
    │   └── datum.py       # WGS-84 <-> GCJ-02
    │
    ├── tracking/          # Stateful accumulation & per-sample evaluation
    │   ├── accumulator.py # PathAccumulator
    │   ├── closure.py     # ClosureEvaluator
    │   ├── collision.py   # CollisionEngine, WarningLevel
    │   └── session.py     # TrackingSession, TrackingStatus, ClaimCandidate
    │
    ├── territory.py       # Territory value type
    ├── config.py          # EngineConfig (frozen, YAML-loadable)
    └── logging/           # Structured JSON logging

Usage:

    from landgrab_geo import EngineConfig, GeoSample, TrackingSession

    session = TrackingSession(owner_id="player-1", config=EngineConfig())
    status = session.ingest(GeoSample.at(31.2304, 121.4737, ts, 5.0), territories)

    if status.is_claimable:
        candidate = session.commit()
        payload = candidate.to_dict()
"""

# Geometry Layer (immutable, stateless)
from landgrab_geo.geometry import (
    AccuracyGrade,
    AreaCalculator,
    BoundingBox,
    Boundary,
    CircleBoundary,
    GeoPoint,
    GeoSample,
    Path,
    PolygonBoundary,
    SelfIntersectionDetector,
    haversine_m,
)

# Domain values & configuration
from landgrab_geo.territory import Territory
from landgrab_geo.config import AccumulatorConfig, ClosureConfig, EngineConfig, ProximityConfig

# Tracking Layer (stateful)
from landgrab_geo.tracking import (
    AcceptResult,
    ClaimCandidate,
    ClaimNotReadyError,
    ClosureEvaluator,
    ClosureResult,
    ClosureState,
    CollisionEngine,
    CollisionReport,
    PathAccumulator,
    RejectionReason,
    SessionEndedError,
    TerritoryViolation,
    TrackingSession,
    TrackingStatus,
    UnmetCondition,
    ViolationKind,
    WarningLevel,
)

__all__ = [
    # Geometry
    "AccuracyGrade",
    "AreaCalculator",
    "BoundingBox",
    "Boundary",
    "CircleBoundary",
    "GeoPoint",
    "GeoSample",
    "Path",
    "PolygonBoundary",
    "SelfIntersectionDetector",
    "haversine_m",
    # Domain
    "Territory",
    "AccumulatorConfig",
    "ClosureConfig",
    "EngineConfig",
    "ProximityConfig",
    # Tracking
    "AcceptResult",
    "ClaimCandidate",
    "ClaimNotReadyError",
    "ClosureEvaluator",
    "ClosureResult",
    "ClosureState",
    "CollisionEngine",
    "CollisionReport",
    "PathAccumulator",
    "RejectionReason",
    "SessionEndedError",
    "TerritoryViolation",
    "TrackingSession",
    "TrackingStatus",
    "UnmetCondition",
    "ViolationKind",
    "WarningLevel",
]

__version__ = "1.0.0"
