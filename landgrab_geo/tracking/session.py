"""
Tracking Session Module
=======================

Bounded Context: One walk, from the first fix to a claim or a cancel.

Design:
- Single writer: samples are ingested one at a time, in arrival order
- Pull model: ingest() returns the fresh TrackingStatus, status reads it back
- Recompute only when a sample is accepted (or before the first status exists)
- Territory snapshot supplied per call, never held between ticks
- Lifecycle misuse raises; rejected samples and violations are values

Flow:
    session = TrackingSession(owner_id="player-1", config=EngineConfig())
    for sample in fixes:
        status = session.ingest(sample, registry.snapshot())
        if status.violation:
            session.cancel()
            break
    if session.status.is_closed:
        candidate = session.commit()
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Collection, Optional, Sequence, Tuple

from landgrab_geo.config import EngineConfig
from landgrab_geo.geometry.area import AreaCalculator
from landgrab_geo.geometry.points import GeoSample, Path
from landgrab_geo.geometry.shapes import PolygonBoundary
from landgrab_geo.logging import LogEvent, StructuredLogger
from landgrab_geo.territory import Territory
from landgrab_geo.tracking.accumulator import AcceptResult, PathAccumulator
from landgrab_geo.tracking.closure import ClosureEvaluator, ClosureResult, ClosureState, UnmetCondition
from landgrab_geo.tracking.collision import CollisionEngine, CollisionReport, TerritoryViolation, WarningLevel


class SessionEndedError(RuntimeError):
    """Raised when a committed or cancelled session is used again."""


class ClaimNotReadyError(RuntimeError):
    """Raised when commit() is called before the path is claimable."""


@dataclass(frozen=True)
class TrackingStatus:
    """
    Derived, never-persisted view of the session after the last accepted sample.
    """

    point_count: int
    total_distance_m: float
    enclosed_area_m2: float
    distance_to_start_m: Optional[float]
    closure_state: ClosureState
    unmet_conditions: Tuple[UnmetCondition, ...]
    distance_to_nearest_other_m: Optional[float]
    warning_level: WarningLevel
    warning_message: str = ""
    violation: Optional[TerritoryViolation] = None

    @property
    def is_closed(self) -> bool:
        return self.closure_state == ClosureState.CLOSED

    @property
    def has_self_intersection(self) -> bool:
        return self.closure_state == ClosureState.SELF_INTERSECTING

    @property
    def is_claimable(self) -> bool:
        return self.is_closed and self.violation is None

    @classmethod
    def from_results(cls, closure: ClosureResult, report: CollisionReport) -> "TrackingStatus":
        metrics = closure.metrics
        return cls(
            point_count=metrics.point_count,
            total_distance_m=metrics.total_distance_m,
            enclosed_area_m2=metrics.enclosed_area_m2,
            distance_to_start_m=metrics.distance_to_start_m,
            closure_state=closure.state,
            unmet_conditions=closure.unmet_conditions,
            distance_to_nearest_other_m=report.nearest_distance_m,
            warning_level=report.warning_level,
            warning_message=report.message,
            violation=report.violation,
        )

    def to_dict(self) -> dict:
        return {
            "point_count": self.point_count,
            "total_distance_m": self.total_distance_m,
            "enclosed_area_m2": self.enclosed_area_m2,
            "distance_to_start_m": self.distance_to_start_m,
            "closure_state": self.closure_state.value,
            "unmet_conditions": [c.value for c in self.unmet_conditions],
            "is_closed": self.is_closed,
            "has_self_intersection": self.has_self_intersection,
            "distance_to_nearest_other_m": self.distance_to_nearest_other_m,
            "warning_level": self.warning_level.name,
            "warning_message": self.warning_message,
            "violation": self.violation.to_dict() if self.violation else None,
        }


@dataclass(frozen=True)
class ClaimCandidate:
    """
    A closed, violation-free path ready to be persisted as a territory.

    The persistence collaborator assigns the id; to_dict() produces its
    insert payload.
    """

    owner_id: str
    boundary: PolygonBoundary
    area_m2: float
    perimeter_m: float
    point_count: int
    started_at: datetime
    completed_at: datetime
    samples: Tuple[GeoSample, ...]
    name: Optional[str] = None

    def to_dict(self) -> dict:
        center = self.boundary.center
        payload = {
            "user_id": self.owner_id,
            "type": "polygon",
            "name": self.name,
            "is_active": True,
            "center_latitude": center.latitude,
            "center_longitude": center.longitude,
            "radius": self.boundary.effective_radius_m,
            "polygon": self.boundary.to_wkt(),
            "area": self.area_m2,
            "perimeter": self.perimeter_m,
            "point_count": self.point_count,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "path": [
                {
                    "lat": s.latitude,
                    "lon": s.longitude,
                    "timestamp": s.timestamp.timestamp(),
                }
                for s in self.samples
            ],
        }
        payload.update(self.boundary.bounding_box.to_dict())
        return payload


class TrackingSession:
    """
    One claim attempt.

    Attributes:
        owner_id: Walking player's id
        started_at: Session start time
        config: Engine configuration (filters, closure, proximity tiers)

    Thread Safety:
        Not thread-safe. One writer per session; hosts serialise ingest().
    """

    def __init__(
        self,
        owner_id: str,
        config: Optional[EngineConfig] = None,
        started_at: Optional[datetime] = None,
        exclude_ids: Collection[str] = (),
        logger: Optional[StructuredLogger] = None,
    ):
        self.owner_id = owner_id
        self.config = config or EngineConfig()
        self.started_at = started_at or datetime.now(timezone.utc)
        self.exclude_ids = frozenset(exclude_ids)
        self.logger = (logger or StructuredLogger(component="session")).bind(owner_id=owner_id)

        self._accumulator = PathAccumulator(self.config.accumulator)
        self._closure = ClosureEvaluator(self.config.closure)
        self._collision = CollisionEngine(self.config.proximity)

        self._status: Optional[TrackingStatus] = None
        self._last_result: Optional[AcceptResult] = None
        self._ended = False

        self.logger.info(
            event=LogEvent.SESSION_STARTED,
            message="Tracking session started",
            metadata={"started_at": self.started_at.isoformat()},
        )

    # ---------------------------------------------------------------- state

    @property
    def path(self) -> Path:
        return self._accumulator.path

    @property
    def status(self) -> Optional[TrackingStatus]:
        """Latest status, None before the first ingest."""
        return self._status

    @property
    def last_result(self) -> Optional[AcceptResult]:
        return self._last_result

    @property
    def is_ended(self) -> bool:
        return self._ended

    # ------------------------------------------------------------ operations

    def ingest(self, sample: GeoSample, territories: Sequence[Territory] = ()) -> TrackingStatus:
        """
        Offer one sample and return the resulting status.

        Args:
            sample: GPS fix
            territories: Immutable snapshot of claimed territories

        Raises:
            SessionEndedError: If the session was committed or cancelled
        """
        self._ensure_active()

        result = self._accumulator.accept(sample)
        self._last_result = result

        if result.accepted:
            self.logger.debug(
                event=LogEvent.SAMPLE_ACCEPTED,
                message="Sample accepted",
                metadata={
                    "point_count": len(self.path),
                    "distance_from_last_m": result.distance_from_last_m,
                },
            )
        else:
            self.logger.debug(
                event=LogEvent.SAMPLE_REJECTED,
                message=f"Sample rejected: {result.reason.value}",
                metadata={
                    "reason": result.reason.value,
                    "accuracy_m": sample.horizontal_accuracy_m,
                    "distance_from_last_m": result.distance_from_last_m,
                    "speed_mps": result.speed_mps,
                },
            )

        if result.accepted or self._status is None:
            self._recompute(territories)
        return self._status

    def cancel(self) -> None:
        """Discard the path and end the session."""
        self._ensure_active()
        point_count = len(self.path)
        self._accumulator.reset()
        self._ended = True
        self.logger.info(
            event=LogEvent.SESSION_CANCELLED,
            message="Tracking session cancelled",
            metadata={"point_count": point_count},
        )

    def commit(self, completed_at: Optional[datetime] = None, name: Optional[str] = None) -> ClaimCandidate:
        """
        Turn a closed, violation-free path into a ClaimCandidate.

        Raises:
            SessionEndedError: If the session already ended
            ClaimNotReadyError: If the path is not closed or has a violation
        """
        self._ensure_active()
        status = self._status
        if status is None or not status.is_closed:
            unmet = [c.value for c in status.unmet_conditions] if status else ["no_samples"]
            raise ClaimNotReadyError(f"Path is not closed (unmet: {', '.join(unmet)})")
        if status.violation is not None:
            raise ClaimNotReadyError(f"Path has a violation: {status.violation.message}")

        samples = self.path.samples
        boundary = PolygonBoundary(vertices=tuple(s.point for s in samples))
        candidate = ClaimCandidate(
            owner_id=self.owner_id,
            boundary=boundary,
            area_m2=status.enclosed_area_m2,
            perimeter_m=AreaCalculator.perimeter(samples),
            point_count=len(samples),
            started_at=self.started_at,
            completed_at=completed_at or datetime.now(timezone.utc),
            samples=samples,
            name=name,
        )

        self._accumulator.reset()
        self._ended = True
        self.logger.info(
            event=LogEvent.SESSION_COMMITTED,
            message="Claim candidate produced",
            metadata={
                "point_count": candidate.point_count,
                "area_m2": round(candidate.area_m2, 1),
            },
        )
        return candidate

    # -------------------------------------------------------------- helpers

    def _ensure_active(self) -> None:
        if self._ended:
            raise SessionEndedError("Tracking session already ended")

    def _recompute(self, territories: Sequence[Territory]) -> None:
        previous = self._status
        path = self.path

        closure = self._closure.evaluate(path)
        candidate = None
        if closure.is_closed:
            candidate = PolygonBoundary(vertices=tuple(path.points))

        report = self._collision.check(
            path,
            candidate,
            territories,
            self_owner_id=self.owner_id,
            exclude_ids=self.exclude_ids,
        )
        status = TrackingStatus.from_results(closure, report)
        self._status = status

        self._log_transitions(previous, status, closure)

    def _log_transitions(
        self,
        previous: Optional[TrackingStatus],
        status: TrackingStatus,
        closure: ClosureResult,
    ) -> None:
        was_state = previous.closure_state if previous else ClosureState.OPEN
        was_level = previous.warning_level if previous else WarningLevel.SAFE

        if status.closure_state != was_state:
            if status.is_closed:
                self.logger.info(
                    event=LogEvent.PATH_CLOSED,
                    message="Path closed",
                    metadata={
                        "point_count": status.point_count,
                        "area_m2": round(status.enclosed_area_m2, 1),
                    },
                )
            elif status.has_self_intersection:
                self.logger.warning(
                    event=LogEvent.PATH_SELF_INTERSECTION,
                    message="Path crosses itself",
                    metadata={"segments": closure.intersection},
                )

        if status.violation is not None:
            if previous is None or previous.violation != status.violation:
                self.logger.warning(
                    event=LogEvent.COLLISION_VIOLATION,
                    message=status.violation.message,
                    metadata=status.violation.to_dict(),
                )
        elif status.warning_level > was_level:
            self.logger.warning(
                event=LogEvent.COLLISION_WARNING,
                message=status.warning_message,
                metadata={
                    "warning_level": status.warning_level.name,
                    "distance_m": status.distance_to_nearest_other_m,
                },
            )

    def __repr__(self) -> str:
        state = "ended" if self._ended else "active"
        return f"TrackingSession(owner={self.owner_id}, points={len(self.path)}, {state})"
