"""
Claim Tracker Service - Sample-driven claim orchestration.

This module provides the ClaimTrackerService class which connects a GPS fix
stream, the territory registry and one TrackingSession at a time.

Architecture:
- Constructor-injected config, registry and listeners (no singletons)
- submit() may be called from any thread (location callback, replay loop)
- process_pending() drains on the caller's thread, one sample at a time
- No internal threads or timers: the host decides when to drain

Threading Model:
- Producer thread(s): submit() -> queue.Queue (arrival order)
- Owner thread: process_pending(), start/cancel/confirm
"""

import queue
import logging
from datetime import datetime
from typing import Callable, Collection, Iterable, List, Optional

from landgrab_geo.geometry.points import GeoPoint, GeoSample, PointLike
from landgrab_geo.logging import LogEvent, StructuredLogger, create_logger
from landgrab_geo.territory import Territory
from landgrab_geo.tracking import (
    ClaimCandidate,
    CollisionEngine,
    NearbyTerritory,
    TerritoryViolation,
    TrackingSession,
    TrackingStatus,
)
from landgrab_tracker.config import TrackerConfig
from landgrab_tracker.registry import TerritoryRegistry

logger = logging.getLogger(__name__)


StatusListener = Callable[[TrackingStatus], None]
ViolationListener = Callable[[TerritoryViolation], None]


class SessionActiveError(RuntimeError):
    """Raised when a session is started while another one is running."""


class NoActiveSessionError(RuntimeError):
    """Raised when a session operation is called with no session running."""


class ClaimTrackerService:
    """
    Orchestrates claim tracking for one player.

    Usage:
        config = TrackerConfig.from_yaml("tracker.yaml")
        registry = TerritoryRegistry(territories_from_backend)

        service = ClaimTrackerService(
            config=config,
            registry=registry,
            on_status=ui.update,
            on_violation=ui.alert,
        )

        service.start_session()
        service.submit(sample)          # from the location thread
        status = service.process_pending()

        if status and status.is_claimable:
            candidate = service.confirm_claim()
            backend.insert(ClaimPayload.from_candidate(candidate).to_dict())

    Thread Safety:
    - submit(): thread-safe (queue.Queue)
    - registry: protected by its own lock, read via snapshot()
    - everything else: owner thread only
    """

    def __init__(
        self,
        config: TrackerConfig,
        registry: Optional[TerritoryRegistry] = None,
        on_status: Optional[StatusListener] = None,
        on_violation: Optional[ViolationListener] = None,
        structured_logger: Optional[StructuredLogger] = None,
    ):
        """
        Initialize tracker service.

        Args:
            config: Tracker configuration
            registry: Territory registry (empty registry if None)
            on_status: Called with every status produced by process_pending()
            on_violation: Called when a violation ends the session
            structured_logger: Event logger (component "tracker" if None)
        """
        self.config = config
        self.registry = registry if registry is not None else TerritoryRegistry()
        self.on_status = on_status
        self.on_violation = on_violation

        self.events = structured_logger or create_logger(
            "tracker", level=config.logging_level, owner_id=config.owner_id
        )
        self.engine = CollisionEngine(config.engine.proximity)

        self._pending: "queue.Queue[GeoSample]" = queue.Queue(maxsize=config.max_pending_samples)
        self._session: Optional[TrackingSession] = None
        self._last_violation: Optional[TerritoryViolation] = None

        self.events.info(
            event=LogEvent.CONFIG_LOADED,
            message="Tracker configured",
            metadata={
                "max_pending_samples": config.max_pending_samples,
                "closure": config.engine.closure,
                "proximity": config.engine.proximity,
            },
        )

    # ------------------------------------------------------------ properties

    @property
    def session(self) -> Optional[TrackingSession]:
        return self._session

    @property
    def is_tracking(self) -> bool:
        return self._session is not None

    @property
    def status(self) -> Optional[TrackingStatus]:
        """Latest status of the running session (None when idle)."""
        return self._session.status if self._session else None

    @property
    def last_violation(self) -> Optional[TerritoryViolation]:
        """Violation that ended the previous session, if any."""
        return self._last_violation

    @property
    def pending_count(self) -> int:
        return self._pending.qsize()

    # ------------------------------------------------------------- lifecycle

    def start_session(
        self,
        started_at: Optional[datetime] = None,
        exclude_ids: Collection[str] = (),
    ) -> TrackingSession:
        """
        Begin a claim attempt.

        Raises:
            SessionActiveError: If a session is already running
        """
        if self._session is not None:
            raise SessionActiveError("A tracking session is already active")

        self._drain_discarding()
        self._last_violation = None
        self._session = TrackingSession(
            owner_id=self.config.owner_id,
            config=self.config.engine,
            started_at=started_at,
            exclude_ids=exclude_ids,
            logger=create_logger("session", level=self.config.logging_level),
        )
        return self._session

    def cancel_session(self) -> None:
        """
        Discard the running session and any queued samples.

        Raises:
            NoActiveSessionError: If no session is running
        """
        session = self._require_session()
        session.cancel()
        self._session = None
        dropped = self._drain_discarding()
        if dropped:
            logger.debug(f"Dropped {dropped} queued samples on cancel")

    def confirm_claim(
        self,
        completed_at: Optional[datetime] = None,
        name: Optional[str] = None,
    ) -> ClaimCandidate:
        """
        Commit the running session.

        Nothing is registered here: the persistence collaborator stores the
        candidate and the host adds the resulting Territory to the registry.

        Raises:
            NoActiveSessionError: If no session is running
            ClaimNotReadyError: If the path is not closed or has a violation
        """
        session = self._require_session()
        candidate = session.commit(completed_at=completed_at, name=name)
        self._session = None
        self._drain_discarding()
        return candidate

    # -------------------------------------------------------------- samples

    def submit(self, sample: GeoSample) -> bool:
        """
        Queue a fix for processing (thread-safe).

        Returns:
            False when the queue is full and the sample was dropped.
        """
        try:
            self._pending.put_nowait(sample)
        except queue.Full:
            logger.warning("Pending sample queue full, dropping sample")
            return False
        return True

    def submit_raw(
        self,
        latitude: float,
        longitude: float,
        timestamp: datetime,
        horizontal_accuracy_m: float,
    ) -> bool:
        """
        Build a GeoSample from raw platform values and queue it.

        Malformed fixes (NaN, out of range) are logged and dropped.
        """
        try:
            sample = GeoSample.at(latitude, longitude, timestamp, horizontal_accuracy_m)
        except (TypeError, ValueError) as e:
            self.events.error(
                event=LogEvent.INVALID_SAMPLE,
                message="Dropped malformed fix",
                metadata={"latitude": latitude, "longitude": longitude},
                exc_info=e,
            )
            return False
        return self.submit(sample)

    def process_pending(self) -> Optional[TrackingStatus]:
        """
        Drain queued samples through the running session, in arrival order.

        Each sample is evaluated against a fresh registry snapshot. A
        violation ends the session; samples queued behind it are discarded.

        Returns:
            Last status produced, or None when nothing was processed.
        """
        last_status = None
        while True:
            try:
                sample = self._pending.get_nowait()
            except queue.Empty:
                break

            if self._session is None:
                continue

            status = self._session.ingest(sample, self.registry.snapshot())
            last_status = status
            if self.on_status is not None:
                self.on_status(status)

            if status.violation is not None:
                self._end_on_violation(status.violation)

        return last_status

    # -------------------------------------------------------------- queries

    def locate(self, sample: GeoSample) -> Optional[GeoPoint]:
        """
        One-shot position lookup.

        Returns the fix's point when it meets the one-shot accuracy ceiling,
        otherwise None.
        """
        if sample.is_accuracy_acceptable(self.config.engine.accumulator.one_shot_max_accuracy_m):
            return sample.point
        return None

    def territory_at(self, point: PointLike) -> Optional[Territory]:
        return self.engine.territory_at(point, self.registry.snapshot())

    def nearby_territories(self, point: PointLike, within_m: Optional[float] = None) -> List[NearbyTerritory]:
        radius = self.config.nearby_radius_m if within_m is None else within_m
        return self.engine.nearby(point, self.registry.snapshot(), radius)

    def replace_territories(self, territories: Iterable[Territory]) -> None:
        """Swap the registry contents (e.g. after a backend refresh)."""
        self.registry.replace_all(territories)
        version, current = self.registry.versioned_snapshot()
        self.events.info(
            event=LogEvent.REGISTRY_UPDATED,
            message="Territory snapshot replaced",
            metadata={"count": len(current), "version": version},
        )

    # -------------------------------------------------------------- helpers

    def _require_session(self) -> TrackingSession:
        if self._session is None:
            raise NoActiveSessionError("No tracking session is active")
        return self._session

    def _end_on_violation(self, violation: TerritoryViolation) -> None:
        self._session.cancel()
        self._session = None
        self._last_violation = violation
        self._drain_discarding()
        if self.on_violation is not None:
            self.on_violation(violation)

    def _drain_discarding(self) -> int:
        dropped = 0
        while True:
            try:
                self._pending.get_nowait()
            except queue.Empty:
                return dropped
            dropped += 1
