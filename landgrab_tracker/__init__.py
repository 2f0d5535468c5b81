"""
landgrab_tracker - Host-side orchestration for claim tracking

Connects a GPS fix stream and a territory snapshot store to the geometry
engine, one claim attempt at a time.

Architecture:
- ClaimTrackerService: Sample queue + session lifecycle
- TerritoryRegistry: Thread-safe copy-on-write territory store
- TrackerConfig: Configuration management
- ClaimPayload / StatusMessage: Outbound data for persistence and UI

Threading Model:
- Producer thread(s) call submit()
- Owner thread calls process_pending() and the lifecycle methods
"""

from landgrab_tracker.config import TrackerConfig
from landgrab_tracker.registry import TerritoryRegistry
from landgrab_tracker.schemas import ClaimPayload, PathPoint, StatusMessage
from landgrab_tracker.service import ClaimTrackerService, NoActiveSessionError, SessionActiveError

__all__ = [
    "TrackerConfig",
    "TerritoryRegistry",
    "ClaimPayload",
    "PathPoint",
    "StatusMessage",
    "ClaimTrackerService",
    "NoActiveSessionError",
    "SessionActiveError",
]
