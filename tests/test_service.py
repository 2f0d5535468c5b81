"""
Tests for ClaimTrackerService orchestration.
"""

from datetime import timedelta

import pytest

from landgrab_geo.tracking import ClaimNotReadyError, WarningLevel
from landgrab_tracker.config import TrackerConfig
from landgrab_tracker.registry import TerritoryRegistry
from landgrab_tracker.service import (
    ClaimTrackerService,
    NoActiveSessionError,
    SessionActiveError,
)

from tests.geo_helpers import SQUARE_LOOP, T0, at, circle_territory, sample, walk


OWNER = "player-1"


@pytest.fixture
def config():
    return TrackerConfig(owner_id=OWNER)


@pytest.fixture
def statuses():
    return []


@pytest.fixture
def violations():
    return []


@pytest.fixture
def service(config, statuses, violations):
    return ClaimTrackerService(
        config=config,
        registry=TerritoryRegistry(),
        on_status=statuses.append,
        on_violation=violations.append,
    )


def submit_all(service, samples):
    return [service.submit(s) for s in samples]


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:

    def test_idle_by_default(self, service):
        assert not service.is_tracking
        assert service.session is None
        assert service.status is None

    def test_start_session(self, service):
        session = service.start_session(started_at=T0)
        assert service.is_tracking
        assert session.owner_id == OWNER
        assert session.started_at == T0

    def test_start_twice_rejected(self, service):
        service.start_session()
        with pytest.raises(SessionActiveError):
            service.start_session()

    def test_cancel_without_session(self, service):
        with pytest.raises(NoActiveSessionError):
            service.cancel_session()

    def test_confirm_without_session(self, service):
        with pytest.raises(NoActiveSessionError):
            service.confirm_claim()

    def test_cancel_discards_queue(self, service):
        service.start_session(started_at=T0)
        submit_all(service, walk(SQUARE_LOOP[:3]))
        service.cancel_session()
        assert not service.is_tracking
        assert service.pending_count == 0

    def test_samples_queued_before_start_are_dropped(self, service):
        submit_all(service, walk(SQUARE_LOOP[:3]))
        service.start_session(started_at=T0)
        assert service.pending_count == 0


# =============================================================================
# Sample processing
# =============================================================================


class TestProcessing:

    def test_process_in_arrival_order(self, service, statuses, square_walk):
        service.start_session(started_at=T0)
        assert all(submit_all(service, square_walk))
        assert service.pending_count == 12

        status = service.process_pending()
        assert service.pending_count == 0
        assert [s.point_count for s in statuses] == list(range(1, 13))
        assert status is statuses[-1]
        assert status.is_claimable
        assert service.status is status

    def test_process_without_samples(self, service):
        service.start_session()
        assert service.process_pending() is None

    def test_process_without_session_discards(self, service, statuses):
        submit_all(service, walk(SQUARE_LOOP[:3]))
        assert service.process_pending() is None
        assert statuses == []
        assert service.pending_count == 0

    def test_queue_full_drops_sample(self, statuses):
        service = ClaimTrackerService(
            config=TrackerConfig(owner_id=OWNER, max_pending_samples=2),
            on_status=statuses.append,
        )
        service.start_session(started_at=T0)
        assert submit_all(service, walk(SQUARE_LOOP[:3])) == [True, True, False]
        assert service.pending_count == 2

    def test_submit_raw(self, service):
        service.start_session(started_at=T0)
        point = at(0, 0)
        assert service.submit_raw(point.latitude, point.longitude, T0, 5.0)
        status = service.process_pending()
        assert status.point_count == 1

    def test_submit_raw_rejects_malformed_fix(self, service):
        assert not service.submit_raw(float("nan"), 121.47, T0, 5.0)
        assert not service.submit_raw(95.0, 121.47, T0, 5.0)
        assert service.pending_count == 0

    def test_confirm_claim(self, service, square_walk):
        service.start_session(started_at=T0)
        submit_all(service, square_walk)
        service.process_pending()

        candidate = service.confirm_claim(completed_at=T0 + timedelta(minutes=2), name="Block")
        assert candidate.owner_id == OWNER
        assert candidate.name == "Block"
        assert candidate.point_count == 12
        assert not service.is_tracking

    def test_confirm_open_path_keeps_session(self, service):
        service.start_session(started_at=T0)
        submit_all(service, walk(SQUARE_LOOP[:4]))
        service.process_pending()
        with pytest.raises(ClaimNotReadyError):
            service.confirm_claim()
        assert service.is_tracking


# =============================================================================
# Violations
# =============================================================================


class TestViolations:

    def test_violation_ends_session(self, service, statuses, violations):
        service.registry.add(circle_territory("t-1", "player-2", 54, 0, 10, name="Plaza"))
        service.start_session(started_at=T0)
        submit_all(service, walk(SQUARE_LOOP[:6]))

        status = service.process_pending()
        assert status.warning_level == WarningLevel.VIOLATION
        assert len(statuses) == 3  # third sample enters the territory
        assert not service.is_tracking
        assert service.pending_count == 0

        assert len(violations) == 1
        assert violations[0].territory_id == "t-1"
        assert service.last_violation is violations[0]

    def test_new_session_clears_last_violation(self, service, violations):
        service.registry.add(circle_territory("t-1", "player-2", 54, 0, 10))
        service.start_session(started_at=T0)
        submit_all(service, walk(SQUARE_LOOP[:3]))
        service.process_pending()
        assert service.last_violation is not None

        service.start_session(started_at=T0 + timedelta(minutes=5))
        assert service.last_violation is None

    def test_registry_changes_seen_between_samples(self, service, violations):
        service.start_session(started_at=T0)
        submit_all(service, walk(SQUARE_LOOP[:2]))
        service.process_pending()
        assert violations == []

        service.replace_territories([circle_territory("late", "player-2", 54, 0, 10)])
        service.submit(sample(54, 0, 20))
        service.process_pending()
        assert violations[0].territory_id == "late"

    def test_excluded_own_territory(self, service, violations):
        service.registry.add(circle_territory("old", OWNER, 54, 0, 10))
        service.start_session(started_at=T0, exclude_ids={"old"})
        submit_all(service, walk(SQUARE_LOOP[:4]))
        service.process_pending()
        assert violations == []
        assert service.is_tracking


# =============================================================================
# Queries
# =============================================================================


class TestQueries:

    def test_locate_uses_one_shot_ceiling(self, service):
        assert service.locate(sample(0, 0, 0, accuracy_m=80.0)) == at(0, 0)
        assert service.locate(sample(0, 0, 0, accuracy_m=150.0)) is None
        assert service.locate(sample(0, 0, 0, accuracy_m=0.0)) is None

    def test_territory_at(self, service):
        plaza = circle_territory("plaza", "player-2", 100, 0, 20)
        service.replace_territories([plaza])
        assert service.territory_at(at(100, 10)) == plaza
        assert service.territory_at(at(0, 0)) is None

    def test_nearby_territories(self, service):
        service.replace_territories([
            circle_territory("near", "player-2", 60, 0, 20),
            circle_territory("far", "player-2", 2000, 0, 20),
        ])
        assert [n.territory.id for n in service.nearby_territories(at(0, 0))] == ["near"]
        assert len(service.nearby_territories(at(0, 0), within_m=5000.0)) == 2
