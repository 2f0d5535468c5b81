"""
Tests for outbound message schemas.
"""

import json
from datetime import timedelta

import pytest

from landgrab_geo.tracking import TrackingSession
from landgrab_tracker.schemas import SCHEMA_VERSION, ClaimPayload, PathPoint, StatusMessage

from tests.geo_helpers import T0, circle_territory, walk, SQUARE_LOOP


@pytest.fixture
def candidate(square_walk):
    session = TrackingSession(owner_id="player-1", started_at=T0)
    for s in square_walk:
        session.ingest(s)
    return session.commit(completed_at=T0 + timedelta(minutes=2), name="Block")


@pytest.fixture
def payload(candidate):
    return ClaimPayload.from_candidate(candidate)


# =============================================================================
# PathPoint
# =============================================================================


class TestPathPoint:

    def test_from_dict_without_timestamp(self):
        point = PathPoint.from_dict({"lat": "31.2", "lon": 121.4})
        assert point == PathPoint(lat=31.2, lon=121.4, timestamp=None)

    def test_missing_field(self):
        with pytest.raises(ValueError, match="lon"):
            PathPoint.from_dict({"lat": 31.2})

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            PathPoint.from_dict({"lat": "north", "lon": 121.4})


# =============================================================================
# ClaimPayload
# =============================================================================


class TestClaimPayload:

    def test_from_candidate(self, payload, candidate):
        assert payload.user_id == "player-1"
        assert payload.name == "Block"
        assert payload.type == "polygon"
        assert payload.is_active
        assert payload.point_count == 12
        assert len(payload.path) == 12
        assert payload.area == pytest.approx(candidate.area_m2)
        assert payload.started_at == T0.isoformat()

    def test_to_dict_is_json_serialisable(self, payload):
        data = json.loads(json.dumps(payload.to_dict()))
        assert data["polygon"].startswith("POLYGON((")
        assert data["path"][0]["timestamp"] == T0.timestamp()
        assert ClaimPayload.from_dict(data) == payload

    def test_to_territory(self, payload):
        territory = payload.to_territory("t-42")
        assert territory.id == "t-42"
        assert territory.owner_id == "player-1"
        assert territory.is_polygon
        assert territory.name == "Block"
        assert territory.area_m2 == pytest.approx(payload.area, rel=1e-6)

    def test_missing_field(self, payload):
        data = payload.to_dict()
        del data["polygon"]
        with pytest.raises(ValueError, match="polygon"):
            ClaimPayload.from_dict(data)

    @pytest.mark.parametrize(
        "field, value",
        [
            ("user_id", ""),
            ("polygon", "LINESTRING(0 0, 1 1)"),
            ("point_count", 2),
            ("area", -1.0),
        ],
    )
    def test_invalid(self, payload, field, value):
        data = payload.to_dict()
        data[field] = value
        with pytest.raises(ValueError):
            ClaimPayload.from_dict(data)


# =============================================================================
# StatusMessage
# =============================================================================


class TestStatusMessage:

    def test_from_closed_status(self, square_walk):
        session = TrackingSession(owner_id="player-1", started_at=T0)
        for s in square_walk:
            status = session.ingest(s)

        msg = StatusMessage.from_status("player-1", status, timestamp=T0)
        assert msg.is_closed
        assert msg.point_count == 12
        assert msg.warning_level == "SAFE"
        assert msg.unmet_conditions == []
        assert msg.timestamp == T0.isoformat()
        assert msg.schema_version == SCHEMA_VERSION

    def test_from_violation_status(self):
        session = TrackingSession(owner_id="player-1", started_at=T0)
        theirs = circle_territory("t-1", "player-2", 54, 0, 10)
        for s in walk(SQUARE_LOOP[:3]):
            status = session.ingest(s, [theirs])

        data = StatusMessage.from_status("player-1", status, timestamp=T0).to_dict()
        assert data["warning_level"] == "VIOLATION"
        assert data["violation"]["territory_id"] == "t-1"
        assert "too_few_points" in data["unmet_conditions"]

    def test_round_trip_through_json(self, square_walk):
        session = TrackingSession(owner_id="player-1", started_at=T0)
        for s in square_walk[:4]:
            status = session.ingest(s)
        msg = StatusMessage.from_status("player-1", status, timestamp=T0)
        assert StatusMessage.from_dict(json.loads(json.dumps(msg.to_dict()))) == msg

    def test_missing_field(self):
        with pytest.raises(ValueError, match="owner_id"):
            StatusMessage.from_dict({"timestamp": "x"})

    def test_negative_point_count(self):
        with pytest.raises(ValueError):
            StatusMessage(
                owner_id="p",
                timestamp="t",
                point_count=-1,
                total_distance_m=0.0,
                enclosed_area_m2=0.0,
                closure_state="open",
                warning_level="SAFE",
            )
