"""
Tracker Message Schemas
=======================

Bounded Context: Data handed to the persistence and UI collaborators.

Design Principles:
- Immutability: frozen=True prevents accidental mutation
- Serialization: to_dict() for JSON export, from_dict() validates on the way in
- Field names follow the territory table (user_id, polygon, bbox_*, ...)

Types:
- PathPoint: One walked vertex with its fix time
- ClaimPayload: Insert payload for a new polygon territory
- StatusMessage: Per-sample tracking status for a UI
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from landgrab_geo.territory import Territory
from landgrab_geo.tracking.session import ClaimCandidate, TrackingStatus


SCHEMA_VERSION = "1.0"


@dataclass(frozen=True)
class PathPoint:
    """
    Walked vertex.

    Example:
        >>> PathPoint(lat=31.2304, lon=121.4737, timestamp=1729000000.0).to_dict()
        {'lat': 31.2304, 'lon': 121.4737, 'timestamp': 1729000000.0}
    """
    lat: float
    lon: float
    timestamp: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lon": self.lon, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PathPoint":
        try:
            ts = data.get("timestamp")
            return cls(
                lat=float(data["lat"]),
                lon=float(data["lon"]),
                timestamp=float(ts) if ts is not None else None,
            )
        except KeyError as e:
            raise ValueError(f"Missing required PathPoint field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid PathPoint data: {e}")


@dataclass(frozen=True)
class ClaimPayload:
    """
    Insert payload for a claimed polygon territory.

    The backend assigns the territory id; to_territory() builds the local
    Territory once it is known.

    Attributes:
        user_id: Owning player
        polygon: WKT polygon, closed ring, lon-lat order
        center_latitude / center_longitude: Vertex centroid
        radius: Equal-area radius in meters
        bbox_*: Bounding box of the ring
        area / perimeter: Square meters / meters
        point_count: Walked vertex count
        started_at / completed_at: ISO 8601 timestamps
        path: Walked vertices
    """
    user_id: str
    polygon: str
    center_latitude: float
    center_longitude: float
    radius: float
    bbox_min_lat: float
    bbox_max_lat: float
    bbox_min_lon: float
    bbox_max_lon: float
    area: float
    perimeter: float
    point_count: int
    started_at: str
    completed_at: str
    path: List[PathPoint] = field(default_factory=list)
    name: Optional[str] = None
    type: str = "polygon"
    is_active: bool = True

    def __post_init__(self):
        """Validate invariants."""
        if not self.user_id:
            raise ValueError("user_id cannot be empty")
        if not self.polygon.startswith("POLYGON(("):
            raise ValueError(f"polygon must be WKT POLYGON, got {self.polygon[:20]!r}")
        if self.point_count < 3:
            raise ValueError(f"point_count must be >= 3, got {self.point_count}")
        if self.area < 0 or self.perimeter < 0:
            raise ValueError("area and perimeter must be >= 0")

    @classmethod
    def from_candidate(cls, candidate: ClaimCandidate) -> "ClaimPayload":
        return cls.from_dict(candidate.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "user_id": self.user_id,
            "type": self.type,
            "name": self.name,
            "is_active": self.is_active,
            "center_latitude": self.center_latitude,
            "center_longitude": self.center_longitude,
            "radius": self.radius,
            "polygon": self.polygon,
            "bbox_min_lat": self.bbox_min_lat,
            "bbox_max_lat": self.bbox_max_lat,
            "bbox_min_lon": self.bbox_min_lon,
            "bbox_max_lon": self.bbox_max_lon,
            "area": self.area,
            "perimeter": self.perimeter,
            "point_count": self.point_count,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "path": [p.to_dict() for p in self.path],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClaimPayload":
        """
        Deserialize from dict.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                user_id=str(data["user_id"]),
                polygon=str(data["polygon"]),
                center_latitude=float(data["center_latitude"]),
                center_longitude=float(data["center_longitude"]),
                radius=float(data["radius"]),
                bbox_min_lat=float(data["bbox_min_lat"]),
                bbox_max_lat=float(data["bbox_max_lat"]),
                bbox_min_lon=float(data["bbox_min_lon"]),
                bbox_max_lon=float(data["bbox_max_lon"]),
                area=float(data["area"]),
                perimeter=float(data["perimeter"]),
                point_count=int(data["point_count"]),
                started_at=str(data["started_at"]),
                completed_at=str(data["completed_at"]),
                path=[PathPoint.from_dict(p) for p in data.get("path", [])],
                name=data.get("name"),
                type=str(data.get("type", "polygon")),
                is_active=bool(data.get("is_active", True)),
            )
        except KeyError as e:
            raise ValueError(f"Missing required ClaimPayload field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid ClaimPayload data: {e}")

    def to_territory(self, territory_id: str) -> Territory:
        """Territory for this payload once persistence has assigned an id."""
        row = self.to_dict()
        row["id"] = territory_id
        return Territory.from_dict(row)


@dataclass(frozen=True)
class StatusMessage:
    """
    Tracking status snapshot for a UI collaborator.

    Example:
        >>> msg = StatusMessage.from_status("player-1", status)
        >>> msg.to_dict()["warning_level"]
        'SAFE'
    """
    owner_id: str
    timestamp: str
    point_count: int
    total_distance_m: float
    enclosed_area_m2: float
    closure_state: str
    warning_level: str
    unmet_conditions: List[str] = field(default_factory=list)
    distance_to_start_m: Optional[float] = None
    distance_to_nearest_other_m: Optional[float] = None
    warning_message: str = ""
    violation: Optional[Dict[str, Any]] = None
    schema_version: str = SCHEMA_VERSION

    def __post_init__(self):
        if self.point_count < 0:
            raise ValueError(f"point_count must be >= 0, got {self.point_count}")

    @classmethod
    def from_status(
        cls,
        owner_id: str,
        status: TrackingStatus,
        timestamp: Optional[datetime] = None,
    ) -> "StatusMessage":
        data = status.to_dict()
        return cls(
            owner_id=owner_id,
            timestamp=(timestamp or datetime.now(timezone.utc)).isoformat(),
            point_count=data["point_count"],
            total_distance_m=data["total_distance_m"],
            enclosed_area_m2=data["enclosed_area_m2"],
            closure_state=data["closure_state"],
            warning_level=data["warning_level"],
            unmet_conditions=list(data["unmet_conditions"]),
            distance_to_start_m=data["distance_to_start_m"],
            distance_to_nearest_other_m=data["distance_to_nearest_other_m"],
            warning_message=data["warning_message"],
            violation=data["violation"],
        )

    @property
    def is_closed(self) -> bool:
        return self.closure_state == "closed"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "schema_version": self.schema_version,
            "owner_id": self.owner_id,
            "timestamp": self.timestamp,
            "point_count": self.point_count,
            "total_distance_m": self.total_distance_m,
            "enclosed_area_m2": self.enclosed_area_m2,
            "closure_state": self.closure_state,
            "unmet_conditions": list(self.unmet_conditions),
            "distance_to_start_m": self.distance_to_start_m,
            "distance_to_nearest_other_m": self.distance_to_nearest_other_m,
            "warning_level": self.warning_level,
            "warning_message": self.warning_message,
            "violation": self.violation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusMessage":
        """
        Deserialize from dict.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                owner_id=str(data["owner_id"]),
                timestamp=str(data["timestamp"]),
                point_count=int(data["point_count"]),
                total_distance_m=float(data["total_distance_m"]),
                enclosed_area_m2=float(data["enclosed_area_m2"]),
                closure_state=str(data["closure_state"]),
                warning_level=str(data["warning_level"]),
                unmet_conditions=list(data.get("unmet_conditions", [])),
                distance_to_start_m=data.get("distance_to_start_m"),
                distance_to_nearest_other_m=data.get("distance_to_nearest_other_m"),
                warning_message=str(data.get("warning_message", "")),
                violation=data.get("violation"),
                schema_version=str(data.get("schema_version", SCHEMA_VERSION)),
            )
        except KeyError as e:
            raise ValueError(f"Missing required StatusMessage field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid StatusMessage data: {e}")
