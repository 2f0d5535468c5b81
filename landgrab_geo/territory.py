"""
Territory Module
================

Bounded Context: Claimed land as seen by the engine.

Design:
- Territory is a read-only snapshot element; the engine never mutates it
- Boundary is a tagged union (CircleBoundary | PolygonBoundary)
- from_dict() accepts persistence rows so hosts can hand over raw records

Dependencies:
- landgrab_geo.geometry (shapes, points)
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from landgrab_geo.geometry.points import BoundingBox, GeoPoint
from landgrab_geo.geometry.shapes import Boundary, CircleBoundary, PolygonBoundary


@dataclass(frozen=True)
class Territory:
    """
    A committed, claimed land boundary.

    Attributes:
        id: Territory identifier (assigned by persistence)
        owner_id: Owning player identifier
        boundary: Circle or polygon shape
        name: Optional human-readable name

    Example:
        >>> t = Territory(
        ...     id="7f0c...",
        ...     owner_id="player-1",
        ...     boundary=CircleBoundary(center=GeoPoint(31.23, 121.47), radius_m=50.0),
        ... )
    """

    id: str
    owner_id: str
    boundary: Boundary
    name: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Territory id cannot be empty")
        if not isinstance(self.boundary, (CircleBoundary, PolygonBoundary)):
            raise TypeError(f"boundary must be CircleBoundary or PolygonBoundary, got {type(self.boundary)}")

    @property
    def bounding_box(self) -> BoundingBox:
        return self.boundary.bounding_box

    @property
    def center(self) -> GeoPoint:
        return self.boundary.center

    @property
    def is_polygon(self) -> bool:
        return isinstance(self.boundary, PolygonBoundary)

    @property
    def area_m2(self) -> float:
        return self.boundary.area_m2

    @property
    def display_name(self) -> str:
        """Name if set, otherwise a short id tag."""
        if self.name:
            return self.name
        return f"Territory-{str(self.id)[:8]}"

    def is_owned_by(self, owner_id: Optional[str]) -> bool:
        return owner_id is not None and str(self.owner_id) == str(owner_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Territory":
        """
        Build from a persistence row.

        Accepted keys:
            id, owner_id (or user_id), name, type ("circle" | "polygon"),
            center_latitude, center_longitude, radius,
            path: [{"lat": .., "lon": ..}, ...]  (polygon vertices)

        A row without `type` is a polygon when it has a path of at least
        3 vertices, otherwise a circle.

        Raises:
            ValueError: If required fields are missing or invalid
        """
        try:
            territory_id = str(data["id"])
            owner_id = data.get("owner_id", data.get("user_id"))
            if owner_id is None:
                raise KeyError("owner_id")

            path = data.get("path") or []
            territory_type = data.get("type") or ("polygon" if len(path) >= 3 else "circle")

            if territory_type == "polygon":
                boundary = PolygonBoundary(
                    vertices=tuple(
                        GeoPoint(latitude=float(p["lat"]), longitude=float(p["lon"]))
                        for p in path
                    )
                )
            elif territory_type == "circle":
                boundary = CircleBoundary(
                    center=GeoPoint(
                        latitude=float(data["center_latitude"]),
                        longitude=float(data["center_longitude"]),
                    ),
                    radius_m=float(data["radius"]),
                )
            else:
                raise ValueError(f"Unknown territory type: {territory_type}")
        except KeyError as e:
            raise ValueError(f"Missing required Territory field: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid Territory data: {e}")

        return cls(
            id=territory_id,
            owner_id=str(owner_id),
            boundary=boundary,
            name=data.get("name"),
        )

    def __str__(self) -> str:
        kind = "polygon" if self.is_polygon else "circle"
        return f"{self.display_name} ({kind}, owner={self.owner_id})"
