"""
Collision Engine Module
=======================

Compares an in-progress path against a snapshot of claimed territories.

Design:
- Read-only: territories are never mutated, no side effects
- Violations first (fatal to the session), proximity tiers second
- Other players' territories scanned before the player's own
- Bounding-box prefilter before exact containment / crossing tests
- Crossing tests vectorised (path segments x boundary edges)

Violation kinds:
    POINT_IN_TERRITORY          a sample lies inside a territory
    PATH_CROSSES_TERRITORY      a path segment crosses a boundary edge
    POLYGON_CONTAINS_TERRITORY  the closed candidate polygon swallows a territory
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Collection, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from landgrab_geo.config import ProximityConfig
from landgrab_geo.geometry.points import (
    BoundingBox,
    GeoPoint,
    PointLike,
    haversine_array_m,
    haversine_m,
    to_lonlat_array,
    to_point,
)
from landgrab_geo.geometry.segments import (
    point_in_ring,
    polyline_segments,
    segment_crossing_matrix,
    unwrap_longitudes,
)
from landgrab_geo.geometry.shapes import CircleBoundary, PolygonBoundary
from landgrab_geo.territory import Territory


BBOX_PADDING_M = 1.0


class WarningLevel(IntEnum):
    """Ordered proximity tier: SAFE < CAUTION < WARNING < DANGER < VIOLATION."""
    SAFE = 0
    CAUTION = 1
    WARNING = 2
    DANGER = 3
    VIOLATION = 4

    @property
    def message(self) -> str:
        return _LEVEL_MESSAGES[self]


_LEVEL_MESSAGES = {
    WarningLevel.SAFE: "",
    WarningLevel.CAUTION: "Caution: approaching another player's territory",
    WarningLevel.WARNING: "Warning: very close to another player's territory",
    WarningLevel.DANGER: "Danger: about to enter another player's territory",
    WarningLevel.VIOLATION: "Violation: entered another player's territory",
}


class ViolationKind(str, Enum):
    POINT_IN_TERRITORY = "point_in_territory"
    PATH_CROSSES_TERRITORY = "path_crosses_territory"
    POLYGON_CONTAINS_TERRITORY = "polygon_contains_territory"


@dataclass(frozen=True)
class TerritoryViolation:
    """
    A path touching a claimed territory. Fatal to the current session.

    Attributes:
        kind: What kind of contact was detected
        territory_id: Violated territory
        territory_name: Display name of the violated territory
        is_own: True when the territory belongs to the walking player
        message: Human-readable explanation
    """

    kind: ViolationKind
    territory_id: str
    territory_name: str
    is_own: bool
    message: str

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "territory_id": self.territory_id,
            "territory_name": self.territory_name,
            "is_own": self.is_own,
            "message": self.message,
        }


@dataclass(frozen=True)
class CollisionReport:
    """
    Result of one collision check.

    Attributes:
        warning_level: Proximity tier (VIOLATION when `violation` is set)
        violation: First violation found, or None
        nearest_distance_m: Distance from the last sample to the nearest
            other-owned boundary (None when there is none, 0 on violation)
        nearest_territory_id: Territory behind `nearest_distance_m`
        message: Human-readable warning ("" when SAFE)
    """

    warning_level: WarningLevel
    violation: Optional[TerritoryViolation] = None
    nearest_distance_m: Optional[float] = None
    nearest_territory_id: Optional[str] = None
    message: str = ""

    @property
    def has_violation(self) -> bool:
        return self.violation is not None

    @classmethod
    def safe(cls) -> "CollisionReport":
        return cls(warning_level=WarningLevel.SAFE)

    def to_dict(self) -> dict:
        return {
            "warning_level": self.warning_level.name,
            "violation": self.violation.to_dict() if self.violation else None,
            "nearest_distance_m": self.nearest_distance_m,
            "nearest_territory_id": self.nearest_territory_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class NearbyTerritory:
    territory: Territory
    distance_m: float


def distance_to_boundary(point: PointLike, territory: Territory) -> float:
    """
    Approximate distance from a point to a territory's boundary.

    Center distance minus the effective radius, floored at zero.
    """
    boundary = territory.boundary
    return max(0.0, haversine_m(point, boundary.center) - boundary.effective_radius_m)


class CollisionEngine:
    """
    Violation and proximity checks against a territory snapshot.

    Usage:
        engine = CollisionEngine(ProximityConfig())
        report = engine.check(path, candidate, territories, self_owner_id="player-1")
        if report.has_violation:
            end_session(report.violation)
    """

    def __init__(self, config: Optional[ProximityConfig] = None):
        self.config = config or ProximityConfig()

    def check(
        self,
        path: Iterable[PointLike],
        candidate_polygon: Optional[PolygonBoundary],
        territories: Sequence[Territory],
        self_owner_id: Optional[str] = None,
        exclude_ids: Collection[str] = (),
    ) -> CollisionReport:
        """
        Check a path against the snapshot.

        Args:
            path: Accepted samples so far
            candidate_polygon: Closed polygon of the path, when closed
            territories: Immutable territory snapshot
            self_owner_id: Walking player's id (splits own vs others)
            exclude_ids: Territory ids to ignore (e.g. one being redrawn)

        Returns:
            CollisionReport with the first violation, or the proximity tier.
        """
        lonlat = to_lonlat_array(path)
        if len(lonlat) == 0:
            return CollisionReport.safe()

        candidates = [t for t in territories if t.id not in exclude_ids]
        others = [t for t in candidates if not t.is_owned_by(self_owner_id)]
        own = [t for t in candidates if t.is_owned_by(self_owner_id)]

        violation = self._find_violation(lonlat, candidate_polygon, others + own, self_owner_id)
        if violation is not None:
            return CollisionReport(
                warning_level=WarningLevel.VIOLATION,
                violation=violation,
                nearest_distance_m=0.0,
                nearest_territory_id=violation.territory_id,
                message=violation.message,
            )

        return self._proximity(lonlat[-1], others)

    def level_for_distance(self, distance_m: Optional[float]) -> WarningLevel:
        """Map a boundary distance to its tier (None -> SAFE)."""
        if distance_m is None or distance_m > self.config.caution_m:
            return WarningLevel.SAFE
        if distance_m > self.config.warning_m:
            return WarningLevel.CAUTION
        if distance_m > self.config.danger_m:
            return WarningLevel.WARNING
        return WarningLevel.DANGER

    def territory_at(self, point: PointLike, territories: Iterable[Territory]) -> Optional[Territory]:
        """First territory whose boundary contains the point."""
        p = to_point(point)
        for territory in territories:
            if territory.bounding_box.contains(p) and territory.boundary.contains(p):
                return territory
        return None

    def nearby(
        self,
        point: PointLike,
        territories: Iterable[Territory],
        within_m: float,
    ) -> List[NearbyTerritory]:
        """Territories whose boundary is within `within_m`, nearest first."""
        found = []
        for territory in territories:
            distance = distance_to_boundary(point, territory)
            if distance <= within_m:
                found.append(NearbyTerritory(territory=territory, distance_m=distance))
        found.sort(key=lambda n: n.distance_m)
        return found

    # ------------------------------------------------------------------

    def _find_violation(
        self,
        lonlat: np.ndarray,
        candidate_polygon: Optional[PolygonBoundary],
        territories: List[Territory],
        self_owner_id: Optional[str],
    ) -> Optional[TerritoryViolation]:
        path_box = BoundingBox(
            min_lat=float(lonlat[:, 1].min()),
            max_lat=float(lonlat[:, 1].max()),
            min_lon=float(lonlat[:, 0].min()),
            max_lon=float(lonlat[:, 0].max()),
        ).expanded_by_meters(BBOX_PADDING_M)

        for territory in territories:
            box = territory.bounding_box
            if not (path_box.intersects(box) or box.reaches_antimeridian or path_box.reaches_antimeridian):
                continue

            is_own = territory.is_owned_by(self_owner_id)

            if self._any_point_inside(lonlat, territory):
                return self._violation(ViolationKind.POINT_IN_TERRITORY, territory, is_own)

            if len(lonlat) >= 2 and self._path_crosses(lonlat, territory):
                return self._violation(ViolationKind.PATH_CROSSES_TERRITORY, territory, is_own)

            if candidate_polygon is not None and candidate_polygon.contains(territory.center):
                return self._violation(ViolationKind.POLYGON_CONTAINS_TERRITORY, territory, is_own)

        return None

    @staticmethod
    def _any_point_inside(lonlat: np.ndarray, territory: Territory) -> bool:
        boundary = territory.boundary
        if isinstance(boundary, CircleBoundary):
            center = np.array([[boundary.center.longitude, boundary.center.latitude]])
            distances = haversine_array_m(lonlat, np.repeat(center, len(lonlat), axis=0))
            return bool((distances <= boundary.radius_m).any())

        box = territory.bounding_box
        ring = boundary.lonlat
        wraps = box.reaches_antimeridian
        for lon, lat in lonlat:
            if not box.min_lat <= lat <= box.max_lat:
                continue
            if wraps:
                if point_in_ring((lon, lat), unwrap_longitudes(ring, lon)):
                    return True
            elif box.min_lon <= lon <= box.max_lon and point_in_ring((lon, lat), ring):
                return True
        return False

    def _path_crosses(self, lonlat: np.ndarray, territory: Territory) -> bool:
        boundary = territory.boundary
        if isinstance(boundary, CircleBoundary):
            boundary = boundary.to_polygon(self.config.circle_edge_segments)
        # Shared frame anchored on the first sample, so rings across +-180 stay contiguous.
        ref_lon = float(lonlat[0, 0])
        path_starts, path_ends = polyline_segments(unwrap_longitudes(lonlat, ref_lon))
        edge_starts, edge_ends = boundary.edges()
        edge_starts = unwrap_longitudes(edge_starts, ref_lon)
        edge_ends = unwrap_longitudes(edge_ends, ref_lon)
        return bool(segment_crossing_matrix(path_starts, path_ends, edge_starts, edge_ends).any())

    @staticmethod
    def _violation(kind: ViolationKind, territory: Territory, is_own: bool) -> TerritoryViolation:
        name = territory.display_name
        if kind == ViolationKind.POLYGON_CONTAINS_TERRITORY:
            owner = "your territory" if is_own else "another player's territory"
            message = f"Claim would enclose {owner} '{name}'"
        elif is_own:
            message = f"Path cannot cross your other territory '{name}'"
        elif kind == ViolationKind.POINT_IN_TERRITORY:
            message = f"Entered another player's territory '{name}'"
        else:
            message = f"Path cannot cross another player's territory '{name}'"

        return TerritoryViolation(
            kind=kind,
            territory_id=territory.id,
            territory_name=name,
            is_own=is_own,
            message=message,
        )

    def _proximity(self, last_lonlat: np.ndarray, others: List[Territory]) -> CollisionReport:
        if not others:
            return CollisionReport.safe()

        last = GeoPoint(latitude=float(last_lonlat[1]), longitude=float(last_lonlat[0]))
        nearest: Optional[Tuple[float, Territory]] = None
        for territory in others:
            distance = distance_to_boundary(last, territory)
            if nearest is None or distance < nearest[0]:
                nearest = (distance, territory)

        distance, territory = nearest
        level = self.level_for_distance(distance)
        message = ""
        if level > WarningLevel.SAFE:
            message = f"{level.message}: '{territory.display_name}' is {int(distance)} m away"

        return CollisionReport(
            warning_level=level,
            nearest_distance_m=distance,
            nearest_territory_id=territory.id,
            message=message,
        )

