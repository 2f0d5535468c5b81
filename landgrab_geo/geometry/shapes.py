"""
Territory Boundary Shapes
=========================

Pure geometric representations of claimed land - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Bounding box cached at construction for O(1) prefiltering
- Haversine containment for circles, ray casting for polygons
- Thread-safe by design (immutability)
"""

import math
from dataclasses import dataclass, field
from typing import Tuple, Union

import numpy as np

from landgrab_geo.geometry.area import AreaCalculator
from landgrab_geo.geometry.points import (
    BoundingBox,
    GeoPoint,
    PointLike,
    haversine_m,
    to_point,
    wrap_longitude,
)
from landgrab_geo.geometry.segments import point_in_ring, ring_segments, unwrap_longitudes


CIRCLE_EDGE_SEGMENTS = 36


@dataclass(frozen=True)
class CircleBoundary:
    """
    Immutable circular territory.

    Attributes:
        center: Circle center
        radius_m: Radius in meters, > 0
    """

    center: GeoPoint
    radius_m: float
    bounding_box: BoundingBox = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate and cache the bounding box."""
        if not isinstance(self.center, GeoPoint):
            raise TypeError(f"center must be GeoPoint, got {type(self.center)}")
        if not (math.isfinite(self.radius_m) and self.radius_m > 0):
            raise ValueError(f"radius_m must be a positive number, got {self.radius_m}")

        bbox = BoundingBox.from_points([self.center]).expanded_by_meters(self.radius_m)
        object.__setattr__(self, "bounding_box", bbox)

    @property
    def area_m2(self) -> float:
        return math.pi * self.radius_m * self.radius_m

    @property
    def effective_radius_m(self) -> float:
        return self.radius_m

    def contains(self, point: PointLike) -> bool:
        """Inside or on the circle (haversine distance to center <= radius)."""
        return haversine_m(point, self.center) <= self.radius_m

    def to_polygon(self, segments: int = CIRCLE_EDGE_SEGMENTS) -> "PolygonBoundary":
        """
        Regular polygon inscribed in the circle.

        Used where an edge-based test needs a ring; the approximation error is
        radius * (1 - cos(pi / segments)).
        """
        if segments < 3:
            raise ValueError(f"segments must be >= 3, got {segments}")
        vertices = []
        for k in range(segments):
            theta = 2.0 * math.pi * k / segments
            vertices.append(
                self.center.offset_meters(
                    east_m=self.radius_m * math.cos(theta),
                    north_m=self.radius_m * math.sin(theta),
                )
            )
        return PolygonBoundary(vertices=tuple(vertices))

    def edges(self) -> Tuple[np.ndarray, np.ndarray]:
        """(starts, ends) edge arrays of the polygonal approximation."""
        return self.to_polygon().edges()


@dataclass(frozen=True)
class PolygonBoundary:
    """
    Immutable polygon territory.

    Attributes:
        vertices: Ordered ring of at least 3 points; implicitly closed, the
            first vertex is not repeated at the end.
    """

    vertices: Tuple[GeoPoint, ...]
    bounding_box: BoundingBox = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate, freeze and cache derived data."""
        vertices = tuple(to_point(v) for v in self.vertices)
        # A closing duplicate is redundant for an implicitly closed ring
        if len(vertices) > 3 and vertices[0] == vertices[-1]:
            vertices = vertices[:-1]
        if len(vertices) < 3:
            raise ValueError(f"Polygon must have at least 3 vertices, got {len(vertices)}")

        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "bounding_box", BoundingBox.from_points(vertices))

        ring = np.array([(v.longitude, v.latitude) for v in vertices], dtype=float)
        ring.flags.writeable = False
        object.__setattr__(self, "_ring", ring)

    @property
    def lonlat(self) -> np.ndarray:
        """Read-only Nx2 (lon, lat) array of the ring."""
        return self._ring

    @property
    def center(self) -> GeoPoint:
        """Vertex centroid."""
        lon, lat = unwrap_longitudes(self._ring, self._ring[0, 0]).mean(axis=0)
        if not -180.0 <= lon <= 180.0:
            lon = wrap_longitude(lon)
        return GeoPoint(latitude=float(lat), longitude=float(lon))

    @property
    def area_m2(self) -> float:
        return AreaCalculator.enclosed_area(self.vertices)

    @property
    def effective_radius_m(self) -> float:
        """Radius of the circle with the same area."""
        return math.sqrt(self.area_m2 / math.pi)

    def contains(self, point: PointLike) -> bool:
        p = to_point(point)
        if not self.bounding_box.contains(p):
            return False
        return point_in_ring((p.longitude, p.latitude), unwrap_longitudes(self._ring, p.longitude))

    def edges(self) -> Tuple[np.ndarray, np.ndarray]:
        """(starts, ends) edge arrays of the closed ring."""
        return ring_segments(self._ring)

    def to_wkt(self) -> str:
        """
        WKT polygon with a closed ring in lon-lat order.

        Example:
            POLYGON((121.47 31.23, 121.48 31.23, 121.48 31.24, 121.47 31.23))
        """
        ring = list(self.vertices) + [self.vertices[0]]
        coords = ", ".join(f"{v.longitude} {v.latitude}" for v in ring)
        return f"POLYGON(({coords}))"


Boundary = Union[CircleBoundary, PolygonBoundary]
