"""
Geometry Layer
==============

Bounded Context: Pure geographic shapes and spatial queries.

Responsibilities:
- Coordinate and GPS-fix value types
- Haversine distance, path length, spherical area
- Segment crossing, point-in-boundary, self-intersection
- NO state, NO session logic, NO logging

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Fail-fast validation
- Zero side effects
"""

from landgrab_geo.geometry.points import (
    EARTH_RADIUS_M,
    AccuracyGrade,
    BoundingBox,
    GeoPoint,
    GeoSample,
    Path,
    haversine_m,
)
from landgrab_geo.geometry.shapes import Boundary, CircleBoundary, PolygonBoundary
from landgrab_geo.geometry.area import AreaCalculator
from landgrab_geo.geometry.intersection import SelfIntersectionDetector
from landgrab_geo.geometry.segments import ccw, segments_intersect

__all__ = [
    "EARTH_RADIUS_M",
    "AccuracyGrade",
    "BoundingBox",
    "GeoPoint",
    "GeoSample",
    "Path",
    "haversine_m",
    "Boundary",
    "CircleBoundary",
    "PolygonBoundary",
    "AreaCalculator",
    "SelfIntersectionDetector",
    "ccw",
    "segments_intersect",
]
