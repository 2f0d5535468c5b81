"""
Path builders for tests.

Walks are described as local (east, north) offsets in meters from ORIGIN so
the expected distances and areas can be read straight off the coordinates.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Sequence, Tuple

from landgrab_geo.geometry.points import GeoPoint, GeoSample
from landgrab_geo.geometry.shapes import CircleBoundary, PolygonBoundary
from landgrab_geo.territory import Territory


ORIGIN = GeoPoint(latitude=31.23, longitude=121.47)
T0 = datetime(2025, 10, 1, 8, 0, 0, tzinfo=timezone.utc)

Offset = Tuple[float, float]

# 80 m x 80 m counter-clockwise loop ending 5 m short of the start.
# 12 points, ~315 m walked, ~6400 m2 enclosed.
SQUARE_LOOP: List[Offset] = [
    (0, 0), (27, 0), (54, 0), (80, 0),
    (80, 27), (80, 54), (80, 80),
    (54, 80), (27, 80), (0, 80),
    (0, 40), (0, 5),
]

# Diagonals of a 40 m square: segment 0 crosses segment 2.
FIGURE_EIGHT: List[Offset] = [(0, 0), (40, 40), (40, 0), (0, 40), (0, 5)]


def at(east_m: float, north_m: float, origin: GeoPoint = ORIGIN) -> GeoPoint:
    return origin.offset_meters(east_m=east_m, north_m=north_m)


def sample(east_m: float, north_m: float, seconds: float, accuracy_m: float = 5.0) -> GeoSample:
    return GeoSample(
        point=at(east_m, north_m),
        timestamp=T0 + timedelta(seconds=seconds),
        horizontal_accuracy_m=accuracy_m,
    )


def walk(
    offsets: Sequence[Offset],
    spacing_s: float = 10.0,
    start_s: float = 0.0,
    accuracy_m: float = 5.0,
) -> List[GeoSample]:
    return [
        sample(east, north, start_s + i * spacing_s, accuracy_m)
        for i, (east, north) in enumerate(offsets)
    ]


def points(offsets: Sequence[Offset]) -> List[GeoPoint]:
    return [at(east, north) for east, north in offsets]


def square(east_m: float, north_m: float, side_m: float) -> List[Offset]:
    """Counter-clockwise square with its south-west corner at (east_m, north_m)."""
    return [
        (east_m, north_m),
        (east_m + side_m, north_m),
        (east_m + side_m, north_m + side_m),
        (east_m, north_m + side_m),
    ]


def circle_territory(
    territory_id: str,
    owner_id: str,
    east_m: float,
    north_m: float,
    radius_m: float,
    name: str = None,
) -> Territory:
    return Territory(
        id=territory_id,
        owner_id=owner_id,
        boundary=CircleBoundary(center=at(east_m, north_m), radius_m=radius_m),
        name=name,
    )


def polygon_territory(
    territory_id: str,
    owner_id: str,
    offsets: Sequence[Offset],
    name: str = None,
) -> Territory:
    return Territory(
        id=territory_id,
        owner_id=owner_id,
        boundary=PolygonBoundary(vertices=tuple(points(offsets))),
        name=name,
    )
