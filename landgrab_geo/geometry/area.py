"""
Area & Distance Module
======================

Path length and enclosed-area computations on a spherical Earth.

Design:
- Stateless (all static methods)
- Accepts Path, or any sequence of GeoPoint / GeoSample
- Vectorised with numpy; deterministic for a given vertex order

Area formula (spherical approximation, radians, implicitly closed ring):

    area = |sum_i (lon_{i+1} - lon_i) * (2 + sin(lat_i) + sin(lat_{i+1}))| * R^2 / 2

Valid for loops up to a few kilometers.
"""

import math
from typing import Iterable

import numpy as np

from landgrab_geo.geometry.points import (
    EARTH_RADIUS_M,
    PointLike,
    haversine_array_m,
    to_lonlat_array,
)


def _polyline_length(lonlat: np.ndarray) -> float:
    if len(lonlat) < 2:
        return 0.0
    return float(haversine_array_m(lonlat[:-1], lonlat[1:]).sum())


def _ring_length(lonlat: np.ndarray) -> float:
    if len(lonlat) < 2:
        return 0.0
    return _polyline_length(np.vstack([lonlat, lonlat[:1]]))


def _signed_area(lonlat: np.ndarray) -> float:
    if len(lonlat) < 3:
        return 0.0

    lon = np.radians(lonlat[:, 0])
    sin_lat = np.sin(np.radians(lonlat[:, 1]))
    lon_next = np.roll(lon, -1)
    sin_lat_next = np.roll(sin_lat, -1)

    d_lon = lon_next - lon
    # Steps across +-180 take the short way round.
    d_lon[d_lon > np.pi] -= 2.0 * np.pi
    d_lon[d_lon < -np.pi] += 2.0 * np.pi
    total = float(np.sum(d_lon * (2.0 + sin_lat + sin_lat_next)))
    return -total * EARTH_RADIUS_M * EARTH_RADIUS_M / 2.0


class AreaCalculator:
    """
    Stateless calculator for path distance, perimeter and enclosed area.

    Usage:
        distance = AreaCalculator.total_path_distance(path)
        area = AreaCalculator.enclosed_area(path)
        ratio = AreaCalculator.compactness(path)
    """

    @staticmethod
    def total_path_distance(path: Iterable[PointLike]) -> float:
        """
        Sum of haversine distances between consecutive points.

        Returns:
            Walked distance in meters; 0.0 for fewer than 2 points.
        """
        return _polyline_length(to_lonlat_array(path))

    @staticmethod
    def perimeter(path: Iterable[PointLike]) -> float:
        """Walked distance plus the closing segment (last -> first)."""
        return _ring_length(to_lonlat_array(path))

    @staticmethod
    def signed_area(path: Iterable[PointLike]) -> float:
        """
        Signed enclosed area in square meters.

        Positive when vertices run counter-clockwise (east = +x, north = +y),
        negative when clockwise. 0.0 for fewer than 3 points.
        """
        return _signed_area(to_lonlat_array(path))

    @staticmethod
    def enclosed_area(path: Iterable[PointLike]) -> float:
        """Absolute enclosed area in square meters (0.0 below 3 points)."""
        return abs(_signed_area(to_lonlat_array(path)))

    @staticmethod
    def compactness(path: Iterable[PointLike]) -> float:
        """
        perimeter^2 / (4 * pi * area).

        1.0 for a circle, about 1.27 for a square. Diagnostic only; `inf` when
        the area is zero.
        """
        lonlat = to_lonlat_array(path)
        area = abs(_signed_area(lonlat))
        if area <= 0.0:
            return math.inf
        perimeter = _ring_length(lonlat)
        return perimeter * perimeter / (4.0 * math.pi * area)
