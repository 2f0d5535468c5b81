"""
Geographic Primitives Module
============================

Pure value types for coordinates and GPS fixes - NO state, NO side effects.

Design:
- Immutable values (frozen dataclass pattern)
- Fail-fast validation at construction (NaN, out-of-range)
- Haversine distance on a spherical Earth
- numpy views for vectorised geometry
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np


EARTH_RADIUS_M = 6_371_000.0  # mean Earth radius in meters
MIN_COS_LAT = 1e-6  # keeps east-west offsets finite at the poles


def wrap_longitude(longitude: float) -> float:
    """Longitude folded into [-180, 180)."""
    return (longitude + 180.0) % 360.0 - 180.0


@dataclass(frozen=True)
class GeoPoint:
    """
    Immutable WGS-84 coordinate.

    Attributes:
        latitude: Latitude in decimal degrees, [-90, 90]
        longitude: Longitude in decimal degrees, [-180, 180]

    Invariants:
        - both values finite
        - |latitude| <= 90, |longitude| <= 180

    Example:
        >>> p = GeoPoint(latitude=31.2304, longitude=121.4737)
        >>> p.to_dict()
        {'latitude': 31.2304, 'longitude': 121.4737}
    """

    latitude: float
    longitude: float

    def __post_init__(self):
        """Validate invariants."""
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError(
                f"GeoPoint coordinates must be finite, got ({self.latitude}, {self.longitude})"
            )
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be in [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude must be in [-180, 180], got {self.longitude}")

    def distance_to(self, other: "GeoPoint") -> float:
        """Haversine distance to another point in meters."""
        return haversine_m(self, other)

    def offset_meters(self, east_m: float, north_m: float) -> "GeoPoint":
        """
        Point displaced by a local east/north offset.

        Uses an equirectangular approximation, good for the tens-to-hundreds
        of meters a walking loop spans. Longitude wraps across the
        antimeridian; latitude is clamped at the poles.
        """
        d_lat = math.degrees(north_m / EARTH_RADIUS_M)
        cos_lat = max(math.cos(math.radians(self.latitude)), MIN_COS_LAT)
        d_lon = math.degrees(east_m / (EARTH_RADIUS_M * cos_lat))

        longitude = self.longitude + d_lon
        if not -180.0 <= longitude <= 180.0:
            longitude = wrap_longitude(longitude)
        latitude = min(90.0, max(-90.0, self.latitude + d_lat))
        return GeoPoint(latitude=latitude, longitude=longitude)

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict."""
        return {"latitude": self.latitude, "longitude": self.longitude}

    def __str__(self) -> str:
        return f"({self.latitude:.6f}, {self.longitude:.6f})"


class AccuracyGrade(str, Enum):
    """Coarse quality band of a fix's horizontal accuracy."""
    EXCELLENT = "excellent"    # <= 5m
    GOOD = "good"              # <= 10m
    FAIR = "fair"              # <= 50m
    POOR = "poor"


@dataclass(frozen=True)
class GeoSample:
    """
    A single accepted-or-candidate GPS fix.

    Attributes:
        point: Fix coordinate
        timestamp: Time of the fix (timezone-aware recommended)
        horizontal_accuracy_m: Reported accuracy radius in meters. Platforms
            report a negative value for an invalid fix; that is allowed here
            and rejected by the accumulator.
    """

    point: GeoPoint
    timestamp: datetime
    horizontal_accuracy_m: float

    def __post_init__(self):
        if not isinstance(self.point, GeoPoint):
            raise TypeError(f"point must be GeoPoint, got {type(self.point)}")
        if math.isnan(self.horizontal_accuracy_m):
            raise ValueError("horizontal_accuracy_m must not be NaN")

    @classmethod
    def at(
        cls,
        latitude: float,
        longitude: float,
        timestamp: datetime,
        horizontal_accuracy_m: float = 5.0,
    ) -> "GeoSample":
        """Build a sample from raw coordinates."""
        return cls(
            point=GeoPoint(latitude=latitude, longitude=longitude),
            timestamp=timestamp,
            horizontal_accuracy_m=horizontal_accuracy_m,
        )

    @property
    def latitude(self) -> float:
        return self.point.latitude

    @property
    def longitude(self) -> float:
        return self.point.longitude

    @property
    def accuracy_grade(self) -> AccuracyGrade:
        """Quality band of this fix."""
        if self.horizontal_accuracy_m <= 5:
            return AccuracyGrade.EXCELLENT
        elif self.horizontal_accuracy_m <= 10:
            return AccuracyGrade.GOOD
        elif self.horizontal_accuracy_m <= 50:
            return AccuracyGrade.FAIR
        return AccuracyGrade.POOR

    def is_accuracy_acceptable(self, max_accuracy_m: float) -> bool:
        """True when the fix is valid (accuracy > 0) and within the ceiling."""
        return 0 < self.horizontal_accuracy_m <= max_accuracy_m

    def seconds_since(self, other: "GeoSample") -> float:
        """Elapsed seconds from `other` to this sample (negative on regression)."""
        return (self.timestamp - other.timestamp).total_seconds()


@dataclass(frozen=True)
class BoundingBox:
    """
    Immutable lat/lon bounding box.

    Used as a cheap prefilter before exact containment and crossing tests.
    """

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self):
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError(
                f"BoundingBox min must not exceed max, got "
                f"lat [{self.min_lat}, {self.max_lat}] lon [{self.min_lon}, {self.max_lon}]"
            )

    @classmethod
    def from_points(cls, points: Iterable[GeoPoint]) -> "BoundingBox":
        points = list(points)
        if not points:
            raise ValueError("BoundingBox requires at least one point")
        lats = [p.latitude for p in points]
        lons = [p.longitude for p in points]
        return cls(min_lat=min(lats), max_lat=max(lats), min_lon=min(lons), max_lon=max(lons))

    def intersects(self, other: "BoundingBox") -> bool:
        return not (
            self.max_lat < other.min_lat
            or self.min_lat > other.max_lat
            or self.max_lon < other.min_lon
            or self.min_lon > other.max_lon
        )

    @property
    def reaches_antimeridian(self) -> bool:
        """True when the box touches longitude +-180 or is wider than a hemisphere."""
        return self.min_lon <= -180.0 or self.max_lon >= 180.0 or self.max_lon - self.min_lon > 180.0

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.min_lat <= point.latitude <= self.max_lat
            and self.min_lon <= point.longitude <= self.max_lon
        )

    def expanded_by_meters(self, meters: float) -> "BoundingBox":
        """Box grown by `meters` on every side (clamped to valid ranges)."""
        d_lat = math.degrees(meters / EARTH_RADIUS_M)
        mid_lat = math.radians((self.min_lat + self.max_lat) / 2.0)
        cos_lat = max(math.cos(mid_lat), MIN_COS_LAT)
        d_lon = math.degrees(meters / (EARTH_RADIUS_M * cos_lat))
        return BoundingBox(
            min_lat=max(-90.0, self.min_lat - d_lat),
            max_lat=min(90.0, self.max_lat + d_lat),
            min_lon=max(-180.0, self.min_lon - d_lon),
            max_lon=min(180.0, self.max_lon + d_lon),
        )

    def to_dict(self) -> dict:
        return {
            "bbox_min_lat": self.min_lat,
            "bbox_max_lat": self.max_lat,
            "bbox_min_lon": self.min_lon,
            "bbox_max_lon": self.max_lon,
        }


PointLike = Union[GeoPoint, GeoSample]


def to_point(item: PointLike) -> GeoPoint:
    """Unwrap a GeoSample to its GeoPoint; GeoPoints pass through."""
    if isinstance(item, GeoSample):
        return item.point
    if isinstance(item, GeoPoint):
        return item
    raise TypeError(f"Expected GeoPoint or GeoSample, got {type(item)}")


def to_points(items: Iterable[PointLike]) -> List[GeoPoint]:
    return [to_point(item) for item in items]


def to_lonlat_array(items: Iterable[PointLike]) -> np.ndarray:
    """
    Nx2 float array of (longitude, latitude) in degrees.

    Longitude is x and latitude is y, matching the planar convention of the
    segment tests.
    """
    as_array = getattr(items, "as_lonlat_array", None)
    if as_array is not None:
        return as_array()
    points = to_points(items)
    if not points:
        return np.empty((0, 2), dtype=float)
    return np.array([(p.longitude, p.latitude) for p in points], dtype=float)


def haversine_m(a: PointLike, b: PointLike) -> float:
    """
    Haversine distance in meters between two points.

    Args:
        a: First point (GeoPoint or GeoSample)
        b: Second point (GeoPoint or GeoSample)

    Returns:
        Great-circle distance in meters.
    """
    p1, p2 = to_point(a), to_point(b)
    phi1 = math.radians(p1.latitude)
    phi2 = math.radians(p2.latitude)
    d_phi = math.radians(p2.latitude - p1.latitude)
    d_lambda = math.radians(p2.longitude - p1.longitude)

    h = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))
    return EARTH_RADIUS_M * c


def haversine_array_m(lonlat_a: np.ndarray, lonlat_b: np.ndarray) -> np.ndarray:
    """Element-wise haversine distance between two Nx2 (lon, lat) arrays."""
    lon1, lat1 = np.radians(lonlat_a[:, 0]), np.radians(lonlat_a[:, 1])
    lon2, lat2 = np.radians(lonlat_b[:, 0]), np.radians(lonlat_b[:, 1])
    h = (
        np.sin((lat2 - lat1) / 2.0) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2.0) ** 2
    )
    return EARTH_RADIUS_M * 2.0 * np.arctan2(np.sqrt(h), np.sqrt(1.0 - h))


class Path:
    """
    Ordered, append-only sequence of GeoSamples.

    Insertion order is chronological order. Owned by exactly one tracking
    session; only the accumulator appends to it.

    Design:
    - Read access via properties and iteration
    - (lon, lat) array view cached until the next append
    - Cleared wholesale on commit or cancel
    """

    def __init__(self, samples: Optional[Sequence[GeoSample]] = None):
        self._samples: List[GeoSample] = list(samples or [])
        self._array_cache: Optional[np.ndarray] = None

    def append(self, sample: GeoSample) -> None:
        self._samples.append(sample)
        self._array_cache = None

    def clear(self) -> None:
        self._samples.clear()
        self._array_cache = None

    @property
    def samples(self) -> Tuple[GeoSample, ...]:
        return tuple(self._samples)

    @property
    def points(self) -> List[GeoPoint]:
        return [s.point for s in self._samples]

    @property
    def first(self) -> Optional[GeoSample]:
        return self._samples[0] if self._samples else None

    @property
    def last(self) -> Optional[GeoSample]:
        return self._samples[-1] if self._samples else None

    def as_lonlat_array(self) -> np.ndarray:
        if self._array_cache is None:
            if self._samples:
                self._array_cache = np.array(
                    [(s.longitude, s.latitude) for s in self._samples], dtype=float
                )
            else:
                self._array_cache = np.empty((0, 2), dtype=float)
            self._array_cache.flags.writeable = False
        return self._array_cache

    def bounding_box(self) -> Optional[BoundingBox]:
        if not self._samples:
            return None
        return BoundingBox.from_points(self.points)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)

    def __getitem__(self, index):
        return self._samples[index]

    def __repr__(self) -> str:
        return f"Path(samples={len(self._samples)})"
