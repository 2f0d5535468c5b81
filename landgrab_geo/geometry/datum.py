"""
Datum Conversion
================

WGS-84 (GPS) <-> GCJ-02 (mainland China map datum) conversion.

Maps served inside mainland China are offset by the GCJ-02 obfuscation; raw
GPS fixes must be shifted before they line up with map tiles. Outside the
China bounding box coordinates pass through unchanged.

Hosts apply `convert_if_needed` at the boundary, before fixes reach the
engine; run_claim_replay.py does so with --gcj02.

The inverse conversion is a single fixed-point step and is accurate to
about a meter.
"""

import math

from landgrab_geo.geometry.points import GeoPoint


_SEMI_MAJOR_AXIS = 6378245.0
_ECCENTRICITY_SQ = 0.00669342162296594323


def is_out_of_china(point: GeoPoint) -> bool:
    """True when the point is outside the GCJ-02 bounding box."""
    if point.longitude < 72.004 or point.longitude > 137.8347:
        return True
    if point.latitude < 0.8293 or point.latitude > 55.8271:
        return True
    return False


def _transform_lat(x: float, y: float) -> float:
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * x * y + 0.2 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(y * math.pi) + 40.0 * math.sin(y / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (160.0 * math.sin(y / 12.0 * math.pi) + 320.0 * math.sin(y * math.pi / 30.0)) * 2.0 / 3.0
    return ret


def _transform_lon(x: float, y: float) -> float:
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * x * y + 0.1 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(x * math.pi) + 40.0 * math.sin(x / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (150.0 * math.sin(x / 12.0 * math.pi) + 300.0 * math.sin(x / 30.0 * math.pi)) * 2.0 / 3.0
    return ret


def wgs84_to_gcj02(point: GeoPoint) -> GeoPoint:
    """
    Shift a WGS-84 coordinate into GCJ-02.

    Args:
        point: GPS (WGS-84) coordinate

    Returns:
        GCJ-02 coordinate, or `point` itself when outside China.
    """
    if is_out_of_china(point):
        return point

    d_lat = _transform_lat(point.longitude - 105.0, point.latitude - 35.0)
    d_lon = _transform_lon(point.longitude - 105.0, point.latitude - 35.0)

    rad_lat = point.latitude / 180.0 * math.pi
    magic = math.sin(rad_lat)
    magic = 1 - _ECCENTRICITY_SQ * magic * magic
    sqrt_magic = math.sqrt(magic)

    d_lat = (d_lat * 180.0) / ((_SEMI_MAJOR_AXIS * (1 - _ECCENTRICITY_SQ)) / (magic * sqrt_magic) * math.pi)
    d_lon = (d_lon * 180.0) / (_SEMI_MAJOR_AXIS / sqrt_magic * math.cos(rad_lat) * math.pi)

    return GeoPoint(latitude=point.latitude + d_lat, longitude=point.longitude + d_lon)


def gcj02_to_wgs84(point: GeoPoint) -> GeoPoint:
    """Approximate inverse of `wgs84_to_gcj02`."""
    if is_out_of_china(point):
        return point

    shifted = wgs84_to_gcj02(point)
    return GeoPoint(
        latitude=point.latitude * 2 - shifted.latitude,
        longitude=point.longitude * 2 - shifted.longitude,
    )


def convert_if_needed(point: GeoPoint) -> GeoPoint:
    """GCJ-02 inside mainland China, unchanged elsewhere."""
    return wgs84_to_gcj02(point)
