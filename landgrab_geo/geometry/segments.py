"""
Planar Segment Tests
====================

Orientation, segment crossing and ray-casting containment on
(longitude, latitude) treated as planar (x, y).

Design:
- Scalar functions for single tests, numpy variants for pair grids
- Strict orientation predicate: collinear triples count as "not CCW"
- Valid at the local scale of a walking loop (no map projection)
"""

from typing import Sequence, Tuple

import numpy as np


XY = Tuple[float, float]


def ccw(a: XY, b: XY, c: XY) -> bool:
    """
    True when a -> b -> c turns counter-clockwise.

    ccw(A,B,C) = (C.y - A.y)*(B.x - A.x) > (B.y - A.y)*(C.x - A.x)
    """
    return (c[1] - a[1]) * (b[0] - a[0]) > (b[1] - a[1]) * (c[0] - a[0])


def segments_intersect(p1: XY, p2: XY, p3: XY, p4: XY) -> bool:
    """
    True when segment p1-p2 crosses segment p3-p4.

    Args:
        p1, p2: First segment endpoints (x, y)
        p3, p4: Second segment endpoints (x, y)
    """
    return ccw(p1, p3, p4) != ccw(p2, p3, p4) and ccw(p1, p2, p3) != ccw(p1, p2, p4)


def _ccw_grid(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    return (c[..., 1] - a[..., 1]) * (b[..., 0] - a[..., 0]) > (
        (b[..., 1] - a[..., 1]) * (c[..., 0] - a[..., 0])
    )


def segment_crossing_matrix(
    starts_a: np.ndarray,
    ends_a: np.ndarray,
    starts_b: np.ndarray,
    ends_b: np.ndarray,
) -> np.ndarray:
    """
    Pairwise crossing test between two segment sets.

    Args:
        starts_a, ends_a: Mx2 arrays, segment set A
        starts_b, ends_b: Kx2 arrays, segment set B

    Returns:
        MxK boolean matrix; [i, j] is True when A[i] crosses B[j].
    """
    p1 = starts_a[:, None, :]
    p2 = ends_a[:, None, :]
    p3 = starts_b[None, :, :]
    p4 = ends_b[None, :, :]

    return (_ccw_grid(p1, p3, p4) != _ccw_grid(p2, p3, p4)) & (
        _ccw_grid(p1, p2, p3) != _ccw_grid(p1, p2, p4)
    )


def polyline_segments(vertices: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """(starts, ends) of the open polyline through `vertices`."""
    return vertices[:-1], vertices[1:]


def ring_segments(vertices: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """(starts, ends) of the closed ring through `vertices` (wraps last -> first)."""
    return vertices, np.roll(vertices, -1, axis=0)


def point_in_ring(point: XY, ring: Sequence[XY]) -> bool:
    """
    Ray-casting containment test.

    Args:
        point: (x, y) query point
        ring: Polygon vertices (x, y), implicitly closed

    Returns:
        True when the point lies inside the ring. Points exactly on an edge
        may fall either way.
    """
    n = len(ring)
    if n < 3:
        return False

    x, y = point
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def unwrap_longitudes(lonlat: np.ndarray, ref_lon: float) -> np.ndarray:
    """
    Copy of an Nx2 (lon, lat) array with every longitude within 180 degrees
    of `ref_lon`.

    Planar tests on shapes that straddle the antimeridian run in this frame.
    Longitudes already within range are returned bit-for-bit unchanged.
    """
    out = np.array(lonlat, dtype=float)
    if len(out) == 0:
        return out
    delta = out[:, 0] - ref_lon
    out[delta > 180.0, 0] -= 360.0
    out[delta < -180.0, 0] += 360.0
    return out
