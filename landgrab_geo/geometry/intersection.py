"""
Self-Intersection Detector
==========================

Stateless detection of a walked path crossing itself.

Design:
- Pure functions (no state)
- All segment pairs tested at once with a numpy CCW grid
- Adjacent segments skipped (they always share an endpoint)
- First/last segment pair excluded: their meeting is closure, not a crossing

Complexity is O(n^2) in the number of samples; a few hundred points are cheap
enough to recheck on every accepted sample.
"""

from typing import Iterable, Optional, Tuple

import numpy as np

from landgrab_geo.geometry.points import PointLike, to_lonlat_array
from landgrab_geo.geometry.segments import polyline_segments, segment_crossing_matrix, unwrap_longitudes


MIN_POINTS_FOR_SELF_INTERSECTION = 4


class SelfIntersectionDetector:
    """
    Detects whether any two non-adjacent segments of a path cross.

    Usage:
        if SelfIntersectionDetector.has_self_intersection(path):
            ...
        pair = SelfIntersectionDetector.find_first_intersection(path)  # (i, j) or None
    """

    @staticmethod
    def _candidate_mask(segment_count: int) -> np.ndarray:
        """Upper-triangular mask of segment pairs (i, j) with j >= i + 2, minus (0, last)."""
        mask = np.triu(np.ones((segment_count, segment_count), dtype=bool), k=2)
        if segment_count >= 3:
            mask[0, segment_count - 1] = False
        return mask

    @staticmethod
    def crossing_pairs(path: Iterable[PointLike]) -> np.ndarray:
        """
        All crossing segment pairs.

        Returns:
            Kx2 int array of (i, j) segment indices in row-major order.
            Segment k joins point k and point k + 1.
        """
        lonlat = to_lonlat_array(path)
        if len(lonlat) < MIN_POINTS_FOR_SELF_INTERSECTION:
            return np.empty((0, 2), dtype=int)
        lonlat = unwrap_longitudes(lonlat, lonlat[0, 0])

        starts, ends = polyline_segments(lonlat)
        crossings = segment_crossing_matrix(starts, ends, starts, ends)
        crossings &= SelfIntersectionDetector._candidate_mask(len(starts))
        return np.argwhere(crossings)

    @staticmethod
    def find_first_intersection(path: Iterable[PointLike]) -> Optional[Tuple[int, int]]:
        """First crossing (i, j) in row-major order, or None."""
        pairs = SelfIntersectionDetector.crossing_pairs(path)
        if len(pairs) == 0:
            return None
        i, j = pairs[0]
        return int(i), int(j)

    @staticmethod
    def has_self_intersection(path: Iterable[PointLike]) -> bool:
        """
        True when any two non-adjacent segments cross.

        Paths with fewer than 4 points never self-intersect.
        """
        return SelfIntersectionDetector.find_first_intersection(path) is not None
