"""
Tests for AreaCalculator: walked distance, perimeter, spherical area, compactness.
"""

import math

import pytest

from landgrab_geo.geometry.area import AreaCalculator
from landgrab_geo.geometry.points import GeoPoint, Path

from tests.geo_helpers import SQUARE_LOOP, points, square, walk


class TestDistance:

    def test_empty_and_single(self):
        assert AreaCalculator.total_path_distance([]) == 0.0
        assert AreaCalculator.total_path_distance(points([(0, 0)])) == 0.0

    def test_straight_line(self):
        line = points([(0, 0), (30, 0), (30, 40)])
        assert AreaCalculator.total_path_distance(line) == pytest.approx(70.0, rel=1e-3)

    def test_square_loop_distance(self):
        assert AreaCalculator.total_path_distance(walk(SQUARE_LOOP)) == pytest.approx(315.0, rel=1e-2)

    def test_accepts_path_object(self):
        path = Path(walk(SQUARE_LOOP))
        assert AreaCalculator.total_path_distance(path) == pytest.approx(
            AreaCalculator.total_path_distance(list(path))
        )

    def test_perimeter_adds_closing_segment(self):
        sq = points(square(0, 0, 100))
        assert AreaCalculator.total_path_distance(sq) == pytest.approx(300.0, rel=1e-3)
        assert AreaCalculator.perimeter(sq) == pytest.approx(400.0, rel=1e-3)


class TestArea:

    def test_fewer_than_three_points(self):
        assert AreaCalculator.enclosed_area([]) == 0.0
        assert AreaCalculator.enclosed_area(points([(0, 0), (50, 50)])) == 0.0

    def test_hundred_meter_square(self):
        assert AreaCalculator.enclosed_area(points(square(0, 0, 100))) == pytest.approx(10_000.0, rel=1e-2)

    def test_square_loop_area(self):
        assert AreaCalculator.enclosed_area(walk(SQUARE_LOOP)) == pytest.approx(6_400.0, rel=2e-2)

    def test_signed_area_orientation(self):
        ccw_square = points(square(0, 0, 50))
        cw_square = list(reversed(ccw_square))
        assert AreaCalculator.signed_area(ccw_square) > 0
        assert AreaCalculator.signed_area(cw_square) < 0
        assert AreaCalculator.enclosed_area(cw_square) == pytest.approx(AreaCalculator.enclosed_area(ccw_square))

    def test_independent_of_start_vertex(self):
        ring = points([(0, 0), (60, 0), (80, 50), (20, 70), (-10, 30)])
        rotated = ring[2:] + ring[:2]
        assert AreaCalculator.enclosed_area(rotated) == pytest.approx(AreaCalculator.enclosed_area(ring), rel=1e-9)

    def test_deterministic(self):
        ring = walk(SQUARE_LOOP)
        assert AreaCalculator.enclosed_area(ring) == AreaCalculator.enclosed_area(ring)

    def test_collinear_points_have_no_area(self):
        assert AreaCalculator.enclosed_area(points([(0, 0), (10, 0), (20, 0), (30, 0)])) == pytest.approx(0.0, abs=1e-6)

    def test_one_degree_cell_on_equator(self):
        cell = [GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(1, 1), GeoPoint(1, 0)]
        # R^2 * dlon * (sin(1 deg) - sin(0)) for a lat/lon cell
        expected = 6_371_000.0 ** 2 * math.radians(1.0) * math.sin(math.radians(1.0))
        assert AreaCalculator.enclosed_area(cell) == pytest.approx(expected, rel=1e-6)


class TestCompactness:

    def test_square(self):
        assert AreaCalculator.compactness(points(square(0, 0, 100))) == pytest.approx(4 / math.pi, rel=1e-2)

    def test_zero_area_is_infinite(self):
        assert AreaCalculator.compactness(points([(0, 0), (10, 0)])) == math.inf

    def test_thin_shape_is_less_compact(self):
        thin = points([(0, 0), (200, 0), (200, 10), (0, 10)])
        assert AreaCalculator.compactness(thin) > AreaCalculator.compactness(points(square(0, 0, 100)))
