"""
Tests for WGS-84 <-> GCJ-02 conversion.
"""

import pytest

from landgrab_geo.geometry.datum import convert_if_needed, gcj02_to_wgs84, is_out_of_china, wgs84_to_gcj02
from landgrab_geo.geometry.points import GeoPoint, haversine_m


SHANGHAI = GeoPoint(latitude=31.2304, longitude=121.4737)
LONDON = GeoPoint(latitude=51.5074, longitude=-0.1278)


class TestDatum:

    def test_out_of_china(self):
        assert is_out_of_china(LONDON)
        assert not is_out_of_china(SHANGHAI)

    def test_outside_china_unchanged(self):
        assert wgs84_to_gcj02(LONDON) == LONDON
        assert gcj02_to_wgs84(LONDON) == LONDON
        assert convert_if_needed(LONDON) == LONDON

    def test_inside_china_is_shifted(self):
        shifted = wgs84_to_gcj02(SHANGHAI)
        offset = haversine_m(SHANGHAI, shifted)
        assert 100.0 < offset < 1000.0

    def test_inverse_round_trip_within_a_few_meters(self):
        back = gcj02_to_wgs84(wgs84_to_gcj02(SHANGHAI))
        assert haversine_m(back, SHANGHAI) == pytest.approx(0.0, abs=5.0)

    def test_convert_if_needed_matches_forward(self):
        assert convert_if_needed(SHANGHAI) == wgs84_to_gcj02(SHANGHAI)
