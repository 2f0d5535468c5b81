"""
Tests for the claim replay entry point.
"""

import json
from datetime import timedelta

import pytest
import yaml

import run_claim_replay
from landgrab_geo.geometry.datum import wgs84_to_gcj02
from run_claim_replay import iter_track, main, parse_timestamp

from tests.geo_helpers import SQUARE_LOOP, T0, at


def write_track(path, offsets, accuracy="5"):
    lines = ["timestamp,latitude,longitude,horizontal_accuracy"]
    for i, (east, north) in enumerate(offsets):
        point = at(east, north)
        ts = (T0 + timedelta(seconds=10 * i)).isoformat()
        lines.append(f"{ts},{point.latitude},{point.longitude},{accuracy}")
    path.write_text("\n".join(lines) + "\n")
    return path


class TestParsing:

    def test_epoch_millis(self):
        assert parse_timestamp(str(int(T0.timestamp() * 1000))) == T0

    def test_iso_with_z(self):
        assert parse_timestamp("2025-10-01T08:00:00Z") == T0

    def test_naive_iso_is_utc(self):
        assert parse_timestamp("2025-10-01T08:00:00") == T0

    def test_bad_rows_skipped(self, tmp_path):
        path = tmp_path / "track.csv"
        path.write_text(
            "geoTime,latitude,longitude,horizontalAccuracy\n"
            "1759305600000,31.23,121.47,5\n"
            "not-a-time,31.23,121.47,5\n"
            "1759305610000,31.2301,121.47,\n"
        )
        rows = list(iter_track(path))
        assert len(rows) == 2
        assert rows[0][0] == T0
        assert rows[1][3] == -1.0

    def test_missing_column(self, tmp_path):
        path = tmp_path / "track.csv"
        path.write_text("timestamp,latitude\n2025-10-01T08:00:00Z,31.23\n")
        with pytest.raises(KeyError, match="longitude"):
            list(iter_track(path))


class TestReplay:

    def test_closed_walk_prints_payload(self, tmp_path, capsys):
        track = write_track(tmp_path / "walk.csv", SQUARE_LOOP)
        code = main(["--track", str(track), "--owner", "player-1", "--name", "Block", "--quiet"])
        assert code == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["user_id"] == "player-1"
        assert payload["name"] == "Block"
        assert payload["point_count"] == 12

    def test_open_walk_not_claimed(self, tmp_path, capsys):
        track = write_track(tmp_path / "walk.csv", SQUARE_LOOP[:5])
        assert main(["--track", str(track), "--quiet"]) == 1
        assert "No claim" in capsys.readouterr().out

    def test_violation_stops_replay(self, tmp_path, capsys):
        track = write_track(tmp_path / "walk.csv", SQUARE_LOOP)
        center = at(54, 0)
        territories = tmp_path / "territories.yaml"
        territories.write_text(yaml.safe_dump([{
            "id": "t-1",
            "user_id": "player-2",
            "type": "circle",
            "center_latitude": center.latitude,
            "center_longitude": center.longitude,
            "radius": 10,
        }]))

        code = main(["--track", str(track), "--territories", str(territories), "--quiet"])
        assert code == 2
        assert "VIOLATION [point_in_territory]" in capsys.readouterr().out

    def test_config_file(self, tmp_path):
        track = write_track(tmp_path / "walk.csv", SQUARE_LOOP)
        config = tmp_path / "tracker.yaml"
        config.write_text("owner_id: player-9\nengine:\n  closure:\n    minimum_points: 20\n")
        assert run_claim_replay.main(["--track", str(track), "--config", str(config), "--quiet"]) == 1

    def test_gcj02_flag_shifts_fixes(self, tmp_path, capsys):
        track = write_track(tmp_path / "walk.csv", SQUARE_LOOP)
        start = at(0, 0)
        shifted = wgs84_to_gcj02(start)

        assert main(["--track", str(track), "--quiet"]) == 0
        raw_first = json.loads(capsys.readouterr().out)["path"][0]
        assert raw_first["lat"] == pytest.approx(start.latitude, abs=1e-9)
        assert raw_first["lon"] == pytest.approx(start.longitude, abs=1e-9)

        assert main(["--track", str(track), "--quiet", "--gcj02"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["point_count"] == 12
        assert payload["path"][0]["lat"] == pytest.approx(shifted.latitude, abs=1e-9)
        assert payload["path"][0]["lon"] == pytest.approx(shifted.longitude, abs=1e-9)
        assert payload["path"][0]["lon"] != pytest.approx(start.longitude, abs=1e-5)
