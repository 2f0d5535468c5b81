#!/usr/bin/env python3
"""
Claim Replay - Entry Point
==========================

Replays a recorded GPS track through ClaimTrackerService, printing the
tracking status as the walk progresses and the claim payload at the end.

Usage:
    python run_claim_replay.py --track walk.csv \\
        --config config/landgrab_tracker/tracker_config.yaml \\
        --territories territories.yaml --owner player-1

Track CSV columns:
    timestamp (ISO 8601 or epoch milliseconds; `geoTime` also accepted)
    latitude, longitude
    horizontal_accuracy (`horizontalAccuracy` also accepted; missing -> -1)

Territories file (YAML or JSON):
    - id: "t-1"
      user_id: "player-2"
      type: "circle"
      center_latitude: 31.2304
      center_longitude: 121.4737
      radius: 50

Lifecycle:
    1. Load configuration and territories
    2. Start a session
    3. Submit every fix (shifted to GCJ-02 with --gcj02) and drain after each one
    4. Confirm the claim if the path closed without a violation
"""

import argparse
import csv
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import yaml

from landgrab_geo.geometry.datum import convert_if_needed
from landgrab_geo.geometry.points import GeoPoint
from landgrab_geo.territory import Territory
from landgrab_geo.tracking import ClaimNotReadyError, TerritoryViolation, TrackingStatus
from landgrab_tracker import ClaimPayload, ClaimTrackerService, TerritoryRegistry, TrackerConfig


logger = logging.getLogger("run_claim_replay")

RawFix = Tuple[datetime, float, float, float]


# ─────────────────────────────────────────────────────────────────────────────
# Input
# ─────────────────────────────────────────────────────────────────────────────

def parse_timestamp(value: str) -> datetime:
    """ISO 8601 or epoch milliseconds -> timezone-aware datetime."""
    value = value.strip()
    try:
        return datetime.fromtimestamp(int(value) / 1000.0, tz=timezone.utc)
    except ValueError:
        pass
    ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def iter_track(csv_path: Path) -> Iterator[RawFix]:
    """Yield (timestamp, latitude, longitude, accuracy) rows; bad rows are skipped."""
    with csv_path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return

        for line_no, row in enumerate(reader, start=2):
            try:
                raw_ts = row.get("timestamp") or row["geoTime"]
                accuracy = row.get("horizontal_accuracy") or row.get("horizontalAccuracy") or "-1"
                yield (
                    parse_timestamp(raw_ts),
                    float(row["latitude"]),
                    float(row["longitude"]),
                    float(accuracy),
                )
            except KeyError as exc:
                raise KeyError(f"Track CSV missing column {exc}; columns: {reader.fieldnames}") from exc
            except (ValueError, TypeError):
                logger.warning(f"Skipping unreadable row {line_no}")
                continue


def load_territories(path: Optional[Path]) -> List[Territory]:
    if path is None:
        return []
    with path.open() as f:
        rows = yaml.safe_load(f) or []
    if not isinstance(rows, list):
        raise ValueError(f"Territories file must contain a list, got {type(rows).__name__}")
    return [Territory.from_dict(row) for row in rows]


# ─────────────────────────────────────────────────────────────────────────────
# Output
# ─────────────────────────────────────────────────────────────────────────────

def print_status(status: TrackingStatus) -> None:
    unmet = ",".join(c.value for c in status.unmet_conditions) or "-"
    nearest = (
        f"{status.distance_to_nearest_other_m:.0f}m"
        if status.distance_to_nearest_other_m is not None
        else "-"
    )
    print(
        f"points={status.point_count:3d} "
        f"dist={status.total_distance_m:7.1f}m "
        f"area={status.enclosed_area_m2:9.1f}m2 "
        f"state={status.closure_state.value:17s} "
        f"level={status.warning_level.name:9s} "
        f"nearest={nearest:>6s} unmet={unmet}"
    )


def print_violation(violation: TerritoryViolation) -> None:
    print(f"VIOLATION [{violation.kind.value}] {violation.message}")


# ─────────────────────────────────────────────────────────────────────────────
# Main
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay a recorded walk through the claim tracker")
    parser.add_argument("--track", type=Path, required=True, help="Track CSV file")
    parser.add_argument("--config", type=Path, default=None, help="Tracker YAML config")
    parser.add_argument("--territories", type=Path, default=None, help="Existing territories (YAML/JSON list)")
    parser.add_argument("--owner", default=None, help="Walking player id (overrides config)")
    parser.add_argument("--name", default=None, help="Name for the claimed territory")
    parser.add_argument("--quiet", action="store_true", help="Only print the final result")
    parser.add_argument(
        "--gcj02",
        action="store_true",
        help="Shift WGS-84 fixes into GCJ-02 (mainland China map datum) before tracking",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    if args.config is not None:
        config = TrackerConfig.from_yaml(args.config, owner_id=args.owner)
    else:
        config = TrackerConfig(owner_id=args.owner or "replay-player")

    registry = TerritoryRegistry(load_territories(args.territories))
    logger.info(f"Loaded {len(registry)} territories")

    service = ClaimTrackerService(
        config=config,
        registry=registry,
        on_status=None if args.quiet else print_status,
        on_violation=print_violation,
    )

    service.start_session()
    for ts, lat, lon, accuracy in iter_track(args.track):
        if not service.is_tracking:
            break
        if args.gcj02:
            shifted = convert_if_needed(GeoPoint(latitude=lat, longitude=lon))
            lat, lon = shifted.latitude, shifted.longitude
        service.submit_raw(lat, lon, ts, accuracy)
        service.process_pending()

    if service.last_violation is not None:
        return 2

    try:
        candidate = service.confirm_claim(name=args.name)
    except ClaimNotReadyError as e:
        print(f"No claim: {e}")
        return 1

    payload = ClaimPayload.from_candidate(candidate)
    print(json.dumps(payload.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
