#!/usr/bin/env python3
"""Generate direction-split timetables for the Gipuzkoa line from a GTFS zip."""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from line_timetable.archive import DEFAULT_CHUNK_SIZE, FeedDecodeError
from line_timetable.board import describe_departures, station_departures
from line_timetable.pipeline import parse_feed
from line_timetable.schedule_builder import build_schedules
from line_timetable.stations import GIPUZKOA_LINE, StationReference, build_stop_names

logger = logging.getLogger(__name__)

DEFAULT_GTFS_CANDIDATES = [
    Path("fomento_transit.zip"),
    Path("data/fomento_transit.zip"),
]


@dataclass(frozen=True)
class CliSettings:
    gtfs_path: Path
    stations_csv: Path | None
    chunk_size: int
    json_out: Path | None
    stdout_json: bool
    station: str | None
    progress: bool


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def resolve_gtfs_path(explicit_path: str | None) -> Path:
    if explicit_path:
        path = Path(explicit_path)
        if not path.exists():
            raise FileNotFoundError(f"GTFS feed not found: {path}")
        return path
    for candidate in DEFAULT_GTFS_CANDIDATES:
        if candidate.exists():
            return candidate
    searched = ", ".join(str(p) for p in DEFAULT_GTFS_CANDIDATES)
    raise FileNotFoundError(f"No GTFS feed found. Tried: {searched}. Use --gtfs-path.")


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build deduplicated forward/reverse timetables for a fixed list of line stations."
    )
    parser.add_argument(
        "--gtfs-path",
        default=os.getenv("LINE_TIMETABLE_GTFS_PATH"),
        help="Path to the GTFS zip. Defaults to $LINE_TIMETABLE_GTFS_PATH, then auto-detects.",
    )
    parser.add_argument(
        "--stations-csv",
        default=os.getenv("LINE_TIMETABLE_STATIONS_CSV"),
        help="CSV with id,name (or CODIGO,DESCRIPCION) rows in line order. Defaults to the Gipuzkoa line.",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=os.getenv("LINE_TIMETABLE_CHUNK_SIZE") or DEFAULT_CHUNK_SIZE,
        help=f"Rows of stop_times.txt read per chunk (default: {DEFAULT_CHUNK_SIZE}).",
    )
    parser.add_argument("--json-out", help="Write the full timetable as JSON to this path.")
    parser.add_argument("--stdout-json", action="store_true", help="Print the JSON result to stdout.")
    parser.add_argument("--station", help="stop_id to list departures for.")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar while reading stop_times.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def resolve_settings(args: argparse.Namespace) -> CliSettings:
    if args.chunk_size <= 0:
        raise ValueError(f"--chunk-size must be positive, got {args.chunk_size}")
    return CliSettings(
        gtfs_path=resolve_gtfs_path(args.gtfs_path),
        stations_csv=Path(args.stations_csv) if args.stations_csv else None,
        chunk_size=args.chunk_size,
        json_out=Path(args.json_out) if args.json_out else None,
        stdout_json=args.stdout_json,
        station=args.station,
        progress=args.progress,
    )


def load_reference(stations_csv: Path | None) -> StationReference:
    if stations_csv is None:
        return GIPUZKOA_LINE
    return StationReference.from_csv(stations_csv)


def build_payload(settings: CliSettings, reference: StationReference) -> dict[str, Any]:
    archive_bytes = settings.gtfs_path.read_bytes()
    logger.debug(f"Read {len(archive_bytes)} bytes from {settings.gtfs_path}")

    feed = parse_feed(
        archive_bytes,
        reference,
        chunksize=settings.chunk_size,
        progress=settings.progress,
    )
    result = build_schedules(feed.stop_times, reference)
    stop_names = build_stop_names(feed.stops.values(), reference)

    payload = result.to_dict()
    payload["station_names"] = {station_id: stop_names.get(station_id, station_id) for station_id in result.station_order}
    if settings.station:
        departures = station_departures(result, settings.station)
        payload["station"] = {
            "stop_id": settings.station,
            "name": stop_names.get(settings.station, settings.station),
            "departures": describe_departures(departures, stop_names),
        }
    return payload


def print_station_board(board: dict[str, Any]) -> None:
    departures = board["departures"]
    print(f"{board['name']}: {len(departures)} trains")
    if not departures:
        print("No scheduled trains for this station in the feed.")
        return
    for departure in departures:
        print(f"  {departure['time']}  -> {departure['destination_name']} ({departure['direction']})")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = make_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = resolve_settings(args)
    except ValueError as exc:
        parser.error(str(exc))
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    logger.debug(f"Resolved settings: {settings}")

    try:
        reference = load_reference(settings.stations_csv)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Invalid station reference: %s", exc)
        return 1

    try:
        payload = build_payload(settings, reference)
    except (FeedDecodeError, FileNotFoundError) as exc:
        logger.error("Could not read the GTFS feed: %s", exc)
        return 1

    logger.info(
        "Timetable ready: forward=%s reverse=%s",
        len(payload["direction_forward"]),
        len(payload["direction_reverse"]),
    )

    if settings.json_out:
        write_json(settings.json_out, payload)
        print(f"Wrote JSON: {settings.json_out}")

    if settings.stdout_json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))

    if settings.station:
        print_station_board(payload["station"])

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
