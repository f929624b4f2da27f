"""Turn filtered stop times into unique, direction-split train schedules."""

from __future__ import annotations

import enum
import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from line_timetable.feed_filter import StopTimeRecord
from line_timetable.stations import StationReference

logger = logging.getLogger(__name__)

SIGNATURE_SEPARATOR = "|"


class Direction(enum.Enum):
    FORWARD = "forward"
    REVERSE = "reverse"


@dataclass(frozen=True)
class TrainSchedule:
    trip_id: str
    times: Mapping[str, str]
    start_time: str
    destination_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "times", MappingProxyType(dict(self.times)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "trip_id": self.trip_id,
            "times": dict(self.times),
            "start_time": self.start_time,
            "destination_id": self.destination_id,
        }


@dataclass(frozen=True)
class ScheduleResult:
    direction_forward: tuple[TrainSchedule, ...]
    direction_reverse: tuple[TrainSchedule, ...]
    station_order: tuple[str, ...]

    def schedules(self, direction: Direction) -> tuple[TrainSchedule, ...]:
        if direction is Direction.FORWARD:
            return self.direction_forward
        return self.direction_reverse

    def to_dict(self) -> dict[str, Any]:
        return {
            "direction_forward": [schedule.to_dict() for schedule in self.direction_forward],
            "direction_reverse": [schedule.to_dict() for schedule in self.direction_reverse],
            "station_order": list(self.station_order),
        }


def normalize_departure_time(raw: str | None) -> str | None:
    """Fold a GTFS time such as ``25:05:00`` onto the clock face as ``01:05``.

    Returns None when the value cannot be used, in which case the stop is skipped.
    """
    if not raw:
        return None
    parts = raw.split(":")
    if len(parts) < 2:
        return None
    hour_text = parts[0].strip()
    if not hour_text.isdecimal():
        return None
    hour = int(hour_text)
    if hour >= 24:
        hour -= 24
    return f"{hour:02d}:{parts[1]}"


def classify_direction(
    first_stop_id: str,
    last_stop_id: str,
    reference: StationReference,
) -> Direction | None:
    first_index = reference.index_of(first_stop_id)
    last_index = reference.index_of(last_stop_id)
    if first_index is None or last_index is None:
        return None
    if first_index < last_index:
        return Direction.FORWARD
    if first_index > last_index:
        return Direction.REVERSE
    return None


def group_by_trip(records: Iterable[StopTimeRecord]) -> dict[str, list[StopTimeRecord]]:
    """Group records per trip in first-appearance order, each group sorted by stop_sequence."""
    grouped: dict[str, list[StopTimeRecord]] = {}
    for record in records:
        if not record.trip_id:
            continue
        grouped.setdefault(record.trip_id, []).append(record)

    for trip_id, stop_times in grouped.items():
        stop_times.sort(key=lambda record: record.stop_sequence)
        unique: list[StopTimeRecord] = []
        for record in stop_times:
            if unique and unique[-1].stop_sequence == record.stop_sequence:
                logger.debug("Trip %s repeats stop_sequence %s, keeping the first row", trip_id, record.stop_sequence)
                continue
            unique.append(record)
        grouped[trip_id] = unique
    return grouped


def build_trip_schedule(trip_id: str, stop_times: list[StopTimeRecord]) -> tuple[TrainSchedule, str]:
    """Build the schedule of one trip together with its dedup signature."""
    times: dict[str, str] = {}
    signature_parts: list[str] = []
    for record in stop_times:
        formatted = normalize_departure_time(record.departure_time)
        if formatted is None:
            continue
        times[record.stop_id] = formatted
        signature_parts.append(f"{record.stop_id}@{formatted}")

    schedule = TrainSchedule(
        trip_id=trip_id,
        times=times,
        start_time=stop_times[0].departure_time,
        destination_id=stop_times[-1].stop_id,
    )
    return schedule, SIGNATURE_SEPARATOR.join(signature_parts)


def build_schedules(records: Iterable[StopTimeRecord], reference: StationReference) -> ScheduleResult:
    """Collapse stop times into one schedule per physical run for each direction."""
    unique_by_direction: dict[Direction, dict[str, TrainSchedule]] = {
        Direction.FORWARD: {},
        Direction.REVERSE: {},
    }
    dropped: Counter[str] = Counter()

    station_ids = reference.station_ids
    grouped = group_by_trip(record for record in records if record.stop_id in station_ids)
    for trip_id, stop_times in grouped.items():
        if len(stop_times) < 2:
            dropped["single_stop"] += 1
            continue

        direction = classify_direction(stop_times[0].stop_id, stop_times[-1].stop_id, reference)
        if direction is None:
            dropped["no_direction"] += 1
            continue

        schedule, signature = build_trip_schedule(trip_id, stop_times)
        if len(schedule.times) < 2:
            dropped["missing_times"] += 1
            continue

        unique = unique_by_direction[direction]
        if signature in unique:
            dropped["duplicate"] += 1
            continue
        unique[signature] = schedule

    forward = sorted(unique_by_direction[Direction.FORWARD].values(), key=lambda schedule: schedule.start_time)
    reverse = sorted(unique_by_direction[Direction.REVERSE].values(), key=lambda schedule: schedule.start_time)

    logger.debug("Grouped %s trips, dropped %s", len(grouped), dict(dropped))
    logger.info("Built %s forward and %s reverse schedules", len(forward), len(reverse))
    return ScheduleResult(
        direction_forward=tuple(forward),
        direction_reverse=tuple(reverse),
        station_order=reference.station_order,
    )
