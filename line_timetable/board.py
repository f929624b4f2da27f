"""Which trains pass a station, in what order, going where."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from line_timetable.schedule_builder import Direction, ScheduleResult

UNKNOWN_DESTINATION = "Unknown"


@dataclass(frozen=True)
class StationDeparture:
    time: str
    direction: Direction
    destination_id: str
    trip_id: str


def station_departures(result: ScheduleResult, station_id: str) -> list[StationDeparture]:
    """Every schedule with a time at ``station_id``, both directions merged and sorted by HH:MM."""
    departures: list[StationDeparture] = []
    for direction in (Direction.FORWARD, Direction.REVERSE):
        for schedule in result.schedules(direction):
            time_at_station = schedule.times.get(station_id)
            if not time_at_station:
                continue
            departures.append(
                StationDeparture(
                    time=time_at_station,
                    direction=direction,
                    destination_id=schedule.destination_id,
                    trip_id=schedule.trip_id,
                )
            )
    departures.sort(key=lambda departure: departure.time)
    return departures


def describe_departures(
    departures: list[StationDeparture],
    stop_names: Mapping[str, str],
) -> list[dict[str, Any]]:
    return [
        {
            "time": departure.time,
            "direction": departure.direction.value,
            "destination_id": departure.destination_id,
            "destination_name": stop_names.get(departure.destination_id, UNKNOWN_DESTINATION),
            "trip_id": departure.trip_id,
        }
        for departure in departures
    ]
