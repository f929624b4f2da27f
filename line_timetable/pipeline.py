"""Raw feed bytes in, direction-split schedules out."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from line_timetable.archive import DEFAULT_CHUNK_SIZE, extract_table
from line_timetable.feed_filter import StopTimeRecord, filter_stop_times
from line_timetable.schedule_builder import ScheduleResult, build_schedules
from line_timetable.stations import GIPUZKOA_LINE, StationReference

logger = logging.getLogger(__name__)

STOPS_FILENAME = "stops.txt"


@dataclass(frozen=True)
class ParsedFeed:
    stops: dict[str, dict[str, str]]
    stop_times: list[StopTimeRecord]


def parse_feed(
    archive_bytes: bytes,
    reference: StationReference = GIPUZKOA_LINE,
    *,
    chunksize: int = DEFAULT_CHUNK_SIZE,
    progress: bool = False,
) -> ParsedFeed:
    """Read stops.txt (optional) and the stop_times rows of the reference stations.

    trips.txt is deliberately not loaded: direction comes from station order.
    """
    stops: dict[str, dict[str, str]] = {}
    for row in extract_table(archive_bytes, STOPS_FILENAME):
        stop_id = row.get("stop_id", "")
        if stop_id:
            stops[stop_id] = row
    logger.debug("Loaded %s stops", len(stops))

    stop_times = filter_stop_times(
        archive_bytes,
        reference.station_ids,
        chunksize=chunksize,
        progress=progress,
    )
    logger.info("Kept %s stop_times rows for %s stations", len(stop_times), len(reference))
    return ParsedFeed(stops=stops, stop_times=stop_times)


def process_feed(
    archive_bytes: bytes,
    reference: StationReference = GIPUZKOA_LINE,
    *,
    chunksize: int = DEFAULT_CHUNK_SIZE,
    progress: bool = False,
) -> ScheduleResult:
    feed = parse_feed(archive_bytes, reference, chunksize=chunksize, progress=progress)
    return build_schedules(feed.stop_times, reference)
