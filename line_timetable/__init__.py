"""Direction-split timetables for one rail line built from a zipped GTFS feed."""

from line_timetable.archive import FeedDecodeError, extract_table
from line_timetable.feed_filter import StopTimeRecord, filter_stop_times, iter_stop_times
from line_timetable.pipeline import ParsedFeed, parse_feed, process_feed
from line_timetable.schedule_builder import Direction, ScheduleResult, TrainSchedule, build_schedules
from line_timetable.stations import GIPUZKOA_LINE, Station, StationReference

__all__ = [
    "Direction",
    "FeedDecodeError",
    "GIPUZKOA_LINE",
    "ParsedFeed",
    "ScheduleResult",
    "Station",
    "StationReference",
    "StopTimeRecord",
    "TrainSchedule",
    "build_schedules",
    "extract_table",
    "filter_stop_times",
    "iter_stop_times",
    "parse_feed",
    "process_feed",
]
