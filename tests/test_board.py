import unittest

from line_timetable import board
from line_timetable.schedule_builder import Direction, ScheduleResult, TrainSchedule
from line_timetable.stations import GIPUZKOA_LINE


def schedule(trip_id: str, times: dict[str, str], destination_id: str) -> TrainSchedule:
    return TrainSchedule(trip_id=trip_id, times=times, start_time=next(iter(times.values())) + ":00", destination_id=destination_id)


RESULT = ScheduleResult(
    direction_forward=(
        schedule("F1", {"11600": "06:00", "11511": "06:25", "11500": "06:55"}, "11500"),
        schedule("F2", {"11600": "08:00", "11500": "08:55"}, "11500"),
    ),
    direction_reverse=(
        schedule("R1", {"11500": "07:00", "11511": "07:30", "11600": "07:55"}, "11600"),
    ),
    station_order=GIPUZKOA_LINE.station_order,
)


class StationDeparturesTests(unittest.TestCase):
    def test_both_directions_are_merged_and_sorted_by_time(self):
        departures = board.station_departures(RESULT, "11511")

        self.assertEqual(
            [(d.time, d.direction, d.trip_id) for d in departures],
            [("06:25", Direction.FORWARD, "F1"), ("07:30", Direction.REVERSE, "R1")],
        )

    def test_station_without_trains_gives_empty_board(self):
        self.assertEqual(board.station_departures(RESULT, "11305"), [])

    def test_describe_departures_uses_stop_names(self):
        departures = board.station_departures(RESULT, "11600")

        described = board.describe_departures(departures, {"11500": "Tolosa"})

        self.assertEqual(
            described,
            [
                {"time": "06:00", "direction": "forward", "destination_id": "11500", "destination_name": "Tolosa", "trip_id": "F1"},
                {"time": "07:55", "direction": "reverse", "destination_id": "11600", "destination_name": "Unknown", "trip_id": "R1"},
                {"time": "08:00", "direction": "forward", "destination_id": "11500", "destination_name": "Tolosa", "trip_id": "F2"},
            ],
        )


if __name__ == "__main__":
    unittest.main()
