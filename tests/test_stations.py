import tempfile
import unittest
from pathlib import Path

from line_timetable import stations
from line_timetable.stations import GIPUZKOA_LINE, Station, StationReference


class StationReferenceTests(unittest.TestCase):
    def test_gipuzkoa_line_order(self):
        self.assertEqual(len(GIPUZKOA_LINE), 27)
        self.assertEqual(GIPUZKOA_LINE.station_order[0], "11600")
        self.assertEqual(GIPUZKOA_LINE.station_order[-1], "11305")
        self.assertEqual(GIPUZKOA_LINE.index_of("11500"), 18)
        self.assertIsNone(GIPUZKOA_LINE.index_of("99999"))
        self.assertEqual(GIPUZKOA_LINE.name_of("11511"), "San Sebastián")
        self.assertEqual(GIPUZKOA_LINE.reversed_order()[0], "11305")

    def test_duplicate_ids_are_rejected(self):
        with self.assertRaises(ValueError):
            StationReference((Station("1", "A"), Station("2", "B"), Station("1", "C")))

    def test_from_records_accepts_original_column_names(self):
        reference = StationReference.from_records(
            [
                {"CODIGO": 11600, "DESCRIPCION": "Irún"},
                {"CODIGO": "11518", "DESCRIPCION": "Ventas de Irún"},
            ]
        )

        self.assertEqual(reference.station_order, ("11600", "11518"))
        self.assertEqual(reference.station_ids, frozenset({"11600", "11518"}))

    def test_from_records_requires_an_id(self):
        with self.assertRaises(ValueError):
            StationReference.from_records([{"name": "Nowhere"}])

    def test_from_csv_keeps_leading_zeros(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "stations.csv"
            path.write_text("id,name\n0711,Alpha\n0712,Beta\n", encoding="utf-8")

            reference = StationReference.from_csv(path)

        self.assertEqual(reference.station_order, ("0711", "0712"))
        self.assertEqual(reference.name_of("0712"), "Beta")

    def test_from_csv_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            StationReference.from_csv(Path("/nonexistent/stations.csv"))


class StationNameTests(unittest.TestCase):
    def test_prettify_station_name(self):
        self.assertEqual(stations.prettify_station_name("ventas de irún"), "Ventas de Irún")
        self.assertEqual(stations.prettify_station_name("Lezo-Rentería"), "Lezo-Rentería")

    def test_build_stop_names_prefers_reference_names(self):
        stop_rows = [
            {"stop_id": "11600", "stop_name": "IRUN"},
            {"stop_id": "70100", "stop_name": "Madrid-Chamartín"},
            {"stop_id": "", "stop_name": "ghost"},
        ]

        names = stations.build_stop_names(stop_rows, GIPUZKOA_LINE)

        self.assertEqual(names["11600"], "Irún")
        self.assertEqual(names["70100"], "Madrid-Chamartín")
        self.assertEqual(names["11305"], "Bríncola")
        self.assertNotIn("", names)


if __name__ == "__main__":
    unittest.main()
