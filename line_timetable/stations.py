"""Canonical station list for the line segment and display-name helpers."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

logger = logging.getLogger(__name__)

ID_KEYS = ("id", "stop_id", "CODIGO")
NAME_KEYS = ("name", "stop_name", "DESCRIPCION")


@dataclass(frozen=True)
class Station:
    id: str
    name: str


@dataclass(frozen=True)
class StationReference:
    """Ordered stations of one line; the order is the physical position along the track."""

    stations: tuple[Station, ...]

    def __post_init__(self) -> None:
        stations = tuple(Station(str(station.id), str(station.name)) for station in self.stations)
        seen: set[str] = set()
        for station in stations:
            if station.id in seen:
                raise ValueError(f"Duplicate station id in reference: {station.id}")
            seen.add(station.id)
        object.__setattr__(self, "stations", stations)

    @property
    def station_order(self) -> tuple[str, ...]:
        return tuple(station.id for station in self.stations)

    @property
    def station_ids(self) -> frozenset[str]:
        return frozenset(self.station_order)

    def index_of(self, station_id: str) -> int | None:
        try:
            return self.station_order.index(station_id)
        except ValueError:
            return None

    def name_of(self, station_id: str, default: str | None = None) -> str | None:
        for station in self.stations:
            if station.id == station_id:
                return station.name
        return default

    def reversed_order(self) -> tuple[str, ...]:
        return tuple(reversed(self.station_order))

    def __len__(self) -> int:
        return len(self.stations)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "StationReference":
        stations: list[Station] = []
        for record in records:
            station_id = _first_value(record, ID_KEYS)
            if not station_id:
                raise ValueError(f"Station record without an id: {dict(record)}")
            name = _first_value(record, NAME_KEYS) or station_id
            stations.append(Station(station_id, name))
        return cls(tuple(stations))

    @classmethod
    def from_csv(cls, path: Path) -> "StationReference":
        if not path.exists():
            raise FileNotFoundError(f"Station reference not found: {path}")
        frame = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
        frame.columns = [str(column).strip() for column in frame.columns]
        reference = cls.from_records(frame.to_dict(orient="records"))
        logger.debug("Loaded %s stations from %s", len(reference), path)
        return reference


def _first_value(record: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = record.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def prettify_station_name(name: str) -> str:
    """Capitalise every word and keep the Spanish particle "de" lowercase."""
    titled = re.sub(r"\b(\w)", lambda match: match.group(1).upper(), name)
    return re.sub(r"\sDe\s", " de ", titled, flags=re.IGNORECASE)


def build_stop_names(stop_rows: Iterable[Mapping[str, Any]], reference: StationReference) -> dict[str, str]:
    """Map stop_id to a display name, preferring the reference names for line stations."""
    names: dict[str, str] = {}
    for row in stop_rows:
        stop_id = str(row.get("stop_id") or "")
        if not stop_id:
            continue
        names[stop_id] = str(row.get("stop_name") or stop_id)
    for station in reference.stations:
        names[station.id] = prettify_station_name(station.name)
    return names


GIPUZKOA_LINE = StationReference(
    (
        Station("11600", "Irún"),
        Station("11518", "Ventas de Irún"),
        Station("11516", "Lezo-Rentería"),
        Station("11515", "Pasaia"),
        Station("11514", "Herrera"),
        Station("11513", "Ategorrieta"),
        Station("11512", "Gros"),
        Station("11511", "San Sebastián"),
        Station("11510", "Loiola"),
        Station("11509", "Martutene"),
        Station("11508", "Hernani"),
        Station("11507", "Hernani-Centro"),
        Station("11506", "Urnieta"),
        Station("11505", "Andoain"),
        Station("11504", "Andoain-Centro"),
        Station("11503", "Villabona-Zizurkil"),
        Station("11502", "Anoeta"),
        Station("11501", "Tolosa-Centro"),
        Station("11500", "Tolosa"),
        Station("11409", "Alegia"),
        Station("11406", "Itsasondo"),
        Station("11405", "Ordizia"),
        Station("11404", "Beasain"),
        Station("11402", "Ormaiztegi"),
        Station("11400", "Zumárraga"),
        Station("11306", "Legazpi"),
        Station("11305", "Bríncola"),
    )
)
