"""Stream stop_times.txt and keep only the rows that touch the line's stations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterator

import pandas as pd
import tqdm

from line_timetable.archive import DEFAULT_CHUNK_SIZE, read_table_chunks

logger = logging.getLogger(__name__)

STOP_TIMES_FILENAME = "stop_times.txt"
STOP_TIME_COLUMNS = ["trip_id", "arrival_time", "departure_time", "stop_id", "stop_sequence"]


@dataclass(frozen=True)
class StopTimeRecord:
    trip_id: str
    stop_id: str
    arrival_time: str
    departure_time: str
    stop_sequence: int


def _filter_chunk(chunk: pd.DataFrame, valid_station_ids: AbstractSet[str]) -> pd.DataFrame:
    if "stop_id" not in chunk.columns:
        return chunk.iloc[0:0]
    kept = chunk[chunk["stop_id"].isin(list(valid_station_ids))].copy()
    if kept.empty:
        return kept
    for column in STOP_TIME_COLUMNS:
        if column not in kept.columns:
            kept[column] = ""
    kept["stop_sequence"] = pd.to_numeric(kept["stop_sequence"].str.strip(), errors="coerce")
    kept = kept[kept["stop_sequence"].notna() & (kept["stop_sequence"] % 1 == 0)]
    return kept


def iter_stop_times(
    archive_bytes: bytes,
    valid_station_ids: AbstractSet[str],
    *,
    chunksize: int = DEFAULT_CHUNK_SIZE,
    progress: bool = False,
) -> Iterator[StopTimeRecord]:
    """Lazily yield the stop_times rows whose stop_id is one of ``valid_station_ids``.

    The table is read ``chunksize`` rows at a time and each chunk is reduced
    before any record is built, so memory stays bounded by the chunk size plus
    the rows that survive. Rows without a stop_id, with a foreign stop_id or
    with a non-integer stop_sequence are dropped silently.
    """
    rows_read = 0
    rows_kept = 0
    chunks = read_table_chunks(
        archive_bytes,
        STOP_TIMES_FILENAME,
        chunksize=chunksize,
        columns=STOP_TIME_COLUMNS,
    )
    for chunk in tqdm.tqdm(chunks, desc="stop_times", unit="chunk", disable=not progress):
        rows_read += len(chunk)
        kept = _filter_chunk(chunk, valid_station_ids)
        rows_kept += len(kept)
        for row in kept.itertuples(index=False):
            yield StopTimeRecord(
                trip_id=row.trip_id,
                stop_id=row.stop_id,
                arrival_time=row.arrival_time,
                departure_time=row.departure_time,
                stop_sequence=int(row.stop_sequence),
            )
    logger.debug("Filtered stop_times: kept %s of %s rows", rows_kept, rows_read)


def filter_stop_times(
    archive_bytes: bytes,
    valid_station_ids: AbstractSet[str],
    *,
    chunksize: int = DEFAULT_CHUNK_SIZE,
    progress: bool = False,
) -> list[StopTimeRecord]:
    return list(
        iter_stop_times(archive_bytes, valid_station_ids, chunksize=chunksize, progress=progress)
    )
