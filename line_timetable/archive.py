"""Read GTFS tables straight out of a zipped feed held in memory."""

from __future__ import annotations

import gzip
import io
import logging
import re
import zipfile
import zlib
from typing import Any, Iterable, Iterator

import pandas as pd

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 50_000


class FeedDecodeError(Exception):
    """The feed archive or one of its tables could not be decoded."""


def open_feed_archive(archive_bytes: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(archive_bytes))
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise FeedDecodeError(f"Feed archive could not be opened: {exc}") from exc


def find_member(archive: zipfile.ZipFile, filename: str) -> str | None:
    """Return the first member whose path ends with ``filename``, ignoring case and folders."""
    members = [info.filename for info in archive.infolist() if not info.is_dir()]
    for candidate in (filename, f"{filename}.gz"):
        pattern = re.compile(rf"(^|/){re.escape(candidate)}$", re.IGNORECASE)
        for member in members:
            if pattern.search(member):
                return member
    return None


def _clean_column(name: Any) -> str:
    return str(name).strip().lstrip("\ufeff")


def read_table_chunks(
    archive_bytes: bytes,
    filename: str,
    *,
    chunksize: int = DEFAULT_CHUNK_SIZE,
    columns: Iterable[str] | None = None,
) -> Iterator[pd.DataFrame]:
    """Yield the table as string-typed DataFrame chunks; yields nothing when the table is absent."""
    wanted = None if columns is None else set(columns)
    kwargs: dict[str, Any] = {
        "dtype": str,
        "keep_default_na": False,
        "encoding": "utf-8-sig",
        "chunksize": chunksize,
    }
    if wanted is not None:
        kwargs["usecols"] = lambda name: _clean_column(name) in wanted

    with open_feed_archive(archive_bytes) as archive:
        member = find_member(archive, filename)
        if member is None:
            logger.debug("Table %s not found in feed archive", filename)
            return
        logger.debug("Reading %s from archive member %s", filename, member)

        try:
            with archive.open(member) as file_obj:
                source = gzip.open(file_obj) if member.lower().endswith(".gz") else file_obj
                with source:
                    try:
                        reader = pd.read_csv(source, **kwargs)
                    except pd.errors.EmptyDataError:
                        logger.debug("Archive member %s is empty", member)
                        return
                    with reader:
                        for chunk in reader:
                            chunk.columns = [_clean_column(name) for name in chunk.columns]
                            yield chunk
        except (
            pd.errors.ParserError,
            UnicodeDecodeError,
            zipfile.BadZipFile,
            gzip.BadGzipFile,
            EOFError,
            zlib.error,
            NotImplementedError,
            RuntimeError,
        ) as exc:
            raise FeedDecodeError(f"Could not decode {member}: {exc}") from exc


def extract_table(archive_bytes: bytes, filename: str) -> list[dict[str, str]]:
    """Decode a whole table into row dicts of raw strings; a missing table gives ``[]``."""
    rows: list[dict[str, str]] = []
    for chunk in read_table_chunks(archive_bytes, filename):
        rows.extend(chunk.to_dict(orient="records"))
    logger.debug("Extracted %s rows from %s", len(rows), filename)
    return rows
