import sqlite3
import os
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from kobo_highlights.core.errors import OpenError, QueryError
from kobo_highlights.core.extractor import extract_annotations
from kobo_highlights.core.models import Annotation

logger = logging.getLogger(__name__)

SQLITE_HEADER = b"SQLite format 3\x00"
KOBO_DB_NAMES = ["Kobo.sqlite", "Book.sqlite", "KoboReader.sqlite"]


def get_kobo_db_path() -> Optional[Path]:
    """Returns the path to the Kobo Desktop database on macOS, if there is one."""
    base = Path(os.path.expanduser("~/Library/Application Support/Kobo/Kobo Desktop Edition"))
    for name in KOBO_DB_NAMES:
        p = base / name
        if p.exists():
            return p
    return None


def _disable_wal(buffer: bytes) -> bytes:
    # An in-memory copy of a WAL database can't be read back; flag it as a
    # rollback-journal database instead (header bytes 18/19).
    if buffer.startswith(SQLITE_HEADER) and len(buffer) > 19 and buffer[18] == 2:
        patched = bytearray(buffer)
        patched[18] = patched[19] = 1
        return bytes(patched)
    return buffer


def _decode_text(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


class KoboDatabase:
    """
    Read-only handle on a KoboReader.sqlite image held in memory.
    Use KoboDatabase.open(buffer), then query(), then close() (or a `with` block).
    """

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    @classmethod
    def open(cls, buffer: bytes) -> "KoboDatabase":
        if not buffer:
            raise OpenError("cannot read store: empty buffer")

        conn = sqlite3.connect(":memory:")
        try:
            conn.deserialize(_disable_wal(bytes(buffer)))
            conn.row_factory = sqlite3.Row
            # One badly encoded highlight must not make the whole store unreadable
            conn.text_factory = _decode_text
            # Forces sqlite to actually parse the header and schema
            conn.execute("SELECT name FROM sqlite_master").fetchall()
        except (sqlite3.Error, OverflowError) as e:
            conn.close()
            raise OpenError(f"cannot read store: {e}") from e
        return cls(conn)

    def query(self, sql: str, params: Sequence = ()) -> Iterator[sqlite3.Row]:
        try:
            cursor = self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise QueryError(f"query failed: {e}") from e
        return self._iter_rows(cursor)

    @staticmethod
    def _iter_rows(cursor: sqlite3.Cursor) -> Iterator[sqlite3.Row]:
        try:
            for row in cursor:
                yield row
        except sqlite3.Error as e:
            raise QueryError(f"query failed: {e}") from e

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "KoboDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def load_annotations(buffer: bytes) -> List[Annotation]:
    """
    Opens the database image, extracts every highlight and releases the handle,
    whether extraction succeeded or not.
    Raises OpenError / QueryError (both ExtractionError).
    """
    db = KoboDatabase.open(buffer)
    try:
        return extract_annotations(db)
    finally:
        db.close()


def load_annotations_from_path(db_path: Union[str, Path]) -> List[Annotation]:
    """Reads a KoboReader.sqlite file from disk and extracts its highlights."""
    logger.info(f"Reading Kobo DB at {db_path}...")
    try:
        buffer = Path(db_path).read_bytes()
    except OSError as e:
        raise OpenError(f"cannot read store: {e}") from e
    return load_annotations(buffer)
