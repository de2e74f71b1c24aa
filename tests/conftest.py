"""Shared fixtures: a small Kobo-shaped SQLite database."""

import sqlite3
from pathlib import Path

import pytest

KOBO_SCHEMA = """
    CREATE TABLE content (
        ContentID TEXT PRIMARY KEY,
        ContentType INTEGER,
        Title TEXT
    );
    CREATE TABLE Bookmark (
        BookmarkID TEXT PRIMARY KEY,
        VolumeID TEXT,
        ContentID TEXT,
        Text TEXT,
        Annotation TEXT,
        DateCreated TEXT,
        Type TEXT
    );
"""

BOOKS = [
    ("vol-a", 6, "A"),
    ("vol-b", 899, "B"),
    ("vol-none", 6, None),
]

BOOKMARKS = [
    # Inserted out of order on purpose, the query sorts them
    ("bm-2", "vol-a", "OEBPS/chapter01.html", "y", None, "2024-01-02T10:00:00", "highlight"),
    ("bm-1", "vol-a", "OEBPS/chapter01.html", "x", None, "2024-01-01T10:00:00", "highlight"),
    ("bm-3", "vol-b", "weird!!.pdf", "z", "n", "2024-01-03T10:00:00", "note"),
    ("bm-4", "vol-a", "OEBPS/chapter02.html", None, None, "2024-01-04T10:00:00", "dogear"),
    ("bm-5", "vol-none", "part003_intro.xhtml#p1", "orphan text", "", "2024-01-05T10:00:00", "highlight"),
]


def create_kobo_db(db_path: Path, books=BOOKS, bookmarks=BOOKMARKS) -> Path:
    conn = sqlite3.connect(str(db_path))
    try:
        conn.executescript(KOBO_SCHEMA)
        conn.executemany("INSERT INTO content VALUES (?, ?, ?)", books)
        conn.executemany("INSERT INTO Bookmark VALUES (?, ?, ?, ?, ?, ?, ?)", bookmarks)
        conn.commit()
    finally:
        conn.close()
    return db_path


@pytest.fixture
def kobo_db_path(tmp_path: Path) -> Path:
    return create_kobo_db(tmp_path / "KoboReader.sqlite")


@pytest.fixture
def kobo_db_bytes(kobo_db_path: Path) -> bytes:
    return kobo_db_path.read_bytes()


@pytest.fixture
def empty_db_bytes(tmp_path: Path) -> bytes:
    """A valid SQLite file without the Kobo tables."""
    db_path = tmp_path / "empty.sqlite"
    conn = sqlite3.connect(str(db_path))
    conn.execute("CREATE TABLE unrelated (id INTEGER)")
    conn.commit()
    conn.close()
    return db_path.read_bytes()
