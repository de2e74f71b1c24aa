import logging
from typing import List, Mapping

from kobo_highlights.core.models import Annotation, book_format_from_code
from kobo_highlights.core.normalizer import normalize_chapter

logger = logging.getLogger(__name__)

# Bookmarks without text (plain dog-ears) are dropped here, not in Python
ANNOTATION_QUERY = """
    SELECT
        b.Text AS highlight,
        b.Annotation AS note,
        b.DateCreated AS date_created,
        b.ContentID AS content_id,
        book.Title AS book_title,
        book.ContentType AS book_type
    FROM Bookmark b
    JOIN content book
        ON b.VolumeID = book.ContentID
    WHERE b.Text IS NOT NULL
    ORDER BY book.Title, b.ContentID, b.DateCreated
"""


def row_to_annotation(row: Mapping) -> Annotation:
    """Builds an Annotation from one row of ANNOTATION_QUERY."""
    return Annotation(
        book_title=row["book_title"],
        book_format=book_format_from_code(row["book_type"]),
        chapter_title=normalize_chapter(row["content_id"]),
        highlight_text=row["highlight"],
        note=row["note"],
        created_at=row["date_created"],
    )


def extract_annotations(db) -> List[Annotation]:
    """
    Reads every highlight out of an open Kobo database.

    `db` is anything with a `query(sql)` method returning an iterator of
    name-addressable rows (see integrations.kobo.KoboDatabase). The rows keep
    the query order: book title, then ContentID, then creation date.
    Raises QueryError (via `db.query`) when the tables are missing.
    The caller owns the handle and is responsible for closing it.
    """
    annotations = [row_to_annotation(row) for row in db.query(ANNOTATION_QUERY)]
    logger.info(f"Extracted {len(annotations)} annotations")
    return annotations
