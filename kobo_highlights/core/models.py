from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

# Kobo stores full EPUB/KEPUB books with ContentType 6
EPUB_CONTENT_TYPE = 6


class BookFormat(str, Enum):
    EPUB = "EPUB"
    PDF = "PDF"


def book_format_from_code(code: Optional[int]) -> BookFormat:
    """Maps the Kobo ContentType of the owning book to a format flag."""
    return BookFormat.EPUB if code == EPUB_CONTENT_TYPE else BookFormat.PDF


@dataclass(frozen=True)
class Annotation:
    """A highlight (and optional note) read from the Kobo Bookmark table."""
    book_title: Optional[str]
    book_format: BookFormat
    chapter_title: str
    highlight_text: str
    note: Optional[str] = None
    created_at: Optional[str] = None  # DateCreated, only used for ordering


# Map: chapter title -> annotations, in first-occurrence order
ChapterGroups = Dict[str, List[Annotation]]
# Map: book title -> chapters, in first-occurrence order
BookGroups = Dict[str, ChapterGroups]
