from typing import Iterable, List

from kobo_highlights.core.models import Annotation, BookGroups
from kobo_highlights.core.normalizer import DEFAULT_CHAPTER

UNKNOWN_BOOK = "Unknown Book"


def matches_query(annotation: Annotation, query: str) -> bool:
    """True if the query appears (case-insensitively) in the highlight or the note."""
    q = query.casefold()
    if q in annotation.highlight_text.casefold():
        return True
    return bool(annotation.note) and q in annotation.note.casefold()


def filter_annotations(annotations: Iterable[Annotation], query: str = "") -> List[Annotation]:
    if not query:
        return list(annotations)
    return [a for a in annotations if matches_query(a, query)]


def group_annotations(annotations: Iterable[Annotation]) -> BookGroups:
    """
    Groups annotations by book, then chapter.
    Dicts keep insertion order, so books, chapters and the annotations inside
    each chapter come out in the order they were first seen. No sorting.
    """
    grouped: BookGroups = {}
    for annotation in annotations:
        book = annotation.book_title or UNKNOWN_BOOK
        chapter = annotation.chapter_title or DEFAULT_CHAPTER
        grouped.setdefault(book, {}).setdefault(chapter, []).append(annotation)
    return grouped


def build_index(annotations: Iterable[Annotation], query: str = "") -> BookGroups:
    """Filters by the search query and groups the result for display. Rebuilt on every call."""
    return group_annotations(filter_annotations(annotations, query))


def count_annotations(grouped: BookGroups) -> int:
    return sum(len(anns) for chapters in grouped.values() for anns in chapters.values())
