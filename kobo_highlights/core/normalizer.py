import re
from typing import Callable, List, Optional, Tuple

DEFAULT_CHAPTER = "Highlights"

# .kepub.epub must be tried before .epub
_EXTENSION_RE = re.compile(r'\.(kepub\.epub|xhtml|html|htm|pdf|epub)$', re.IGNORECASE)
_SEPARATOR_RE = re.compile(r'[_-]+')
_WORD_RE = re.compile(r'[A-Za-z]+')


def _chapter_number(number: str) -> str:
    return f"Chapter {int(number)}"


# Ordered (pattern, formatter) table, first match wins
CHAPTER_PATTERNS: List[Tuple[re.Pattern, Callable[[str], str]]] = [
    (re.compile(r'^part0*(\d+)', re.IGNORECASE), _chapter_number),
    (re.compile(r'chapter0*(\d+)', re.IGNORECASE), _chapter_number),
    (re.compile(r'c\s*(\d+)', re.IGNORECASE), _chapter_number),
    (re.compile(r'ch\s*(\d+)', re.IGNORECASE), _chapter_number),
]


def clean_identifier(identifier: str) -> str:
    """
    Reduces a Kobo ContentID to a bare, space-separated file name.
    e.g. 'OEBPS/Text/the-lost_world.xhtml#p3' -> 'the lost world'
    """
    file_name = identifier.split("/")[-1].split("#")[0]
    file_name = _EXTENSION_RE.sub('', file_name)
    return _SEPARATOR_RE.sub(' ', file_name).strip()


def normalize_chapter(identifier: Optional[str]) -> str:
    """
    Turns the ContentID of a bookmark into a readable chapter label.
    Never fails; falls back to 'Highlights' when nothing usable is left.
    """
    if not identifier:
        return DEFAULT_CHAPTER

    name = clean_identifier(identifier)

    for pattern, formatter in CHAPTER_PATTERNS:
        match = pattern.search(name)
        if match:
            return formatter(match.group(1))

    words = _WORD_RE.findall(name)
    if words:
        return " ".join(w[0].upper() + w[1:].lower() for w in words)

    return DEFAULT_CHAPTER
