import re
import logging
from pathlib import Path
from typing import List

from kobo_highlights.core.models import BookGroups, ChapterGroups
from kobo_highlights.utils.paths import ensure_dir_exists

logger = logging.getLogger(__name__)


def sanitize_filename(name: str) -> str:
    """Sanitizes a string to be safe for filenames."""
    # Remove invalid characters for files
    safe_name = re.sub(r'[<>:"/\\|?*]', '', name)
    return safe_name.strip()


def render_book_markdown(book_title: str, chapters: ChapterGroups) -> str:
    """One Markdown note per book: a section per chapter, a quote per highlight."""
    lines = [f"# {book_title}", ""]
    for chapter_title, annotations in chapters.items():
        lines.append(f"## {chapter_title}")
        lines.append("")
        for annotation in annotations:
            for text_line in annotation.highlight_text.strip().splitlines():
                lines.append(f"> {text_line}")
            if annotation.note:
                lines.append("")
                lines.append(f"*Note:* {annotation.note.strip()}")
            lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def export_markdown(grouped: BookGroups, output_dir: Path) -> List[Path]:
    """Writes `<book>.md` for every book in the grouped highlights. Returns the files written."""
    output_dir = Path(output_dir)
    ensure_dir_exists(output_dir)

    written = []
    used_names = set()
    for book_title, chapters in grouped.items():
        safe_title = sanitize_filename(book_title) or "Untitled"
        # Titles like "A/B" and "AB" sanitize to the same name
        name = safe_title
        suffix = 2
        while name.casefold() in used_names:
            name = f"{safe_title} ({suffix})"
            suffix += 1
        used_names.add(name.casefold())

        path = output_dir / f"{name}.md"
        with open(path, "w", encoding="utf-8") as f:
            f.write(render_book_markdown(book_title, chapters))
        written.append(path)

    logger.info(f"Exported {len(written)} books to {output_dir}")
    return written
