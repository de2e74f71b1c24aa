import sys
import logging
import argparse
from pathlib import Path

import uvicorn

from kobo_highlights.core.errors import ExtractionError
from kobo_highlights.core.export import export_markdown
from kobo_highlights.core.index import build_index, count_annotations
from kobo_highlights.integrations.kobo import load_annotations_from_path
from kobo_highlights.utils.config import load_settings

logger = logging.getLogger(__name__)


def start_server(host: str, port: int):
    print(f"Starting server at http://{host}:{port}")
    uvicorn.run("kobo_highlights.server:app", host=host, port=port)


def print_highlights(books) -> None:
    for book_title, chapters in books.items():
        print(f"\n{'=' * 50}")
        print(book_title)
        print(f"{'=' * 50}")
        for chapter_title, annotations in chapters.items():
            print(f"\n  {chapter_title}")
            for a in annotations:
                print(f"    - \"{a.highlight_text.strip()}\"")
                if a.note:
                    print(f"      Note: {a.note.strip()}")


def main(argv=None) -> int:
    settings = load_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    parser = argparse.ArgumentParser(description="Kobo Highlights")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Start Server")
    serve_parser.add_argument("--host", default=settings.host)
    serve_parser.add_argument("--port", type=int, default=settings.port)

    show_parser = subparsers.add_parser("show", help="Print highlights grouped by book and chapter")
    show_parser.add_argument("db", nargs="?", help="KoboReader.sqlite (default: configured database)")
    show_parser.add_argument("-q", "--query", default="", help="Only highlights/notes containing this text")

    export_parser = subparsers.add_parser("export", help="Write one Markdown file per book")
    export_parser.add_argument("db", nargs="?", help="KoboReader.sqlite (default: configured database)")
    export_parser.add_argument("-q", "--query", default="", help="Only highlights/notes containing this text")
    export_parser.add_argument("-o", "--output", type=Path, default=settings.export_dir)

    args = parser.parse_args(argv)

    if args.command == "serve":
        start_server(args.host, args.port)
        return 0

    if args.command in ("show", "export"):
        db_path = Path(args.db) if args.db else settings.db_path
        if db_path is None:
            print("Error: no Kobo database given and none found.")
            return 1
        try:
            annotations = load_annotations_from_path(db_path)
        except ExtractionError as e:
            logger.error(f"Could not read {db_path}: {e}")
            print(f"Error: {e}")
            return 1

        books = build_index(annotations, args.query)
        if args.command == "show":
            print_highlights(books)
            print(f"\n{count_annotations(books)} highlights in {len(books)} books")
        else:
            written = export_markdown(books, args.output)
            print(f"Exported {len(written)} books to {args.output}")
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
