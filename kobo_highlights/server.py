import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from kobo_highlights.core.errors import ExtractionError
from kobo_highlights.core.index import build_index, count_annotations
from kobo_highlights.core.models import Annotation, BookGroups
from kobo_highlights.integrations.kobo import load_annotations, load_annotations_from_path
from kobo_highlights.utils.config import load_settings
from kobo_highlights.utils.paths import get_templates_dir

logger = logging.getLogger(__name__)

DEFAULT_LOAD_ERROR = "Failed to load default SQLite file."
UPLOAD_ERROR = "Failed to read SQLite file. Make sure it is valid."


@dataclass
class HighlightsState:
    """What the page currently shows: the last loaded annotations and any error."""
    annotations: List[Annotation] = field(default_factory=list)
    file_name: Optional[str] = None
    error: str = ""

    def load_buffer(self, buffer: bytes, file_name: str) -> bool:
        """Replaces the annotations with those of `buffer`. Nothing is kept on failure."""
        self.annotations = []
        self.error = ""
        self.file_name = file_name
        try:
            self.annotations = load_annotations(buffer)
        except ExtractionError:
            logger.error(f"Could not read {file_name}", exc_info=True)
            self.error = UPLOAD_ERROR
            return False
        return True

    def load_default(self, db_path: Optional[Path]) -> bool:
        self.annotations = []
        self.error = ""
        if db_path is None:
            logger.warning("No default Kobo database found.")
            self.error = DEFAULT_LOAD_ERROR
            return False

        self.file_name = f"Default {db_path.name}"
        try:
            self.annotations = load_annotations_from_path(db_path)
        except ExtractionError:
            logger.error(f"Could not read default database {db_path}", exc_info=True)
            self.error = DEFAULT_LOAD_ERROR
            return False
        return True


state = HighlightsState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    await run_in_threadpool(state.load_default, settings.db_path)
    yield


app = FastAPI(lifespan=lifespan)
templates = Jinja2Templates(directory=str(get_templates_dir()))


def grouped_to_json(grouped: BookGroups) -> List[dict]:
    """Lists instead of objects so the display order survives any JSON client."""
    books = []
    for book_title, chapters in grouped.items():
        books.append({
            "title": book_title,
            "chapters": [
                {
                    "title": chapter_title,
                    "annotations": [
                        {
                            "highlight": a.highlight_text,
                            "note": a.note,
                            "date": a.created_at,
                            "format": a.book_format.value,
                        }
                        for a in annotations
                    ],
                }
                for chapter_title, annotations in chapters.items()
            ],
        })
    return books


@app.get("/", response_class=HTMLResponse)
async def highlights_view(request: Request, q: str = ""):
    """Book -> chapter -> highlights page, filtered by the search box."""
    books = build_index(state.annotations, q)
    return templates.TemplateResponse(request, "highlights.html", {
        "books": books,
        "query": q,
        "file_name": state.file_name,
        "error": state.error,
        "total": count_annotations(books),
    })


@app.post("/upload")
async def upload_view(file: UploadFile = File(...)):
    buffer = await file.read()
    await run_in_threadpool(state.load_buffer, buffer, file.filename or "upload.sqlite")
    return RedirectResponse("/", status_code=303)


@app.get("/api/highlights")
async def get_highlights(q: str = ""):
    books = build_index(state.annotations, q)
    return JSONResponse({
        "file_name": state.file_name,
        "error": state.error,
        "total": count_annotations(books),
        "books": grouped_to_json(books),
    })


@app.post("/api/upload")
async def upload_api(file: UploadFile = File(...)):
    buffer = await file.read()
    if not await run_in_threadpool(state.load_buffer, buffer, file.filename or "upload.sqlite"):
        raise HTTPException(status_code=400, detail=state.error)
    return JSONResponse({"status": "loaded", "file_name": state.file_name, "count": len(state.annotations)})
