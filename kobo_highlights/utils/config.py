import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from kobo_highlights.integrations.kobo import get_kobo_db_path
from kobo_highlights.utils.paths import get_bundled_db_path, get_project_root

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8123


@dataclass
class Settings:
    db_path: Optional[Path]
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    export_dir: Path = Path("exports")
    log_level: str = "INFO"


def find_default_db_path() -> Optional[Path]:
    """Bundled sample first, then the Kobo Desktop database."""
    bundled = get_bundled_db_path()
    if bundled.exists():
        return bundled
    return get_kobo_db_path()


def _read_port(value: Optional[str]) -> int:
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid KOBO_HIGHLIGHTS_PORT '{value}', using {DEFAULT_PORT}")
        return DEFAULT_PORT


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Loads settings from the .env file at the project root (or `env_file`),
    then from the environment. Variables already set in the environment win.
    """
    load_dotenv(env_file or get_project_root() / ".env")

    db_value = os.getenv("KOBO_HIGHLIGHTS_DB")
    db_path = Path(db_value).expanduser() if db_value else find_default_db_path()

    return Settings(
        db_path=db_path,
        host=os.getenv("KOBO_HIGHLIGHTS_HOST", DEFAULT_HOST),
        port=_read_port(os.getenv("KOBO_HIGHLIGHTS_PORT")),
        export_dir=Path(os.getenv("KOBO_HIGHLIGHTS_EXPORT_DIR", "exports")),
        log_level=os.getenv("KOBO_HIGHLIGHTS_LOG_LEVEL", "INFO").upper(),
    )
