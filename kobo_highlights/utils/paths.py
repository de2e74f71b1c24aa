from pathlib import Path


def get_project_root() -> Path:
    """Returns the root directory of the repository."""
    # This file is in kobo_highlights/utils/paths.py
    # Root is 3 levels up
    return Path(__file__).resolve().parent.parent.parent


def get_templates_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "web" / "templates"


def get_bundled_db_path() -> Path:
    """The sample database shipped with the app (data/KoboReader.sqlite)."""
    return get_project_root() / "data" / "KoboReader.sqlite"


def ensure_dir_exists(path: Path) -> None:
    """Ensures that a directory exists."""
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
