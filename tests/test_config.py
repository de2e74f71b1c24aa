"""Tests for configuration loading."""

from pathlib import Path

import pytest

from kobo_highlights.utils import config, paths
from kobo_highlights.utils.config import DEFAULT_HOST, DEFAULT_PORT, load_settings

ENV_VARS = [
    "KOBO_HIGHLIGHTS_DB",
    "KOBO_HIGHLIGHTS_HOST",
    "KOBO_HIGHLIGHTS_PORT",
    "KOBO_HIGHLIGHTS_EXPORT_DIR",
    "KOBO_HIGHLIGHTS_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so monkeypatch restores (removes) anything .env files add
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestLoadSettings:
    def test_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "missing.env")
        assert settings.host == DEFAULT_HOST
        assert settings.port == DEFAULT_PORT
        assert settings.export_dir == Path("exports")
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("KOBO_HIGHLIGHTS_DB", str(tmp_path / "KoboReader.sqlite"))
        monkeypatch.setenv("KOBO_HIGHLIGHTS_PORT", "9000")
        monkeypatch.setenv("KOBO_HIGHLIGHTS_LOG_LEVEL", "debug")

        settings = load_settings(tmp_path / "missing.env")
        assert settings.db_path == tmp_path / "KoboReader.sqlite"
        assert settings.port == 9000
        assert settings.log_level == "DEBUG"

    def test_invalid_port_falls_back(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("KOBO_HIGHLIGHTS_PORT", "not-a-port")
        assert load_settings(tmp_path / "missing.env").port == DEFAULT_PORT

    def test_reads_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("KOBO_HIGHLIGHTS_HOST=0.0.0.0\nKOBO_HIGHLIGHTS_EXPORT_DIR=notes\n")

        settings = load_settings(env_file)
        assert settings.host == "0.0.0.0"
        assert settings.export_dir == Path("notes")

    def test_environment_wins_over_env_file(self, tmp_path: Path, monkeypatch) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("KOBO_HIGHLIGHTS_HOST=0.0.0.0\n")
        monkeypatch.setenv("KOBO_HIGHLIGHTS_HOST", "localhost")

        assert load_settings(env_file).host == "localhost"


class TestFindDefaultDbPath:
    def test_prefers_bundled_database(self, tmp_path: Path, monkeypatch) -> None:
        bundled = tmp_path / "KoboReader.sqlite"
        bundled.write_bytes(b"")
        monkeypatch.setattr(config, "get_bundled_db_path", lambda: bundled)
        monkeypatch.setattr(config, "get_kobo_db_path", lambda: tmp_path / "desktop.sqlite")

        assert config.find_default_db_path() == bundled

    def test_falls_back_to_kobo_desktop(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setattr(config, "get_bundled_db_path", lambda: tmp_path / "missing.sqlite")
        monkeypatch.setattr(config, "get_kobo_db_path", lambda: tmp_path / "desktop.sqlite")

        assert config.find_default_db_path() == tmp_path / "desktop.sqlite"

    def test_paths_module_has_no_kobo_lookup(self) -> None:
        assert not hasattr(paths, "get_kobo_db_path")
        assert not hasattr(paths, "find_default_db_path")
