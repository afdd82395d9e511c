"""Tests for core.settings module.

Covers:
- SchemashiftSettings defaults
- SCHEMASHIFT_* environment overrides and .env files
- log_level / log_format validation
- get_settings caching
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from schemashift.core.settings import SchemashiftSettings, clear_settings_cache, get_settings


class TestDefaults:
    def test_defaults(self):
        s = SchemashiftSettings()
        assert s.database_url == "sqlite:///schemashift.db"
        assert s.database_echo is False
        assert s.database_pool_size is None
        assert s.migrations_dir == Path("migrations")
        assert s.log_level == "INFO"
        assert s.log_format == "auto"
        assert s.json_logs is None


class TestEnvOverride:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SCHEMASHIFT_DATABASE_URL", "postgresql://db/app")
        monkeypatch.setenv("SCHEMASHIFT_MIGRATIONS_DIR", "/srv/migrations")
        monkeypatch.setenv("SCHEMASHIFT_DATABASE_POOL_SIZE", "5")
        s = SchemashiftSettings()
        assert s.database_url == "postgresql://db/app"
        assert s.migrations_dir == Path("/srv/migrations")
        assert s.database_pool_size == 5

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("SCHEMASHIFT_LOG_LEVEL=debug\n")
        assert SchemashiftSettings().log_level == "DEBUG"

    def test_unknown_keys_ignored(self, monkeypatch):
        monkeypatch.setenv("SCHEMASHIFT_NOT_A_SETTING", "x")
        SchemashiftSettings()


class TestValidation:
    def test_bad_log_level(self, monkeypatch):
        monkeypatch.setenv("SCHEMASHIFT_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            SchemashiftSettings()

    def test_bad_log_format(self, monkeypatch):
        monkeypatch.setenv("SCHEMASHIFT_LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            SchemashiftSettings()

    @pytest.mark.parametrize(("fmt", "expected"), [("json", True), ("console", False), ("AUTO", None)])
    def test_json_logs(self, monkeypatch, fmt, expected):
        monkeypatch.setenv("SCHEMASHIFT_LOG_FORMAT", fmt)
        assert SchemashiftSettings().json_logs is expected


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("SCHEMASHIFT_DATABASE_URL", "sqlite:///other.db")
        assert get_settings() is first
        reloaded = get_settings(_force_reload=True)
        assert reloaded.database_url == "sqlite:///other.db"

    def test_clear_cache(self):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
