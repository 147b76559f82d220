"""Unit tests for Settings."""

import pytest

from mdb_docs.config import Settings, get_settings
from mdb_docs.constants import DEFAULT_MAX_POOL_SIZE, DEFAULT_PAGE_SIZE
from mdb_docs.exceptions import ConfigurationError


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.mongo_uri == ""
        assert settings.max_pool_size == DEFAULT_MAX_POOL_SIZE
        assert settings.default_page_size == DEFAULT_PAGE_SIZE

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "mongodb://db:27017")
        monkeypatch.setenv("DB_NAME", "docs")
        monkeypatch.setenv("MONGO_MAX_POOL_SIZE", "20")
        monkeypatch.setenv("MONGO_MIN_POOL_SIZE", "2")
        monkeypatch.setenv("DEFAULT_PAGE_SIZE", "25")

        settings = Settings(_env_file=None)

        assert settings.mongo_uri == "mongodb://db:27017"
        assert settings.db_name == "docs"
        assert settings.max_pool_size == 20
        assert settings.min_pool_size == 2
        assert settings.default_page_size == 25

    def test_populate_by_field_name(self):
        settings = Settings(_env_file=None, mongo_uri="mongodb://x", db_name="d")
        settings.require_connection()

    def test_min_pool_above_max_rejected(self, monkeypatch):
        monkeypatch.setenv("MONGO_MAX_POOL_SIZE", "5")
        monkeypatch.setenv("MONGO_MIN_POOL_SIZE", "10")
        with pytest.raises(ConfigurationError):
            get_settings()

    def test_timeout_floor(self, monkeypatch):
        monkeypatch.setenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "10")
        with pytest.raises(ConfigurationError):
            get_settings()

    @pytest.mark.parametrize("missing", ["MONGO_URI", "DB_NAME"])
    def test_require_connection(self, monkeypatch, missing):
        monkeypatch.setenv("MONGO_URI", "mongodb://db:27017")
        monkeypatch.setenv("DB_NAME", "docs")
        monkeypatch.delenv(missing)

        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None).require_connection()
        assert exc_info.value.config_key == missing

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
