"""Tests for bossdesk.core.settings."""

import pytest
from pydantic import ValidationError

from bossdesk.core.connection import SSLMode
from bossdesk.core.settings import BossDeskSettings, clear_settings_cache, get_settings


class TestDefaults:
    def test_defaults(self):
        settings = BossDeskSettings()
        assert settings.schema_name == "pgboss"
        assert settings.page_size == 50
        assert settings.refresh_interval_seconds == 30
        assert settings.connect_timeout_seconds == 30
        assert settings.ssl_mode is SSLMode.DISABLED


class TestEnvironment:
    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("BOSSDESK_SCHEMA_NAME", "jobs")
        monkeypatch.setenv("BOSSDESK_PAGE_SIZE", "25")
        monkeypatch.setenv("BOSSDESK_SSL_MODE", "verify_ca")
        settings = BossDeskSettings()
        assert settings.schema_name == "jobs"
        assert settings.page_size == 25
        assert settings.ssl_mode is SSLMode.VERIFY_CA

    def test_invalid_schema_rejected(self, monkeypatch):
        monkeypatch.setenv("BOSSDESK_SCHEMA_NAME", "Not Valid")
        with pytest.raises(ValidationError):
            BossDeskSettings()

    def test_page_size_bounds(self):
        with pytest.raises(ValidationError):
            BossDeskSettings(page_size=0)


class TestCache:
    def test_cached_until_cleared(self, monkeypatch):
        first = get_settings()
        assert get_settings() is first
        monkeypatch.setenv("BOSSDESK_SCHEMA_NAME", "other")
        assert get_settings().schema_name == "pgboss"
        clear_settings_cache()
        assert get_settings().schema_name == "other"

    def test_force_reload(self):
        first = get_settings()
        assert get_settings(_force_reload=True) is not first
