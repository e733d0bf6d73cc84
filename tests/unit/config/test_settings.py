"""Unit tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from cluster_dao.config.settings import Settings, get_settings


@pytest.mark.unit
class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("DAO_MASTER_ROLE", "DAO_SLAVE_ROLE", "DAO_TIMEZONE", "DAO_POOL_SIZE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.master_role == "master"
        assert settings.slave_role == "slave*"
        assert settings.pool_selector == "RR"
        assert settings.pool_size == 10
        assert settings.charset == "utf8mb4"
        assert settings.timezone is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("DAO_MASTER_ROLE", "primary")
        monkeypatch.setenv("DAO_SLAVE_ROLE", "replica-*")
        monkeypatch.setenv("DAO_POOL_SIZE", "4")
        monkeypatch.setenv("DAO_POOL_SELECTOR", "ORDER")

        settings = Settings()

        assert settings.master_role == "primary"
        assert settings.slave_role == "replica-*"
        assert settings.pool_size == 4
        assert settings.pool_selector == "ORDER"

    def test_log_level_has_no_prefix(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        assert Settings().LOG_LEVEL == "WARNING"

    def test_valid_timezone(self, monkeypatch):
        monkeypatch.setenv("DAO_TIMEZONE", "Asia/Seoul")
        assert Settings().timezone == "Asia/Seoul"

    def test_empty_timezone_means_local(self, monkeypatch):
        monkeypatch.setenv("DAO_TIMEZONE", "")
        assert Settings().timezone is None

    def test_unknown_timezone_rejected(self, monkeypatch):
        monkeypatch.setenv("DAO_TIMEZONE", "Mars/Olympus")
        with pytest.raises(ValidationError, match="Unknown timezone"):
            Settings()

    def test_empty_role_rejected(self, monkeypatch):
        monkeypatch.setenv("DAO_SLAVE_ROLE", "  ")
        with pytest.raises(ValidationError, match="must be non-empty"):
            Settings()

    def test_invalid_selector_rejected(self, monkeypatch):
        monkeypatch.setenv("DAO_POOL_SELECTOR", "LEAST_USED")
        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
