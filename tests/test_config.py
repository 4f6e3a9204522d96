"""Tests for configuration module."""

from __future__ import annotations

import pytest

from core.config import Settings, get_database_url, get_settings, _ENV_PROFILES


def test_settings_dataclass():
    s = Settings(database_url="postgres://localhost/test")
    assert s.database_url == "postgres://localhost/test"
    assert s.app_env == "dev"
    assert s.import_url_rate_limit == "10/minute"
    assert s.plan_max_bytes == 2_000_000
    assert s.default_long_run_day == "Sunday"
    assert s.default_long_ride_day == "Saturday"
    assert s.default_include_strength is True


def test_settings_frozen():
    s = Settings(database_url="x")
    with pytest.raises(AttributeError):
        s.database_url = "y"


def test_settings_is_production():
    s = Settings(database_url="x", app_env="production")
    assert s.is_production is True
    assert s.is_dev is False


def test_get_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://from-env/db")
    assert get_database_url() == "postgres://from-env/db"


def test_get_database_url_default(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert get_database_url().startswith("postgresql")


def test_env_profiles_exist():
    for name in ("dev", "staging", "production", "test"):
        assert name in _ENV_PROFILES


def test_production_profile_tightens_url_imports(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("IMPORT_URL_RATE_LIMIT", raising=False)
    monkeypatch.delenv("PLAN_FETCH_TIMEOUT_S", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    s = get_settings()
    assert s.import_url_rate_limit == "5/minute"
    assert s.plan_fetch_timeout_s == 5.0
    assert s.log_level == "WARNING"


def test_test_profile_disables_rate_limit(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.delenv("RATE_LIMIT_ENABLED", raising=False)
    assert get_settings().rate_limit_enabled is False


def test_env_overrides_profile(monkeypatch):
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("PLAN_MAX_BYTES", "1024")
    monkeypatch.setenv("DEFAULT_INCLUDE_STRENGTH", "no")
    s = get_settings()
    assert s.log_level == "ERROR"
    assert s.cors_origins == ("https://a.example", "https://b.example")
    assert s.plan_max_bytes == 1024
    assert s.default_include_strength is False


def test_invalid_weekday_falls_back(monkeypatch):
    monkeypatch.setenv("DEFAULT_LONG_RUN_DAY", "saturday")
    monkeypatch.setenv("DEFAULT_LONG_RIDE_DAY", "Funday")
    s = get_settings()
    assert s.default_long_run_day == "Saturday"
    assert s.default_long_ride_day == "Saturday"


def test_unknown_env_uses_dev_profile(monkeypatch):
    monkeypatch.setenv("APP_ENV", "qa")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert get_settings().log_level == "DEBUG"
