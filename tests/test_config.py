import pytest
from pydantic import ValidationError

from notification_prefs.config import Settings, get_settings


def test_defaults(monkeypatch):
    for name in ("NOTIFY_ENV", "NOTIFY_PORT", "NOTIFY_HOST", "NOTIFY_LOG_LEVEL", "NOTIFY_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.ENV == "development"
    assert settings.PORT == 3000
    assert settings.LOG_JSON is False
    assert not settings.is_test


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("NOTIFY_PORT", "8080")
    monkeypatch.setenv("NOTIFY_ENV", "production")
    monkeypatch.setenv("NOTIFY_LOG_JSON", "true")
    settings = Settings()
    assert settings.PORT == 8080
    assert settings.is_prod
    assert settings.LOG_JSON is True


def test_rejects_unknown_env(monkeypatch):
    monkeypatch.setenv("NOTIFY_ENV", "staging")
    with pytest.raises(ValidationError):
        Settings()


def test_get_settings_is_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
