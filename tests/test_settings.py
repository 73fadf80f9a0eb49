"""Tests for application settings."""

from config.settings import Settings


def test_defaults(monkeypatch):
    for name in ("TELEGRAM_LOG_BOT_TOKEN", "TELEGRAM_LOG_CHAT_ID", "MAX_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.max_attempts == 3
    assert settings.retry_initial_delay == 1.0
    assert settings.max_tokens == 500
    assert not settings.audit_enabled


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("MAX_ATTEMPTS", "5")
    monkeypatch.setenv("TELEGRAM_ORDER_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("TELEGRAM_ORDER_CHAT_ID", "-100")
    settings = Settings(_env_file=None)
    assert settings.max_attempts == 5
    assert settings.order_delivery_enabled


def test_unused_env_ignored(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    settings = Settings(_env_file=None)
    assert not hasattr(settings, "debug")
