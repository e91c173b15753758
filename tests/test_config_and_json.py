import pytest

from familyhub.core.config import DEV_JWT_SECRET, DEV_REFRESH_SECRET, LoadSettings, ReadIntEnv
from familyhub.core.json_fields import ParseJson, SerializeJson

SECRET_KEYS = ("JWT_SECRET_KEY", "JWT_REFRESH_SECRET_KEY")


def test_production_without_secrets_fails(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    for key in SECRET_KEYS:
        monkeypatch.delenv(key, raising=False)

    with pytest.raises(RuntimeError) as exc_info:
        LoadSettings()
    assert "JWT_SECRET_KEY" in str(exc_info.value)


def test_development_falls_back_to_dev_secrets(monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")
    for key in SECRET_KEYS:
        monkeypatch.delenv(key, raising=False)

    settings = LoadSettings()
    assert settings.JwtSecret == DEV_JWT_SECRET
    assert settings.RefreshSecret == DEV_REFRESH_SECRET
    assert settings.IsProduction is False


def test_settings_read_from_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET_KEY", "a")
    monkeypatch.setenv("JWT_REFRESH_SECRET_KEY", "b")
    monkeypatch.setenv("JWT_ACCESS_TTL_MINUTES", "15")
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000, https://family.example")

    settings = LoadSettings()
    assert settings.IsProduction is True
    assert settings.AccessTtlMinutes == 15
    assert settings.RefreshTtlDays == 7
    assert settings.AllowedOrigins == ("http://localhost:3000", "https://family.example")


def test_bad_integer_setting_fails(monkeypatch):
    monkeypatch.setenv("CHAT_HISTORY_LIMIT", "lots")
    with pytest.raises(RuntimeError):
        LoadSettings()


def test_json_helpers():
    assert SerializeJson(None) is None
    assert SerializeJson({"days": ["mon"]}) == '{"days":["mon"]}'
    assert ParseJson('{"days":["mon"]}') == {"days": ["mon"]}
    assert ParseJson(None, default=[]) == []
    assert ParseJson("", default=[]) == []
    assert ParseJson("not json") == "not json"


def test_int_env_shared_by_pool_and_migration_knobs(monkeypatch):
    monkeypatch.delenv("SQLALCHEMY_POOL_SIZE", raising=False)
    assert ReadIntEnv("SQLALCHEMY_POOL_SIZE", 10) == 10

    monkeypatch.setenv("MIGRATIONS_TIMEOUT_SECONDS", " 120 ")
    assert ReadIntEnv("MIGRATIONS_TIMEOUT_SECONDS", 600) == 120

    monkeypatch.setenv("MIGRATIONS_TIMEOUT_SECONDS", "ten minutes")
    with pytest.raises(RuntimeError) as exc_info:
        ReadIntEnv("MIGRATIONS_TIMEOUT_SECONDS", 600)
    assert "MIGRATIONS_TIMEOUT_SECONDS" in str(exc_info.value)
