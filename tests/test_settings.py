from notifier.core.settings import Settings, get_settings


def test_defaults():
    settings = Settings()

    assert settings.app_env == "local"
    assert settings.smtp_port == 587
    assert settings.telemetry_event_prefix == "notifier"
    assert settings.flowroute_access_key is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("SMTP_PORT", "2525")
    monkeypatch.setenv("FLOWROUTE_FROM_NUMBER", "12065550100")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.app_env == "production"
        assert settings.smtp_port == 2525
        assert settings.flowroute_from_number == "12065550100"
    finally:
        get_settings.cache_clear()
