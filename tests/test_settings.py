from backend.app.core.settings import Settings, get_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.app_name == "Launchpad Student Tracker"
    assert settings.auth_cookie_name == "auth-token"
    assert settings.access_token_expire_minutes == 60 * 24 * 7
    assert isinstance(settings.secret_key, str) and settings.secret_key
    assert isinstance(settings.database_url, str) and settings.database_url


def test_settings_singleton():
    assert get_settings() is get_settings()


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("CRON_SECRET", "from-env")
    monkeypatch.setenv("EMAIL_PORT", "465")
    settings = Settings()
    assert settings.cron_secret == "from-env"
    assert settings.email_port == 465
