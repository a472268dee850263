"""Application settings for the Launchpad student tracker.

Values come from environment variables (or a local ``.env`` file) so the same
image can run the API, the follow-up cron job and the test suite.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Launchpad Student Tracker"
    api_version: str = "1.0.0"
    environment: str = "development"

    secret_key: str = "CHANGE_ME"
    access_token_expire_minutes: int = 60 * 24 * 7
    auth_cookie_name: str = "auth-token"
    cookie_secure: bool = False
    default_reset_password: str = "@Changeme2"

    database_url: str = "sqlite:///./launchpad.db"
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    log_level: str = "INFO"
    log_json: bool = False

    email_host: str = "smtp.gmail.com"
    email_port: int = 587
    email_secure: bool = False
    email_from: Optional[str] = None
    email_password: Optional[str] = None

    playlab_api_key: Optional[str] = None
    playlab_project_id: Optional[str] = None
    playlab_base_url: str = "https://www.playlab.ai/api/v1"
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    ai_timeout_seconds: float = 60.0

    cron_secret: Optional[str] = None


_settings_instance = None


def get_settings() -> Settings:
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
