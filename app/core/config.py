# app/core/config.py
"""
Centralized application settings.
Values come from environment variables (and the .env file loaded in app.main).
"""
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "data")
DEFAULT_DATABASE_FILE = os.path.join(DATA_DIR, "db", "paytrack.sqlite")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    secret_key: str = ""
    database_url: str = f"sqlite:///{DEFAULT_DATABASE_FILE}"
    app_env: str = "development"

    # Comma separated lists (kept as plain strings, split on use)
    allowed_origins: str = "http://localhost:3000"
    allowed_hosts: str = "localhost,127.0.0.1"

    access_token_lifetime_seconds: int = 28800  # 8 hours
    daily_submission_limit: int = 5
    setup_rate_limit: str = "5/minute"

    log_level: str = "INFO"
    log_dir: str = "logs"

    # Optional first admin created at bootstrap
    admin_email: str | None = None
    admin_password: str | None = None
    admin_name: str = "Administrator"

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def hosts(self) -> list[str]:
        return [h.strip() for h in self.allowed_hosts.split(",") if h.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def async_database_url(self) -> str:
        """Async driver URL for the same database (used by fastapi-users)."""
        url = self.database_url
        if url.startswith("sqlite:///"):
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


settings = Settings()
