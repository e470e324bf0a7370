"""Application settings and configuration.

This module defines all configuration options for the neor forum.
Settings are loaded from environment variables with sensible defaults.
"""

from datetime import timedelta
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="neor", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Public domain used for cookies and links inside emails
    domain: str = Field(default="localhost", alias="DOMAIN")
    secure_cookies: bool = Field(default=False, alias="SECURE_COOKIES")

    # Database configuration
    database_url: str = Field(default="sqlite:///./neor.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Outgoing mail
    email_enabled: bool = Field(default=True, alias="EMAIL_ENABLED")
    email_from: str = Field(default="neor <noreply@localhost>", alias="EMAIL_FROM")
    email_password: str | None = Field(default=None, alias="EMAIL_PASSWORD")
    email_relay: str = Field(default="localhost", alias="EMAIL_RELAY")
    email_port: int = Field(default=465, alias="EMAIL_PORT")
    email_timeout_seconds: float = Field(default=10.0, alias="EMAIL_TIMEOUT_SECONDS")

    # Uploaded profile pictures
    files_dir: Path = Field(default=Path("public/files"), alias="FILES_DIR")
    mini_pfp_width: int = Field(default=32, alias="MINI_PFP_WIDTH")
    pfp_width: int = Field(default=128, alias="PFP_WIDTH")

    # Content rules
    edit_window_hours: float = Field(default=2.0, alias="EDIT_WINDOW_HOURS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="text", alias="LOG_FORMAT")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def edit_window(self) -> timedelta:
        """Return how long after posting a post or comment stays editable."""
        return timedelta(hours=self.edit_window_hours)

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url


settings = Settings()
