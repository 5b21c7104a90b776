"""Application configuration from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite:///./budgetdesk.db",
        description="SQLAlchemy connection string",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Server log file path")

    # API
    api_title: str = Field(default="budgetdesk API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")

    # Sessions
    session_secret: str = Field(
        default="change-me", description="HMAC key used to sign session tokens"
    )
    session_cookie_name: str = Field(default="session", description="Session cookie name")

    # Approval rules
    allow_uncategorized_approval: bool = Field(
        default=True,
        description="Approve expenses without a category without a cap check",
    )


# Global settings instance
settings = Settings()
