"""Pydantic Settings model for application configuration."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings shared by every command."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    DEBUG: bool = False
    LOG_FORMAT: Literal["console", "json"] = "console"

    GITHUB_API_URL: str = "https://api.github.com"


def get_settings() -> Settings:
    """Read settings from the environment and the optional .env file."""
    return Settings()
