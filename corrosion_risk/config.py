"""
Application Configuration — Pydantic Settings

Centralized configuration management using environment variables.
Loads from .env file automatically with sensible defaults.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Priority: Environment variables > .env file > defaults
    """

    # === API Configuration ===
    PROJECT_NAME: str = "Corrosion Risk Rating"

    # === CORS Configuration ===
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    # === Rating Engine ===
    PRIMARY_OUTPUT: str = "B0"
    DEFAULT_NORM_ID: str = "din50929-3"
    NORMS_FILE: Optional[str] = None  # JSON file with additional norms

    # === Logging ===
    LOG_LEVEL: str = "INFO"

    # === Environment ===
    ENVIRONMENT: str = "local"  # local, development, staging, production

    # === Settings Configuration ===
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Singleton instance
settings = Settings()
