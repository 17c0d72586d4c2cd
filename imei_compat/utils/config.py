"""
Configuration module using pydantic-settings.

This reads environment variables and makes them available as 'settings'.
Every field has a default so the resolver works with no environment at all;
the bot additionally needs BOT_TOKEN.
"""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file if present (useful in local dev)
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    BOT_TOKEN: str | None = None  # Telegram bot token
    WEBHOOK_URL: str | None = None  # Optional webhook URL
    PORT: int = 8080  # Port used when running in webhook mode
    LOCALE_FALLBACK: str = "en"  # Fallback language code
    LOG_LEVEL: str = "INFO"

    # External device identification
    AI_PROVIDER: Literal["auto", "gemini", "openai", "none"] = "auto"
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-pro"
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o"
    AI_TIMEOUT_SECONDS: float = 10.0

    DEFAULT_NETWORK: str = "AT&T"  # Carrier used when the user didn't pick one
    REFERENCE_DATA_PATH: str | None = None  # Alternative devices.json

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


# A global 'settings' object that's easy to import elsewhere.
settings = get_settings()
