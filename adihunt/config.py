"""Configuration management using environment variables."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from pydantic import Field

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = Field(
        default="sqlite:///data/adihunt.db",
        alias="DATABASE_URL"
    )

    # Generative-language API
    gemini_api_key: Optional[str] = Field(
        default=None,
        alias="GEMINI_API_KEY"
    )
    gemini_api_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        alias="GEMINI_API_URL"
    )
    gemini_model: str = Field(
        default="gemini-pro",
        alias="GEMINI_MODEL"
    )
    gemini_timeout_seconds: float = Field(
        default=60.0,
        alias="GEMINI_TIMEOUT_SECONDS"
    )
    gemini_max_attempts: int = Field(
        default=1,
        alias="GEMINI_MAX_ATTEMPTS"
    )

    # Accounts
    default_usage_limit: int = Field(
        default=10,
        alias="DEFAULT_USAGE_LIMIT"
    )

    # CLI identity (authentication itself happens elsewhere)
    user_id: Optional[str] = Field(
        default=None,
        alias="ADIHUNT_USER_ID"
    )
    user_email: Optional[str] = Field(
        default=None,
        alias="ADIHUNT_USER_EMAIL"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL"
    )
    log_file: Optional[str] = Field(
        default=None,
        alias="LOG_FILE"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Project paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Generation defaults sent with every request
GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 8192,
}

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]

# Article content limits embedded in prompts
PROMPT_CONTENT_LIMITS = {
    "optimize": 2000,
    "meta_description": 1000,
    "schema_markup": 1500,
}

DEFAULT_PROJECT_COLOR = "#3b82f6"

ACTIVITY_FEED_LIMIT = 20
CONVERSATION_HISTORY_LIMIT = 50
INTERNAL_LINK_SUGGESTION_LIMIT = 10
