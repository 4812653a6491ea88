"""Centralized configuration loading.

Loads environment variables once and provides a typed Settings object
for the rest of the codebase. Entry points (the CLI, tests) import this
module early so .env is respected.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv


# Load .env once at import time
load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
DB_PATH = os.path.join(PROJECT_ROOT, "data", "agilow.db")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass
class Settings:
    # Backend gateway (speech-to-text + task execution)
    backend_url: str = field(
        default_factory=lambda: os.getenv(
            "AGILOW_BACKEND_URL", "http://localhost:8000/api/voice"
        )
    )
    request_timeout: int = field(
        default_factory=lambda: _env_int("AGILOW_REQUEST_TIMEOUT", 30)
    )

    # Trello app (OAuth + board discovery)
    trello_app_key: Optional[str] = field(
        default_factory=lambda: os.getenv("TRELLO_APP_KEY")
    )
    trello_redirect_uri: str = field(
        default_factory=lambda: os.getenv(
            "TRELLO_REDIRECT_URI", "http://localhost:5173/trello-auth"
        )
    )

    # Durable + legacy credential tiers (root-level data directory by default)
    database_url: str = field(
        default_factory=lambda: os.getenv(
            "DATABASE_URL",
            "sqlite:///" + DB_PATH,
        )
    )

    # Activity log / capture
    log_capacity: int = field(
        default_factory=lambda: _env_int("AGILOW_LOG_CAPACITY", 50)
    )
    sample_rate: int = field(
        default_factory=lambda: _env_int("AGILOW_SAMPLE_RATE", 16000)
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: os.getenv("AGILOW_LOG_LEVEL", "INFO")
    )


def get_settings() -> Settings:
    """Return a new Settings instance (cheap dataclass construction)."""
    return Settings()
