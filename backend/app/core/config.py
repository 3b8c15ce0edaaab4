import json

from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Resolve backend root (…/backend/) regardless of current working directory
BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"

ALLOWED_DURATIONS = (1, 5, 10, 15, 30)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Parity Quiz"
    ENV: str = "dev"
    # One origin or several, comma separated
    # Example: "http://localhost:5173,https://example.com"
    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:5173"]

    # Postgres in production (postgresql+psycopg2://...), a local file otherwise.
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'parity_quiz.db'}"

    # Create tables on startup without running Alembic (local SQLite only).
    DB_AUTO_CREATE: bool = True

    LOG_LEVEL: str = "INFO"

    # ===== Quiz engine =====
    QUIZ_PAGE_SIZE: int = 20
    # Deadline poll interval; 200ms keeps the finish transition at >= 5 Hz.
    QUIZ_TICK_INTERVAL_MS: int = 200
    QUIZ_DEFAULT_DURATION_MIN: int = 10
    # Idle client slots are dropped after this many seconds, and the least
    # recently used idle slots go first once the registry holds more than
    # QUIZ_MAX_CLIENTS. A running session is never evicted.
    QUIZ_CLIENT_IDLE_TTL_SEC: int = 3600
    QUIZ_MAX_CLIENTS: int = 1000

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if v is None or v == "":
            return []

        if isinstance(v, list):
            return v

        # JSON list first, then comma separated
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                try:
                    return json.loads(s)
                except ValueError:
                    pass
            return [item.strip() for item in s.split(",") if item.strip()]

        return v

    @field_validator("QUIZ_TICK_INTERVAL_MS")
    @classmethod
    def _check_tick_interval(cls, v: int) -> int:
        if not (1 <= int(v) <= 200):
            raise ValueError("QUIZ_TICK_INTERVAL_MS must be within 1..200")
        return int(v)

    @field_validator("QUIZ_PAGE_SIZE")
    @classmethod
    def _check_page_size(cls, v: int) -> int:
        if not (1 <= int(v) <= 20):
            raise ValueError("QUIZ_PAGE_SIZE must be within 1..20")
        return int(v)

    @field_validator("QUIZ_DEFAULT_DURATION_MIN")
    @classmethod
    def _check_default_duration(cls, v: int) -> int:
        if int(v) not in ALLOWED_DURATIONS:
            raise ValueError(f"QUIZ_DEFAULT_DURATION_MIN must be one of {ALLOWED_DURATIONS}")
        return int(v)

    @field_validator("QUIZ_CLIENT_IDLE_TTL_SEC", "QUIZ_MAX_CLIENTS")
    @classmethod
    def _check_positive(cls, v: int, info) -> int:
        if int(v) < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return int(v)


settings = Settings()
