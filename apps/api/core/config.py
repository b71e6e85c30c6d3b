import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from homelib.db.session import build_database_url

_ENV_FILE = Path(__file__).parent.parent / ".env"


def _origin_entries(value: Any) -> list[Any]:
    """Accept a JSON array, a comma-separated string or an already parsed list."""
    if isinstance(value, list):
        return value
    if not isinstance(value, str):
        raise ValueError("CORS_ORIGINS must be a list or comma-separated string.")
    text = value.strip()
    if text.startswith("["):
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list):
            return decoded
    return text.split(",")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=_ENV_FILE, extra="ignore")

    DATABASE_FILE: str = "data/development.db"
    DATABASE_URL: str | None = None  # Full SQLAlchemy URL; overrides DATABASE_FILE
    HOST: str = "0.0.0.0"
    PORT: int = Field(default=3000, gt=0, le=65535)
    # NoDecode keeps comma-separated env values away from the JSON decoder.
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:5173"]
    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS: bool = True
    COVER_LOOKUP_ENABLED: bool = True
    COVER_API_URL: str = "https://bookcover.longitood.com/bookcover"
    COVER_API_TIMEOUT_SECONDS: float = Field(default=8.0, gt=0)

    @property
    def database_url(self) -> str:
        return build_database_url(self.DATABASE_FILE, self.DATABASE_URL)

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def normalize_cors_origins(cls, value: Any) -> list[str]:
        origins: dict[str, None] = {}
        for entry in _origin_entries(value):
            if not isinstance(entry, str):
                raise ValueError("CORS_ORIGINS entries must be strings.")
            # Browsers send the Origin header without a trailing slash.
            origin = entry.strip().strip("[]\"'").rstrip("/")
            if origin:
                origins.setdefault(origin, None)
        if not origins:
            raise ValueError("CORS_ORIGINS must include at least one origin.")
        return list(origins)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got {value!r}.")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
