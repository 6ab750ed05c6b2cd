from functools import lru_cache
import json
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

_ENV_CANDIDATES = (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path(__file__).resolve().parent.parent / ".env",
    Path.cwd() / ".env",
)

for env_path in _ENV_CANDIDATES:
    if env_path.is_file():
        load_dotenv(env_path, override=False)
        break


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    database_url: str = "postgresql+psycopg://postgres:postgres@db:5432/budget"
    api_prefix: str = "/api"
    allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "https://web.telegram.org",
        ]
    )
    telegram_bot_token: str | None = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    default_currency: str = "USD"
    base_currency: str = "USD"
    extraction_model: str = "gpt-4o-mini"
    analysis_model: str = "gpt-5"
    category_matcher: Literal["undefined", "keyword"] = "undefined"
    seed_reference_data: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=None, populate_by_name=True)

    @field_validator("allow_origins", mode="before")
    @classmethod
    def parse_allow_origins(cls, value: object) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    return json.loads(stripped)
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in stripped.split(",") if item.strip()]
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        raise ValueError("Invalid allow_origins format.")

    @field_validator("default_currency", "base_currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.strip().upper()


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid repeated environment parsing."""
    return Settings()
