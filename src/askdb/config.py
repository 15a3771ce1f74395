"""Configuration management for askdb."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_MODEL = "gemini:gemini-2.0-flash"
DEFAULT_DATABASE_URL = "mysql+aiomysql://root@localhost/sample_data"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="ASKDB_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    # Model Configuration
    model: str = Field(default=DEFAULT_MODEL, description="Model in provider:model format")
    api_key: str | None = Field(default=None, description="API key for the LLM provider")
    api_base: str | None = Field(default=None, description="Optional API base URL")
    max_tokens: int | None = Field(default=None, description="Maximum tokens per completion")
    model_timeout_seconds: float | None = Field(default=None, description="Timeout for one completion call")

    # Database Configuration
    database_url: str = Field(default=DEFAULT_DATABASE_URL, description="SQLAlchemy async database URL")
    read_only: bool = Field(default=False, description="Reject generated statements that may write")
    schema_file: Path | None = Field(default=None, description="File holding the schema description")

    # Session Configuration
    telegram_token: str | None = Field(default=None, description="Telegram bot token")
    telegram_allow_from: Annotated[set[str], NoDecode] = Field(
        default_factory=set, description="Chat ids allowed to talk to the bot, comma separated or a JSON list"
    )
    poll_timeout_seconds: int = Field(default=30, description="Long polling timeout")
    session_dir: Path = Field(default=Path(".askdb/sessions"), description="Directory for persisted credentials")
    reconnect_delay_seconds: float = Field(default=2.0, description="Pause before reconnecting a dropped session")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")

    @field_validator("telegram_allow_from", mode="before")
    @classmethod
    def split_chat_ids(cls, value: Any) -> Any:
        if isinstance(value, (int, str)):
            text = str(value).strip()
            if text.startswith("["):
                value = json.loads(text)
            else:
                return {item.strip() for item in text.split(",") if item.strip()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return {str(item).strip() for item in value}
        return value

    @property
    def credentials_path(self) -> Path:
        return self.session_dir / "telegram.json"


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, the .env file and explicit overrides.

    Overrides whose value is ``None`` are ignored so CLI options can be passed
    through unconditionally.
    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**updates)
