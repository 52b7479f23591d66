from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent
LOG_LEVEL_PATTERN = "^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$"


class Settings(BaseSettings):
    # YAML policy file; anchored to the project, not the caller's cwd
    config_path: Path = Field(default=PROJECT_ROOT / "config" / "config.yaml")

    # Overrides logging.level from the YAML file when set
    log_level: str | None = Field(default=None, pattern=LOG_LEVEL_PATTERN)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
