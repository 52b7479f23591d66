from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from common.errors import InvalidParameter
from common.settings import LOG_LEVEL_PATTERN, settings


class ChunkingConfig(BaseModel):
    chunk_size: int = Field(default=500, gt=0)
    overlap: int = Field(default=50, ge=0)

    @model_validator(mode="after")
    def _overlap_below_chunk_size(self) -> "ChunkingConfig":
        if self.overlap >= self.chunk_size:
            raise ValueError(
                f"overlap ({self.overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self


class RankingConfig(BaseModel):
    min_similarity: float = Field(default=0.7, ge=-1.0, le=1.0)
    top_k: int = Field(default=3, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", pattern=LOG_LEVEL_PATTERN)

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class GlobalYAMLConfig(BaseModel):
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_yaml_config(path: Path | None = None) -> GlobalYAMLConfig:
    """
    Read the policy knobs from YAML. A missing file means "use the defaults";
    a present but invalid file is an error.
    """
    path = Path(path or settings.config_path)
    if not path.exists():
        return GlobalYAMLConfig()
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise InvalidParameter(f"{path} must contain a mapping at the top level")
    return GlobalYAMLConfig(**raw)


yaml_config = load_yaml_config()
