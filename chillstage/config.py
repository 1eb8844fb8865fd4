"""Configuration management for ChillStage."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StagingConfig(BaseModel):
    """Hourly staging rules."""

    # Remove the lowest-priority unit when capacity exceeds load by this factor
    excess_capacity_ratio: float = Field(default=1.5, gt=1.0)


class SearchConfig(BaseModel):
    """Priority-order search settings."""

    batch_size: int = Field(default=50, ge=1)
    top_n: int = Field(default=20, ge=1)


class ProfileConfig(BaseModel):
    """Load profile settings."""

    hours: int = Field(default=24, ge=1)
    load_unit: str = "kW"


class PerformanceConfig(BaseModel):
    """Performance table layout."""

    load_column: str = "kW"
    delimiter: str = "+"


class ChillStageConfig(BaseSettings):
    """Main configuration for ChillStage."""

    model_config = SettingsConfigDict(
        env_prefix="CHILLSTAGE_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    staging: StagingConfig = Field(default_factory=StagingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    profile: ProfileConfig = Field(default_factory=ProfileConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)

    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: Path) -> "ChillStageConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for internal use."""
        return self.model_dump()
