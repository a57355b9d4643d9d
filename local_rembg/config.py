"""
Configuration loader for the background-removal service.

Environment variables are centralized here to keep the rest of the code
focused on business logic and to make operational tuning clear.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

QUALITY_MODES = {"fast", "standard", "high"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    # Mask provider + preprocessing
    modnet_model_path: Optional[Path] = None
    modnet_max_long_edge: int = 1024
    modnet_max_long_edge_high_quality: int = 1536
    default_quality_mode: str = "high"

    # Foreground classification; the same threshold drives the crop box
    foreground_threshold: int = Field(50, ge=0, le=255)
    foreground_area_ratio: float = Field(0.1, ge=0.0, le=1.0)

    # API; imagePath requests are only served from below image_root
    image_root: Optional[Path] = None
    request_timeout_seconds: int = 30
    log_level: str = "INFO"

    # Batch worker
    batch_max_workers: int = Field(4, ge=1)

    @field_validator("default_quality_mode")
    @classmethod
    def validate_quality_mode(cls, v: str) -> str:
        if v not in QUALITY_MODES:
            raise ValueError("DEFAULT_QUALITY_MODE must be one of fast|standard|high")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()


def quality_to_long_edge(quality_mode: str, settings: Optional[Settings] = None) -> int:
    """
    Translate a quality string into the resize target for the longest edge.

    Higher values give finer detail at the cost of speed/memory.
    """
    settings = settings or get_settings()
    if quality_mode not in QUALITY_MODES:
        raise ValueError("qualityMode must be one of fast | standard | high")
    if quality_mode == "high":
        return settings.modnet_max_long_edge_high_quality
    return settings.modnet_max_long_edge
