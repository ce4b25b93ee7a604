"""Application settings loaded from .env via pydantic-settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class MovieSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BH_MOVIE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    trajectories: Path = Field(default=Path("trajectories"))
    outputs: Path = Field(default=Path("outputs"))
    capture: bool = False
    capture_seconds: Optional[float] = Field(default=None, gt=0)
    variant: str = "A"

    @field_validator("trajectories", "outputs", mode="before")
    @classmethod
    def _expand_root(cls, value: Path) -> Path:
        return Path(value).expanduser().resolve()


_settings: Optional[MovieSettings] = None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def get_settings() -> MovieSettings:
    global _settings
    if _settings is None:
        env_path = _project_root() / ".env"
        if not env_path.exists():
            logger.debug(
                "No .env file found at %s; using environment and defaults. Example:\n"
                "BH_MOVIE_TRAJECTORIES=/absolute/path/to/trajectories\n"
                "BH_MOVIE_OUTPUTS=/absolute/path/to/outputs",
                env_path,
            )
        _settings = MovieSettings()
    return _settings


def trajectory_root() -> Path:
    return get_settings().trajectories


def output_root() -> Path:
    root = get_settings().outputs
    root.mkdir(parents=True, exist_ok=True)
    return root


def reset_settings_cache() -> None:
    global _settings
    _settings = None
