"""
Configuration models and loader for movie sessions.

A session is described by a YAML file; anything omitted falls back to the
model defaults and, for the playback block, to the ``BH_MOVIE_*`` settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, confloat, conint, field_validator, model_validator

from .core.playback import OverrunPolicy
from .settings import get_settings


PositiveFloat = confloat(gt=0)


class ConfigurationError(ValueError):
    """Raised when a session configuration cannot be used."""


class PlaybackConfig(BaseModel):
    """Playback and capture window."""

    capture_enabled: bool = Field(default=False, description="Record rendered frames to the capture sink")
    capture_duration_s: Optional[PositiveFloat] = Field(
        default=None, description="Stop playback and finalize capture after this many seconds"
    )
    scene_variant: str = Field(default="A", description="Trajectory set / palette selector (A or B)")
    fps: PositiveFloat = Field(default=60.0, description="Tick rate and capture frame rate")
    overrun: OverrunPolicy = Field(
        default=OverrunPolicy.STOP,
        description="What to do once the frame index passes the last trajectory row",
    )

    @field_validator("scene_variant", mode="before")
    @classmethod
    def _coerce_variant(cls, value: Any) -> str:
        # YAML reads `scene_variant: 1` as an int
        return str(value).strip()


class VideoConfig(BaseModel):
    """Render surface and capture container."""

    resolution: Tuple[conint(gt=0), conint(gt=0)] = Field(
        default=(1280, 720), description="(width, height) in pixels"
    )
    format: Literal["webm", "png"] = Field(default="webm", description="Capture container")
    codec: str = Field(default="VP80", description="FourCC used for video capture")

    @field_validator("codec")
    @classmethod
    def _validate_codec(cls, value: str) -> str:
        if len(value) != 4:
            raise ValueError(f"Codec must be a four character code, got {value!r}")
        return value


class SceneConfig(BaseModel):
    """Camera and static scene furniture."""

    fov_deg: confloat(gt=0, lt=180) = 75.0
    near: PositiveFloat = 0.1
    far: PositiveFloat = 5000.0
    look_at: Tuple[float, float, float] = (13.0, 0.0, 0.0)
    black_hole_radius: PositiveFloat = 13.0
    spin_axis_half_length: PositiveFloat = 15.0
    radial_axis_length: PositiveFloat = 40.0
    ray_radius: PositiveFloat = 0.05
    trail_capacity: conint(gt=0) = 10000
    sky_texture: Optional[Path] = Field(
        default=None, description="Equirectangular image wrapped on the sky dome"
    )
    sky_radius: PositiveFloat = 2000.0

    @model_validator(mode="after")
    def _check_clip_planes(self) -> "SceneConfig":
        if self.near >= self.far:
            raise ValueError("Near clip plane must be closer than the far clip plane")
        return self


class MovieConfig(BaseModel):
    """Top-level configuration object for a movie session."""

    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    video: VideoConfig = Field(default_factory=VideoConfig)
    scene: SceneConfig = Field(default_factory=SceneConfig)
    trajectory_root: Optional[Path] = Field(
        default=None, description="Directory holding the per-variant trajectory folders"
    )
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Optional bookkeeping")

    @property
    def capture_frame_count(self) -> Optional[int]:
        """Frames in a full capture window, when the window is bounded."""
        duration = self.playback.capture_duration_s
        if duration is None:
            return None
        return int(round(duration * self.playback.fps))


def _playback_defaults() -> Dict[str, Any]:
    settings = get_settings()
    defaults: Dict[str, Any] = {
        "capture_enabled": settings.capture,
        "scene_variant": settings.variant,
    }
    if settings.capture_seconds is not None:
        defaults["capture_duration_s"] = settings.capture_seconds
    return defaults


def _resolve_relative_paths(data: dict, base_path: Path) -> dict:
    """Make relative paths in the raw dictionary absolute against the config file."""

    def _resolve(value: Optional[Union[str, Path]]) -> Optional[Path]:
        if value is None:
            return None
        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return (base_path / path).resolve()

    if "trajectory_root" in data:
        data["trajectory_root"] = _resolve(data["trajectory_root"])

    scene = data.get("scene")
    if isinstance(scene, dict) and "sky_texture" in scene:
        scene["sky_texture"] = _resolve(scene["sky_texture"])

    return data


def build_movie_config(raw_data: Optional[dict] = None) -> MovieConfig:
    """
    Validate a raw configuration mapping, layering it over the environment defaults.

    Raises
    ------
    ConfigurationError
        If the mapping does not describe a valid session.
    """
    data = dict(raw_data or {})
    playback = dict(_playback_defaults())
    raw_playback = data.get("playback") or {}
    if not isinstance(raw_playback, dict):
        raise ConfigurationError("'playback' must be a mapping")
    playback.update(raw_playback)
    data["playback"] = playback

    try:
        return MovieConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def load_movie_config(path: Union[str, Path]) -> MovieConfig:
    """
    Load and validate a movie session from a YAML file.

    Parameters
    ----------
    path:
        Path to the YAML configuration file.

    Returns
    -------
    MovieConfig
        Parsed and validated configuration object.
    """

    config_path = Path(path).resolve()
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw_data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(raw_data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    processed = _resolve_relative_paths(raw_data, config_path.parent)
    return build_movie_config(processed)
