"""
Animated playback of precomputed camera and ray trajectories around a black hole.

Trajectories are loaded from CSV files, replayed one row per frame, drawn
with fixed-length trails and optionally captured to a video.
"""

from .config import ConfigurationError, MovieConfig, build_movie_config, load_movie_config
from .assets import (
    AssetLoadingError,
    TrajectoryLoadingError,
    TrajectorySet,
    load_sky_texture,
    load_trajectory_csv,
    load_trajectory_set,
    parse_trajectory_csv,
)
from .variants import VariantSpec, available_variants, resolve_variant
from .core.trail import TrailBuffer
from .core.playback import OverrunPolicy, PlaybackDriver, PlaybackState, TrackedObject
from .core.camera import PerspectiveCamera
from .core.scene import Scene, build_scene
from .core.renderer import SceneRenderer
from .session import MovieSession
from .settings import output_root, reset_settings_cache, trajectory_root
from .exporters import (
    DEFAULT_VIDEO_CODEC,
    PngCaptureSink,
    VideoCaptureSink,
    create_capture_sink,
    determine_movie_name,
    prepare_output_directory,
)

__all__ = [
    "ConfigurationError",
    "MovieConfig",
    "build_movie_config",
    "load_movie_config",
    "AssetLoadingError",
    "TrajectoryLoadingError",
    "TrajectorySet",
    "load_sky_texture",
    "load_trajectory_csv",
    "load_trajectory_set",
    "parse_trajectory_csv",
    "VariantSpec",
    "available_variants",
    "resolve_variant",
    "TrailBuffer",
    "OverrunPolicy",
    "PlaybackDriver",
    "PlaybackState",
    "TrackedObject",
    "PerspectiveCamera",
    "Scene",
    "build_scene",
    "SceneRenderer",
    "MovieSession",
    "output_root",
    "reset_settings_cache",
    "trajectory_root",
    "DEFAULT_VIDEO_CODEC",
    "PngCaptureSink",
    "VideoCaptureSink",
    "create_capture_sink",
    "determine_movie_name",
    "prepare_output_directory",
]
