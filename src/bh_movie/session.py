"""
Movie session assembly.

A session resolves the scene variant, loads every trajectory, builds the
scene, camera and renderer, and owns the playback driver that ties them
together. Nothing is rendered until every step above has succeeded.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Tuple

import numpy as np

from .assets import TrajectorySet, load_sky_texture, load_trajectory_set
from .config import MovieConfig
from .core.camera import PerspectiveCamera
from .core.playback import CaptureSink, PlaybackDriver, PlaybackState, RenderHost
from .core.renderer import SceneRenderer
from .core.scene import Scene, build_scene
from .settings import trajectory_root as default_trajectory_root
from .variants import VariantSpec, resolve_variant

logger = logging.getLogger(__name__)

RendererFactory = Callable[[Scene, Tuple[int, int]], RenderHost]


class MovieSession:
    """
    A ready-to-play movie.

    Parameters
    ----------
    config:
        Validated session configuration.
    variant:
        Resolved scene variant.
    trajectories:
        Loaded camera and ray trajectories.
    renderer_factory:
        Builds the render host for the scene; :class:`SceneRenderer` by default.
    capture:
        Capture sink, used only when ``config.playback.capture_enabled``.
    clock:
        Seconds source for the capture deadline; wall-clock time when ``None``.
    frame_clock:
        Measure the capture window in rendered frames instead of seconds,
        so an offline capture holds exactly ``config.capture_frame_count``
        frames.
    """

    def __init__(
        self,
        config: MovieConfig,
        variant: VariantSpec,
        trajectories: TrajectorySet,
        renderer_factory: Optional[RendererFactory] = None,
        capture: Optional[CaptureSink] = None,
        sky_texture: Optional[np.ndarray] = None,
        clock: Optional[Callable[[], float]] = None,
        frame_clock: bool = False,
    ):
        if trajectories.ray_count != variant.ray_count:
            raise ValueError(
                f"Variant {variant.name} expects {variant.ray_count} rays, got {trajectories.ray_count}"
            )
        self.config = config
        self.variant = variant
        self.trajectories = trajectories
        self.scene = build_scene(variant, config.scene, sky_texture=sky_texture)
        self.camera = PerspectiveCamera(
            fov_deg=config.scene.fov_deg,
            resolution=config.video.resolution,
            near=config.scene.near,
            far=config.scene.far,
        )
        factory = renderer_factory or SceneRenderer
        self.renderer = factory(self.scene, config.video.resolution)

        playback = config.playback
        self.capture = capture if playback.capture_enabled else None
        if playback.capture_enabled and capture is None:
            logger.warning("Capture is enabled but no capture sink was provided; frames will not be recorded.")

        # The capture window only bounds playback while capturing
        stop_after_s: Optional[float] = None
        stop_after_frames: Optional[int] = None
        if playback.capture_enabled:
            if frame_clock:
                stop_after_frames = config.capture_frame_count
            else:
                stop_after_s = playback.capture_duration_s

        self.driver = PlaybackDriver(
            camera=self.camera,
            camera_trajectory=trajectories.camera,
            rays=self.scene.rays,
            ray_trajectories=trajectories.rays,
            renderer=self.renderer,
            capture=self.capture,
            look_at=config.scene.look_at,
            overrun=playback.overrun,
            stop_after_s=stop_after_s,
            stop_after_frames=stop_after_frames,
            clock=clock,
        )

    @classmethod
    def from_config(
        cls,
        config: MovieConfig,
        trajectory_root: Optional[Path] = None,
        renderer_factory: Optional[RendererFactory] = None,
        capture: Optional[CaptureSink] = None,
        clock: Optional[Callable[[], float]] = None,
        frame_clock: bool = False,
    ) -> "MovieSession":
        """
        Resolve, load and assemble a session.

        Raises
        ------
        ConfigurationError
            If the scene variant is unknown.
        TrajectoryLoadingError
            If any trajectory cannot be loaded.
        """
        variant = resolve_variant(config.playback.scene_variant)
        root = Path(trajectory_root or config.trajectory_root or default_trajectory_root())
        trajectories = load_trajectory_set(variant.sources(root))
        sky_texture = load_sky_texture(config.scene.sky_texture) if config.scene.sky_texture else None
        logger.info(
            "Loaded variant %s: %d ray(s), %d frame(s) from %s",
            variant.name,
            trajectories.ray_count,
            trajectories.frame_count,
            root / variant.directory,
        )
        return cls(
            config,
            variant,
            trajectories,
            renderer_factory=renderer_factory,
            capture=capture,
            sky_texture=sky_texture,
            clock=clock,
            frame_clock=frame_clock,
        )

    @property
    def running(self) -> bool:
        return self.driver.state is PlaybackState.RUNNING

    def tick(self) -> bool:
        return self.driver.tick()

    def request_stop(self) -> None:
        self.driver.request_stop()

    def stop(self) -> None:
        self.driver.stop()

    def run(self, max_frames: Optional[int] = None) -> int:
        """
        Tick until playback stops; returns the number of rendered frames.

        ``max_frames`` requests a stop once that many frames were rendered.
        """
        rendered = 0
        while True:
            if max_frames is not None and rendered >= max_frames:
                self.driver.request_stop()
            if not self.driver.tick():
                break
            rendered += 1
        return rendered
