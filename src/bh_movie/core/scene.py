"""
Scene description.

The scene is plain data: the black hole, the static reference lines, the
moving rays with their trails and the sky dome. Rendering lives in
:mod:`bh_movie.core.renderer`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np

from .colors import AXIS_COLOR, BLACK
from .playback import TrackedObject
from .trail import TrailBuffer

if TYPE_CHECKING:
    from ..config import SceneConfig
    from ..variants import VariantSpec


Vector3 = Tuple[float, float, float]

TRAIL_WIDTH = 3
SPIN_AXIS_WIDTH = 3
RADIAL_AXIS_WIDTH = 2


@dataclass(frozen=True)
class Sphere:
    center: Vector3
    radius: float
    color: int


@dataclass(frozen=True)
class SceneLine:
    start: Vector3
    end: Vector3
    color: int
    width: int = 1

    def points(self) -> np.ndarray:
        return np.array([self.start, self.end], dtype=np.float64)


@dataclass
class Scene:
    """Everything the renderer draws for one movie."""

    black_hole: Sphere
    lines: List[SceneLine]
    rays: List[TrackedObject]
    ray_radius: float
    trail_width: int = TRAIL_WIDTH
    sky_texture: Optional[np.ndarray] = field(default=None, repr=False)
    sky_radius: float = 2000.0
    background_color: int = BLACK


def build_rays(palette: Tuple[int, ...], trail_capacity: int) -> List[TrackedObject]:
    """One tracked object per palette entry, each with its own trail."""
    return [
        TrackedObject(name=f"ray{idx + 1}", color=color, trail=TrailBuffer(trail_capacity))
        for idx, color in enumerate(palette)
    ]


def build_scene(
    variant: "VariantSpec",
    scene_config: "SceneConfig",
    sky_texture: Optional[np.ndarray] = None,
) -> Scene:
    """Assemble the scene for ``variant``."""
    half = float(scene_config.spin_axis_half_length)
    lines = [
        SceneLine(start=(0.0, 0.0, half), end=(0.0, 0.0, -half), color=AXIS_COLOR, width=SPIN_AXIS_WIDTH),
    ]
    if variant.radial_axis:
        lines.append(
            SceneLine(
                start=(0.0, 0.0, 0.0),
                end=(float(scene_config.radial_axis_length), 0.0, 0.0),
                color=AXIS_COLOR,
                width=RADIAL_AXIS_WIDTH,
            )
        )

    return Scene(
        black_hole=Sphere(center=(0.0, 0.0, 0.0), radius=float(scene_config.black_hole_radius), color=BLACK),
        lines=lines,
        rays=build_rays(variant.palette, scene_config.trail_capacity),
        ray_radius=float(scene_config.ray_radius),
        sky_texture=sky_texture,
        sky_radius=float(scene_config.sky_radius),
    )
