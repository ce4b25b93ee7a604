"""
Asset loading utilities for movie sessions.

This module turns the trajectory CSV files and the optional sky texture named
by a session into ready-to-use NumPy arrays.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import cv2
import numpy as np


logger = logging.getLogger(__name__)


class AssetLoadingError(RuntimeError):
    """Raised when an asset cannot be loaded or validated."""


class TrajectoryLoadingError(AssetLoadingError):
    """Raised when a trajectory file cannot be read or parsed."""


@dataclass(frozen=True)
class TrajectorySet:
    """Camera trajectory plus one trajectory per ray, all indexed by frame."""

    camera: np.ndarray
    rays: List[np.ndarray]
    sources: List[Path]

    @property
    def frame_count(self) -> int:
        """Rows available in every trajectory."""
        return min([self.camera.shape[0]] + [ray.shape[0] for ray in self.rays])

    @property
    def ray_count(self) -> int:
        return len(self.rays)


def _parse_row(row: Sequence[str], line_number: int, path: Path) -> Optional[List[float]]:
    cells = [cell.strip() for cell in row]
    if not any(cells):
        return None
    if len(cells) != 3:
        raise TrajectoryLoadingError(
            f"{path}:{line_number}: expected 3 columns (x,y,z), got {len(cells)}"
        )
    try:
        return [float(cell) for cell in cells]
    except ValueError as exc:
        raise TrajectoryLoadingError(f"{path}:{line_number}: {exc}") from exc


def _is_header(row: Sequence[str]) -> bool:
    try:
        [float(cell) for cell in row if cell.strip()]
    except ValueError:
        return True
    return False


def parse_trajectory_csv(text: str, path: Path = Path("<memory>")) -> np.ndarray:
    """
    Parse ``x,y,z`` rows into an ``(N, 3)`` float array.

    Blank lines are skipped and a non-numeric first row is treated as a header.
    """
    points: List[List[float]] = []
    first_row = True
    for line_number, row in enumerate(csv.reader(text.splitlines()), start=1):
        if not row or not any(cell.strip() for cell in row):
            continue
        if first_row:
            first_row = False
            if _is_header(row):
                continue
        point = _parse_row(row, line_number, path)
        if point is not None:
            points.append(point)

    if not points:
        raise TrajectoryLoadingError(f"Trajectory contains no rows: {path}")
    return np.asarray(points, dtype=np.float64)


def load_trajectory_csv(path: Path) -> np.ndarray:
    """Read and parse one trajectory file, raising :class:`TrajectoryLoadingError` on failure."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TrajectoryLoadingError(f"Failed to read trajectory {path}: {exc}") from exc
    trajectory = parse_trajectory_csv(text, path)
    logger.debug("Loaded %d frame(s) from %s", trajectory.shape[0], path)
    return trajectory


def load_trajectory_set(sources: Sequence[Path]) -> TrajectorySet:
    """
    Load every source or none; the first one is the camera trajectory.

    Differing row counts are logged but accepted: playback only covers the
    rows every trajectory has.
    """
    if len(sources) < 1:
        raise TrajectoryLoadingError("At least the camera trajectory is required")

    trajectories = [load_trajectory_csv(Path(source)) for source in sources]
    lengths = {int(traj.shape[0]) for traj in trajectories}
    if len(lengths) > 1:
        logger.warning(
            "Trajectories have different lengths (%s); playback covers %d frame(s).",
            ", ".join(str(length) for length in sorted(lengths)),
            min(lengths),
        )

    return TrajectorySet(
        camera=trajectories[0],
        rays=trajectories[1:],
        sources=[Path(source) for source in sources],
    )


def load_sky_texture(path: Path) -> np.ndarray:
    """Load the equirectangular sky image as a BGR array."""
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise AssetLoadingError(f"Failed to load sky texture: {path}")
    return image
