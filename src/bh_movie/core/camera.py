"""
Pinhole perspective camera.

The camera follows the usual graphics convention: ``fov_deg`` is the vertical
field of view, the view direction is set with :meth:`PerspectiveCamera.look_at`
and ``up`` defaults to ``+z`` so the black hole spin axis stays vertical.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np


class PerspectiveCamera:
    """Project world-space points to pixel coordinates of a fixed-size surface."""

    def __init__(
        self,
        fov_deg: float,
        resolution: Tuple[int, int],
        near: float = 0.1,
        far: float = 5000.0,
        up: Sequence[float] = (0.0, 0.0, 1.0),
    ):
        width, height = resolution
        self.width = int(width)
        self.height = int(height)
        self.fov_deg = float(fov_deg)
        self.near = float(near)
        self.far = float(far)
        self.up = _normalize(np.asarray(up, dtype=np.float64))

        self.focal_px = (self.height / 2.0) / math.tan(math.radians(self.fov_deg) / 2.0)
        self.cx = self.width / 2.0
        self.cy = self.height / 2.0

        self.position = np.zeros(3, dtype=np.float64)
        self._right = np.array([1.0, 0.0, 0.0])
        self._true_up = np.array([0.0, 0.0, 1.0])
        self._forward = np.array([0.0, 1.0, 0.0])

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def forward(self) -> np.ndarray:
        return self._forward.copy()

    def set_position(self, point: Sequence[float]) -> None:
        self.position = np.asarray(point, dtype=np.float64).reshape(3).copy()

    def look_at(self, target: Sequence[float]) -> None:
        """Rotate the camera so ``target`` sits in the middle of the frame."""
        direction = np.asarray(target, dtype=np.float64) - self.position
        if not np.any(direction):
            return
        forward = _normalize(direction)
        right = np.cross(forward, self.up)
        if np.linalg.norm(right) < 1e-9:
            # Looking straight along the up vector
            right = np.cross(forward, np.array([0.0, 1.0, 0.0]))
        right = _normalize(right)
        self._forward = forward
        self._right = right
        self._true_up = np.cross(right, forward)

    def world_to_camera(self, points: np.ndarray) -> np.ndarray:
        """Return ``(N, 3)`` camera-space coordinates (right, up, depth)."""
        relative = np.atleast_2d(points) - self.position
        basis = np.stack([self._right, self._true_up, self._forward], axis=1)
        return relative @ basis

    def project(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Project world points to pixels.

        Returns
        -------
        pixels:
            ``(N, 2)`` array of (u, v) pixel coordinates; rows with
            non-positive depth are NaN.
        depth:
            ``(N,)`` distance along the view direction.
        """
        cam = self.world_to_camera(points)
        depth = cam[:, 2]
        pixels = np.full((cam.shape[0], 2), np.nan, dtype=np.float64)
        ahead = depth > 0.0
        pixels[ahead, 0] = self.cx + self.focal_px * cam[ahead, 0] / depth[ahead]
        pixels[ahead, 1] = self.cy - self.focal_px * cam[ahead, 1] / depth[ahead]
        return pixels, depth

    def in_view_depth(self, depth: np.ndarray) -> np.ndarray:
        return (depth > self.near) & (depth < self.far)

    def projected_radius(self, center: Sequence[float], radius: float) -> float:
        """Apparent radius in pixels of a sphere, 0 when it is behind the camera."""
        depth = float(self.world_to_camera(np.asarray(center, dtype=np.float64))[0, 2])
        if depth <= self.near:
            return 0.0
        distance = float(np.linalg.norm(np.asarray(center, dtype=np.float64) - self.position))
        if distance <= radius:
            return float("inf")
        # Silhouette of a sphere seen from `distance`
        half_angle = math.asin(radius / distance)
        return self.focal_px * math.tan(half_angle)

    def pixel_directions(self, grid: np.ndarray) -> np.ndarray:
        """
        World-space unit view directions for a camera-space direction grid.

        ``grid`` is the ``(H, W, 3)`` output of :meth:`camera_space_grid`.
        """
        basis = np.stack([self._right, self._true_up, self._forward], axis=0)
        return grid @ basis

    def camera_space_grid(self) -> np.ndarray:
        """Unit directions through every pixel centre, in camera space."""
        us = (np.arange(self.width, dtype=np.float64) + 0.5 - self.cx) / self.focal_px
        vs = -(np.arange(self.height, dtype=np.float64) + 0.5 - self.cy) / self.focal_px
        xx, yy = np.meshgrid(us, vs)
        grid = np.stack([xx, yy, np.ones_like(xx)], axis=-1)
        return grid / np.linalg.norm(grid, axis=-1, keepdims=True)


def _normalize(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    if norm == 0:
        raise ValueError("Cannot normalize a zero-length vector")
    return vector / norm
