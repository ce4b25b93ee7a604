"""
Frame rendering for movie sessions.

The renderer rasterizes a :class:`~bh_movie.core.scene.Scene` from the
current camera pose with OpenCV primitives: the sky dome is remapped from an
equirectangular texture, the black hole is a filled disc and every line,
trail and ray marker is clipped against the camera and hidden where the black
hole sits in front of it.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .camera import PerspectiveCamera
from .colors import hex_to_bgr
from .scene import Scene, SceneLine

_LINE_SAMPLES = 64
_MIN_MARKER_RADIUS_PX = 2
# Keeps projected coordinates inside int32 before OpenCV clips them
_PIXEL_LIMIT = 1.0e5


class SceneRenderer:
    """
    Render frames of a scene.

    Parameters
    ----------
    scene:
        Scene to draw.
    resolution:
        ``(width, height)`` of the output frames.
    """

    def __init__(self, scene: Scene, resolution: Tuple[int, int]):
        self._scene = scene
        self._width, self._height = int(resolution[0]), int(resolution[1])
        self._grid: Optional[np.ndarray] = None
        self._grid_key: Optional[Tuple[int, int, float]] = None
        self.frames_rendered = 0

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def resolution(self) -> Tuple[int, int]:
        return self._width, self._height

    def render(self, camera: PerspectiveCamera) -> np.ndarray:
        """Draw the scene from ``camera`` and return a BGR ``uint8`` frame."""
        if (camera.width, camera.height) != (self._width, self._height):
            raise ValueError(
                "Camera resolution mismatch: "
                f"camera {(camera.width, camera.height)}, expected {(self._width, self._height)}"
            )

        frame = self._draw_background(camera)
        self._draw_black_hole(frame, camera)

        for line in self._scene.lines:
            self._draw_polyline(frame, camera, _sample_line(line), hex_to_bgr(line.color), line.width)

        for ray in self._scene.rays:
            if ray.trail is not None and len(ray.trail) >= 2:
                self._draw_polyline(
                    frame, camera, ray.trail.visible_points(), hex_to_bgr(ray.color), self._scene.trail_width
                )
        for ray in self._scene.rays:
            self._draw_marker(frame, camera, ray.position, hex_to_bgr(ray.color))

        self.frames_rendered += 1
        return frame

    # Internal helpers -------------------------------------------------

    def _draw_background(self, camera: PerspectiveCamera) -> np.ndarray:
        texture = self._scene.sky_texture
        if texture is None:
            frame = np.empty((self._height, self._width, 3), dtype=np.uint8)
            frame[:] = hex_to_bgr(self._scene.background_color)
            return frame

        directions = camera.pixel_directions(self._camera_grid(camera))
        hits = _dome_intersections(camera.position, directions, self._scene.sky_radius)
        tex_height, tex_width = texture.shape[:2]
        radius = np.linalg.norm(hits, axis=-1)
        longitude = np.arctan2(hits[..., 1], hits[..., 0])
        colatitude = np.arccos(np.clip(hits[..., 2] / radius, -1.0, 1.0))
        map_x = ((longitude + math.pi) / (2.0 * math.pi) * tex_width).astype(np.float32)
        map_y = (colatitude / math.pi * (tex_height - 1)).astype(np.float32)
        return cv2.remap(texture, map_x, map_y, interpolation=cv2.INTER_LINEAR, borderMode=cv2.BORDER_WRAP)

    def _camera_grid(self, camera: PerspectiveCamera) -> np.ndarray:
        key = (camera.width, camera.height, camera.fov_deg)
        if self._grid is None or self._grid_key != key:
            self._grid = camera.camera_space_grid()
            self._grid_key = key
        return self._grid

    def _draw_black_hole(self, frame: np.ndarray, camera: PerspectiveCamera) -> None:
        hole = self._scene.black_hole
        radius_px = camera.projected_radius(hole.center, hole.radius)
        if radius_px <= 0.0:
            return
        color = hex_to_bgr(hole.color)
        if math.isinf(radius_px):
            frame[:] = color
            return
        pixels, _ = camera.project(np.asarray([hole.center], dtype=np.float64))
        center = _to_int_pixels(pixels)[0]
        cv2.circle(frame, (int(center[0]), int(center[1])), int(round(radius_px)), color, thickness=-1, lineType=cv2.LINE_AA)

    def _draw_polyline(
        self,
        frame: np.ndarray,
        camera: PerspectiveCamera,
        points: np.ndarray,
        color: Tuple[int, int, int],
        width: int,
    ) -> None:
        pixels, depth = camera.project(points)
        visible = camera.in_view_depth(depth) & ~self._occluded(camera, points)
        runs = _visible_runs(visible)
        if not runs:
            return
        int_pixels = _to_int_pixels(pixels)
        polylines = [int_pixels[run].reshape(-1, 1, 2) for run in runs]
        cv2.polylines(frame, polylines, isClosed=False, color=color, thickness=int(width), lineType=cv2.LINE_AA)

    def _draw_marker(
        self,
        frame: np.ndarray,
        camera: PerspectiveCamera,
        position: Sequence[float],
        color: Tuple[int, int, int],
    ) -> None:
        point = np.asarray([position], dtype=np.float64)
        pixels, depth = camera.project(point)
        if not camera.in_view_depth(depth)[0] or self._occluded(camera, point)[0]:
            return
        radius_px = camera.projected_radius(position, self._scene.ray_radius)
        if math.isinf(radius_px):
            return
        radius = max(_MIN_MARKER_RADIUS_PX, int(round(radius_px)))
        center = _to_int_pixels(pixels)[0]
        cv2.circle(frame, (int(center[0]), int(center[1])), radius, color, thickness=-1, lineType=cv2.LINE_AA)

    def _occluded(self, camera: PerspectiveCamera, points: np.ndarray) -> np.ndarray:
        hole = self._scene.black_hole
        return occluded_by_sphere(camera.position, points, np.asarray(hole.center), hole.radius)


def occluded_by_sphere(
    eye: np.ndarray,
    points: np.ndarray,
    center: np.ndarray,
    radius: float,
) -> np.ndarray:
    """
    Boolean mask of ``points`` hidden from ``eye`` by a solid sphere.

    A point is hidden when the segment from the eye to the point enters the
    sphere before reaching it, or when the point lies inside the sphere.
    """
    points = np.atleast_2d(points)
    direction = points - eye
    offset = eye - center
    a = np.einsum("ij,ij->i", direction, direction)
    b = 2.0 * direction @ offset
    c = float(offset @ offset) - radius * radius
    if c <= 0.0:
        return np.ones(points.shape[0], dtype=bool)

    disc = b * b - 4.0 * a * c
    hidden = np.zeros(points.shape[0], dtype=bool)
    hit = (disc >= 0.0) & (a > 0.0)
    entry = np.full(points.shape[0], np.inf)
    entry[hit] = (-b[hit] - np.sqrt(disc[hit])) / (2.0 * a[hit])
    hidden[hit] = (entry[hit] > 0.0) & (entry[hit] < 1.0)
    return hidden


def _dome_intersections(eye: np.ndarray, directions: np.ndarray, radius: float) -> np.ndarray:
    """Points where unit rays from ``eye`` leave a sphere of ``radius`` at the origin."""
    b = directions @ eye
    c = float(eye @ eye) - radius * radius
    t = -b + np.sqrt(np.maximum(b * b - c, 0.0))
    return eye + directions * t[..., None]


def _sample_line(line: SceneLine) -> np.ndarray:
    weights = np.linspace(0.0, 1.0, _LINE_SAMPLES)[:, None]
    start, end = line.points()
    return start + (end - start) * weights


def _visible_runs(mask: np.ndarray) -> List[np.ndarray]:
    """Index runs of consecutive visible points, dropping runs too short to draw."""
    indices = np.flatnonzero(mask)
    if indices.size == 0:
        return []
    breaks = np.flatnonzero(np.diff(indices) > 1) + 1
    return [run for run in np.split(indices, breaks) if run.size >= 2]


def _to_int_pixels(pixels: np.ndarray) -> np.ndarray:
    clipped = np.clip(np.nan_to_num(pixels, nan=0.0), -_PIXEL_LIMIT, _PIXEL_LIMIT)
    return np.round(clipped).astype(np.int32)
