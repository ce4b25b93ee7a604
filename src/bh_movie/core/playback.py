"""
Frame-by-frame playback of precomputed trajectories.

One call to :meth:`PlaybackDriver.tick` is one animation frame: the camera
and every ray jump to the trajectory row for the current frame index, ray
positions are pushed into their trails, and the render host draws a frame
that is optionally handed to a capture sink. The driver never assumes a
wall-clock delta between ticks.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, List, Optional, Protocol, Sequence

import numpy as np

from .trail import TrailBuffer


logger = logging.getLogger(__name__)


class OverrunPolicy(str, enum.Enum):
    """Behaviour once the frame index passes the last trajectory row."""

    STOP = "stop"
    CLAMP = "clamp"
    LOOP = "loop"


class PlaybackState(enum.Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class Camera(Protocol):
    def set_position(self, point: Sequence[float]) -> None:
        ...

    def look_at(self, target: Sequence[float]) -> None:
        ...


class RenderHost(Protocol):
    def render(self, camera: Camera) -> np.ndarray:
        ...


class CaptureSink(Protocol):
    def capture(self, frame: np.ndarray) -> None:
        ...

    def finalize(self) -> None:
        ...


class TrackedObject:
    """A ray (or any moving marker) with a current position and an optional trail."""

    def __init__(self, name: str, color: int, trail: Optional[TrailBuffer] = None):
        self.name = name
        self.color = color
        self.trail = trail
        self.position = np.zeros(3, dtype=np.float64)

    def move_to(self, point: Sequence[float]) -> None:
        self.position = np.asarray(point, dtype=np.float64).reshape(3).copy()
        if self.trail is not None:
            self.trail.append(self.position)

    def __repr__(self) -> str:
        return f"TrackedObject(name={self.name!r}, position={self.position.tolist()})"


class PlaybackDriver:
    """
    Advance a shared frame index and move every tracked object each tick.

    Parameters
    ----------
    camera:
        Camera moved along ``camera_trajectory`` and aimed at ``look_at``.
    camera_trajectory:
        ``(N, 3)`` camera positions, one row per frame.
    rays:
        Tracked objects, paired with ``ray_trajectories`` by position.
    ray_trajectories:
        One ``(N, 3)`` array per ray.
    renderer:
        Render host asked for one frame per tick.
    capture:
        Optional capture sink receiving every rendered frame.
    look_at:
        Fixed point the camera faces.
    overrun:
        Policy once the index passes the shortest trajectory.
    stop_after_s:
        Optional session length; measured on ``clock`` from the first tick.
    stop_after_frames:
        Optional session length in rendered frames.
    clock:
        Seconds source, ``time.monotonic`` unless given.
    """

    def __init__(
        self,
        camera: Camera,
        camera_trajectory: np.ndarray,
        rays: Sequence[TrackedObject],
        ray_trajectories: Sequence[np.ndarray],
        renderer: RenderHost,
        capture: Optional[CaptureSink] = None,
        look_at: Sequence[float] = (13.0, 0.0, 0.0),
        overrun: OverrunPolicy = OverrunPolicy.STOP,
        stop_after_s: Optional[float] = None,
        stop_after_frames: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        if len(rays) != len(ray_trajectories):
            raise ValueError(
                f"Got {len(rays)} ray objects for {len(ray_trajectories)} ray trajectories"
            )
        self._camera = camera
        self._camera_trajectory = camera_trajectory
        self._rays: List[TrackedObject] = list(rays)
        self._ray_trajectories = list(ray_trajectories)
        self._renderer = renderer
        self._capture = capture
        self._look_at = np.asarray(look_at, dtype=np.float64)
        self._overrun = OverrunPolicy(overrun)
        self._stop_after_s = stop_after_s
        self._stop_after_frames = stop_after_frames
        self._clock = clock or time.monotonic

        lengths = [len(camera_trajectory)] + [len(traj) for traj in ray_trajectories]
        self._frame_count = min(lengths)
        self._frame_index = 0
        self._started_at: Optional[float] = None
        self._stop_requested = False
        self._state = PlaybackState.RUNNING
        self.last_frame: Optional[np.ndarray] = None

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def frame_count(self) -> int:
        """Number of rows every trajectory provides."""
        return self._frame_count

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def rays(self) -> List[TrackedObject]:
        return list(self._rays)

    def request_stop(self) -> None:
        """Ask playback to stop at the next tick boundary."""
        self._stop_requested = True

    def stop(self) -> None:
        """Stop playback now and finalize the capture sink once."""
        if self._state is PlaybackState.STOPPED:
            return
        self._state = PlaybackState.STOPPED
        logger.info("Playback stopped after %d frame(s)", self._frame_index)
        if self._capture is not None:
            try:
                self._capture.finalize()
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to finalize capture: %s", exc)

    def tick(self) -> bool:
        """
        Advance playback by one frame.

        Returns ``True`` if a frame was rendered and ``False`` once playback
        has stopped (including when this call is the one that stops it).
        """
        if self._state is PlaybackState.STOPPED:
            return False
        if self._started_at is None:
            self._started_at = self._clock()
        if self._stop_requested or self._deadline_reached():
            self.stop()
            return False

        row = self._row_for(self._frame_index)
        if row is None:
            logger.info(
                "Frame index %d is past the last trajectory row (%d rows)",
                self._frame_index,
                self._frame_count,
            )
            self.stop()
            return False

        self._camera.set_position(self._camera_trajectory[row])
        self._camera.look_at(self._look_at)
        for ray, trajectory in zip(self._rays, self._ray_trajectories):
            ray.move_to(trajectory[row])

        self._frame_index += 1
        frame = self._renderer.render(self._camera)
        self.last_frame = frame

        if self._capture is not None:
            try:
                self._capture.capture(frame)
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to capture frame %d: %s", self._frame_index - 1, exc)
        return True

    def _row_for(self, index: int) -> Optional[int]:
        if index < self._frame_count:
            return index
        if self._frame_count == 0 or self._overrun is OverrunPolicy.STOP:
            return None
        if self._overrun is OverrunPolicy.CLAMP:
            return self._frame_count - 1
        return index % self._frame_count

    def _deadline_reached(self) -> bool:
        if self._stop_after_frames is not None and self._frame_index >= self._stop_after_frames:
            return True
        if self._stop_after_s is None or self._started_at is None:
            return False
        return self._clock() - self._started_at >= self._stop_after_s
