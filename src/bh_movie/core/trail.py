"""Fixed-capacity position history used to draw ray trails."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np


DEFAULT_TRAIL_CAPACITY = 10000


class TrailBuffer:
    """
    Ring buffer of the most recent positions of one tracked object.

    Points are written at a cursor that wraps modulo ``capacity``. While the
    buffer is filling, the drawable segment is ``[0, writes)``. Once full, the
    whole ring ``[0, capacity)`` is drawn even though the newest point sits at
    ``cursor - 1``; the seam where new points overwrite old ones is visible
    and that is accepted.

    Parameters
    ----------
    capacity:
        Number of slots in the ring.
    """

    def __init__(self, capacity: int = DEFAULT_TRAIL_CAPACITY):
        capacity = int(capacity)
        if capacity <= 0:
            raise ValueError(f"Trail capacity must be positive, got {capacity}")
        self._points = np.zeros((capacity, 3), dtype=np.float64)
        self._cursor = 0
        self._writes = 0

    @property
    def capacity(self) -> int:
        return int(self._points.shape[0])

    @property
    def cursor(self) -> int:
        """Index of the slot the next ``append`` writes to."""
        return self._cursor

    @property
    def is_full(self) -> bool:
        return self._writes >= self.capacity

    def __len__(self) -> int:
        return self._writes

    def append(self, point: Sequence[float]) -> None:
        """Store ``point`` at the cursor and advance it, overwriting the oldest slot when full."""
        self._points[self._cursor] = point
        self._cursor = (self._cursor + 1) % self.capacity
        if self._writes < self.capacity:
            self._writes += 1

    def visible_range(self) -> Tuple[int, int]:
        """Return the ``(start, end)`` slot range a renderer should draw."""
        if self._writes < self.capacity:
            return 0, self._writes
        return 0, self.capacity

    def visible_points(self) -> np.ndarray:
        """Read-only view of the slots inside :meth:`visible_range`."""
        start, end = self.visible_range()
        view = self._points[start:end]
        view.flags.writeable = False
        return view

    def slot(self, index: int) -> np.ndarray:
        return self._points[index].copy()
