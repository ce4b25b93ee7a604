"""Timer-driven playback of a movie session on a pyqtgraph canvas."""

from __future__ import annotations

import logging

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import QObject, QTimer, Signal

from ..session import MovieSession

logger = logging.getLogger(__name__)


class PlaybackController(QObject):
    """Tick a :class:`MovieSession` from a ``QTimer`` and show each frame."""

    finished = Signal()
    frame_advanced = Signal(int)  # frame index after the tick

    def __init__(self, session: MovieSession, image_item: pg.ImageItem, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._session = session
        self._image_item = image_item
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._advance_frame)
        self._frame_interval_ms = max(1, int(round(1000.0 / session.config.playback.fps)))

    def start(self) -> None:
        if not self._session.running:
            return
        self._timer.start(self._frame_interval_ms)

    def stop(self) -> None:
        """Stop scheduling ticks and finalize the session."""
        was_active = self._timer.isActive()
        self._timer.stop()
        # Timer callbacks run on this thread, so no tick is in flight here
        self._session.stop()
        if was_active:
            self.finished.emit()

    def _advance_frame(self) -> None:
        if not self._session.tick():
            self._timer.stop()
            self.finished.emit()
            return

        frame = self._session.driver.last_frame
        if frame is not None:
            self._image_item.setImage(bgr_to_image_item(frame), autoLevels=False, levels=(0, 255))
        self.frame_advanced.emit(self._session.driver.frame_index)


def bgr_to_image_item(frame: np.ndarray) -> np.ndarray:
    """Convert an OpenCV BGR frame to the column-major RGB layout ``ImageItem`` expects."""
    rgb = frame[..., ::-1]
    return np.ascontiguousarray(rgb.transpose(1, 0, 2))
