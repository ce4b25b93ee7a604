"""Main window for watching a movie session."""

from __future__ import annotations

import logging
import sys

import pyqtgraph as pg
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QApplication, QMainWindow

from ..session import MovieSession
from .playback_controller import PlaybackController

logger = logging.getLogger(__name__)


class MovieWindow(QMainWindow):
    """Full-window canvas showing the rendered frames of one session."""

    def __init__(self, session: MovieSession) -> None:
        super().__init__()
        self._session = session
        width, height = session.config.video.resolution
        self.setWindowTitle(f"Black hole rays - variant {session.variant.name}")
        self.resize(width, height)

        self._canvas = pg.GraphicsLayoutWidget()
        self._canvas.ci.setContentsMargins(0, 0, 0, 0)
        view = self._canvas.addViewBox(lockAspect=True, invertY=True, enableMouse=False)
        view.setDefaultPadding(0.0)
        self._image_item = pg.ImageItem()
        view.addItem(self._image_item)
        view.setRange(xRange=(0, width), yRange=(0, height), padding=0.0)
        self.setCentralWidget(self._canvas)

        self.controller = PlaybackController(session, self._image_item, parent=self)
        self.controller.finished.connect(self._on_finished)
        self.controller.frame_advanced.connect(self._on_frame_advanced)

    def start(self) -> None:
        self.controller.start()

    def _on_frame_advanced(self, frame_index: int) -> None:
        total = self._session.driver.frame_count
        self.statusBar().showMessage(f"Frame {frame_index} / {total}")

    def _on_finished(self) -> None:
        logger.info("Playback finished at frame %d", self._session.driver.frame_index)
        self.statusBar().showMessage(f"Stopped at frame {self._session.driver.frame_index}")

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        self.controller.stop()
        super().closeEvent(event)


def run(session: MovieSession) -> int:
    """Show ``session`` in a window and block until it is closed."""
    app = QApplication.instance() or QApplication(sys.argv)
    window = MovieWindow(session)
    window.show()
    window.start()
    return app.exec()
