"""Qt viewer for movie sessions."""

from .app import MovieWindow, run
from .playback_controller import PlaybackController

__all__ = ["MovieWindow", "PlaybackController", "run"]
