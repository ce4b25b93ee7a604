"""Capture sinks for rendered frames.

A capture sink receives every frame rendered during the capture window and
writes it to a WebM video or a numbered PNG stack. Capture failures never
interrupt rendering: they are logged and the sink keeps going (or disables
itself when it could not be opened at all).
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np

from .config import MovieConfig
from .settings import output_root as default_output_root

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_CODEC = "VP80"
VIDEO_SUFFIXES = {"webm": ".webm"}


def determine_movie_name(config: MovieConfig, fallback: str = "movie") -> str:
    """
    Determine a filesystem-friendly movie name.

    Preference order:
    1. `config.metadata["name"]`
    2. ``"variant_<scene_variant>"``
    3. Provided fallback string
    """
    value = config.metadata.get("name")
    if isinstance(value, str) and value.strip():
        return _sanitize_name(value)
    variant = config.playback.scene_variant
    if variant:
        return _sanitize_name(f"variant_{variant}")
    return _sanitize_name(fallback)


def _sanitize_name(name: str) -> str:
    safe = "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in name.strip().lower())
    return safe or "movie"


def prepare_output_directory(output_root: Path, timestamp: Optional[str] = None) -> Path:
    """
    Create the directory where the artefacts of one capture are stored.
    """
    ts = timestamp or datetime.now().strftime("%Y%m%d_%H%M%S_%f")

    output_dir = output_root / "captures" / ts
    counter = 1
    while output_dir.exists():
        output_dir = output_root / "captures" / f"{ts}_{counter}"
        counter += 1

    output_dir.mkdir(parents=True, exist_ok=False)
    return output_dir


class VideoCaptureSink:
    """
    Stream frames into a video container through ``cv2.VideoWriter``.

    The writer opens lazily on the first frame so the frame size always
    matches what the renderer produced.
    """

    def __init__(self, output_path: Path, fps: float, codec: str = DEFAULT_VIDEO_CODEC):
        self.output_path = Path(output_path)
        self.fps = float(fps)
        self.codec = codec
        self.frames_written = 0
        self.frames_failed = 0
        self._writer: Optional[cv2.VideoWriter] = None
        self._frame_size: Optional[Tuple[int, int]] = None
        self._disabled = False
        self._finalized = False

    @property
    def disabled(self) -> bool:
        return self._disabled

    def _open(self, frame_size: Tuple[int, int]) -> None:
        fourcc = cv2.VideoWriter_fourcc(*self.codec)
        writer = cv2.VideoWriter(str(self.output_path), fourcc, self.fps, frame_size, isColor=True)
        if not writer.isOpened():
            self._disabled = True
            logger.error(
                "Failed to open video writer at %s (codec %s); capture disabled.",
                self.output_path,
                self.codec,
            )
            return
        self._writer = writer
        self._frame_size = frame_size
        logger.info("Capturing to %s at %.2f fps", self.output_path, self.fps)

    def capture(self, frame: np.ndarray) -> None:
        if self._disabled or self._finalized:
            return
        height, width = frame.shape[:2]
        if self._writer is None:
            self._open((width, height))
            if self._writer is None:
                return
        if (width, height) != self._frame_size:
            self.frames_failed += 1
            logger.error("Dropping frame of size %s; capture expects %s", (width, height), self._frame_size)
            return
        try:
            self._writer.write(frame)
        except cv2.error as exc:
            self.frames_failed += 1
            logger.error("Failed to write frame %d: %s", self.frames_written + self.frames_failed, exc)
            return
        self.frames_written += 1

    def finalize(self) -> None:
        if self._finalized:
            return
        self._finalized = True
        if self._writer is not None:
            self._writer.release()
            self._writer = None
        logger.info(
            "Capture finalized: %d frame(s) written, %d failed -> %s",
            self.frames_written,
            self.frames_failed,
            self.output_path,
        )


class PngCaptureSink:
    """Save each captured frame as ``<prefix><index>.png`` in ``frames_dir``."""

    def __init__(self, frames_dir: Path, prefix: str = "frame_", digits: int = 5):
        self.frames_dir = Path(frames_dir)
        self.frames_written = 0
        self.frames_failed = 0
        self._template = f"{prefix}{{:0{digits}d}}.png"
        self._finalized = False
        self.frames_dir.mkdir(parents=True, exist_ok=True)

    def capture(self, frame: np.ndarray) -> None:
        if self._finalized:
            return
        index = self.frames_written + self.frames_failed
        frame_path = self.frames_dir / self._template.format(index)
        try:
            ok = cv2.imwrite(str(frame_path), frame)
        except cv2.error as exc:
            logger.error("Failed to write %s: %s", frame_path, exc)
            ok = False
        if ok:
            self.frames_written += 1
        else:
            self.frames_failed += 1
            logger.error("Frame %d was not saved to %s", index, frame_path)

    def finalize(self) -> None:
        if self._finalized:
            return
        self._finalized = True
        logger.info(
            "Capture finalized: %d PNG frame(s) written, %d failed -> %s",
            self.frames_written,
            self.frames_failed,
            self.frames_dir,
        )


def create_capture_sink(
    config: MovieConfig,
    output_root: Optional[Path] = None,
    timestamp: Optional[str] = None,
):
    """
    Build the capture sink described by ``config.video``.

    Returns the sink and the directory it writes into.
    """
    if output_root is None:
        output_root = default_output_root()
    else:
        output_root = Path(output_root)
    output_root.mkdir(parents=True, exist_ok=True)

    output_dir = prepare_output_directory(output_root, timestamp=timestamp)
    name = determine_movie_name(config)

    if config.video.format == "png":
        return PngCaptureSink(output_dir / "frames"), output_dir

    video_path = output_dir / f"{name}{VIDEO_SUFFIXES[config.video.format]}"
    return VideoCaptureSink(video_path, fps=config.playback.fps, codec=config.video.codec), output_dir
