from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Sequence

import numpy as np
import pytest

from bh_movie.settings import reset_settings_cache


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    for name in ("TRAJECTORIES", "OUTPUTS", "CAPTURE", "CAPTURE_SECONDS", "VARIANT"):
        monkeypatch.delenv(f"BH_MOVIE_{name}", raising=False)
    monkeypatch.setenv("BH_MOVIE_OUTPUTS", str(tmp_path / "outputs"))
    monkeypatch.chdir(tmp_path)
    reset_settings_cache()
    yield
    reset_settings_cache()


def write_csv(path: Path, rows: Sequence[Sequence[float]], header: bool = False) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["x,y,z"] if header else []
    lines.extend(",".join(str(value) for value in row) for row in rows)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def circle_rows(frames: int, radius: float, z: float = 0.0, phase: float = 0.0) -> List[List[float]]:
    angles = np.linspace(0.0, np.pi, frames) + phase
    return [[radius * float(np.cos(a)), radius * float(np.sin(a)), z] for a in angles]


@pytest.fixture
def make_trajectory_root(tmp_path) -> Callable[..., Path]:
    """Write a trajectory folder for a variant and return the root directory."""

    def _make(directory: str = "subsupercritical", rays: int = 3, frames: int = 10) -> Path:
        root = tmp_path / "trajectories"
        write_csv(root / directory / "cameraTrajectory.csv", circle_rows(frames, 60.0, z=10.0))
        for idx in range(rays):
            write_csv(
                root / directory / f"ray{idx + 1}.csv",
                circle_rows(frames, 20.0 + idx, z=float(idx), phase=0.3 * idx),
            )
        return root

    return _make


class FakeRenderer:
    def __init__(self, scene=None, resolution=(8, 6)):
        self.scene = scene
        self.resolution = resolution
        self.calls = 0

    def render(self, camera) -> np.ndarray:
        self.calls += 1
        width, height = self.resolution
        frame = np.zeros((height, width, 3), dtype=np.uint8)
        frame[0, 0, 0] = self.calls % 256
        return frame


class FakeCapture:
    def __init__(self):
        self.frames: List[np.ndarray] = []
        self.finalized = 0

    def capture(self, frame: np.ndarray) -> None:
        self.frames.append(frame)

    def finalize(self) -> None:
        self.finalized += 1


class FakeCamera:
    def __init__(self):
        self.position = None
        self.target = None

    def set_position(self, point) -> None:
        self.position = np.asarray(point, dtype=np.float64).copy()

    def look_at(self, target) -> None:
        self.target = np.asarray(target, dtype=np.float64).copy()
