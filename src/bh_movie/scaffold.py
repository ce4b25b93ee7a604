"""Session configuration scaffolding."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml

from .config import MovieConfig
from .variants import resolve_variant


def build_stub(
    name: str,
    variant: str = "A",
    trajectory_root: Optional[Path] = None,
    capture_enabled: bool = False,
    capture_duration_s: Optional[float] = None,
    fps: float = 60.0,
) -> dict:
    """Return a configuration mapping with every default spelled out."""
    spec = resolve_variant(variant)
    defaults = MovieConfig()
    stub = {
        "metadata": {"name": name},
        "playback": {
            "scene_variant": spec.name,
            "capture_enabled": bool(capture_enabled),
            "capture_duration_s": capture_duration_s,
            "fps": float(fps),
            "overrun": defaults.playback.overrun.value,
        },
        "video": {
            "resolution": list(defaults.video.resolution),
            "format": defaults.video.format,
            "codec": defaults.video.codec,
        },
        "scene": {
            "fov_deg": defaults.scene.fov_deg,
            "look_at": list(defaults.scene.look_at),
            "trail_capacity": defaults.scene.trail_capacity,
            "sky_texture": None,
        },
    }
    if trajectory_root is not None:
        stub["trajectory_root"] = str(trajectory_root)
    return stub


def write_stub(target_path: Path, name: str, **kwargs) -> Path:
    target_path = Path(target_path)
    if target_path.exists():
        raise FileExistsError(f"Refusing to overwrite existing file: {target_path}")
    target_path.parent.mkdir(parents=True, exist_ok=True)
    stub = build_stub(name, **kwargs)
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(stub, handle, sort_keys=False)
    return target_path
