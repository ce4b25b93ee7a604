"""
Scene variants.

A variant names the trajectory set to play, the palette used for its rays
and whether the radial reference axis is part of the scene.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

from .config import ConfigurationError


CAMERA_FILE = "cameraTrajectory.csv"


@dataclass(frozen=True)
class VariantSpec:
    """Resolved description of one movie."""

    name: str
    directory: str
    palette: Tuple[int, ...]
    radial_axis: bool = False
    description: str = ""

    @property
    def ray_count(self) -> int:
        return len(self.palette)

    @property
    def ray_files(self) -> List[str]:
        return [f"ray{idx + 1}.csv" for idx in range(self.ray_count)]

    def sources(self, root: Path) -> List[Path]:
        """Trajectory files for this variant; the camera trajectory comes first."""
        base = Path(root) / self.directory
        return [base / CAMERA_FILE] + [base / name for name in self.ray_files]


_VARIANTS: Dict[str, VariantSpec] = {
    "A": VariantSpec(
        name="A",
        directory="subsupercritical",
        palette=(0xFF0000, 0x00FF00, 0x48B8D0),
        description="Sub- and supercritical rays",
    ),
    "B": VariantSpec(
        name="B",
        directory="pairwise",
        palette=(0xFF0000, 0xFF0000, 0x00FF00, 0x00FF00, 0x48B8D0, 0x48B8D0),
        radial_axis=True,
        description="Pairwise rays with a radial reference axis",
    ),
}

_ALIASES: Dict[str, str] = {
    "1": "A",
    "2": "B",
    "subsupercritical": "A",
    "pairwise": "B",
}


def available_variants() -> List[str]:
    return sorted(_VARIANTS)


def resolve_variant(name: str) -> VariantSpec:
    """
    Map a variant name (or alias) to its :class:`VariantSpec`.

    Raises
    ------
    ConfigurationError
        If the name is not a known variant.
    """
    key = str(name).strip()
    key = _ALIASES.get(key.lower(), key.upper())
    try:
        return _VARIANTS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown scene variant {name!r}; expected one of {', '.join(available_variants())}"
        ) from None
