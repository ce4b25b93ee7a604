"""Color utility functions."""

from __future__ import annotations

from typing import Tuple

AXIS_COLOR = 0xE1E1E1
BLACK = 0x000000


def hex_to_bgr(color: int) -> Tuple[int, int, int]:
    """Convert a ``0xRRGGBB`` integer to the BGR tuple OpenCV draws with."""
    if not 0 <= color <= 0xFFFFFF:
        raise ValueError(f"Color out of range: {color:#x}")
    red = (color >> 16) & 0xFF
    green = (color >> 8) & 0xFF
    blue = color & 0xFF
    return blue, green, red


def hex_to_rgb_float(color: int) -> Tuple[float, float, float]:
    """Convert a ``0xRRGGBB`` integer to a matplotlib RGB tuple in ``[0, 1]``."""
    blue, green, red = hex_to_bgr(color)
    return red / 255.0, green / 255.0, blue / 255.0
