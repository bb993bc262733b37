"""Intensity windowing from stored pixel values to 8-bit display values."""

from __future__ import annotations

import numpy as np


def window_bounds(center: float, width: float) -> tuple[float, float]:
    """Return (min, max) physical intensity of a window."""
    return (center - width / 2, center + width / 2)


def window_pixels(
    pixels: np.ndarray,
    center: float,
    width: float,
    slope: float = 1.0,
    intercept: float = 0.0,
) -> np.ndarray:
    """Map stored pixel values to uint8 through rescale and a linear window.

    Physical values at or below the window minimum become 0, values above
    the maximum become 255, and values in between are scaled linearly and
    rounded half up. A zero-width window thresholds at ``center``.
    """
    physical = np.asarray(pixels, dtype=np.float64) * slope + intercept
    min_x, max_x = window_bounds(center, width)

    out = np.zeros(physical.shape, dtype=np.uint8)
    # the lower bound wins when a negative width inverts the window
    out[(physical > min_x) & (physical > max_x)] = 255

    inside = (physical > min_x) & (physical <= max_x)
    if max_x > min_x and inside.any():
        scale = (max_x - min_x) / 255
        scaled = np.floor((physical[inside] - min_x) / scale + 0.5)
        out[inside] = np.clip(scaled, 0, 255).astype(np.uint8)

    return out
