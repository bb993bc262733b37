"""Resample slice spacing with four-point cubic interpolation."""

from __future__ import annotations

import dataclasses
import logging
import math

import numpy as np

from dicomira.core.types import RawSlice

logger = logging.getLogger(__name__)

STENCIL_SIZE = 4


def cubic_interpolate(p0, p1, p2, p3, t):
    """Catmull-Rom style cubic through p1 (t=0) and p2 (t=1).

    Works on scalars and on numpy arrays of matching shape.
    """
    return p1 + 0.5 * t * (
        p2 - p0 + t * (2 * p0 - 5 * p1 + 4 * p2 - p3 + t * (3 * (p1 - p2) + p3 - p0))
    )


def default_target_thickness(slices: list[RawSlice]) -> float:
    """In-plane row spacing of the first slice."""
    return float(slices[0].pixel_spacing[0])


def interpolate_slices(
    slices: list[RawSlice],
    target_thickness: float,
) -> list[RawSlice]:
    """Fill each interior gap with slices spaced ``target_thickness`` apart.

    For every ``i`` in ``[1, n-3]`` the stencil ``i-1, i, i+1, i+2`` yields
    ``ceil(|z(i+1) - z(i)| / target_thickness)`` slices between ``i`` and
    ``i+1``, the first of them equal to slice ``i``. The first slice and
    the last two have no full stencil around them and are not part of the
    output.

    With fewer than four slices, or a non-positive target thickness, the
    input is returned unchanged.
    """
    n = len(slices)
    if n < STENCIL_SIZE:
        logger.warning(
            f"Only {n} slice(s); at least {STENCIL_SIZE} are needed for "
            "interpolation, keeping slices unchanged"
        )
        return list(slices)

    if not target_thickness > 0:
        logger.warning(
            f"Target thickness {target_thickness} is not positive, "
            "keeping slices unchanged"
        )
        return list(slices)

    result: list[RawSlice] = []
    for i in range(1, n - 2):
        prev, current, nxt, next_next = slices[i - 1 : i + 3]
        p0, p1, p2, p3 = (
            s.pixel_data.astype(np.float64)
            for s in (prev, current, nxt, next_next)
        )

        dz = nxt.z - current.z
        step = abs(dz) / target_thickness
        for j in range(math.ceil(step)):
            factor = j / step
            result.append(
                _make_slice(
                    current,
                    cubic_interpolate(p0, p1, p2, p3, factor),
                    current.z + factor * dz,
                    target_thickness,
                )
            )

    logger.debug(
        f"Interpolated {n} slices into {len(result)} at {target_thickness:g} mm"
    )
    return result


def _make_slice(
    template: RawSlice, pixels: np.ndarray, z: float, thickness: float
) -> RawSlice:
    pixels.flags.writeable = False
    x, y, _ = template.image_position
    return dataclasses.replace(
        template,
        image_position=(x, y, z),
        slice_thickness=thickness,
        pixel_data=pixels,
        source="",
    )
