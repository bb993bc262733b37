"""Voxel index to patient-space coordinate mapping."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from dicomira.core.volume import Volume


def slice_normal(orientation: Sequence[float]) -> np.ndarray:
    """Cross product of the row and column direction cosines."""
    row_dir = np.asarray(orientation[:3], dtype=np.float64)
    col_dir = np.asarray(orientation[3:6], dtype=np.float64)
    return np.cross(row_dir, col_dir)


def map_coordinate(
    position: Sequence[float],
    orientation: Sequence[float],
    pixel_spacing: Sequence[float],
    slice_spacing: float,
    voxel_index: tuple[int, int, int],
) -> tuple[float, float, float]:
    """Patient coordinate ``P0 + r*Sr*Dr + c*Sc*Dc + s*Ss*Ds``.

    Pass ``slice_spacing=0`` when ``position`` already carries the slice
    offset, as every slice of a built volume does.
    """
    r, c, s = voxel_index
    row_spacing, col_spacing = pixel_spacing[0], pixel_spacing[1]

    origin = np.asarray(position, dtype=np.float64)
    row_dir = np.asarray(orientation[:3], dtype=np.float64)
    col_dir = np.asarray(orientation[3:6], dtype=np.float64)

    point = (
        origin
        + r * row_spacing * row_dir
        + c * col_spacing * col_dir
        + s * slice_spacing * slice_normal(orientation)
    )
    return (float(point[0]), float(point[1]), float(point[2]))


def map_voxel(volume: Volume, voxel_index: tuple[int, int, int]) -> tuple[float, float, float]:
    """Patient coordinate of a voxel, using the geometry of its own slice."""
    s = voxel_index[2]
    if not 0 <= s < volume.num_slices:
        raise IndexError(f"slice {s} out of range [0, {volume.num_slices - 1}]")

    meta = volume.metadata[s]
    return map_coordinate(
        meta.image_position,
        meta.image_orientation,
        meta.pixel_spacing,
        0.0,
        voxel_index,
    )
