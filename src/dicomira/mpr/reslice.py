"""Multi-planar reformatting: 2D planes cut from a built volume."""

from __future__ import annotations

import numpy as np

from dicomira.core.types import PlaneMode
from dicomira.core.volume import Volume


def axis_length(volume: Volume, mode: PlaneMode | str) -> int:
    """Number of planes available along ``mode``."""
    mode = PlaneMode(mode)
    if mode is PlaneMode.AXIAL:
        return volume.num_slices
    if mode is PlaneMode.SAGITTAL:
        return volume.cols
    return volume.rows


def reslice(volume: Volume, mode: PlaneMode | str, index: int) -> np.ndarray:
    """Return plane ``index`` along ``mode`` as a read-only uint8 view.

    axial:    ``voxels[index]``, rows x cols.
    sagittal: ``plane[num_slices-1-s][r] = voxels[s][r][index]``,
              num_slices x rows.
    coronal:  ``plane[num_slices-1-s][c] = voxels[s][index][c]``,
              num_slices x cols.

    The slice axis of sagittal and coronal planes is flipped so the last
    slice is drawn at the top. Callers clamp ``index`` first; an index
    outside the axis raises IndexError.
    """
    mode = PlaneMode(mode)
    length = axis_length(volume, mode)
    if not 0 <= index < length:
        raise IndexError(
            f"{mode.value} index {index} out of range [0, {length - 1}]"
        )

    voxels = volume.voxels
    if mode is PlaneMode.AXIAL:
        return voxels[index]
    if mode is PlaneMode.SAGITTAL:
        return voxels[::-1, :, index]
    return voxels[::-1, index, :]
