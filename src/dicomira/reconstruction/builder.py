"""Volume builder: window each slice and assemble the flat voxel buffer."""

from __future__ import annotations

import logging

import numpy as np

from dicomira.core.types import RawSlice, SliceMetadata
from dicomira.core.volume import Volume
from dicomira.errors import GeometryError, ReconstructionError
from dicomira.reconstruction.windowing import window_pixels

logger = logging.getLogger(__name__)

ORIENTATION_TOLERANCE = 1e-6


def check_geometry(slices: list[RawSlice]) -> None:
    """Raise GeometryError unless all slices share rows, cols and orientation."""
    if not slices:
        return

    first = slices[0]
    reference = np.asarray(first.image_orientation, dtype=np.float64)
    for s in slices[1:]:
        if s.shape != first.shape:
            raise GeometryError(
                f"Slice {s.source or s.z} is {s.rows}x{s.cols}, "
                f"expected {first.rows}x{first.cols}"
            )
        orientation = np.asarray(s.image_orientation, dtype=np.float64)
        if not np.allclose(orientation, reference, atol=ORIENTATION_TOLERANCE):
            raise GeometryError(
                f"Slice {s.source or s.z} has orientation {s.image_orientation}, "
                f"expected {first.image_orientation}"
            )


def build_volume(slices: list[RawSlice]) -> Volume:
    """Window every slice with its own parameters and stack them in order.

    Each slice becomes one ``rows * cols`` run of the flat uint8 buffer and
    one SliceMetadata entry with the same index.
    """
    if not slices:
        raise ReconstructionError("Cannot build a volume from zero slices")

    check_geometry(slices)

    num_slices = len(slices)
    rows, cols = slices[0].shape
    frame = rows * cols

    buffer = np.empty(num_slices * frame, dtype=np.uint8)
    metadata: list[SliceMetadata] = []

    for number, s in enumerate(slices):
        if s.pixel_data.size != frame:
            raise GeometryError(
                f"Slice {number} has {s.pixel_data.size} pixels, expected {frame}"
            )
        buffer[number * frame:(number + 1) * frame] = window_pixels(
            s.pixel_data,
            s.window_center,
            s.window_width,
            s.rescale_slope,
            s.rescale_intercept,
        )
        metadata.append(
            SliceMetadata(
                slice_number=number,
                image_position=s.image_position,
                image_orientation=s.image_orientation,
                slice_thickness=s.slice_thickness,
                pixel_spacing=s.pixel_spacing,
            )
        )

    logger.debug(f"Built volume {num_slices}x{rows}x{cols}")
    return Volume(buffer=buffer, shape=(num_slices, rows, cols), metadata=tuple(metadata))
