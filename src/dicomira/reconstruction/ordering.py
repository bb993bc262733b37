"""Order decoded slices along the scan axis."""

from __future__ import annotations

from dicomira.core.types import RawSlice


def sort_slices(slices: list[RawSlice]) -> list[RawSlice]:
    """Sort slices ascending by the z component of their image position.

    The sort is stable, so slices sharing a z keep their input order.
    """
    return sorted(slices, key=lambda s: s.image_position[2])
