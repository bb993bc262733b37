"""Viewer navigation over an explicit view state.

A viewer shell keeps one ViewState (the selected plane index per mode)
and feeds it, with the volume, into these pure functions on scroll and
pointer events. Nothing here holds on to the volume between calls.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from dicomira.core.types import PlaneMode
from dicomira.core.volume import Volume
from dicomira.mpr.coordinates import map_voxel
from dicomira.mpr.reslice import axis_length

# (horizontal line, vertical line) drawn over each plane
CROSSHAIR_LINES: dict[PlaneMode, tuple[PlaneMode, PlaneMode]] = {
    PlaneMode.AXIAL: (PlaneMode.CORONAL, PlaneMode.SAGITTAL),
    PlaneMode.SAGITTAL: (PlaneMode.AXIAL, PlaneMode.CORONAL),
    PlaneMode.CORONAL: (PlaneMode.AXIAL, PlaneMode.SAGITTAL),
}


@dataclass(frozen=True)
class ViewState:
    """Selected plane index for each of the three views."""

    axial: int = 0
    sagittal: int = 0
    coronal: int = 0

    def index(self, mode: PlaneMode | str) -> int:
        return getattr(self, PlaneMode(mode).value)

    def with_index(self, mode: PlaneMode | str, index: int) -> ViewState:
        return dataclasses.replace(self, **{PlaneMode(mode).value: index})


def initial_view_state(volume: Volume) -> ViewState:
    """Start every view on the middle plane of its axis."""
    return ViewState(
        axial=axis_length(volume, PlaneMode.AXIAL) // 2,
        sagittal=axis_length(volume, PlaneMode.SAGITTAL) // 2,
        coronal=axis_length(volume, PlaneMode.CORONAL) // 2,
    )


def clamp_index(volume: Volume, mode: PlaneMode | str, index: int) -> int:
    return max(0, min(axis_length(volume, mode) - 1, index))


def step_slice(
    volume: Volume, state: ViewState, mode: PlaneMode | str, delta: int
) -> ViewState:
    """Scroll ``mode`` by ``delta`` planes, stopping at either end."""
    return state.with_index(mode, clamp_index(volume, mode, state.index(mode) + delta))


def marker_position(volume: Volume, mode: PlaneMode | str, index: int) -> int:
    """Crosshair position the other views draw for plane ``index``.

    Sagittal and coronal planes show the slice axis flipped, so the axial
    marker counts from the far end.
    """
    mode = PlaneMode(mode)
    if mode is PlaneMode.AXIAL:
        return axis_length(volume, mode) - 1 - index
    return index


def crosshair_lines(
    mode: PlaneMode | str, markers: dict[PlaneMode, int]
) -> tuple[int, int]:
    """Return the (horizontal, vertical) marker positions drawn over ``mode``."""
    horizontal, vertical = CROSSHAIR_LINES[PlaneMode(mode)]
    return (markers[horizontal], markers[vertical])


def cursor_to_voxel(
    volume: Volume, mode: PlaneMode | str, index: int, x: int, y: int
) -> tuple[int, int, int]:
    """Voxel index ``(r, c, s)`` under plane pixel ``(x, y)`` of plane ``index``.

    ``x`` and ``y`` are clamped to the plane. ``r`` follows the plane's
    horizontal axis and ``c`` its vertical one, matching the direction
    vectors ``map_coordinate`` applies them to.
    """
    mode = PlaneMode(mode)
    last_slice = volume.num_slices - 1

    if mode is PlaneMode.AXIAL:
        x = _clamp(x, volume.cols - 1)
        y = _clamp(y, volume.rows - 1)
        return (x, y, index)

    y = _clamp(y, last_slice)
    s = last_slice - y
    if mode is PlaneMode.SAGITTAL:
        return (index, _clamp(x, volume.rows - 1), s)
    return (_clamp(x, volume.cols - 1), index, s)


def cursor_coordinate(
    volume: Volume, mode: PlaneMode | str, index: int, x: int, y: int
) -> tuple[float, float, float]:
    """Patient coordinate under plane pixel ``(x, y)``."""
    return map_voxel(volume, cursor_to_voxel(volume, mode, index, x, y))


def slice_info_rows(volume: Volume, index: int) -> list[tuple[str, str]]:
    """Label/value rows describing slice ``index`` for an info panel."""
    rows = [("Total Slices", str(volume.num_slices))]
    if not 0 <= index < volume.num_slices:
        return rows

    meta = volume.metadata[index]
    for f in dataclasses.fields(meta):
        label = f.name.replace("_", " ").title()
        rows.append((label, _format_value(getattr(meta, f.name))))
    return rows


def _clamp(value: int, upper: int) -> int:
    return max(0, min(upper, value))


def _format_value(value) -> str:
    if isinstance(value, (tuple, list)):
        return ", ".join(_format_value(v) for v in value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else f"{value:.2f}"
    return str(value)
