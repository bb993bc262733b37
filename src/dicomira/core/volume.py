"""Volume data structures produced by a reconstruction."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from dicomira.core.types import SliceMetadata


@dataclass(frozen=True, eq=False)
class Volume:
    """Windowed 8-bit voxels in one flat buffer, plus per-slice geometry.

    Voxel ``(s, r, c)`` lives at ``s * rows * cols + r * cols + c``. The
    buffer is made read-only on construction; a new load builds a new
    Volume instead of patching this one.
    """

    buffer: np.ndarray  # uint8 [num_slices * rows * cols]
    shape: tuple[int, int, int]  # (num_slices, rows, cols)
    metadata: tuple[SliceMetadata, ...]

    def __post_init__(self) -> None:
        num_slices, rows, cols = self.shape
        if self.buffer.dtype != np.uint8 or self.buffer.ndim != 1:
            raise ValueError("Volume buffer must be a flat uint8 array")
        if self.buffer.size != num_slices * rows * cols:
            raise ValueError(
                f"Volume buffer has {self.buffer.size} voxels, "
                f"expected {num_slices}x{rows}x{cols}"
            )
        if len(self.metadata) != num_slices:
            raise ValueError(
                f"Volume has {num_slices} slices but {len(self.metadata)} metadata entries"
            )
        self.buffer.flags.writeable = False

    @property
    def num_slices(self) -> int:
        return self.shape[0]

    @property
    def rows(self) -> int:
        return self.shape[1]

    @property
    def cols(self) -> int:
        return self.shape[2]

    @property
    def voxels(self) -> np.ndarray:
        """Read-only [slice, row, col] view of the buffer."""
        return self.buffer.reshape(self.shape)

    def flat_index(self, s: int, r: int, c: int) -> int:
        return s * self.rows * self.cols + r * self.cols + c

    def voxel(self, s: int, r: int, c: int) -> int:
        return int(self.buffer[self.flat_index(s, r, c)])

    @property
    def spacing(self) -> tuple[float, float, float]:
        """Return (slice, row, col) spacing in mm taken from the first slice."""
        first = self.metadata[0]
        return (first.slice_thickness, first.pixel_spacing[0], first.pixel_spacing[1])


@dataclass
class ReconstructionResult:
    """Outcome of one load: the volume, or None when no slice was usable."""

    volume: Volume | None
    slice_count: int
    file_count: int = 0
    skipped_count: int = 0
    interpolated: bool = False
    elapsed: float = 0.0

    @property
    def produced(self) -> bool:
        return self.volume is not None
