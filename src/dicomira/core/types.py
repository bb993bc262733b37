"""Core data types for the dicomira reconstruction pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import numpy as np

DEFAULT_POSITION = (0.0, 0.0, 0.0)
DEFAULT_ORIENTATION = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0)


class PlaneMode(str, Enum):
    """Orthogonal plane a 2D view is cut along."""

    AXIAL = "axial"
    SAGITTAL = "sagittal"
    CORONAL = "coronal"


@dataclass(frozen=True, eq=False)
class RawSlice:
    """One decoded cross-section: geometry, intensity transform and pixels."""

    image_position: tuple[float, float, float]
    image_orientation: tuple[float, ...]  # row direction, then column direction
    pixel_spacing: tuple[float, float]  # (row mm, col mm)
    slice_thickness: float
    window_center: float
    window_width: float
    rescale_slope: float
    rescale_intercept: float
    rows: int
    cols: int
    pixel_data: np.ndarray  # [rows * cols], uint16 / int16, float64 once interpolated
    source: str = ""

    @property
    def z(self) -> float:
        return self.image_position[2]

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)


@dataclass(frozen=True)
class SliceMetadata:
    """Geometry kept for each slice of a built volume."""

    slice_number: int
    image_position: tuple[float, float, float]
    image_orientation: tuple[float, ...]
    slice_thickness: float
    pixel_spacing: tuple[float, float]


@dataclass
class ReconstructionConfig:
    """Options for turning a slice directory into a volume."""

    input_path: Path
    interpolate: bool = True
    target_thickness: float | None = None  # None: first slice's row spacing
    max_workers: int = 8
    recursive: bool = True
