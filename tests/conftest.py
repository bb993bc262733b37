"""Shared test fixtures: synthetic DICOM files, slices and volumes."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pydicom
import pytest
from pydicom.dataset import FileDataset
from pydicom.uid import ExplicitVRLittleEndian, generate_uid

from dicomira.core.types import RawSlice
from dicomira.reconstruction.builder import build_volume


def make_raw_slice(
    z: float,
    pixels: np.ndarray | None = None,
    rows: int = 4,
    cols: int = 4,
    fill: float = 0.0,
    window_center: float = 127.5,
    window_width: float = 255.0,
    pixel_spacing: tuple[float, float] = (1.0, 1.0),
    orientation: tuple[float, ...] = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0),
) -> RawSlice:
    """Build a RawSlice in memory; default window maps value v to byte v."""
    if pixels is None:
        pixels = np.full(rows * cols, fill, dtype=np.float64)
    pixels = np.asarray(pixels).ravel()
    return RawSlice(
        image_position=(0.0, 0.0, float(z)),
        image_orientation=orientation,
        pixel_spacing=pixel_spacing,
        slice_thickness=1.0,
        window_center=window_center,
        window_width=window_width,
        rescale_slope=1.0,
        rescale_intercept=0.0,
        rows=rows,
        cols=cols,
        pixel_data=pixels,
    )


@pytest.fixture
def slice_factory():
    return make_raw_slice


@pytest.fixture
def labeled_volume():
    """Volume of 3 slices x 4 rows x 5 cols whose voxel (s, r, c) holds s*20 + r*5 + c."""
    num_slices, rows, cols = 3, 4, 5
    slices = []
    for s in range(num_slices):
        labels = np.array(
            [[s * 20 + r * 5 + c for c in range(cols)] for r in range(rows)],
            dtype=np.float64,
        )
        slices.append(make_raw_slice(z=float(s), pixels=labels, rows=rows, cols=cols))
    return build_volume(slices)


@pytest.fixture
def dicom_directory(tmp_path) -> Path:
    """Create a temporary directory with synthetic DICOM files (3D volume)."""
    series_uid = generate_uid()

    # written out of order on purpose
    for i in (3, 0, 7, 1, 9, 5, 2, 8, 4, 6):
        write_synthetic_dicom(
            tmp_path / f"slice_{i:03d}.dcm",
            series_uid=series_uid,
            instance_number=i + 1,
            slice_location=float(i) * 2.0,
        )

    return tmp_path


@pytest.fixture
def dicom_mixed_directory(tmp_path) -> Path:
    """3 valid slices plus 2 files that are not DICOM."""
    series_uid = generate_uid()
    for i in range(3):
        write_synthetic_dicom(
            tmp_path / f"slice_{i:03d}.dcm",
            series_uid=series_uid,
            instance_number=i + 1,
            slice_location=float(i),
        )

    (tmp_path / "notes.txt").write_text("not a slice\n")
    (tmp_path / "noise.bin").write_bytes(b"\x01" * 256)
    return tmp_path


@pytest.fixture
def dicom_mismatched_directory(tmp_path) -> Path:
    """Slices that disagree on their matrix size."""
    series_uid = generate_uid()
    for i in range(4):
        size = 32 if i < 3 else 16
        write_synthetic_dicom(
            tmp_path / f"slice_{i:03d}.dcm",
            series_uid=series_uid,
            instance_number=i + 1,
            slice_location=float(i),
            rows=size,
            cols=size,
        )
    return tmp_path


@pytest.fixture
def non_dicom_directory(tmp_path) -> Path:
    (tmp_path / "readme.txt").write_text("nothing to see here\n")
    (tmp_path / "image.raw").write_bytes(bytes(range(200)))
    return tmp_path


def write_synthetic_dicom(
    path: Path,
    series_uid: str,
    instance_number: int,
    slice_location: float,
    rows: int = 32,
    cols: int = 32,
    pixel_data: np.ndarray | None = None,
    signed: bool = False,
    window: tuple[float, float] | None = (250.0, 500.0),
    rescale: tuple[float, float] | None = (1.0, 0.0),
    pixel_spacing: tuple[float, float] | None = (1.0, 1.0),
    orientation: list[float] | None = None,
) -> None:
    """Write a single synthetic DICOM file.

    ``window`` is (center, width), ``rescale`` is (slope, intercept);
    passing None leaves the tags out.
    """
    file_meta = pydicom.Dataset()
    file_meta.MediaStorageSOPClassUID = "1.2.840.10008.5.1.4.1.1.2"
    file_meta.MediaStorageSOPInstanceUID = generate_uid()
    file_meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(str(path), {}, file_meta=file_meta, preamble=b"\x00" * 128)

    ds.SOPClassUID = "1.2.840.10008.5.1.4.1.1.2"
    ds.SOPInstanceUID = generate_uid()
    ds.SeriesInstanceUID = series_uid
    ds.StudyInstanceUID = generate_uid()
    ds.Modality = "CT"
    ds.InstanceNumber = instance_number
    ds.ImagePositionPatient = [0.0, 0.0, slice_location]
    ds.ImageOrientationPatient = orientation or [1, 0, 0, 0, 1, 0]
    if pixel_spacing is not None:
        ds.PixelSpacing = list(pixel_spacing)
    ds.SliceThickness = 1.0
    ds.SliceLocation = slice_location
    ds.Rows = rows
    ds.Columns = cols
    ds.BitsAllocated = 16
    ds.BitsStored = 16
    ds.HighBit = 15
    ds.PixelRepresentation = 1 if signed else 0
    ds.SamplesPerPixel = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    if rescale is not None:
        ds.RescaleSlope = rescale[0]
        ds.RescaleIntercept = rescale[1]
    if window is not None:
        ds.WindowCenter = window[0]
        ds.WindowWidth = window[1]

    if pixel_data is None:
        # Disc of value 500 in the middle of the slice
        pixel_data = np.zeros((rows, cols), dtype=np.uint16)
        center = (rows // 2, cols // 2)
        radius = min(rows, cols) // 4
        yy, xx = np.mgrid[0:rows, 0:cols]
        dist = (yy - center[0])**2 + (xx - center[1])**2
        pixel_data[dist < radius**2] = 500

    ds.PixelData = np.asarray(pixel_data, dtype="<i2" if signed else "<u2").tobytes()
    ds.save_as(str(path))


@pytest.fixture
def write_dicom():
    return write_synthetic_dicom
