"""DICOM slice reader: signature check, tag extraction, concurrent decode."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from pathlib import Path

import numpy as np
import pydicom
from pydicom.multival import MultiValue
from pydicom.tag import Tag

from dicomira.core.types import DEFAULT_ORIENTATION, DEFAULT_POSITION, RawSlice

logger = logging.getLogger(__name__)

DICM_OFFSET = 128
DICM_MARKER = b"DICM"

TAG_IMAGE_POSITION = Tag(0x0020, 0x0032)
TAG_IMAGE_ORIENTATION = Tag(0x0020, 0x0037)
TAG_PIXEL_SPACING = Tag(0x0028, 0x0030)
TAG_SLICE_THICKNESS = Tag(0x0018, 0x0050)
TAG_WINDOW_CENTER = Tag(0x0028, 0x1050)
TAG_WINDOW_WIDTH = Tag(0x0028, 0x1051)
TAG_RESCALE_INTERCEPT = Tag(0x0028, 0x1052)
TAG_RESCALE_SLOPE = Tag(0x0028, 0x1053)
TAG_PIXEL_REPRESENTATION = Tag(0x0028, 0x0103)
TAG_ROWS = Tag(0x0028, 0x0010)
TAG_COLUMNS = Tag(0x0028, 0x0011)
TAG_PIXEL_DATA = Tag(0x7FE0, 0x0010)

DEFAULT_ROWS = 512
DEFAULT_COLS = 512


def has_dicom_signature(raw: bytes) -> bool:
    """True when the 4-byte DICM marker follows the 128-byte preamble."""
    return raw[DICM_OFFSET:DICM_OFFSET + 4] == DICM_MARKER


def decode_slice(raw: bytes, source: str = "") -> RawSlice | None:
    """Decode one slice file's bytes.

    Returns None for anything that is not a reconstructable slice: a
    missing DICM marker, a malformed tag table, absent or truncated pixel
    data. Such files are skipped, never raised.
    """
    if not has_dicom_signature(raw):
        logger.debug(f"Skipping {source or '<bytes>'}: no DICM marker")
        return None

    try:
        return _decode_dataset(pydicom.dcmread(BytesIO(raw)), source)
    except Exception as e:
        logger.debug(f"Skipping {source or '<bytes>'}: {e}")
        return None


def read_slice_file(path: Path) -> RawSlice | None:
    """Read and decode a single file; unreadable files yield None."""
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        logger.debug(f"Skipping {path}: {e}")
        return None
    return decode_slice(raw, source=str(path))


def load_slices(
    paths: list[Path],
    max_workers: int = 8,
) -> list[RawSlice]:
    """Decode all files concurrently and return the usable slices.

    Every read is submitted before any result is collected; results are
    gathered in input order so the output does not depend on scheduling.
    """
    if not paths:
        return []

    workers = max(1, min(max_workers, len(paths)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(read_slice_file, path) for path in paths]
        decoded = [future.result() for future in futures]

    slices = [s for s in decoded if s is not None]
    logger.info(
        f"Decoded {len(slices)} of {len(paths)} files "
        f"({len(paths) - len(slices)} skipped)"
    )
    return slices


def scan_slice_files(input_path: Path, recursive: bool = True) -> list[Path]:
    """List candidate slice files under a directory, or the file itself."""
    input_path = Path(input_path)

    if input_path.is_file():
        return [input_path]

    if not input_path.is_dir():
        raise FileNotFoundError(f"Path not found: {input_path}")

    pattern = input_path.rglob("*") if recursive else input_path.glob("*")
    return sorted(path for path in pattern if path.is_file())


def _decode_dataset(ds: pydicom.Dataset, source: str) -> RawSlice:
    rows = int(_scalar(ds, TAG_ROWS, DEFAULT_ROWS))
    cols = int(_scalar(ds, TAG_COLUMNS, DEFAULT_COLS))
    signed = int(_scalar(ds, TAG_PIXEL_REPRESENTATION, 0)) != 0

    return RawSlice(
        image_position=tuple(_values(ds, TAG_IMAGE_POSITION, DEFAULT_POSITION, 3)),
        image_orientation=tuple(_values(ds, TAG_IMAGE_ORIENTATION, DEFAULT_ORIENTATION, 6)),
        pixel_spacing=tuple(_values(ds, TAG_PIXEL_SPACING, (0.0, 0.0), 2)),
        slice_thickness=_scalar(ds, TAG_SLICE_THICKNESS, 1.0),
        window_center=_scalar(ds, TAG_WINDOW_CENTER, 0.0),
        window_width=_scalar(ds, TAG_WINDOW_WIDTH, 0.0),
        rescale_slope=_scalar(ds, TAG_RESCALE_SLOPE, 1.0),
        rescale_intercept=_scalar(ds, TAG_RESCALE_INTERCEPT, 0.0),
        rows=rows,
        cols=cols,
        pixel_data=_read_pixels(ds, rows, cols, signed),
        source=source,
    )


def _read_pixels(ds: pydicom.Dataset, rows: int, cols: int, signed: bool) -> np.ndarray:
    """Interpret the raw pixel bytes as little-endian 16-bit samples."""
    elem = ds.get(TAG_PIXEL_DATA)
    if elem is None or not elem.value:
        raise ValueError("missing pixel data")

    data = bytes(elem.value)
    dtype = np.dtype("<i2") if signed else np.dtype("<u2")
    pixels = np.frombuffer(data, dtype=dtype, count=len(data) // 2)

    expected = rows * cols
    if pixels.size < expected:
        raise ValueError(
            f"pixel data holds {pixels.size} samples, expected {rows}x{cols}"
        )
    # frombuffer over bytes is already read-only
    return pixels[:expected]


def _raw_values(ds: pydicom.Dataset, tag: Tag) -> list | None:
    elem = ds.get(tag)
    if elem is None or elem.VM == 0:
        return None

    value = elem.value
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")
    if isinstance(value, str):
        return [v for v in value.strip("\x00 ").split("\\")]
    if isinstance(value, (list, tuple, MultiValue)):
        return list(value)
    return [value]


def _values(
    ds: pydicom.Dataset, tag: Tag, default: tuple[float, ...], count: int
) -> list[float]:
    """Multi-valued numeric field, or the default when the tag is absent."""
    values = _raw_values(ds, tag)
    if values is None:
        return list(default)

    floats = [float(v) for v in values]
    if len(floats) < count:
        raise ValueError(f"tag {tag} has {len(floats)} values, expected {count}")
    return floats[:count]


def _scalar(ds: pydicom.Dataset, tag: Tag, default: float) -> float:
    """First value of a numeric field; absent, zero or NaN falls back."""
    values = _raw_values(ds, tag)
    if not values:
        return float(default)

    try:
        value = float(values[0])
    except (TypeError, ValueError):
        return float(default)
    if value == 0 or math.isnan(value):
        return float(default)
    return value
