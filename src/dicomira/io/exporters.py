"""Write resliced planes to image files."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)


def plane_to_png(plane: np.ndarray) -> bytes:
    """Encode a uint8 plane as 8-bit grayscale PNG bytes.

    Values are written as stored; no rescaling is applied, since the
    volume is already windowed to 0-255.
    """
    from PIL import Image

    if plane.ndim != 2 or plane.dtype != np.uint8:
        raise ValueError(f"Expected a 2D uint8 plane, got {plane.dtype} {plane.shape}")

    # Sagittal/coronal planes are negative-stride views
    img = Image.fromarray(np.ascontiguousarray(plane))

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def export_plane_png(plane: np.ndarray, output: Path) -> None:
    """Write a plane to ``output`` as PNG."""
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(plane_to_png(plane))
    logger.info(f"Wrote {plane.shape[1]}x{plane.shape[0]} plane to {output}")
