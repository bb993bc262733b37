"""Reconstruction pipeline: scan, decode, order, interpolate, build."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from rich.progress import Progress

from dicomira.core.types import ReconstructionConfig
from dicomira.core.volume import ReconstructionResult
from dicomira.io.dicom_reader import load_slices, scan_slice_files
from dicomira.reconstruction.builder import build_volume, check_geometry
from dicomira.reconstruction.interpolation import (
    STENCIL_SIZE,
    default_target_thickness,
    interpolate_slices,
)
from dicomira.reconstruction.ordering import sort_slices

logger = logging.getLogger("dicomira")


def reconstruct(
    config: ReconstructionConfig,
    progress: Progress | None = None,
) -> ReconstructionResult:
    """Run one load and return its result.

    Zero usable slices is not an error: the result carries ``volume=None``.
    Inconsistent geometry raises GeometryError and nothing is returned.
    """
    start_time = time.time()

    task = _start(progress, "Scanning files...")
    paths = scan_slice_files(config.input_path, recursive=config.recursive)
    _finish(progress, task)

    task = _start(progress, f"Decoding {len(paths)} files...")
    slices = load_slices(paths, max_workers=config.max_workers)
    _finish(progress, task)

    skipped = len(paths) - len(slices)
    if not slices:
        logger.info(f"No usable slices in {config.input_path}")
        return ReconstructionResult(
            volume=None,
            slice_count=0,
            file_count=len(paths),
            skipped_count=skipped,
            elapsed=time.time() - start_time,
        )

    slices = sort_slices(slices)
    check_geometry(slices)

    interpolated = False
    if config.interpolate:
        target = config.target_thickness
        if target is None:
            target = default_target_thickness(slices)

        task = _start(progress, f"Interpolating to {target:g} mm...")
        resampled = interpolate_slices(slices, target)
        _finish(progress, task)

        if len(slices) >= STENCIL_SIZE and target > 0:
            if resampled:
                slices = resampled
                interpolated = True
            else:
                # only zero-length gaps between interior slices
                logger.warning("Interpolation produced no slices, keeping originals")

    task = _start(progress, "Building volume...")
    volume = build_volume(slices)
    _finish(progress, task)

    elapsed = time.time() - start_time
    logger.info(
        f"Reconstructed {volume.num_slices}x{volume.rows}x{volume.cols} volume "
        f"from {len(paths) - skipped} slices in {elapsed:.1f}s"
    )
    return ReconstructionResult(
        volume=volume,
        slice_count=len(paths) - skipped,
        file_count=len(paths),
        skipped_count=skipped,
        interpolated=interpolated,
        elapsed=elapsed,
    )


def reconstruct_directory(input_path: Path, **options) -> ReconstructionResult:
    """Shortcut for ``reconstruct(ReconstructionConfig(input_path, **options))``."""
    return reconstruct(ReconstructionConfig(input_path=Path(input_path), **options))


def _start(progress: Progress | None, description: str):
    if progress is None:
        return None
    return progress.add_task(description, total=None)


def _finish(progress: Progress | None, task) -> None:
    if progress is not None and task is not None:
        progress.remove_task(task)
