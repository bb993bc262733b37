"""CLI entry point for dicomira."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from dicomira import __version__
from dicomira._console import console, print_error, print_warning
from dicomira.core.types import PlaneMode, ReconstructionConfig
from dicomira.core.volume import Volume

app = typer.Typer(
    name="dicomira",
    help="Reconstruct DICOM slice folders into volumes and reslice them.",
    add_completion=False,
)

logger = logging.getLogger("dicomira")

EXIT_ERROR = 1
EXIT_NO_VOLUME = 2
EXIT_NOT_FOUND = 4

INPUT_ARGUMENT = typer.Argument(
    ...,
    help="Directory of DICOM slices (or a single slice file).",
    exists=True,
)
INTERPOLATE_OPTION = typer.Option(
    True,
    "--interpolate/--no-interpolate",
    help="Resample slice spacing with cubic interpolation.",
)
THICKNESS_OPTION = typer.Option(
    None,
    "--thickness",
    help="Target slice spacing in mm (default: first slice's row pixel spacing).",
)
WORKERS_OPTION = typer.Option(
    8,
    "--workers",
    min=1,
    help="Concurrent file decoders.",
)
MODE_OPTION = typer.Option(
    PlaneMode.AXIAL,
    "-m",
    "--mode",
    help="Plane: axial, sagittal or coronal.",
)
INDEX_OPTION = typer.Option(
    None,
    "-i",
    "--index",
    help="Plane index along the chosen axis (default: middle plane).",
)


def version_callback(value: bool):
    if value:
        console.print(f"dicomira {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "-v",
        "--verbose",
        help="Show detailed processing information.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """Reconstruct DICOM slice folders into volumes and reslice them."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")


@app.command()
def info(
    input_path: Path = INPUT_ARGUMENT,
    interpolate: bool = INTERPOLATE_OPTION,
    thickness: float = THICKNESS_OPTION,
    workers: int = WORKERS_OPTION,
):
    """Reconstruct a volume and print a summary."""
    config = ReconstructionConfig(
        input_path=input_path,
        interpolate=interpolate,
        target_thickness=thickness,
        max_workers=workers,
    )
    result = _run_reconstruction(config)
    volume = result.volume

    table = Table(title=f"Volume from {input_path}")
    table.add_column("Property", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Files scanned", str(result.file_count))
    table.add_row("Usable slices", str(result.slice_count))
    table.add_row("Skipped files", str(result.skipped_count))
    table.add_row("Interpolated", "[green]Yes[/green]" if result.interpolated else "[dim]No[/dim]")
    table.add_row("Shape (slices x rows x cols)", "x".join(str(n) for n in volume.shape))
    table.add_row("Spacing (mm)", ", ".join(f"{v:g}" for v in volume.spacing))
    table.add_row("Time", f"{result.elapsed:.1f}s")
    console.print(table)

    if interpolate and not result.interpolated:
        print_warning("Interpolation skipped, original slice spacing kept.")


@app.command("slice-info")
def slice_info(
    input_path: Path = INPUT_ARGUMENT,
    mode: PlaneMode = MODE_OPTION,
    index: int = INDEX_OPTION,
    interpolate: bool = INTERPOLATE_OPTION,
    thickness: float = THICKNESS_OPTION,
    workers: int = WORKERS_OPTION,
):
    """Print the metadata of the slice shown in a view."""
    from dicomira.mpr.navigation import slice_info_rows

    volume = _load_volume(input_path, interpolate, thickness, workers)
    index = _resolve_index(volume, mode, index)

    table = Table(title=f"Slice Info - {mode.value.capitalize()} {index}")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for label, value in slice_info_rows(volume, index):
        table.add_row(label, value)
    console.print(table)


@app.command()
def locate(
    input_path: Path = INPUT_ARGUMENT,
    x: int = typer.Option(..., "--x", help="Horizontal pixel position in the plane."),
    y: int = typer.Option(..., "--y", help="Vertical pixel position in the plane."),
    mode: PlaneMode = MODE_OPTION,
    index: int = INDEX_OPTION,
    interpolate: bool = INTERPOLATE_OPTION,
    thickness: float = THICKNESS_OPTION,
    workers: int = WORKERS_OPTION,
):
    """Map a cursor position in a plane to a patient-space coordinate."""
    from dicomira.mpr.coordinates import map_voxel
    from dicomira.mpr.navigation import cursor_to_voxel

    volume = _load_volume(input_path, interpolate, thickness, workers)
    index = _resolve_index(volume, mode, index)

    voxel_index = cursor_to_voxel(volume, mode, index, x, y)
    px, py, pz = map_voxel(volume, voxel_index)

    r, c, s = voxel_index
    console.print(f"Voxel:  r={r} c={c} s={s}")
    console.print(f"  X: {px:.1f}")
    console.print(f"  Y: {py:.1f}")
    console.print(f"  Z: {pz:.1f}")


@app.command()
def export(
    input_path: Path = INPUT_ARGUMENT,
    output: Path = typer.Option(
        "plane.png",
        "-o",
        "--output",
        help="Output PNG path.",
    ),
    mode: PlaneMode = MODE_OPTION,
    index: int = INDEX_OPTION,
    interpolate: bool = INTERPOLATE_OPTION,
    thickness: float = THICKNESS_OPTION,
    workers: int = WORKERS_OPTION,
):
    """Write one resliced plane as a grayscale PNG."""
    from dicomira.io.exporters import export_plane_png
    from dicomira.mpr.reslice import reslice

    volume = _load_volume(input_path, interpolate, thickness, workers)
    index = _resolve_index(volume, mode, index)

    plane = reslice(volume, mode, index)
    export_plane_png(plane, output)

    console.print(f"\n[green]Export complete![/green]")
    console.print(f"  Plane:  {mode.value} {index}")
    console.print(f"  Size:   {plane.shape[1]}x{plane.shape[0]}")
    console.print(f"  Output: {output}")


def _load_volume(
    input_path: Path, interpolate: bool, thickness: float | None, workers: int
) -> Volume:
    config = ReconstructionConfig(
        input_path=input_path,
        interpolate=interpolate,
        target_thickness=thickness,
        max_workers=workers,
    )
    return _run_reconstruction(config).volume


def _run_reconstruction(config: ReconstructionConfig):
    """Run the pipeline under a spinner; exits unless a volume was built."""
    from dicomira._pipeline import reconstruct

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            result = reconstruct(config, progress=progress)
    except FileNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_NOT_FOUND)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR)

    if not result.produced:
        print_error(
            f"No volume produced: none of {result.file_count} files "
            f"in {config.input_path} is a usable DICOM slice"
        )
        raise typer.Exit(code=EXIT_NO_VOLUME)
    return result


def _resolve_index(volume: Volume, mode: PlaneMode, index: int | None) -> int:
    """Default to the middle plane; reject indices outside the axis."""
    from dicomira.mpr.navigation import initial_view_state
    from dicomira.mpr.reslice import axis_length

    if index is None:
        return initial_view_state(volume).index(mode)

    length = axis_length(volume, mode)
    if not 0 <= index < length:
        print_error(f"{mode.value} index {index} out of range [0, {length - 1}]")
        raise typer.Exit(code=EXIT_ERROR)
    return index
