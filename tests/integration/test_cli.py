"""Integration test: CLI argument parsing and commands."""

from __future__ import annotations

import numpy as np
from PIL import Image
from typer.testing import CliRunner

from dicomira.cli import EXIT_ERROR, EXIT_NO_VOLUME, app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_missing_command():
    result = runner.invoke(app, [])
    assert result.exit_code != 0


def test_nonexistent_input():
    result = runner.invoke(app, ["info", "/nonexistent/path"])
    assert result.exit_code != 0


def test_info(dicom_directory):
    result = runner.invoke(app, ["info", str(dicom_directory)])
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert "14x32x32" in result.output
    assert "Usable slices" in result.output


def test_info_no_interpolation(dicom_directory):
    result = runner.invoke(app, ["info", str(dicom_directory), "--no-interpolate", "--workers", "2"])
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert "10x32x32" in result.output


def test_info_warns_when_interpolation_skipped(dicom_mixed_directory):
    result = runner.invoke(app, ["info", str(dicom_mixed_directory)])
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert "3x32x32" in result.output
    assert "Interpolation skipped" in result.output


def test_info_no_warning_when_interpolated(dicom_directory):
    result = runner.invoke(app, ["info", str(dicom_directory)])
    assert "Interpolation skipped" not in result.output


def test_info_without_slices(non_dicom_directory):
    result = runner.invoke(app, ["info", str(non_dicom_directory)])
    assert result.exit_code == EXIT_NO_VOLUME


def test_info_mismatched_geometry(dicom_mismatched_directory):
    result = runner.invoke(app, ["info", str(dicom_mismatched_directory)])
    assert result.exit_code == EXIT_ERROR


def test_slice_info(dicom_directory):
    result = runner.invoke(app, ["slice-info", str(dicom_directory), "--index", "3"])
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert "Total Slices" in result.output
    assert "Image Position" in result.output
    assert "0, 0, 5" in result.output


def test_slice_info_index_out_of_range(dicom_directory):
    result = runner.invoke(app, ["slice-info", str(dicom_directory), "--index", "99"])
    assert result.exit_code == EXIT_ERROR


def test_locate(dicom_directory):
    result = runner.invoke(
        app,
        ["locate", str(dicom_directory), "-m", "axial", "-i", "4", "--x", "3", "--y", "7"],
    )
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert "X: 3.0" in result.output
    assert "Y: 7.0" in result.output
    assert "Z: 6.0" in result.output


def test_export_coronal(dicom_directory, tmp_path):
    output = tmp_path / "coronal.png"
    result = runner.invoke(
        app,
        ["export", str(dicom_directory), "-m", "coronal", "-o", str(output)],
    )
    assert result.exit_code == 0, f"CLI failed: {result.output}"
    assert output.exists()

    pixels = np.asarray(Image.open(output))
    assert pixels.shape == (14, 32)
    assert np.all(pixels[:, 16] == 255)
