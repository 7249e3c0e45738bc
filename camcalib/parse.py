"""Reading and writing calibrations in the format named by a file's extension."""

from __future__ import annotations

from camcalib.camera_info import CalibrationError, CameraInfo
from camcalib.ini import (
    parse_calibration_ini,
    read_calibration_ini_file,
    write_calibration_ini_file,
)
from camcalib.yml import read_calibration_yml_file, write_calibration_yml_file


def _format_of(file_name) -> str:
    lowered = str(file_name).lower()
    if lowered.endswith(".ini"):
        return "ini"
    if lowered.endswith((".yml", ".yaml")):
        return "yml"
    raise CalibrationError(
        f"unknown calibration file format for [{file_name}]; "
        "expected a .ini, .yml or .yaml extension"
    )


def write_calibration(file_name, camera_name: str, cam_info: CameraInfo) -> None:
    """Write a calibration; the extension (.ini, .yml, .yaml) selects the format."""
    if _format_of(file_name) == "ini":
        write_calibration_ini_file(file_name, camera_name, cam_info)
    else:
        write_calibration_yml_file(file_name, camera_name, cam_info)


def read_calibration(file_name) -> tuple[str, CameraInfo]:
    """Read a calibration in YAML or INI format as ``(camera_name, CameraInfo)``."""
    if _format_of(file_name) == "ini":
        return read_calibration_ini_file(file_name)
    return read_calibration_yml_file(file_name)


def parse_calibration(buffer: str, format: str) -> tuple[str, CameraInfo]:
    """Parse calibration text held in memory; only the "ini" format is supported."""
    if format != "ini":
        raise CalibrationError(f"unsupported calibration format {format!r}")
    return parse_calibration_ini(buffer)