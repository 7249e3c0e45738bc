"""Reading and writing camera calibrations in YAML format."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, TextIO

import yaml

from camcalib.camera_info import PLUMB_BOB, CalibrationError, CameraInfo

log = logging.getLogger(__name__)

CAM_YML_NAME = "camera_name"
WIDTH_YML_NAME = "image_width"
HEIGHT_YML_NAME = "image_height"
K_YML_NAME = "camera_matrix"
D_YML_NAME = "distortion_coefficients"
R_YML_NAME = "rectification_matrix"
P_YML_NAME = "projection_matrix"
DMODEL_YML_NAME = "distortion_model"


class _FlowList(list):
    """A list that is emitted in YAML flow style."""


class _Dumper(yaml.SafeDumper):
    pass


def _represent_flow_list(dumper: yaml.SafeDumper, data: _FlowList) -> yaml.Node:
    return dumper.represent_sequence("tag:yaml.org,2002:seq", list(data), flow_style=True)


_Dumper.add_representer(_FlowList, _represent_flow_list)


def _matrix(rows: int, cols: int, data: list[float]) -> dict[str, Any]:
    return {"rows": rows, "cols": cols, "data": _FlowList(float(v) for v in data)}


def format_calibration_yml(camera_name: str, cam_info: CameraInfo) -> str:
    """Return the YAML text for a calibration."""
    document = {
        WIDTH_YML_NAME: int(cam_info.width),
        HEIGHT_YML_NAME: int(cam_info.height),
        CAM_YML_NAME: camera_name,
        K_YML_NAME: _matrix(3, 3, cam_info.k),
        DMODEL_YML_NAME: cam_info.distortion_model,
        D_YML_NAME: _matrix(1, len(cam_info.d), cam_info.d),
        R_YML_NAME: _matrix(3, 3, cam_info.r),
        P_YML_NAME: _matrix(3, 4, cam_info.p),
    }
    return yaml.dump(document, Dumper=_Dumper, sort_keys=False, default_flow_style=False)


def write_calibration_yml(stream: TextIO, camera_name: str, cam_info: CameraInfo) -> None:
    """Write a calibration in YAML format to a text stream."""
    stream.write(format_calibration_yml(camera_name, cam_info))


def write_calibration_yml_file(file_name, camera_name: str, cam_info: CameraInfo) -> None:
    """Write a calibration in YAML format to a file, creating its directory."""
    path = Path(file_name)
    text = format_calibration_yml(camera_name, cam_info)
    directory = path.parent
    if str(directory) not in ("", "."):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            log.error("Unable to create directory for camera calibration file [%s]", directory)
    try:
        with path.open("w", encoding="utf-8") as out:
            out.write(text)
    except OSError as exc:
        raise CalibrationError(
            f"Unable to open camera calibration file [{file_name}] for writing"
        ) from exc


def _read_matrix(node: Any, rows: int, cols: int) -> list[float]:
    node_rows = int(node["rows"])
    node_cols = int(node["cols"])
    if node_rows != rows or node_cols != cols:
        raise CalibrationError(
            f"expected a {rows}x{cols} matrix, got {node_rows}x{node_cols}"
        )
    data = node["data"]
    return [float(data[i]) for i in range(rows * cols)]


def _decode(doc: Any) -> tuple[str, CameraInfo]:
    if not isinstance(doc, dict):
        raise CalibrationError("camera calibration is not a YAML mapping")

    name = doc.get(CAM_YML_NAME)
    camera_name = "unknown" if name is None else str(name)

    width = int(doc[WIDTH_YML_NAME])
    height = int(doc[HEIGHT_YML_NAME])
    k = _read_matrix(doc[K_YML_NAME], 3, 3)
    r = _read_matrix(doc[R_YML_NAME], 3, 3)
    p = _read_matrix(doc[P_YML_NAME], 3, 4)

    model = doc.get(DMODEL_YML_NAME)
    if model is None:
        log.warning(
            "Camera calibration file did not specify distortion model, assuming plumb bob"
        )
        model = PLUMB_BOB

    d_node = doc[D_YML_NAME]
    d_rows = int(d_node["rows"])
    d_cols = int(d_node["cols"])
    d_data = d_node["data"]
    d = [float(d_data[i]) for i in range(d_rows * d_cols)]

    info = CameraInfo(
        width=width, height=height, distortion_model=str(model), d=d, k=k, r=r, p=p
    )
    return camera_name, info


def read_calibration_yml(stream: TextIO) -> tuple[str, CameraInfo]:
    """Read a YAML calibration from a text stream as ``(camera_name, CameraInfo)``.

    A missing camera name reads as ``"unknown"``; a missing distortion model
    is taken to be plumb bob.
    """
    try:
        doc = yaml.safe_load(stream)
        return _decode(doc)
    except CalibrationError as exc:
        log.error("Exception parsing YAML camera calibration:\n%s", exc)
        raise
    except (yaml.YAMLError, KeyError, IndexError, TypeError, ValueError) as exc:
        log.error("Exception parsing YAML camera calibration:\n%s", exc)
        raise CalibrationError(f"invalid YAML camera calibration: {exc!r}") from exc


def read_calibration_yml_file(file_name) -> tuple[str, CameraInfo]:
    """Read a YAML calibration from a file."""
    try:
        stream = open(file_name, encoding="utf-8")
    except OSError as exc:
        log.info("Unable to open camera calibration file [%s]", file_name)
        raise CalibrationError(
            f"Unable to open camera calibration file [{file_name}]"
        ) from exc
    with stream:
        try:
            return read_calibration_yml(stream)
        except CalibrationError:
            log.error("Failed to parse camera calibration from file [%s]", file_name)
            raise