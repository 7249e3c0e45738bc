# camcalib

Read, write and convert camera calibration data, and keep track of where a
camera's calibration lives.

Two file formats are supported:

- **YAML** (`.yaml` / `.yml`): image size, camera name, camera matrix,
  distortion model and coefficients, rectification and projection matrices.
- **Videre INI** (`.ini`): a legacy format that can only be written for the
  plumb bob distortion model with five coefficients. When read, five
  coefficients give `plumb_bob`, eight give `rational_polynomial`.

The format of a file is chosen from its extension, case-insensitively.

## Installation

```
pip install camcalib
```

## Converting files

```
camcalib-convert input.yaml output.ini
camcalib-convert input.ini output.yaml
```

Run with fewer than two arguments to print usage. The command exits with
status 1 if the input cannot be read or the output cannot be written.

## Reading and writing in code

```python
from camcalib.parse import read_calibration, write_calibration, parse_calibration

name, info = read_calibration("left.yaml")
print(name, info.width, info.height, info.k)

write_calibration("left.ini", name, info)

with open("left.ini") as f:
    name, info = parse_calibration(f.read(), "ini")
```

`parse_calibration` accepts only the `"ini"` format. Failures raise
`camcalib.camera_info.CalibrationError`. Writing a file creates its parent
directory if needed.

The format-specific modules offer the same operations on text, streams and
file names:

- `camcalib.yml`: `format_calibration_yml`, `write_calibration_yml`,
  `write_calibration_yml_file`, `read_calibration_yml`,
  `read_calibration_yml_file`. A YAML file without a camera name reads as
  `"unknown"`; one without a distortion model is taken to be plumb bob.
- `camcalib.ini`: `format_calibration_ini`, `write_calibration_ini`,
  `write_calibration_ini_file`, `parse_calibration_ini`,
  `read_calibration_ini`, `read_calibration_ini_file`.

All readers return a `(camera_name, CameraInfo)` tuple.

A `camcalib.camera_info.CameraInfo` holds `width`, `height`,
`distortion_model`, `d` (distortion coefficients), `k` (9 values), `r`
(9 values) and `p` (12 values), matrices stored row-major. `copy()` returns
an independent copy. An all-zero `k` means the camera is uncalibrated.

## Calibration URLs

`camcalib.manager.CameraInfoManager` loads and saves calibration data for a
named camera from a URL:

- `file:///full/path/to/file.yaml`
- `package://some_package/calibrations/camera3.yaml`

URLs may contain `${NAME}` (the camera name) and `${ROS_HOME}` (the
`ROS_HOME` environment variable, or `$HOME/.ros` when it is unset). An empty
URL means `file://${ROS_HOME}/camera_info/${NAME}.yaml`. A `package://` URL
is resolved with a package locator; the default, `camcalib.urls.find_package`,
searches the directories listed in `ROS_PACKAGE_PATH`, and another callable
can be passed as `package_locator`.

```python
from camcalib.manager import CameraInfoManager

manager = CameraInfoManager("left_camera", "file:///tmp/${NAME}.yaml")
if manager.is_calibrated():
    info = manager.get_camera_info()
    success, message = manager.handle_set_camera_info(info)  # store and save
```

- `load_camera_info(url)` sets a new URL and loads from it.
- `set_camera_name(name)` accepts names of letters, digits and `_` only and
  forces a reload before the calibration is next used.
- `set_camera_info(info)` replaces the calibration in memory without saving.
- `handle_set_camera_info(info)` replaces it and saves it to the current URL,
  returning `(success, status_message)`; an invalid URL saves to the default
  location.
- `validate_url(url)` tells whether a URL's syntax is supported.

Nothing is loaded until `load_camera_info`, `is_calibrated` or
`get_camera_info` is first called.

The helpers in `camcalib.urls` (`resolve_url`, `parse_url`, `UrlType`,
`is_valid_camera_name`, `find_package`, `package_file_name`) can be used on
their own.

## What is not provided

- `flash:///` URLs are recognised but cannot be loaded from or saved to.
- There is no network service for receiving new calibrations; callers pass
  them to `CameraInfoManager.handle_set_camera_info` directly.