"""Command that converts a calibration file between YAML and INI formats."""

from __future__ import annotations

import logging
import sys

from camcalib.camera_info import CalibrationError
from camcalib.parse import read_calibration, write_calibration

log = logging.getLogger(__name__)

PROG = "camcalib-convert"


def main(argv=None) -> int:
    """Convert the calibration in the first file to the format of the second."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print(
            f"Usage: {PROG} input.yml output.ini\n"
            f"       {PROG} input.ini output.yml"
        )
        return 0

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    source, target = args[0], args[1]

    try:
        name, cam_info = read_calibration(source)
    except CalibrationError:
        log.error("Failed to load camera model from file %s", source)
        return 1
    try:
        write_calibration(target, name, cam_info)
    except CalibrationError:
        log.error("Failed to save camera model to file %s", target)
        return 1

    log.info("Saved %s", target)
    return 0


if __name__ == "__main__":
    sys.exit(main())