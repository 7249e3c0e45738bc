"""Reading and writing camera calibrations in the Videre INI format."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TextIO

from camcalib.camera_info import (
    PLUMB_BOB,
    RATIONAL_POLYNOMIAL,
    CalibrationError,
    CameraInfo,
)

log = logging.getLogger(__name__)

_WHITESPACE = " \t\n\r\f\v"
_REAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_UINT = re.compile(r"\d+")
_UINT_MAX = 0xFFFFFFFF


def _format_matrix(rows: int, cols: int, data: list[float]) -> str:
    lines = []
    for row in range(rows):
        values = data[row * cols:(row + 1) * cols]
        lines.append("".join(f"{v:.5f} " for v in values) + "\n")
    return "".join(lines)


def format_calibration_ini(camera_name: str, cam_info: CameraInfo) -> str:
    """Return the INI text for a calibration.

    Only the plumb bob model with five coefficients can be stored.
    """
    if cam_info.distortion_model != PLUMB_BOB or len(cam_info.d) != 5:
        raise CalibrationError(
            "Videre INI format can only save calibrations using the plumb bob "
            "distortion model; use the YAML format instead "
            f"(distortion_model = {cam_info.distortion_model!r}, expected "
            f"{PLUMB_BOB!r}; {len(cam_info.d)} coefficients, expected 5)"
        )
    return "".join(
        [
            "# Camera intrinsics\n\n",
            "[image]\n\n",
            f"width\n{cam_info.width}\n\n",
            f"height\n{cam_info.height}\n\n",
            f"[{camera_name}]\n\n",
            "camera matrix\n",
            _format_matrix(3, 3, cam_info.k),
            "\ndistortion\n",
            _format_matrix(1, 5, cam_info.d),
            "\n\nrectification\n",
            _format_matrix(3, 3, cam_info.r),
            "\nprojection\n",
            _format_matrix(3, 4, cam_info.p),
        ]
    )


def write_calibration_ini(stream: TextIO, camera_name: str, cam_info: CameraInfo) -> None:
    """Write a calibration in INI format to a text stream."""
    stream.write(format_calibration_ini(camera_name, cam_info))


def write_calibration_ini_file(file_name, camera_name: str, cam_info: CameraInfo) -> None:
    """Write a calibration in INI format to a file, creating its directory."""
    path = Path(file_name)
    text = format_calibration_ini(camera_name, cam_info)
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


class _Mismatch(Exception):
    pass


class _Scanner:
    """Recursive-descent scanner that skips whitespace and '#' comments."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def skip(self) -> None:
        text, pos = self.text, self.pos
        while pos < len(text):
            ch = text[pos]
            if ch in _WHITESPACE:
                pos += 1
            elif ch == "#":
                end = text.find("\n", pos)
                pos = len(text) if end < 0 else end + 1
            else:
                break
        self.pos = pos

    def literal(self, lit: str) -> None:
        self.skip()
        if not self.text.startswith(lit, self.pos):
            raise _Mismatch(f"expected {lit!r} at offset {self.pos}")
        self.pos += len(lit)

    def _match(self, pattern: re.Pattern, what: str) -> str:
        self.skip()
        match = pattern.match(self.text, self.pos)
        if match is None:
            raise _Mismatch(f"expected {what} at offset {self.pos}")
        self.pos = match.end()
        return match.group()

    def real(self) -> float:
        return float(self._match(_REAL, "a number"))

    def reals(self, count: int) -> list[float]:
        return [self.real() for _ in range(count)]

    def real_sequence(self) -> list[float]:
        values = []
        while True:
            save = self.pos
            try:
                values.append(self.real())
            except _Mismatch:
                self.pos = save
                return values

    def uint(self) -> int:
        start = self.pos
        value = int(self._match(_UINT, "an unsigned integer"))
        if value > _UINT_MAX:
            raise _Mismatch(f"integer out of range at offset {start}")
        return value

    def bracketed(self) -> str:
        self.literal("[")
        self.skip()
        end = self.text.find("]", self.pos)
        if end < 0:
            raise _Mismatch(f"unterminated section name at offset {self.pos}")
        name = self.text[self.pos:end].rstrip(_WHITESPACE)
        self.pos = end + 1
        return name


def _parse_externals(scanner: _Scanner) -> None:
    # The externals are part of the format but not used.
    scanner.literal("[externals]")
    scanner.literal("translation")
    scanner.reals(3)
    scanner.literal("rotation")
    scanner.reals(3)


def parse_calibration_ini(buffer: str) -> tuple[str, CameraInfo]:
    """Parse INI calibration text into ``(camera_name, CameraInfo)``."""
    scanner = _Scanner(buffer)
    try:
        scanner.literal("[image]")
        scanner.literal("width")
        width = scanner.uint()
        scanner.literal("height")
        height = scanner.uint()

        save = scanner.pos
        try:
            _parse_externals(scanner)
        except _Mismatch:
            scanner.pos = save

        camera_name = scanner.bracketed()
        scanner.literal("camera matrix")
        k = scanner.reals(9)
        scanner.literal("distortion")
        d = scanner.real_sequence()
        scanner.literal("rectification")
        r = scanner.reals(9)
        scanner.literal("projection")
        p = scanner.reals(12)
    except _Mismatch as exc:
        raise CalibrationError(f"invalid INI camera calibration: {exc}") from None

    if len(d) == 5:
        model = PLUMB_BOB
    elif len(d) == 8:
        model = RATIONAL_POLYNOMIAL
    else:
        model = ""
    info = CameraInfo(width=width, height=height, distortion_model=model, d=d, k=k, r=r, p=p)
    return camera_name, info


def read_calibration_ini(stream: TextIO) -> tuple[str, CameraInfo]:
    """Read an INI calibration from a text stream."""
    return parse_calibration_ini(stream.read())


def read_calibration_ini_file(file_name) -> tuple[str, CameraInfo]:
    """Read an INI calibration from a file."""
    try:
        with open(file_name, encoding="utf-8") as stream:
            text = stream.read()
    except OSError as exc:
        log.info("Unable to open camera calibration file [%s]", file_name)
        raise CalibrationError(
            f"Unable to open camera calibration file [{file_name}]"
        ) from exc
    return parse_calibration_ini(text)