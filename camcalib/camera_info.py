"""Camera calibration data and the error raised when it cannot be handled."""

from __future__ import annotations

from dataclasses import dataclass, field

PLUMB_BOB = "plumb_bob"
RATIONAL_POLYNOMIAL = "rational_polynomial"

_MATRIX_SIZES = {"k": 9, "r": 9, "p": 12}


class CalibrationError(Exception):
    """Raised when calibration data cannot be read, parsed or written."""


def _zeros(count: int) -> list[float]:
    return [0.0] * count


@dataclass
class CameraInfo:
    """Intrinsic calibration of a camera.

    ``k`` is the 3x3 camera matrix, ``r`` the 3x3 rectification matrix and
    ``p`` the 3x4 projection matrix, all stored row-major.  ``d`` holds the
    distortion coefficients, whose number depends on ``distortion_model``.
    All matrices are zero when the camera is uncalibrated.
    """

    width: int = 0
    height: int = 0
    distortion_model: str = ""
    d: list[float] = field(default_factory=list)
    k: list[float] = field(default_factory=lambda: _zeros(9))
    r: list[float] = field(default_factory=lambda: _zeros(9))
    p: list[float] = field(default_factory=lambda: _zeros(12))

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("image width and height must not be negative")
        self.width = int(self.width)
        self.height = int(self.height)
        for name, size in _MATRIX_SIZES.items():
            values = [float(v) for v in getattr(self, name)]
            if len(values) != size:
                raise ValueError(
                    f"{name} must hold {size} values, got {len(values)}"
                )
            setattr(self, name, values)
        self.d = [float(v) for v in self.d]

    def copy(self) -> CameraInfo:
        """Return an independent copy of this calibration."""
        return CameraInfo(
            width=self.width,
            height=self.height,
            distortion_model=self.distortion_model,
            d=list(self.d),
            k=list(self.k),
            r=list(self.r),
            p=list(self.p),
        )