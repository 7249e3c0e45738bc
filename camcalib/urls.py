"""Calibration URLs: variable substitution, classification and package lookup."""

from __future__ import annotations

import enum
import logging
import os
import re
from pathlib import Path
from typing import Callable, Optional

log = logging.getLogger(__name__)

DEFAULT_CAMERA_INFO_URL = "file://${ROS_HOME}/camera_info/${NAME}.yaml"

_PACKAGE_PREFIX = "package://"
_NAME_VAR = "{NAME}"
_ROS_HOME_VAR = "{ROS_HOME}"
_CAMERA_NAME = re.compile(r"[A-Za-z0-9_]+")


class UrlType(enum.IntEnum):
    """Kinds of calibration URL; values from INVALID on are not supported."""

    EMPTY = 0
    FILE = 1
    PACKAGE = 2
    INVALID = 3
    FLASH = 4

    @property
    def supported(self) -> bool:
        """True if calibration data can be loaded from this kind of URL."""
        return self < UrlType.INVALID


def _ros_home() -> str:
    ros_home = os.environ.get("ROS_HOME")
    if ros_home is not None:
        return ros_home
    home = os.environ.get("HOME")
    if home is not None:
        return home + "/.ros"
    return ""


def resolve_url(url: str, camera_name: str) -> str:
    """Return ``url`` with ``${NAME}`` and ``${ROS_HOME}`` substituted.

    Resolution is a single pass; substituted values are not resolved again.
    A ``$`` that does not start a known variable is kept literally.
    """
    parts: list[str] = []
    rest = 0
    while True:
        dollar = url.find("$", rest)
        if dollar < 0:
            parts.append(url[rest:])
            break
        parts.append(url[rest:dollar])
        following = url[dollar + 1:]
        if not following.startswith("{"):
            parts.append("$")
        elif following.startswith(_NAME_VAR):
            parts.append(camera_name)
            dollar += len(_NAME_VAR)
        elif following.startswith(_ROS_HOME_VAR):
            parts.append(_ros_home())
            dollar += len(_ROS_HOME_VAR)
        else:
            log.error("invalid URL substitution (not resolved): %s", url)
            parts.append("$")
        rest = dollar + 1
    return "".join(parts)


def parse_url(url: str) -> UrlType:
    """Classify a resolved calibration URL."""
    if url == "":
        return UrlType.EMPTY
    lowered = url.lower()
    if lowered.startswith("file:///"):
        return UrlType.FILE
    if lowered.startswith("flash:///"):
        return UrlType.FLASH
    if lowered.startswith(_PACKAGE_PREFIX):
        # The package name must be non-empty and something must follow its '/'.
        slash = url.find("/", len(_PACKAGE_PREFIX))
        if len(_PACKAGE_PREFIX) < slash < len(url) - 1:
            return UrlType.PACKAGE
    return UrlType.INVALID


def is_valid_camera_name(camera_name: str) -> bool:
    """True if the name is non-empty and holds only ASCII letters, digits and '_'."""
    return _CAMERA_NAME.fullmatch(camera_name) is not None


def find_package(package: str) -> Optional[str]:
    """Return the directory of a package found on ``$ROS_PACKAGE_PATH``, or None."""
    search_path = os.environ.get("ROS_PACKAGE_PATH", "")
    roots = [Path(entry) for entry in search_path.split(os.pathsep) if entry]
    if not package:
        return None
    for root in roots:
        if root.name == package and root.is_dir():
            return str(root)
        candidate = root / package
        if candidate.is_dir():
            return str(candidate)
    for root in roots:
        if not root.is_dir():
            continue
        for dirpath, dirnames, filenames in os.walk(root):
            if Path(dirpath).name == package and "package.xml" in filenames:
                return dirpath
            dirnames.sort()
    return None


def package_file_name(
    url: str,
    locator: Callable[[str], Optional[str]] = find_package,
) -> Optional[str]:
    """Return the file named by a ``package://`` URL, or None if the package is unknown."""
    prefix_len = len(_PACKAGE_PREFIX)
    slash = url.find("/", prefix_len)
    if slash < 0:
        package, remainder = url[prefix_len:], ""
    else:
        package, remainder = url[prefix_len:slash], url[slash:]
    package_path = locator(package)
    if not package_path:
        log.warning("unknown package: %s (ignored)", package)
        return None
    return package_path + remainder