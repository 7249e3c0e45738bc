"""Keeps a camera's calibration, loading and saving it through calibration URLs."""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable, Optional

from camcalib.camera_info import CalibrationError, CameraInfo
from camcalib.parse import read_calibration, write_calibration
from camcalib.urls import (
    DEFAULT_CAMERA_INFO_URL,
    UrlType,
    find_package,
    is_valid_camera_name,
    package_file_name,
    parse_url,
    resolve_url,
)

log = logging.getLogger(__name__)

_FILE_PREFIX_LEN = len("file://")
STORE_FAILED_MESSAGE = "Error storing camera calibration."


class CameraInfoManager:
    """Provides a camera's calibration and stores new calibrations.

    Nothing is loaded until :meth:`load_camera_info`, :meth:`is_calibrated`
    or :meth:`get_camera_info` is called.  The lock guarding the private
    state is never held during file I/O.
    """

    def __init__(
        self,
        camera_name: str = "camera",
        url: str = "",
        package_locator: Callable[[str], Optional[str]] = find_package,
    ) -> None:
        self._lock = threading.Lock()
        self._camera_name = camera_name
        self._url = url
        self._package_locator = package_locator
        self._cam_info = CameraInfo()
        self._loaded = False

    def _ensure_loaded(self) -> CameraInfo:
        """Load the calibration if no load was attempted yet; return a copy of it."""
        while True:
            with self._lock:
                if self._loaded:
                    return self._cam_info.copy()
                self._loaded = True
                url = self._url
                camera_name = self._camera_name
            self._load_calibration(url, camera_name)

    def get_camera_info(self) -> CameraInfo:
        """Return the current calibration; all zeros if none is available."""
        return self._ensure_loaded()

    def is_calibrated(self) -> bool:
        """True if the current calibration has a non-zero camera matrix."""
        return self._ensure_loaded().k[0] != 0.0

    def load_camera_info(self, url: str) -> bool:
        """Set a new URL and load its calibration; True if data was found."""
        with self._lock:
            self._url = url
            camera_name = self._camera_name
            self._loaded = True
        return self._load_calibration(url, camera_name)

    def resolve_url(self, url: str, camera_name: str) -> str:
        """Return ``url`` with its substitution variables resolved."""
        return resolve_url(url, camera_name)

    def set_camera_name(self, camera_name: str) -> bool:
        """Set a new camera name if its syntax is valid; forces a reload later."""
        if not is_valid_camera_name(camera_name):
            return False
        with self._lock:
            self._camera_name = camera_name
            self._loaded = False
        return True

    def set_camera_info(self, camera_info: CameraInfo) -> bool:
        """Replace the current calibration without saving it."""
        with self._lock:
            self._cam_info = camera_info.copy()
            self._loaded = True
        return True

    def validate_url(self, url: str) -> bool:
        """True if the URL syntax is supported; the resource need not exist."""
        with self._lock:
            camera_name = self._camera_name
        return parse_url(resolve_url(url, camera_name)).supported

    def handle_set_camera_info(self, camera_info: CameraInfo) -> tuple[bool, str]:
        """Store a new calibration and save it to the current URL.

        The calibration in memory is always updated, even if saving fails.
        Returns ``(success, status_message)``.
        """
        with self._lock:
            self._cam_info = camera_info.copy()
            url = self._url
            camera_name = self._camera_name
            self._loaded = True
        if self._save_calibration(camera_info, url, camera_name):
            return True, ""
        return False, STORE_FAILED_MESSAGE

    def _load_calibration(self, url: str, camera_name: str) -> bool:
        resolved = resolve_url(url, camera_name)
        url_type = parse_url(resolved)
        if url_type is not UrlType.EMPTY:
            log.info("camera calibration URL: %s", resolved)

        if url_type is UrlType.EMPTY:
            log.info("using default calibration URL")
            return self._load_calibration(DEFAULT_CAMERA_INFO_URL, camera_name)
        if url_type is UrlType.FILE:
            return self._load_calibration_file(resolved[_FILE_PREFIX_LEN:], camera_name)
        if url_type is UrlType.FLASH:
            log.warning("reading from flash not implemented yet")
            return False
        if url_type is UrlType.PACKAGE:
            filename = package_file_name(resolved, self._package_locator)
            if filename:
                return self._load_calibration_file(filename, camera_name)
            return False
        log.error("Invalid camera calibration URL: %s", resolved)
        return False

    def _load_calibration_file(self, filename: str, camera_name: str) -> bool:
        log.debug("reading camera calibration from %s", filename)
        try:
            file_camera_name, cam_info = read_calibration(filename)
        except CalibrationError:
            log.warning("Camera calibration file %s not found.", filename)
            return False
        if camera_name != file_camera_name:
            log.warning(
                "[%s] does not match name %s in file %s",
                camera_name,
                file_camera_name,
                filename,
            )
        with self._lock:
            self._cam_info = cam_info
        return True

    def _save_calibration(self, new_info: CameraInfo, url: str, camera_name: str) -> bool:
        resolved = resolve_url(url, camera_name)
        url_type = parse_url(resolved)

        if url_type is UrlType.EMPTY:
            return self._save_calibration(new_info, DEFAULT_CAMERA_INFO_URL, camera_name)
        if url_type is UrlType.FILE:
            return self._save_calibration_file(
                new_info, resolved[_FILE_PREFIX_LEN:], camera_name
            )
        if url_type is UrlType.PACKAGE:
            filename = package_file_name(resolved, self._package_locator)
            if filename:
                return self._save_calibration_file(new_info, filename, camera_name)
            return False
        log.error("invalid url: %s (ignored)", resolved)
        return self._save_calibration(new_info, DEFAULT_CAMERA_INFO_URL, camera_name)

    def _save_calibration_file(
        self, new_info: CameraInfo, filename: str, camera_name: str
    ) -> bool:
        log.info("writing calibration data to %s", filename)
        last_slash = filename.rfind("/")
        if last_slash < 0:
            log.error("filename [%s] has no '/'", filename)
            return False

        dirname = filename[: last_slash + 1]
        if os.path.lexists(dirname) or os.path.exists(dirname):
            if not os.path.isdir(dirname):
                log.error("[%s] is not a directory", dirname)
                return False
        else:
            try:
                os.makedirs(dirname, exist_ok=True)
            except OSError:
                log.error("unable to create path to directory [%s]", dirname)
                return False

        try:
            write_calibration(filename, camera_name, new_info)
        except CalibrationError as exc:
            log.error("%s", exc)
            return False
        return True