"""Camera calibration files in YAML and INI formats, and URL-based calibration management."""

__version__ = "0.1.0"

__all__ = ["camera_info", "ini", "yml", "parse", "convert", "urls", "manager"]