[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "camcalib"
version = "0.1.0"
description = "Read, write and convert camera calibration files (YAML and Videre INI) and manage camera calibration data by URL"
requires-python = ">=3.10"
keywords = ["camera", "calibration", "intrinsics", "yaml", "ini", "computer-vision"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
camcalib-convert = "camcalib.convert:main"

[tool.hatch.build.targets.wheel]
packages = ["camcalib"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
