import pytest

from camcalib.urls import (
    DEFAULT_CAMERA_INFO_URL,
    UrlType,
    find_package,
    is_valid_camera_name,
    package_file_name,
    parse_url,
    resolve_url,
)

PACKAGE_NAME = "camera_info_manager"
TEST_NAME = "test_calibration"
PACKAGE_URL = f"package://{PACKAGE_NAME}/tests/{TEST_NAME}.yaml"
PACKAGE_NAME_URL = f"package://{PACKAGE_NAME}/tests/${{NAME}}.yaml"
CAMERA_NAME = "made_up_camera_0001"


def validate(url, camera_name="camera"):
    return parse_url(resolve_url(url, camera_name)).supported


@pytest.mark.parametrize(
    "name",
    [
        "a",
        "1",
        "_",
        "abcdefghijklmnopqrstuvwxyz",
        "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
        "0123456789",
        "0123456789abcdef",
        "A1",
        "9z",
        "made_up_camera_640x480_mono8",
    ],
)
def test_valid_camera_names(name):
    assert is_valid_camera_name(name) is True


@pytest.mark.parametrize(
    "name",
    ["", "-21", "C++", "file:///tmp/url.yaml", "file://${INVALID}/xxx.yaml"],
)
def test_invalid_camera_names(name):
    assert is_valid_camera_name(name) is False


@pytest.mark.parametrize(
    "url",
    [
        "",
        "file:///",
        "file:///tmp/url.yaml",
        "File:///tmp/url.ini",
        "FILE:///tmp/url.yaml",
        DEFAULT_CAMERA_INFO_URL,
        PACKAGE_URL,
        "package://no_such_package/calibration.yaml",
        "packAge://camera_info_manager/x",
    ],
)
def test_valid_urls(url, monkeypatch):
    monkeypatch.setenv("ROS_HOME", "/tmp")
    assert validate(url) is True


@pytest.mark.parametrize(
    "url",
    [
        "file://",
        "flash:///",
        "html://ros.org/wiki/camera_info_manager",
        "package://",
        "package:///",
        "package://calibration.yaml",
        "package://camera_info_manager/",
    ],
)
def test_invalid_urls(url):
    assert validate(url) is False


@pytest.mark.parametrize(
    "url, expected",
    [
        ("", UrlType.EMPTY),
        ("file:///tmp/x.yaml", UrlType.FILE),
        ("flash:///", UrlType.FLASH),
        ("package://pkg/x.yaml", UrlType.PACKAGE),
        ("package:///x.yaml", UrlType.INVALID),
        ("http://example.com/x.yaml", UrlType.INVALID),
    ],
)
def test_parse_url_types(url, expected):
    assert parse_url(url) is expected


def test_flash_is_recognised_but_unsupported():
    flash = parse_url("flash:///some/where")
    assert flash is UrlType.FLASH
    assert flash.supported is False
    package = parse_url("package://pkg/x.yaml")
    assert package is UrlType.PACKAGE
    assert package.supported is True


@pytest.mark.parametrize(
    "url, expected, name",
    [
        (
            PACKAGE_NAME_URL,
            f"package://{PACKAGE_NAME}/tests/{CAMERA_NAME}.yaml",
            CAMERA_NAME,
        ),
        (
            f"package://{PACKAGE_NAME}/tests/${{NAME}}_calibration.yaml",
            f"package://{PACKAGE_NAME}/tests/test_calibration.yaml",
            "test",
        ),
        (
            f"package://{PACKAGE_NAME}/tests/${{NAME}}_calibration.yaml",
            f"package://{PACKAGE_NAME}/tests/camera_1024x768_calibration.yaml",
            "camera_1024x768",
        ),
        (
            f"package://{PACKAGE_NAME}/tests/${{NAME}}_calibration.yaml",
            f"package://{PACKAGE_NAME}/tests/_calibration.yaml",
            "",
        ),
        (PACKAGE_NAME_URL, PACKAGE_URL, TEST_NAME),
    ],
)
def test_camera_name_substitution(url, expected, name):
    assert resolve_url(url, name) == expected


def test_ros_home_from_home(monkeypatch):
    monkeypatch.delenv("ROS_HOME", raising=False)
    monkeypatch.setenv("HOME", "/home/someone")
    url = "file://${ROS_HOME}/camera_info/test_camera.yaml"
    assert resolve_url(url, CAMERA_NAME) == (
        "file:///home/someone/.ros/camera_info/test_camera.yaml"
    )


def test_ros_home_from_environment(monkeypatch):
    monkeypatch.setenv("ROS_HOME", "/my/ros/home")
    url = "file://${ROS_HOME}/camera_info/test_camera.yaml"
    assert resolve_url(url, CAMERA_NAME) == "file:///my/ros/home/camera_info/test_camera.yaml"


def test_ros_home_without_any_home(monkeypatch):
    monkeypatch.delenv("ROS_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    assert resolve_url("file://${ROS_HOME}/x.yaml", CAMERA_NAME) == "file:///x.yaml"


def test_default_url_resolution(monkeypatch):
    monkeypatch.setenv("ROS_HOME", "/tmp")
    assert resolve_url(DEFAULT_CAMERA_INFO_URL, "camera") == (
        "file:///tmp/camera_info/camera.yaml"
    )


def test_double_dollar_before_name():
    assert resolve_url("file:///tmp/$${NAME}.yaml", CAMERA_NAME) == (
        f"file:///tmp/${CAMERA_NAME}.yaml"
    )


@pytest.mark.parametrize(
    "url",
    [
        "file:///$whatever.yaml",
        "file:///something$$whatever.yaml",
        "file:///$$",
    ],
)
def test_unmatched_dollar_signs(url):
    assert resolve_url(url, CAMERA_NAME) == url


def test_empty_url():
    assert resolve_url("", CAMERA_NAME) == ""


@pytest.mark.parametrize(
    "url",
    [
        "file:///tmp/$NAME.yaml",
        "file:///tmp/${INVALID}/calibration.yaml",
        "file:///tmp/${NAME",
        "file:///tmp/${}",
        "file:///$",
    ],
)
def test_invalid_variables(url):
    assert resolve_url(url, CAMERA_NAME) == url


def test_substituted_values_are_not_resolved_again():
    assert resolve_url("file:///${NAME}", "${NAME}") == "file:///${NAME}"


def test_package_file_name_with_locator():
    packages = {"pkg": "/opt/pkg"}
    assert package_file_name("package://pkg/calib/a.yaml", packages.get) == (
        "/opt/pkg/calib/a.yaml"
    )


def test_package_file_name_unknown_package():
    assert package_file_name("package://missing/a.yaml", {}.get) is None


def test_find_package_on_search_path(tmp_path, monkeypatch):
    (tmp_path / "my_cameras" / "calibrations").mkdir(parents=True)
    monkeypatch.setenv("ROS_PACKAGE_PATH", str(tmp_path))
    assert find_package("my_cameras") == str(tmp_path / "my_cameras")


def test_find_package_nested_manifest(tmp_path, monkeypatch):
    nested = tmp_path / "stack" / "deep_pkg"
    nested.mkdir(parents=True)
    (nested / "package.xml").write_text("<package/>")
    monkeypatch.setenv("ROS_PACKAGE_PATH", str(tmp_path))
    assert find_package("deep_pkg") == str(nested)


def test_find_package_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("ROS_PACKAGE_PATH", str(tmp_path))
    assert find_package("no_such_package") is None


def test_package_file_name_default_locator(tmp_path, monkeypatch):
    (tmp_path / PACKAGE_NAME / "tests").mkdir(parents=True)
    monkeypatch.setenv("ROS_PACKAGE_PATH", str(tmp_path))
    assert package_file_name(PACKAGE_URL) == str(
        tmp_path / PACKAGE_NAME
    ) + f"/tests/{TEST_NAME}.yaml"