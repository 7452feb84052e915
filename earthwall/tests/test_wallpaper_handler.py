"""
Test wallpaper_handler

Validate that updates to the desktop background are handed to the right OS facility. The OS calls
themselves are patched: subprocess.run for gsettings, the ctypes module for user32 on Windows.

*** Fixtures ***
- test_image (defined in conftest.py)
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

# following entities are tested in this module:
from earthwall.wallpaper_handler import update_wallpaper
from earthwall.wallpaper_handler import get_wallpaper_setter
from earthwall.wallpaper_handler import WallpaperSetter
from earthwall.wallpaper_handler import WindowsWallpaperSetter
from earthwall.wallpaper_handler import GnomeWallpaperSetter
from earthwall.wallpaper_handler import UnsupportedWallpaperSetter
from earthwall.wallpaper_handler import WallpaperUpdateError
from earthwall.wallpaper_handler import SPI_SETDESKWALLPAPER
from earthwall.wallpaper_handler import SPIF_UPDATEINIFILE
from earthwall.wallpaper_handler import SPIF_SENDCHANGE


@pytest.mark.parametrize(
    ["platform", "expected"],
    [
        ("win32", WindowsWallpaperSetter),
        ("linux", GnomeWallpaperSetter),
        ("freebsd13", GnomeWallpaperSetter),
        ("darwin", UnsupportedWallpaperSetter),
        ("emscripten", UnsupportedWallpaperSetter),
    ],
)
def test_get_wallpaper_setter(platform, expected):

    assert isinstance(get_wallpaper_setter(platform), expected)


@patch("earthwall.wallpaper_handler.ctypes")
def test_windows_setter_success(fake_ctypes, test_image):
    """
    SystemParametersInfoW gets the full path and asks for the change to be persisted and broadcast.
    """

    fake_ctypes.windll.user32.SystemParametersInfoW.return_value = 1

    WindowsWallpaperSetter().set_wallpaper(test_image)

    fake_ctypes.windll.user32.SystemParametersInfoW.assert_called_once_with(
        SPI_SETDESKWALLPAPER, 0, str(test_image), SPIF_UPDATEINIFILE | SPIF_SENDCHANGE
    )
    assert SPIF_UPDATEINIFILE | SPIF_SENDCHANGE == 0x03


@patch("earthwall.wallpaper_handler.ctypes")
def test_windows_setter_failure(fake_ctypes, test_image):

    fake_ctypes.windll.user32.SystemParametersInfoW.return_value = 0
    fake_ctypes.GetLastError.return_value = 5

    with pytest.raises(WallpaperUpdateError, match="5"):
        WindowsWallpaperSetter().set_wallpaper(test_image)


@patch("earthwall.wallpaper_handler.subprocess.run", autospec=True)
def test_gnome_setter_success(fake_run, test_image):
    """
    Both the light and the dark picture keys are pointed at the file uri.
    """

    GnomeWallpaperSetter().set_wallpaper(test_image.resolve())

    uri = test_image.resolve().as_uri()
    commands = [call.args[0] for call in fake_run.call_args_list]
    assert commands == [
        ["gsettings", "set", "org.gnome.desktop.background", "picture-uri", uri],
        ["gsettings", "set", "org.gnome.desktop.background", "picture-uri-dark", uri],
    ]
    assert all(call.kwargs["check"] for call in fake_run.call_args_list)


@patch("earthwall.wallpaper_handler.subprocess.run", autospec=True)
def test_gnome_setter_subprocess_failure(fake_run, test_image):

    fake_run.side_effect = subprocess.CalledProcessError(
        cmd="gsettings", returncode=1, stderr="No such schema"
    )

    with pytest.raises(WallpaperUpdateError, match="No such schema"):
        GnomeWallpaperSetter().set_wallpaper(test_image.resolve())


@patch("earthwall.wallpaper_handler.subprocess.run", autospec=True)
def test_gnome_setter_missing_gsettings(fake_run, test_image):

    fake_run.side_effect = FileNotFoundError

    with pytest.raises(WallpaperUpdateError, match="not found"):
        GnomeWallpaperSetter().set_wallpaper(test_image.resolve())


def test_unsupported_setter(test_image):

    with pytest.raises(WallpaperUpdateError, match="unsupported"):
        UnsupportedWallpaperSetter("darwin").set_wallpaper(test_image)


def test_update_wallpaper_success(test_image, monkeypatch):
    """
    Relative paths are resolved before they reach the setter.
    """

    monkeypatch.chdir(test_image.parent)
    setter = MagicMock(spec=WallpaperSetter)

    result = update_wallpaper(Path(test_image.name), setter=setter)

    assert result == test_image.resolve()
    assert result.is_absolute()
    setter.set_wallpaper.assert_called_once_with(test_image.resolve())


@patch("earthwall.wallpaper_handler.get_wallpaper_setter", autospec=True)
def test_update_wallpaper_default_setter(fake_get_setter, test_image):

    update_wallpaper(test_image)

    fake_get_setter.assert_called_once_with()
    fake_get_setter.return_value.set_wallpaper.assert_called_once_with(test_image.resolve())


@pytest.mark.parametrize(
    "img_path",
    [
        "",
        "/not/a/real/absolute/path.jpg",
        42,
    ],
)
def test_update_wallpaper_failure(img_path):
    """
    Verify that update_wallpaper raises the appropriate error type for invalid inputs, without
    touching the OS:
    - empty path (resolves to the current directory)
    - invalid path
    - invalid data type (e.g. instead of str)
    """

    setter = MagicMock(spec=WallpaperSetter)

    with pytest.raises(WallpaperUpdateError):
        update_wallpaper(img_path, setter=setter)

    setter.set_wallpaper.assert_not_called()


def test_update_wallpaper_setter_failure(test_image):

    setter = MagicMock(spec=WallpaperSetter)
    setter.set_wallpaper.side_effect = WallpaperUpdateError("nope")

    with pytest.raises(WallpaperUpdateError):
        update_wallpaper(test_image, setter=setter)
