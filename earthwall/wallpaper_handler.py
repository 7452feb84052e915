"""
Desktop Wallpaper Handler

This module handles updates to the desktop background. Every platform exposes this differently, so the
capability "set the desktop background to this file" is modelled as a WallpaperSetter with one
implementation per supported operating system:

- Windows: SystemParametersInfoW from user32, called through ctypes with SPI_SETDESKWALLPAPER. The
  SPIF_UPDATEINIFILE flag persists the change across reboots and SPIF_SENDCHANGE broadcasts it to the
  running desktop session.
  https://learn.microsoft.com/en-us/windows/win32/api/winuser/nf-winuser-systemparametersinfow

- Gnome: the org.gnome.desktop.background schema, updated by dropping into the gsettings CLI. Values
  written through gsettings are stored in dconf (persisted) and picked up by the shell immediately.
  https://github.com/GNOME/gsettings-desktop-schemas/blob/master/schemas/org.gnome.desktop.background.gschema.xml.in

Anything else gets the UnsupportedWallpaperSetter, which refuses with a WallpaperUpdateError.
"""

import ctypes
import subprocess
import sys
from collections import OrderedDict
from pathlib import Path
from typing import Optional

SPI_SETDESKWALLPAPER = 0x0014
SPIF_UPDATEINIFILE = 0x01
SPIF_SENDCHANGE = 0x02

GNOME_BACKGROUND_SCHEMA = "org.gnome.desktop.background"
# picture-uri-dark is used instead of picture-uri when the dark style is active (Gnome 42+)
GNOME_BACKGROUND_KEYS = ("picture-uri", "picture-uri-dark")


class WallpaperUpdateError(Exception):
    """
    Raised when an attempt to update the desktop background fails.
    """

    pass


class WallpaperSetter:
    """Set the desktop background to an image file. Subclasses implement one platform each."""

    def set_wallpaper(self, img_path: Path) -> None:
        raise NotImplementedError


class WindowsWallpaperSetter(WallpaperSetter):

    def set_wallpaper(self, img_path: Path) -> None:
        """
        SystemParametersInfoW returns a nonzero BOOL on success. It needs an absolute path, which
        update_wallpaper guarantees.
        """

        user32 = ctypes.windll.user32
        result = user32.SystemParametersInfoW(
            SPI_SETDESKWALLPAPER,
            0,
            str(img_path),
            SPIF_UPDATEINIFILE | SPIF_SENDCHANGE,
        )

        if not result:
            raise WallpaperUpdateError(
                f"SystemParametersInfoW failed to set wallpaper (error code {ctypes.GetLastError()})."
            )


class GnomeWallpaperSetter(WallpaperSetter):

    def __init__(self, gsettings: str = "gsettings"):
        self.gsettings = gsettings

    def set_wallpaper(self, img_path: Path) -> None:
        """
        Drop into gsettings CLI to update the desktop background without expensive dependencies.
        subprocess.CalledProcessError is raised by the run method call if a non-zero exit status is
        returned. A missing gsettings binary surfaces as FileNotFoundError.
        """

        for key in GNOME_BACKGROUND_KEYS:

            # ordered dict is used here for clarity and to preserve sequence for command arguments.
            set_desktop_background = OrderedDict(
                [
                    ("cmd", self.gsettings),
                    ("subcmd", "set"),
                    ("schema", GNOME_BACKGROUND_SCHEMA),
                    ("key", key),
                    ("value", Path(img_path).as_uri()),
                ]
            )

            try:
                subprocess.run(
                    list(set_desktop_background.values()),
                    check=True,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                )

            except subprocess.CalledProcessError as error:
                raise WallpaperUpdateError(
                    f"Could not set desktop background ({key}): {error.stderr or error}"
                )

            except FileNotFoundError:
                raise WallpaperUpdateError(
                    f"Could not set desktop background: '{self.gsettings}' was not found."
                )


class UnsupportedWallpaperSetter(WallpaperSetter):

    def __init__(self, platform: str = sys.platform):
        self.platform = platform

    def set_wallpaper(self, img_path: Path) -> None:
        raise WallpaperUpdateError(
            f"Setting the desktop background is unsupported on platform '{self.platform}'."
        )


def get_wallpaper_setter(platform: str = sys.platform) -> WallpaperSetter:
    """
    Pick the WallpaperSetter for platform (a sys.platform value).
    """

    if platform == "win32":
        return WindowsWallpaperSetter()

    if platform.startswith(("linux", "freebsd", "openbsd")):
        return GnomeWallpaperSetter()

    return UnsupportedWallpaperSetter(platform)


def update_wallpaper(img_path: Path, setter: Optional[WallpaperSetter] = None) -> Path:
    """
    Update the background image to the one specified by img_path. Raise WallpaperUpdateError if issues
    are encountered during the attempt. Returns the absolute path handed to the OS.
    """

    try:
        wallpaper_location = Path(img_path).expanduser().resolve()
    except TypeError:
        raise WallpaperUpdateError(
            f"Invalid parameter: {img_path} is not a valid Pathlike object."
        )

    # subsequent operations will fail if path does not exist or is not a file, so catch this.
    if not wallpaper_location.exists() or not wallpaper_location.is_file():
        raise WallpaperUpdateError(
            f"Invalid path provided for image location: {img_path} does not exist."
        )

    if setter is None:
        setter = get_wallpaper_setter()

    setter.set_wallpaper(wallpaper_location)

    return wallpaper_location
