"""
earthwall Configuration Management

This file handles utilities related to generating and loading the wallpaper configuration file and
resolving the working files used during a run. Raise an EarthwallConfigError for any issues that arise in
processing or retrieving these configuration variables.

The configuration file is "earth_wallpaper.config.json" and by default lives in the working directory
next to the downloaded and composited images. Its location can be overridden with the EARTHWALL_CONFIG
environment variable or the --config option of the command line. The file looks like:

    {
        "WallpaperConfig": {
            "ScaleToHeight": 1080,
            "ScaleToWidth": 1080,
            "WallpaperHeight": 1080,
            "WallpaperWidth": 1920
        }
    }
"""

import json
import os
from dataclasses import dataclass
from dataclasses import asdict
from dataclasses import fields
from pathlib import Path
from typing import Optional

import structlog

log = structlog.stdlib.get_logger(__name__)

CONFIG_SECTION = "WallpaperConfig"
CONFIG_ENV_VAR = "EARTHWALL_CONFIG"

CONFIG_FILE_NAME = "earth_wallpaper.config.json"
DOWNLOAD_FILE_NAME = "earth_original.jpg"
WALLPAPER_FILE_NAME = "earth_wallpaper.jpg"
LOG_FILE_NAME = "earth_wallpaper.log"


class EarthwallConfigError(Exception):
    """Raise when an issue occurs with handling earthwall configuration."""

    pass


@dataclass(frozen=True)
class WallpaperConfig:
    """
    Dataclass to represent the dimensions used to build a wallpaper. The downloaded image is scaled to
    ScaleToWidth x ScaleToHeight and centered on a black canvas of WallpaperWidth x WallpaperHeight.

    The field names match the keys of the "WallpaperConfig" section in the config file so that a record
    can be built directly from the deserialized json object without touching brittle dictionary keys
    anywhere else in the application.
    """

    ScaleToWidth: int
    ScaleToHeight: int
    WallpaperWidth: int
    WallpaperHeight: int

    def __post_init__(self):
        """
        Reject anything that is not a positive integer. bool is a subclass of int in Python so it has to
        be excluded explicitly, otherwise "true" in the json would quietly become a 1px image.
        """

        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise EarthwallConfigError(
                    f"{field.name} must be an integer, got {value!r}."
                )
            if value <= 0:
                raise EarthwallConfigError(
                    f"{field.name} must be a positive integer, got {value}."
                )

    @property
    def scale_to(self) -> tuple[int, int]:
        return (self.ScaleToWidth, self.ScaleToHeight)

    @property
    def canvas_size(self) -> tuple[int, int]:
        return (self.WallpaperWidth, self.WallpaperHeight)

    @property
    def overflows(self) -> bool:
        """True when the scaled image is larger than the canvas in either dimension (and will be cropped)."""

        return (
            self.ScaleToWidth > self.WallpaperWidth
            or self.ScaleToHeight > self.WallpaperHeight
        )

    def generate_config_json(self, config_path: Path, overwrite: bool = False) -> Path:
        """
        Write the WallpaperConfig to file, serializing to JSON under the "WallpaperConfig" section.
        Returns filepath of written config file.

        An existing config file is only replaced when overwrite is set.
        """

        config_path = Path(config_path).expanduser().resolve()

        if config_path.is_dir():
            raise EarthwallConfigError(f"Config path {config_path} is a directory.")

        if config_path.exists() and not overwrite:
            raise EarthwallConfigError(
                f"A config file already exists at {config_path}. Use --force to replace it."
            )

        try:
            to_json = json.dumps({CONFIG_SECTION: asdict(self)}, sort_keys=True, indent=4)

        except TypeError as error:
            raise EarthwallConfigError(
                f"There was an error trying to serialize config data to JSON: {error}"
            )

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            config_path.write_text(to_json + "\n", encoding="utf-8")

        except OSError as error:
            raise EarthwallConfigError(
                f"There was an error saving the configuration file: {error}."
            )

        return config_path


DEFAULT_CONFIG = WallpaperConfig(
    ScaleToWidth=1080, ScaleToHeight=1080, WallpaperWidth=1920, WallpaperHeight=1080
)


@dataclass
class EarthwallPaths:
    """
    The working files of a single run. Every step receives the paths it needs from here instead of
    reading module level constants, which keeps the steps testable against a temporary directory.
    """

    work_dir: Path
    config_file: Path
    download_file: Path
    wallpaper_file: Path
    log_file: Path

    def __post_init__(self):
        # the Windows wallpaper API fails when it is not given a full path
        self.work_dir = Path(self.work_dir).expanduser().resolve()
        self.config_file = Path(self.config_file).expanduser().resolve()
        self.download_file = Path(self.download_file).expanduser().resolve()
        self.wallpaper_file = Path(self.wallpaper_file).expanduser().resolve()
        self.log_file = Path(self.log_file).expanduser().resolve()

    @classmethod
    def from_work_dir(
        cls, work_dir: Optional[Path] = None, config_file: Optional[Path] = None
    ) -> "EarthwallPaths":
        """
        Build the set of working files rooted at work_dir (current directory by default). The config
        file is taken from config_file if given, then from the EARTHWALL_CONFIG environment variable,
        and finally defaults to earth_wallpaper.config.json inside work_dir.
        """

        work_dir = Path(work_dir or Path.cwd()).expanduser().resolve()

        if config_file is None:
            try:
                config_file = Path(os.environ[CONFIG_ENV_VAR])

            except KeyError:
                config_file = work_dir / CONFIG_FILE_NAME

        return cls(
            work_dir=work_dir,
            config_file=config_file,
            download_file=work_dir / DOWNLOAD_FILE_NAME,
            wallpaper_file=work_dir / WALLPAPER_FILE_NAME,
            log_file=work_dir / LOG_FILE_NAME,
        )


def read_config(config_path: Path) -> WallpaperConfig:
    """
    Read the config file at config_path and instantiate the "WallpaperConfig" section as a
    WallpaperConfig dataclass. Keys in the section that are not fields of WallpaperConfig are ignored.
    Raise EarthwallConfigError if the file can't be read or does not hold a valid section.
    """

    config_path = Path(config_path)

    # utf-8-sig also accepts files saved with a byte order mark, as Windows editors tend to do
    try:
        with config_path.open("r", encoding="utf-8-sig") as file:
            from_json = json.loads(file.read())

    except json.JSONDecodeError as error:
        raise EarthwallConfigError(f"There was an issue reading the config: {error}")

    except UnicodeDecodeError as error:
        raise EarthwallConfigError(f"The config is not valid UTF-8 text: {error}")

    except FileNotFoundError as error:
        raise EarthwallConfigError(f"There was an issue opening the config: {error}")

    except OSError as error:
        raise EarthwallConfigError(f"There was an issue opening the config: {error}")

    if not isinstance(from_json, dict):
        raise EarthwallConfigError(
            f"Config file {config_path} must contain a JSON object at the top level."
        )

    section = from_json.get(CONFIG_SECTION)
    if not isinstance(section, dict):
        raise EarthwallConfigError(
            f"Config file {config_path} has no '{CONFIG_SECTION}' section."
        )

    known = {field.name for field in fields(WallpaperConfig)}
    missing = sorted(known - section.keys())
    if missing:
        raise EarthwallConfigError(
            f"'{CONFIG_SECTION}' section is missing: {', '.join(missing)}."
        )

    return WallpaperConfig(**{key: section[key] for key in known})


def load_config(config_path: Path) -> Optional[WallpaperConfig]:
    """
    Pipeline entry point for the config loader. Returns None when the configuration is not available
    (missing file, malformed json, absent section or invalid values) after logging the reason.
    """

    log.info("Reading configuration file", path=str(config_path))

    try:
        config = read_config(config_path)

    except EarthwallConfigError as error:
        log.error("Error reading configuration file", error=str(error))
        return None

    if config.overflows:
        log.warning(
            "Scaled image is larger than the wallpaper canvas and will be cropped",
            scale_to=list(config.scale_to),
            canvas_size=list(config.canvas_size),
        )

    return config
