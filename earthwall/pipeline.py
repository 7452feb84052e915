"""
earthwall pipeline

A run is four steps executed in order:

    read config -> download image -> composite wallpaper -> set wallpaper

Each step handles its own failures: the error is logged and the step reports False, at which point the
run stops. Nothing is retried. The next scheduled run starts over from the beginning.
"""

from functools import wraps
from pathlib import Path
from typing import Optional

import structlog

from earthwall.config import EarthwallPaths
from earthwall.config import WallpaperConfig
from earthwall.config import load_config
from earthwall.image_handler import download_image
from earthwall.image_handler import composite_image
from earthwall.image_handler import ImageDownloadError
from earthwall.image_handler import ImageProcessingError
from earthwall.image_handler import InvalidImageError
from earthwall.log import SEPARATOR
from earthwall.wallpaper_handler import update_wallpaper
from earthwall.wallpaper_handler import WallpaperSetter
from earthwall.wallpaper_handler import WallpaperUpdateError

log = structlog.stdlib.get_logger(__name__)

# GOES-16 (GOES-East) full disk GeoColor composite, refreshed every 10 minutes
DEFAULT_IMAGE_URL = "https://cdn.star.nesdis.noaa.gov/GOES16/ABI/FD/GEOCOLOR/1808x1808.jpg"


def step(message: str, *errors: type[Exception]):
    """
    Turn a function that raises one of errors on failure into a pipeline step that returns a bool.
    The error is logged under message and swallowed. Any other exception propagates to run_pipeline.
    """

    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs) -> bool:
            try:
                func(*args, **kwargs)

            except errors as error:
                log.error(message, error=str(error))
                return False

            return True

        return inner

    return wrapper


@step("Error downloading image", ImageDownloadError)
def fetch_image(url: str, dest_path: Path, timeout: Optional[float] = None):
    download_image(url, dest_path, timeout=timeout)


@step("Error resizing image", InvalidImageError, ImageProcessingError)
def build_wallpaper(img_path: Path, dest_path: Path, config: WallpaperConfig):
    composite_image(img_path, dest_path, config.scale_to, config.canvas_size)


@step("Error setting wallpaper", WallpaperUpdateError)
def apply_wallpaper(img_path: Path, setter: Optional[WallpaperSetter] = None):
    log.info("Setting wallpaper", path=str(img_path))
    update_wallpaper(img_path, setter=setter)


def run_pipeline(
    paths: EarthwallPaths,
    url: str = DEFAULT_IMAGE_URL,
    setter: Optional[WallpaperSetter] = None,
    timeout: Optional[float] = None,
) -> bool:
    """
    Execute one run. Returns True only if the wallpaper was set. Always finishes by logging the run
    separator, even when a step raised something it did not expect.
    """

    try:
        config = load_config(paths.config_file)
        if config is None:
            return False

        if not fetch_image(url, paths.download_file, timeout=timeout):
            return False

        if not build_wallpaper(paths.download_file, paths.wallpaper_file, config):
            return False

        return apply_wallpaper(paths.wallpaper_file, setter=setter)

    except Exception as error:
        log.exception("Unexpected error", error=str(error))
        return False

    finally:
        log.info(SEPARATOR)
