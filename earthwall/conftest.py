"""
conftest.py

Test configuration for earthwall tests.

Defines Pytest fixtures for supplying test data to tests across the entire
test suite. Fixtures used within only a single module are defined
directly in that module. Test images are generated with PIL into the pytest
tmp_path so the suite does not depend on binary files in the repository.
"""

import json
from pathlib import Path

import pytest
from PIL import Image

from earthwall.config import EarthwallPaths
from earthwall.cli_utils.console import console
from earthwall.cli_utils.console import error_console


@pytest.fixture
def make_image(tmp_path):
    """
    Return a factory that saves a solid color image of the given size and returns its path.
    """

    def inner(size=(64, 64), color="white", name="source.jpg", format="JPEG") -> Path:
        path = tmp_path / name
        Image.new("RGB", size, color).save(path, format=format)
        return path

    return inner


@pytest.fixture
def test_image(make_image) -> Path:
    """
    A small satellite-sized stand-in: 1808 is the edge of the GOES full disk image, scaled down.
    """

    return make_image(size=(226, 226), color=(30, 90, 200), name="earth_test.jpg")


@pytest.fixture
def write_config(tmp_path):
    """
    Return a factory that writes a config file. Pass a dict for the WallpaperConfig section, or raw
    text to write the file contents verbatim.
    """

    def inner(section=None, raw: str = None, name="earth_wallpaper.config.json") -> Path:
        path = tmp_path / name
        if raw is not None:
            path.write_text(raw, encoding="utf-8")
        else:
            path.write_text(json.dumps({"WallpaperConfig": section}), encoding="utf-8")
        return path

    return inner


@pytest.fixture
def paths(tmp_path) -> EarthwallPaths:
    return EarthwallPaths.from_work_dir(
        work_dir=tmp_path, config_file=tmp_path / "earth_wallpaper.config.json"
    )


@pytest.fixture(autouse=True)
def reset_console():
    """
    --quiet swaps the console files for junk streams. Point them back at stdout/stderr after every test.
    """

    yield
    console.file = None
    error_console.file = None
