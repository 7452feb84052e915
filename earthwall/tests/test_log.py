"""
Tests for log.py

Verify that events are written as JSON lines to both stdout and the log file, and that the log file
is appended to across runs.
"""

import json

import pytest
import structlog

from earthwall.log import configure_logging
from earthwall.log import close_logging
from earthwall.log import SEPARATOR


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    close_logging()
    structlog.reset_defaults()


def read_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_json_to_file_and_stdout(tmp_path, capsys):

    log_file = tmp_path / "earth_wallpaper.log"
    configure_logging(log_file=log_file)

    structlog.stdlib.get_logger("earthwall.test").info(
        "Downloading image", url="https://example.com/earth.jpg"
    )
    close_logging()

    [record] = read_lines(log_file)
    assert record["event"] == "Downloading image"
    assert record["url"] == "https://example.com/earth.jpg"
    assert record["level"] == "info"
    assert record["logger"] == "earthwall.test"
    assert "timestamp" in record

    stdout = json.loads(capsys.readouterr().out.strip())
    assert stdout == record


def test_log_level_filters(tmp_path):

    log_file = tmp_path / "earth_wallpaper.log"
    configure_logging(log_file=log_file, log_level="WARNING")

    log = structlog.stdlib.get_logger("earthwall.test")
    log.info("hidden")
    log.error("Error setting wallpaper", error="unsupported")
    close_logging()

    assert [record["event"] for record in read_lines(log_file)] == ["Error setting wallpaper"]


def test_log_file_appended(tmp_path):
    """
    Consecutive runs share one log file, each terminated by the separator line.
    """

    log_file = tmp_path / "earth_wallpaper.log"

    for run in range(2):
        configure_logging(log_file=log_file)
        log = structlog.stdlib.get_logger("earthwall.test")
        log.info("Reading configuration file", run=run)
        log.info(SEPARATOR)
        close_logging()

    events = [record["event"] for record in read_lines(log_file)]
    assert events == ["Reading configuration file", SEPARATOR] * 2


def test_exception_info_rendered(tmp_path):

    log_file = tmp_path / "earth_wallpaper.log"
    configure_logging(log_file=log_file)

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        structlog.stdlib.get_logger("earthwall.test").exception("Unexpected error")
    close_logging()

    [record] = read_lines(log_file)
    assert "RuntimeError: boom" in record["exception"]


def test_close_logging_releases_file(tmp_path):

    log_file = tmp_path / "earth_wallpaper.log"
    configure_logging(log_file=log_file)
    close_logging()

    # nothing is attached anymore, so this must not reach the file
    structlog.stdlib.get_logger("earthwall.test").info("after close")

    assert log_file.read_text() == ""


def test_separator():

    assert SEPARATOR == "=" * 107
