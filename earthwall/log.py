"""
earthwall logging

Structured logging for scheduled runs. There is nobody watching the terminal when a scheduler starts
earthwall, so the log is the only record of what happened: every event is rendered by structlog as a
JSON object and written both to stdout and to the log file in the working directory.

The log file is appended to. Each run ends with SEPARATOR so consecutive runs are easy to tell apart.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import structlog

SEPARATOR = "=" * 107

_handlers: list[logging.Handler] = []


def _get_processors() -> list[Any]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(log_file: Optional[Path] = None, log_level: str = "INFO") -> None:
    """
    Configure the standard library root logger with a stdout handler (and a file handler when log_file
    is given), then route structlog through it.
    """

    close_logging()

    root_logger = logging.getLogger()
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(numeric_level)

    # the renderer already produced the JSON line, the handlers only write it out
    formatter = logging.Formatter("%(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    _handlers.append(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        _handlers.append(file_handler)

    for handler in _handlers:
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    structlog.configure(
        processors=_get_processors(),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def close_logging() -> None:
    """
    Flush and detach the handlers installed by configure_logging so the log file is closed.
    """

    root_logger = logging.getLogger()

    while _handlers:
        handler = _handlers.pop()
        handler.flush()
        root_logger.removeHandler(handler)
        handler.close()
