"""
earthwall console utilities

This module provides application-wide access to a Rich Console object for the interactive commands
(init, show) to write to stdout and stderr. Scheduled runs do not print here; they log instead.
"""

from rich.console import Console
from rich.theme import Theme

earthwall_theme = Theme(
    {"fail": "bold red", "confirm": "bold", "describe": ""}
)

console = Console(theme=earthwall_theme)
error_console = Console(theme=earthwall_theme, stderr=True)


"""
Formatting helpers
"""


def describe(msg: str, **kwargs):
    """
    Format descriptive msg and print to stdout.
    """

    console.print(f"{msg}", style="describe", **kwargs)


def confirm(msg: str, **kwargs):
    """
    Format confirmation msg and print to stdout. Accept any additional kwargs that console.print from
    rich module exposes.
    """

    console.print(f":white_check_mark-emoji: {msg}", style="confirm", **kwargs)


def fail(msg: str):
    """
    Format failure msg and print to stderr.
    """

    error_console.print(f":x-emoji: failed. {msg}", style="fail")
