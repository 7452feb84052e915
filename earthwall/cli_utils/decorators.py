"""
earthwall Decorators

Helpers shared by the click commands in earthwall.cli.
"""

from sys import exit
from functools import wraps

import click

from earthwall.cli_utils.console import fail


def catch_errors(func):
    """
    Catch and format errors with the "fail" console template and gracefully
    exit the application with an error code. click's own exceptions (usage errors, --help,
    --version) are left for click to handle.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (click.exceptions.ClickException, click.exceptions.Exit, click.exceptions.Abort):
            raise
        except Exception as error:
            fail(str(error))
            exit(1)

    return wrapper
