"""
earthwall

Set the desktop wallpaper to a current satellite image of Earth.

This module defines the entry point to the earthwall CLI. The 'cli' group resolves the working files
for the run (config file, downloaded image, wallpaper image, log file) from the global options and
stores them on the click context for the subcommands. Running 'earthwall' without a subcommand is
the same as 'earthwall run', which is what a scheduler should invoke.
"""

from io import StringIO
from pathlib import Path

import click
import structlog
from rich.table import Table

from earthwall.config import DEFAULT_CONFIG
from earthwall.config import EarthwallPaths
from earthwall.config import WallpaperConfig
from earthwall.config import read_config
from earthwall.log import configure_logging
from earthwall.log import close_logging
from earthwall.pipeline import DEFAULT_IMAGE_URL
from earthwall.pipeline import run_pipeline

from earthwall.cli_utils.console import console
from earthwall.cli_utils.console import error_console
from earthwall.cli_utils.console import confirm
from earthwall.cli_utils.console import describe
from earthwall.cli_utils.decorators import catch_errors

log = structlog.stdlib.get_logger(__name__)


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path of the config file. Defaults to $EARTHWALL_CONFIG, then earth_wallpaper.config.json in the working directory.",
)
@click.option(
    "--work-dir",
    "-d",
    "work_dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory holding the downloaded image, the wallpaper and the log file. Defaults to the current directory.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Silence all console output of the interactive commands.",
)
@click.version_option()
@click.pass_context
def cli(ctx: click.Context, config_file, work_dir, quiet):
    """
    earthwall

    Download the latest satellite image of Earth, center it on a black canvas and set it as your
    desktop wallpaper. Schedule 'earthwall' with cron, a systemd timer or the Windows Task Scheduler
    to keep the wallpaper current.

    Create a config file in the current directory, then update the wallpaper:

        $ earthwall init

        $ earthwall
    """

    ctx.obj = EarthwallPaths.from_work_dir(work_dir=work_dir, config_file=config_file)

    # if quiet, capture all console output to a junk stream.
    if quiet:
        console.file = StringIO()
        error_console.file = StringIO()

    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command(name="run")
@click.option(
    "--url",
    "-u",
    default=DEFAULT_IMAGE_URL,
    show_default=True,
    help="Image to download. Must link directly to an image resource.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.pass_obj
def run(paths: EarthwallPaths, url: str, log_level: str):
    """
    Download, composite and set the wallpaper once. Progress and failures are written to the log;
    the exit code is 0 either way.
    """

    try:
        configure_logging(log_file=paths.log_file, log_level=log_level)

    except OSError as error:
        # an unwritable log file must not stop the wallpaper update, keep logging to stdout only
        configure_logging(log_file=None, log_level=log_level)
        log.error("Error opening log file", path=str(paths.log_file), error=str(error))

    try:
        run_pipeline(paths, url=url)

    finally:
        close_logging()


@cli.command(name="init")
@click.option(
    "--scale",
    "scale_to",
    type=(click.IntRange(min=1), click.IntRange(min=1)),
    default=DEFAULT_CONFIG.scale_to,
    show_default=True,
    help="Width and height the downloaded image is resized to.",
)
@click.option(
    "--canvas",
    "canvas_size",
    type=(click.IntRange(min=1), click.IntRange(min=1)),
    default=DEFAULT_CONFIG.canvas_size,
    show_default=True,
    help="Width and height of the wallpaper, usually the screen resolution.",
)
@click.option("--force", "-f", is_flag=True, help="Replace an existing config file.")
@click.pass_obj
@catch_errors
def init(paths: EarthwallPaths, scale_to, canvas_size, force: bool):
    """
    Write a config file with the given dimensions.
    """

    config = WallpaperConfig(
        ScaleToWidth=scale_to[0],
        ScaleToHeight=scale_to[1],
        WallpaperWidth=canvas_size[0],
        WallpaperHeight=canvas_size[1],
    )

    config_path = config.generate_config_json(paths.config_file, overwrite=force)
    confirm(f"'init' saved config to {config_path}")

    if config.overflows:
        describe(
            "note: the scaled image is larger than the canvas and will be cropped to fit."
        )


@cli.command(name="show")
@click.pass_obj
@catch_errors
def show(paths: EarthwallPaths):
    """
    Print the current configuration and the files a run will use.
    """

    config = read_config(paths.config_file)

    table = Table(title="earthwall", show_header=False)
    table.add_column("setting", style="bold")
    table.add_column("value")

    table.add_row("scale to", f"{config.ScaleToWidth}x{config.ScaleToHeight}")
    table.add_row("canvas", f"{config.WallpaperWidth}x{config.WallpaperHeight}")
    table.add_row("config file", str(paths.config_file))
    table.add_row("downloaded image", str(paths.download_file))
    table.add_row("wallpaper", str(paths.wallpaper_file))
    table.add_row("log file", str(paths.log_file))

    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
