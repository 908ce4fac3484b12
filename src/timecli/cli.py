"""CLI entry point for time-cli. Uses Click for argument parsing."""

from __future__ import annotations

import asyncio
import logging

import click

from timecli import __version__
from timecli.app import App
from timecli.config import Config
from timecli.terminal import ProcessTerminal, TerminalError

logger = logging.getLogger(__name__)


def _setup_logging(log_file: str | None, log_level: str) -> None:
    # The terminal is the render surface, so logs only ever go to a file.
    if not log_file:
        return
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@click.command()
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write diagnostic logging to this file.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="info",
    show_default=True,
)
@click.version_option(__version__, prog_name="time-cli")
def main(log_file, log_level):
    """Full-screen terminal shell.

    Keys: n new task, c calendar, m main menu, ctrl+c quit.
    """
    _setup_logging(log_file, log_level)

    config = Config()
    app = App(ProcessTerminal(write_log_path=config.write_log_path), config)
    try:
        asyncio.run(app.run())
    except (TerminalError, OSError) as e:
        logger.exception("Terminal failure")
        raise click.ClickException(str(e)) from e
    logger.info("Exited normally")


if __name__ == "__main__":
    main()
