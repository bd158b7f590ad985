"""Logging configuration for the stepcheck CLI."""

import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO = sys.stderr,
) -> Console:
    """Configure logging for CLI runs.

    Args:
        verbosity: Number of -v flags (0=warnings, 1=info, 2+=debug)
        quiet: Only show errors (takes precedence over verbosity)
        no_color: Disable colored output
        stream: Output stream for logs

    Returns:
        The Rich console the log handler writes to
    """
    if quiet:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    console = Console(file=stream, no_color=no_color, force_terminal=False if no_color else None)
    handler = RichHandler(
        console=console,
        show_time=verbosity >= 2,
        show_path=verbosity >= 2,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    return console
