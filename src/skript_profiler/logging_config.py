"""
Logging setup for the skript-profiler command line.

Library modules only call ``logging.getLogger(__name__)``. Handlers are
installed here on the ``skript_profiler`` logger rather than the root logger,
so a host that embeds the profiler keeps control of its own logging.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "skript_profiler"

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Handlers installed by the last setup_logging() call
_installed: list[logging.Handler] = []


def _console_level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Route profiler log records to stderr and, optionally, to a file.

    Calling it again replaces the handlers from the previous call, so the
    CLI can run several times in one process without duplicated output.

    Args:
        verbose: Show DEBUG records on stderr, with source paths and locals
            in tracebacks
        quiet: Show only ERROR records on stderr; wins over ``verbose``
        log_file: Also append every record, down to DEBUG, to this file

    Returns:
        The ``skript_profiler`` logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()

    console_level = _console_level(verbose, quiet)
    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_path=verbose,
    )
    console_handler.setLevel(console_level)
    _installed.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        file_handler.setLevel(logging.DEBUG)
        _installed.append(file_handler)

    for handler in _installed:
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if log_file else console_level)
    return logger
