"""Logging setup for pmbench.

Every module logs through ``logging.getLogger("pmbench")``.  The console
shows one line per benchmarked command plus warnings for failed or timed
out commands; ``--log-file`` additionally keeps a timestamped DEBUG trace
with the exact command lines and workspace events of the run.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "pmbench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Attach pmbench's console (and optional file) handlers.

    Args:
        verbose: Show per-command DEBUG detail on the console.
        quiet: Only show warnings, e.g. failed commands.  *verbose* wins.
        log_file: Also write the full DEBUG trace of the run here.

    Returns:
        The ``pmbench`` logger.  Calling this again replaces its handlers.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(_console_level(verbose, quiet))
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        trace = logging.FileHandler(log_file, encoding="utf-8")
        trace.setLevel(logging.DEBUG)
        trace.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(trace)

    return logger
