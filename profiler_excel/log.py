"""
Logging setup for the command line.

Library modules only create loggers under ``profiler_excel``; the CLI calls
``setup_logging`` once to attach a Rich handler on stderr.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "profiler_excel"


def setup_logging(verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    # Avoid stacking handlers when invoked repeatedly in one process
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
