"""Logging configuration for the jqlite CLI."""

from __future__ import annotations

import logging
import sys


LOGGER_NAME = "jqlite"


def configure_logging(verbose: bool) -> None:
    """Configure logging output based on verbosity.

    Query results own stdout, so diagnostics are written to stderr.

    Args:
        verbose: Whether to enable INFO logging to stderr
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False

    if verbose:
        logger.setLevel(logging.INFO)
        if not any(isinstance(handler, logging.StreamHandler) for handler in logger.handlers):
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(logging.INFO)
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)
    else:
        logger.setLevel(logging.WARNING)
        logger.handlers.clear()
