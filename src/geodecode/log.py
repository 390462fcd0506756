"""
Package logger.

Library code only logs through `logger`; handlers and levels are left
to the application. The command-line program calls `setup_logging()`.
"""

import logging

LOGGER_NAME = "geodecode"

logger = logging.getLogger(LOGGER_NAME)


def verbose_level(verbose: bool) -> int:
    """Level for chatty progress messages: INFO when verbose, else DEBUG."""
    return logging.INFO if verbose else logging.DEBUG


def set_debug(enabled: bool) -> None:
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)


def setup_logging(debug: bool = False) -> None:
    """Attach a stream handler to the package logger (once) and set its level."""
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(name)s] %(levelname)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    set_debug(debug)
