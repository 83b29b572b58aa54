"""Diagnostic logging configuration for the lazi CLI."""

from __future__ import annotations

import logging
import os

CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(verbose: bool = False, log_file: str | None = None) -> logging.Logger:
    """
    Configure dual-handler logging (console + file) on the ``lazi`` logger.

    Args:
        verbose: DEBUG on the console instead of WARNING
        log_file: Path to a log file receiving DEBUG and up (None for none)

    Returns:
        The configured ``lazi`` logger
    """
    logger = logging.getLogger("lazi")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(file_handler)

    return logger
