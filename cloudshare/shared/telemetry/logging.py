"""Logging configuration for the application."""

import logging
import sys

from cloudshare.core.config import get_settings


def setup_logging(debug: bool | None = None) -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True (or debug is passed as True),
    otherwise INFO. Output goes to stdout. Safe to call more than once:
    basicConfig is a no-op once the root logger has handlers.
    """
    if debug is None:
        debug = get_settings().debug
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
