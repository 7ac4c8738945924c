"""Logging utilities."""

import logging
import sys
from typing import Optional

# Chatty third-party loggers, kept at WARNING unless debugging
_NOISY_LOGGERS = ("git.cmd", "git.remote", "github.Requester", "urllib3")


def setup_logging(
    level: int = logging.INFO,
    format_str: Optional[str] = None
) -> logging.Logger:
    """
    Configure the root handler and the ``backport_bot`` logger.

    Args:
        level: Logging level (default: INFO)
        format_str: Custom format string

    Returns:
        The package logger
    """
    if format_str is None:
        format_str = "[%(asctime)s] %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logger = get_logger()
    logger.setLevel(level)
    return logger


def get_logger(name: str = "backport_bot") -> logging.Logger:
    """Get a logger under the package namespace."""
    if name != "backport_bot" and not name.startswith("backport_bot."):
        name = f"backport_bot.{name}"
    return logging.getLogger(name)
