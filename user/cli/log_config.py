# log_config.py
"""Leveled logging sink for the IFS driver (info/warning/error/debug/skip)."""

import logging
import typing

LOGGER_NAME = "ifs"
SKIP = 25 # Between INFO and WARNING
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.addLevelName(SKIP, "SKIP")


def setup_logging(verbose: bool = False,
                  stream: typing.Optional[typing.TextIO] = None) -> logging.Logger:
    """Configures the root 'ifs' logger with a single stream handler.

    Calling it again only adjusts the level, so repeated CLI invocations in
    one process do not stack handlers.

    Args:
        verbose: Emit debug messages when True.
        stream: Target stream; stderr when omitted.

    Returns:
        The configured 'ifs' logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Returns a child of the 'ifs' logger named after the calling module."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def log_skip(logger: logging.Logger, msg: str, *args: typing.Any) -> None:
    """Emits a message on the SKIP channel."""
    logger.log(SKIP, msg, *args)
