"""This module implements some helpers for setting up logging."""

from __future__ import annotations

import logging

import colorlog

DEBUG = logging.DEBUG
INFO = logging.INFO
WARNING = logging.WARNING
ERROR = logging.ERROR
FATAL = logging.FATAL
CRITICAL = logging.CRITICAL


def setup(level: int = logging.INFO, logger: logging.Logger | None = None) -> None:
    """Setup a colorful logging output.

    If `logger` is None, sets up only the ``sddsplain`` logger. Calling this
    function again on the same logger replaces the handler installed by the
    previous call instead of stacking a second one.

    Parameters
    ----------
    level
        logging level (see :mod:`logging` module).
    logger
        if not `None`, setup this logger.

    Examples
    --------
    >>> from sddsplain import logging
    >>> logging.setup(level=logging.DEBUG)
    """
    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter("%(log_color)s%(name)s [%(levelname)s] %(message)s")
    )
    handler._sddsplain_handler = True

    if logger is None:
        logger = colorlog.getLogger("sddsplain")

    for old in list(logger.handlers):
        if getattr(old, "_sddsplain_handler", False):
            logger.removeHandler(old)

    logger.setLevel(level)
    logger.addHandler(handler)
