from __future__ import annotations

import logging

import colorlog

from sddsplain import logging as sddslogging


def test_setup():
    logger = logging.getLogger("sddsplain.test")
    sddslogging.setup(sddslogging.DEBUG, logger)
    sddslogging.setup(sddslogging.DEBUG, logger)

    handlers = [h for h in logger.handlers if isinstance(h, colorlog.StreamHandler)]
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, colorlog.ColoredFormatter)
    assert logger.level == logging.DEBUG

    logger.removeHandler(handlers[0])
