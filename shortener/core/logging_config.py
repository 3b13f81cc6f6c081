"""
Logging Configuration

Sets up the 'shortener' logger hierarchy. Every module logs through
logging.getLogger(__name__), so one handler on the package logger
covers services, the store and the request middleware.
"""

import logging

LOGGER_NAME = "shortener"
HANDLER_NAME = "shortener-stream"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a stream handler to the package logger and set its level.

    Calling it again only updates the level, so building several apps in
    one process (tests) does not duplicate log lines.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.set_name(HANDLER_NAME)
        logger.addHandler(handler)

    return logger
