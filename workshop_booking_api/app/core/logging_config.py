"""
Logging configuration for the booking service.

``setup_logging`` attaches handlers to the ``workshop_booking_api``
package logger, which every module logs through via
``logging.getLogger(__name__)``.  Records still propagate to the root
logger, so uvicorn's or pytest's handlers see them as well.
"""

import logging
from pathlib import Path

from .config import Settings

PACKAGE_LOGGER = "workshop_booking_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: Settings) -> logging.Logger:
    """Configure the package logger from ``config``.

    The level is applied on every call; handlers are attached only on
    the first one, so building several apps in one process (as the test
    suite does) does not duplicate output.

    Parameters
    ----------
    config : Settings
        Uses ``log_level`` (case insensitive, unknown names fall back to
        ``INFO``) and ``log_file`` (empty for console only).

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.log_file:
        log_path = Path(config.log_file).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info("Writing logs to %s", log_path)

    return logger
