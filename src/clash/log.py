"""Logging configuration for applications embedding the client."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure console logging for the ``clash`` loggers.

    Calling it again only updates the level; the handler is installed once.
    """
    logger = logging.getLogger("clash")
    logger.setLevel(level)

    for handler in logger.handlers:
        if getattr(handler, "_clash_console", False):
            handler.setLevel(level)
            return

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler._clash_console = True  # type: ignore[attr-defined]
    logger.addHandler(console_handler)

    # Websocket frames are logged by us at debug level already
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
