import logging
import os

from rich.logging import RichHandler


def _level() -> int:
    if os.getenv("DEBUG"):
        return logging.DEBUG
    return getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def get_logger(name=None) -> logging.Logger:
    """
    Returns a logger writing through a RichHandler.

    The handler is attached only once per logger name, so modules can call
    this at import time.
    """
    logger = logging.getLogger(name or "medbridge")
    level = _level()
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(logging.Formatter("[%(name)s]  %(message)s"))
        handler.setLevel(level)
        logger.addHandler(handler)
        logger.propagate = False

    return logger
