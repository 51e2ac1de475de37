"""
Logging infrastructure.

Provides logging utilities for the infrastructure layer.
"""
import logging


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Get a handler-backed logger.

    Used by components that may run outside the API process (scripts,
    workers) where logging.basicConfig has not been called.

    Args:
        name: Logger name (usually module name)
        level: Level applied when the logger is first configured

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
