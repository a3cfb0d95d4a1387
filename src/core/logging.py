"""Logging configuration shared by the CLI, dashboard and AI adapter.

Console logging only, one uniform format:
  timestamp | level | module | message

configure_logging() is called once by each entrypoint; library modules
only ask for a named logger.
"""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging settings.

    Parameters:
        level (str): "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    logging.getLogger(__name__).debug("Logging initialized with level %s", level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
