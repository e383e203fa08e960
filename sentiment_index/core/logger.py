"""Shared ``pipeline`` logger: one file handler and one console handler."""

import logging
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(module)s.%(funcName)s | %(message)s"


def setup_logger(name: str = "pipeline", log_file: str | None = None, level: str | None = None) -> logging.Logger:
    """
    Configure and return a logger that writes to a log file and the console.

    Args:
        name (str): The name of the logger.
        log_file (str | None): Path to the log file. Defaults to
            ``$SENTIMENT_LOG_FILE`` or ``output/pipeline.log``.
        level (str | None): Level name. Defaults to ``$SENTIMENT_LOG_LEVEL``
            or ``INFO``; ``DEBUG`` also shows the scorers' renormalisation notes.

    Returns:
        logging.Logger: The configured logger instance.
    """
    log_path = Path(log_file or os.getenv("SENTIMENT_LOG_FILE", "output/pipeline.log"))
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)

    # setup_logger may run once per importing module
    if logger.handlers:
        return logger

    level_name = (level or os.getenv("SENTIMENT_LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


logger = setup_logger()
