"""
log_util.py: Shared logger factory for the quakemap dashboard.

Every module grabs its logger with ``app_logger(__name__)``. Streamlit re-runs
the script on each interaction, so handlers are attached only once per logger.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level() -> int:
    level_name = os.getenv("QUAKEMAP_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def app_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """
    Build (or fetch) a named logger with console output and optional file output.

    :param name: Logger name, usually the calling module's ``__name__``.
    :param log_file: Optional path of a file that also receives the records.
    :return: Configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level())

    if getattr(logger, "_quakemap_configured", False):
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger._quakemap_configured = True
    return logger
