from __future__ import annotations

import logging

LOGGER_NAME = "dppmap"


def get_logger(verbose: bool = False) -> logging.Logger:
    """Package logger with a single stream handler attached on first use."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[dppmap] %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
