"""Logging configuration for the RAG showcase client."""

import logging
import sys
from typing import Optional

from rag_showcase.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Logger writing to stdout (Streamlit shows it in the server console).
    Level comes from LOG_LEVEL unless passed explicitly.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        logger.setLevel(logging.getLevelName(LOG_LEVEL))
        # Already has its own stdout handler
        logger.propagate = False
    if level is not None:
        logger.setLevel(level)
    return logger
