# -------------------- LOGGING CONFIGURATION --------------------
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"


def create_logger(name: str, level=None):
    """Get configured logger instance"""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    level = level or os.environ.get("LOG_LEVEL", "INFO").upper()
    if isinstance(level, str) and not isinstance(logging.getLevelName(level), int):
        level = logging.INFO
    logger.setLevel(level)
    return logger
