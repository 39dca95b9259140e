"""
logging_config.py

Logger configuration for the joker_odds package - call setup_logging() once
from the entry point, then use get_logger(__name__) in each module
"""
import logging
import os
from datetime import datetime
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Package-wide logger
logger = logging.getLogger("joker_odds")


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> logging.Logger:
    """
    Attach handlers to the package logger.

    Log lines go to stderr so stdout stays reserved for the report. When
    log_dir is given, a timestamped log file is written there as well.
    """
    handlers = [logging.StreamHandler()]

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_filename = os.path.join(log_dir, f"joker_odds_{timestamp}.log")
        handlers.append(logging.FileHandler(log_filename, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    if name == "joker_odds" or name.startswith("joker_odds."):
        return logging.getLogger(name)
    return logger.getChild(name)
