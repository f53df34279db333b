"""Logging configuration for the friendly URL service."""

import json
import logging
import sys
from typing import Optional


LOGGER_NAME = "friendly_urls"

# Libraries that log every connection or request at INFO
NOISY_LOGGERS = ("asyncpg", "httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""
    
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the ``friendly_urls`` logger tree.
    
    Components log to children of this logger (``friendly_urls.web``,
    ``friendly_urls.resolver``...), so one call configures the whole service.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, in addition to stdout
        json_format: Emit JSON lines instead of plain text
        
    Returns:
        The ``friendly_urls`` logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False
    
    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
    
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger in the ``friendly_urls`` tree."""
    return logging.getLogger(name)
