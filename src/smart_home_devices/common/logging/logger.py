"""Centralized logging configuration."""

import logging
from typing import Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level))
    
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        # own handler; records must not reach the root handler a second time
        logger.propagate = False
    
    return logger


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Configure root logging for a process entry point (API, consumer, Lambda)."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    
    # boto's wire logging is noisy below WARNING
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
