"""Logging helpers."""

from smart_home_devices.common.logging.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
