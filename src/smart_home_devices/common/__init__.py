"""Common utilities - logging, config, exceptions."""

from smart_home_devices.common.logging.logger import configure_logging, get_logger
from smart_home_devices.common.config import Config, get_config, reset_config
from smart_home_devices.common.exceptions import (
    SmartHomeDevicesException,
    ConfigurationError,
    MissingFieldsError,
    MissingIDError,
    DeviceNotFoundError,
    StorageFailureError,
    InvalidMessageError,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Config
    "Config",
    "get_config",
    "reset_config",
    # Exceptions
    "SmartHomeDevicesException",
    "ConfigurationError",
    "MissingFieldsError",
    "MissingIDError",
    "DeviceNotFoundError",
    "StorageFailureError",
    "InvalidMessageError",
]
