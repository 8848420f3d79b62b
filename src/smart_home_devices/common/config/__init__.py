"""Configuration module - environment-driven settings."""

from smart_home_devices.common.config.settings import (
    Config,
    Environment,
    LogLevel,
    StoreBackend,
    get_config,
    reset_config,
)

__all__ = [
    "Config",
    "Environment",
    "LogLevel",
    "StoreBackend",
    "get_config",
    "reset_config",
]
