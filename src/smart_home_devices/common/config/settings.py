"""Configuration management - Centralized configuration for the device registry.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
"""

import os
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from smart_home_devices.common.constants import QueueConstants, StoreConstants
from smart_home_devices.common.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StoreBackend(str, Enum):
    """Device store backend types."""
    DYNAMODB = "dynamodb"
    MEMORY = "memory"


@dataclass
class Config:
    """Central configuration object for the device registry.
    
    All settings can be overridden via environment variables prefixed with
    DEVICES_ (AWS_DEFAULT_REGION keeps its standard name).
    
    Example:
        DEVICES_ENVIRONMENT=production
        DEVICES_TABLE=DevicesTable
        DEVICES_STORE_BACKEND=dynamodb
    """
    
    # Core settings
    environment: Environment = field(
        default_factory=lambda: Environment(
            os.getenv("DEVICES_ENVIRONMENT", "development")
        )
    )
    debug: bool = field(
        default_factory=lambda: os.getenv("DEVICES_DEBUG", "false").lower() == "true"
    )
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("DEVICES_LOG_LEVEL", "INFO").upper())
    )
    
    # Store settings
    store_backend: StoreBackend = field(
        default_factory=lambda: StoreBackend(
            os.getenv("DEVICES_STORE_BACKEND", "dynamodb").lower()
        )
    )
    table_name: Optional[str] = field(
        default_factory=lambda: os.getenv(StoreConstants.DEFAULT_TABLE_ENV) or None
    )
    dynamodb_endpoint_url: Optional[str] = field(
        default_factory=lambda: os.getenv("DEVICES_DYNAMODB_ENDPOINT_URL") or None
    )
    aws_region: str = field(
        default_factory=lambda: os.getenv("AWS_DEFAULT_REGION", StoreConstants.DEFAULT_REGION)
    )
    
    # Queue consumer settings
    queue_url: Optional[str] = field(
        default_factory=lambda: os.getenv("DEVICES_QUEUE_URL") or None
    )
    queue_wait_seconds: int = field(
        default_factory=lambda: int(
            os.getenv("DEVICES_QUEUE_WAIT_SECONDS", str(QueueConstants.DEFAULT_WAIT_SECONDS))
        )
    )
    queue_batch_size: int = field(
        default_factory=lambda: int(
            os.getenv("DEVICES_QUEUE_BATCH_SIZE", str(QueueConstants.MAX_BATCH_SIZE))
        )
    )
    
    # API settings
    api_host: str = field(
        default_factory=lambda: os.getenv("DEVICES_API_HOST", "0.0.0.0")
    )
    api_port: int = field(
        default_factory=lambda: int(os.getenv("DEVICES_API_PORT", "8000"))
    )
    
    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.store_backend == StoreBackend.DYNAMODB and not self.table_name:
            raise ConfigurationError(
                "DEVICES_TABLE must be set when using the DynamoDB store",
                details={"store_backend": self.store_backend.value},
            )
        
        if not 1 <= self.queue_batch_size <= QueueConstants.MAX_BATCH_SIZE:
            raise ConfigurationError(
                "DEVICES_QUEUE_BATCH_SIZE must be between 1 and "
                f"{QueueConstants.MAX_BATCH_SIZE}",
                details={"queue_batch_size": self.queue_batch_size},
            )
        
        if self.queue_wait_seconds < 0:
            raise ConfigurationError(
                "DEVICES_QUEUE_WAIT_SECONDS must not be negative",
                details={"queue_wait_seconds": self.queue_wait_seconds},
            )
        
        # Warn about debug in production
        if self.environment == Environment.PRODUCTION and self.debug:
            warnings.warn(
                "Debug mode is enabled in production environment",
                RuntimeWarning,
                stacklevel=2
            )
    
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION
    
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.
    
    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
