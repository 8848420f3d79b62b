"""Custom exceptions for the device registry.

Provides a hierarchy of exceptions for different error types.
All service errors inherit from SmartHomeDevicesException so callers can
branch on ``code`` without knowing which backend produced the failure.
"""

from typing import Any, Dict, List, Optional


class SmartHomeDevicesException(Exception):
    """Base exception for all device registry errors.
    
    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """
    
    def __init__(
        self,
        message: str,
        code: str = "DEVICES_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(SmartHomeDevicesException):
    """Raised when configuration is invalid or missing."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class MissingFieldsError(SmartHomeDevicesException):
    """Raised when a create request lacks one or more required fields."""
    
    def __init__(self, missing: List[str]):
        super().__init__(
            "Missing required fields: id, mac, name, type must be present",
            code="MISSING_FIELDS",
            details={"missing_fields": list(missing)},
        )


class MissingIDError(SmartHomeDevicesException):
    """Raised when a read, update or delete request has no device id."""
    
    def __init__(self, operation: str):
        super().__init__(
            "Missing device ID",
            code="MISSING_ID",
            details={"operation": operation},
        )


class DeviceNotFoundError(SmartHomeDevicesException):
    """Raised when no record exists for the requested device id."""
    
    def __init__(self, device_id: str):
        super().__init__(
            "Device not found",
            code="NOT_FOUND",
            details={"device_id": device_id},
        )


class StorageFailureError(SmartHomeDevicesException):
    """Raised when the device store fails for any reason.
    
    The backend error is chained as ``__cause__`` and logged, but it is not
    part of ``details``.
    """
    
    def __init__(self, operation: str, device_id: Optional[str] = None):
        details: Dict[str, Any] = {"operation": operation}
        if device_id is not None:
            details["device_id"] = device_id
        super().__init__(
            f"Device storage operation '{operation}' failed",
            code="STORAGE_FAILURE",
            details=details,
        )


class InvalidMessageError(SmartHomeDevicesException):
    """Raised when a queue message body cannot be decoded into an assignment."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_MESSAGE", details=details)
