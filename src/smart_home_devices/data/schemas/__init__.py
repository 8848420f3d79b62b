"""Data schemas - canonical Pydantic definitions."""

from smart_home_devices.data.schemas.device import (
    Device,
    DeviceUpdate,
    HomeAssignmentMessage,
)

__all__ = [
    "Device",
    "DeviceUpdate",
    "HomeAssignmentMessage",
]
