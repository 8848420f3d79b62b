"""Smart Home Devices - device registry service."""

__version__ = "0.1.0"
__author__ = "Smart Home Devices Team"

from smart_home_devices.data.schemas.device import Device, DeviceUpdate, HomeAssignmentMessage
from smart_home_devices.registry.service import DeviceService

__all__ = [
    "Device",
    "DeviceUpdate",
    "HomeAssignmentMessage",
    "DeviceService",
]
