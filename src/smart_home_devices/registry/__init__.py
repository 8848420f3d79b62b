"""Device registry - record service and store backends."""

from smart_home_devices.registry.store import (
    DeviceStore,
    DeviceStoreError,
    InMemoryDeviceStore,
)
from smart_home_devices.registry.dynamodb_store import DynamoDBDeviceStore
from smart_home_devices.registry.service import DeviceService, current_millis
from smart_home_devices.registry.factory import build_service, build_store

__all__ = [
    "DeviceStore",
    "DeviceStoreError",
    "InMemoryDeviceStore",
    "DynamoDBDeviceStore",
    "DeviceService",
    "current_millis",
    "build_service",
    "build_store",
]
