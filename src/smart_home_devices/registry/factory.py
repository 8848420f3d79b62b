"""Builders wiring a DeviceService to the configured store."""

from typing import Optional

from smart_home_devices.common.config import Config, StoreBackend, get_config
from smart_home_devices.registry.dynamodb_store import DynamoDBDeviceStore
from smart_home_devices.registry.service import DeviceService
from smart_home_devices.registry.store import DeviceStore, InMemoryDeviceStore


def build_store(config: Optional[Config] = None) -> DeviceStore:
    config = config or get_config()
    if config.store_backend == StoreBackend.MEMORY:
        return InMemoryDeviceStore()
    return DynamoDBDeviceStore(
        table_name=config.table_name,
        region=config.aws_region,
        endpoint_url=config.dynamodb_endpoint_url,
    )


def build_service(config: Optional[Config] = None) -> DeviceService:
    return DeviceService(build_store(config))
