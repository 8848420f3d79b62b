"""Shared fixtures for the device registry tests."""

import os

import pytest

# The gateway reads these at import time; tests never talk to AWS.
os.environ.setdefault("DEVICES_STORE_BACKEND", "memory")
os.environ.setdefault("DEVICES_ENVIRONMENT", "development")

from smart_home_devices.common.config import reset_config  # noqa: E402
from smart_home_devices.registry.service import DeviceService  # noqa: E402
from smart_home_devices.registry.store import InMemoryDeviceStore  # noqa: E402


class FakeClock:
    """Millisecond clock that advances by ``step`` on every read."""
    
    def __init__(self, start: int = 1_700_000_000_000, step: int = 1):
        self.now = start
        self.step = step
    
    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryDeviceStore()


@pytest.fixture
def service(store, clock):
    return DeviceService(store, clock=clock)


@pytest.fixture
def thermostat_payload() -> dict:
    """A complete create request for the reference thermostat."""
    return {
        "id": "1",
        "mac": "AA:BB:CC:DD:EE:FF",
        "name": "Thermostat",
        "type": "thermostat",
        "homeId": "home-123",
    }
