"""Quick smoke script for the API Gateway, run against the in-memory store."""

import json
import os

os.environ.setdefault("DEVICES_STORE_BACKEND", "memory")

from fastapi.testclient import TestClient
from smart_home_devices.api.gateway import app

client = TestClient(app)

device = {
    "id": "1",
    "mac": "AA:BB:CC:DD:EE:FF",
    "name": "Thermostat",
    "type": "thermostat",
    "homeId": "home-123",
}

steps = [
    ("POST /devices", lambda: client.post("/devices", json=device), 201),
    ("GET /devices/1", lambda: client.get("/devices/1"), 200),
    ("PUT /devices", lambda: client.put("/devices", json={"id": "1", "homeId": "home-456"}), 200),
    ("GET /devices/1", lambda: client.get("/devices/1"), 200),
    ("DELETE /devices/1", lambda: client.delete("/devices/1"), 200),
    ("GET /devices/1", lambda: client.get("/devices/1"), 404),
    ("POST /devices (missing fields)", lambda: client.post("/devices", json={"id": "2"}), 400),
]

all_passed = True
for label, call, expected in steps:
    print("=" * 60)
    print(f"Testing {label}")
    print("=" * 60)
    response = call()
    print(f"Status code: {response.status_code} (expected {expected})")
    print(json.dumps(response.json(), indent=2))
    if response.status_code != expected:
        print(f"❌ FAIL: {label}")
        all_passed = False

print("\n" + "=" * 60)
if all_passed:
    print("✅ ALL CHECKS PASSED!")
else:
    print("❌ CHECKS FAILED!")
print("=" * 60)
