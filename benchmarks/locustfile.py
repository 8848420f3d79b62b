"""
Smart Home Devices HTTP Load Test - Locust
==========================================
Exercises the real HTTP API layer (POST/GET/PUT/DELETE /devices) end-to-end.
Complements benchmarks/latency_benchmark.py, which benchmarks the
in-process DeviceService directly without going through the network stack.

Usage (headless, 200 concurrent users, 60-second run):

    DEVICES_STORE_BACKEND=memory python main.py api &
    locust -f benchmarks/locustfile.py \\
           --headless -u 200 -r 20 --run-time 60s \\
           --host http://localhost:8000

    # Interactive web UI (browse to http://localhost:8089):
    locust -f benchmarks/locustfile.py --host http://localhost:8000

Key stats emitted at test end
------------------------------
  - Total requests / failure count / error rate (%)
  - P50 / P95 / P99 HTTP latency (ms)
  - Requests per second (RPS) at steady state
  - Mean CPU utilisation (%) + peak CPU (%) sampled via psutil
"""

from __future__ import annotations

import random
import threading
import time
import uuid
from collections import deque

import psutil
from locust import HttpUser, between, events, task

# ---------------------------------------------------------------------------
# CPU utilisation sampler, runs in a background thread during the test
# ---------------------------------------------------------------------------

_cpu_samples: deque[float] = deque()
_cpu_sampler_stop = threading.Event()


def _sample_cpu() -> None:
    """Collect system-wide CPU% every second until signalled to stop."""
    while not _cpu_sampler_stop.is_set():
        _cpu_samples.append(psutil.cpu_percent(interval=None))
        time.sleep(1.0)


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Start the CPU sampler thread and prime the psutil baseline reading."""
    _cpu_samples.clear()
    _cpu_sampler_stop.clear()
    # First call always returns 0.0
    psutil.cpu_percent(interval=None)
    t = threading.Thread(target=_sample_cpu, daemon=True, name="cpu-sampler")
    t.start()
    print("\n[devices-load-test] CPU sampler started.")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Stop the CPU sampler and print a consolidated results summary."""
    _cpu_sampler_stop.set()

    stats = environment.runner.stats.total
    req_count = stats.num_requests
    fail_count = stats.num_failures
    error_rate = (fail_count / req_count * 100) if req_count > 0 else 0.0

    p50 = stats.get_response_time_percentile(0.50) or 0
    p95 = stats.get_response_time_percentile(0.95) or 0
    p99 = stats.get_response_time_percentile(0.99) or 0
    rps = stats.current_rps

    cpu_list = list(_cpu_samples)
    mean_cpu = sum(cpu_list) / len(cpu_list) if cpu_list else 0.0
    peak_cpu = max(cpu_list) if cpu_list else 0.0

    print("\n" + "=" * 60)
    print("  Smart Home Devices Load Test Results")
    print("=" * 60)
    print(f"  Requests        : {req_count:>8,}")
    print(f"  Failures        : {fail_count:>8,}")
    print(f"  Error rate      : {error_rate:>7.2f}%")
    print(f"  RPS (current)   : {rps:>7.1f}")
    print(f"  P50 latency     : {p50:>7} ms")
    print(f"  P95 latency     : {p95:>7} ms")
    print(f"  P99 latency     : {p99:>7} ms")
    print(f"  CPU mean        : {mean_cpu:>7.1f}%")
    print(f"  CPU peak        : {peak_cpu:>7.1f}%")
    print("=" * 60 + "\n")


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

DEVICE_TYPES = ("thermostat", "lamp", "lock", "camera", "speaker")


def _device_payload() -> dict:
    device_type = random.choice(DEVICE_TYPES)
    return {
        "id": f"dev_{uuid.uuid4().hex[:12]}",
        "mac": ":".join(f"{random.randint(0, 255):02X}" for _ in range(6)),
        "name": f"{device_type.title()} {random.randint(1, 99)}",
        "type": device_type,
        "homeId": f"home_{random.randint(1, 500)}",
    }


# ---------------------------------------------------------------------------
# Locust user
# ---------------------------------------------------------------------------

class DeviceUser(HttpUser):
    """
    Simulates a device fleet registering and reporting against /devices.

    Task weighting:
      - 5 reads of a device this user created
      - 2 creates
      - 2 home reassignments (PUT /devices)
      - 1 delete

    Wait time: 0.1-0.5 s between requests per user.
    """

    wait_time = between(0.1, 0.5)

    def on_start(self):
        """Verify the API is healthy and register a first device."""
        self.device_ids: list[str] = []
        with self.client.get("/health", catch_response=True) as resp:
            if resp.status_code != 200:
                resp.failure(f"Health check failed: HTTP {resp.status_code}")
        self.create_device()

    def _expect(self, response, status_code: int) -> None:
        if response.status_code == status_code:
            response.success()
        elif response.status_code in (400, 422):
            response.failure(f"Validation error: {response.text[:200]}")
        else:
            response.failure(f"Unexpected HTTP {response.status_code}")

    @task(2)
    def create_device(self):
        payload = _device_payload()
        with self.client.post(
            "/devices", json=payload, name="POST /devices", catch_response=True
        ) as response:
            self._expect(response, 201)
            if response.status_code == 201:
                self.device_ids.append(payload["id"])

    @task(5)
    def get_device(self):
        if not self.device_ids:
            return
        with self.client.get(
            f"/devices/{random.choice(self.device_ids)}",
            name="GET /devices/{id}",
            catch_response=True,
        ) as response:
            self._expect(response, 200)
            if response.status_code == 200 and "modifiedAt" not in response.json():
                response.failure("Response missing 'modifiedAt' field")

    @task(2)
    def reassign_home(self):
        if not self.device_ids:
            return
        with self.client.put(
            "/devices",
            json={"id": random.choice(self.device_ids), "homeId": f"home_{random.randint(1, 500)}"},
            name="PUT /devices",
            catch_response=True,
        ) as response:
            self._expect(response, 200)

    @task(1)
    def delete_device(self):
        if len(self.device_ids) < 2:
            return
        device_id = self.device_ids.pop(random.randrange(len(self.device_ids)))
        with self.client.delete(
            f"/devices/{device_id}", name="DELETE /devices/{id}", catch_response=True
        ) as response:
            self._expect(response, 200)
