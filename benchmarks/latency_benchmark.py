import time
import uuid
import numpy as np
import concurrent.futures
from smart_home_devices.registry.service import DeviceService
from smart_home_devices.registry.store import InMemoryDeviceStore

def create_device_payload():
    return {
        "id": f"bench-{uuid.uuid4().hex[:8]}",
        "mac": "AA:BB:CC:DD:EE:FF",
        "name": "Thermostat",
        "type": "thermostat",
        "homeId": "home-bench",
    }

def device_lifecycle(service, payload):
    service.create(payload)
    service.get(payload["id"])
    service.update({"id": payload["id"], "homeId": "home-moved"})
    service.delete(payload["id"])

def run_latency_benchmark(iterations=1000):
    service = DeviceService(InMemoryDeviceStore())
    
    print(f"--- Latency Benchmark ({iterations} lifecycles) ---")
    
    latencies = []
    
    # Warmup
    device_lifecycle(service, create_device_payload())
    
    for i in range(iterations):
        payload = create_device_payload()
        start_time = time.perf_counter()
        device_lifecycle(service, payload)
        end_time = time.perf_counter()
        
        latency_ms = (end_time - start_time) * 1000
        latencies.append(latency_ms)
        
        if (i + 1) % 200 == 0:
            print(f"  Completed {i + 1}/{iterations} iterations")
            
    print("\nLatency Results:")
    print(f"  Mean:   {np.mean(latencies):.3f} ms")
    print(f"  Median: {np.median(latencies):.3f} ms")
    print(f"  P95:    {np.percentile(latencies, 95):.3f} ms")
    print(f"  P99:    {np.percentile(latencies, 99):.3f} ms")
    print("-" * 40)
    return latencies

def run_throughput_benchmark(total_requests=5000, concurrent_users=10):
    service = DeviceService(InMemoryDeviceStore())
    payloads = [create_device_payload() for _ in range(total_requests)]
    
    print(f"\n--- Throughput Benchmark ({total_requests} lifecycles, {concurrent_users} concurrent) ---")
    
    start_time = time.perf_counter()
    
    with concurrent.futures.ThreadPoolExecutor(max_workers=concurrent_users) as executor:
        futures = [executor.submit(device_lifecycle, service, p) for p in payloads]
        concurrent.futures.wait(futures)
        
    end_time = time.perf_counter()
    total_time = end_time - start_time
    
    throughput = total_requests / total_time
    
    print(f"\nThroughput Results:")
    print(f"  Total Time: {total_time:.2f} s")
    print(f"  Throughput: {throughput:.2f} lifecycles/sec")
    print("-" * 40)
    return throughput

if __name__ == "__main__":
    run_latency_benchmark()
    run_throughput_benchmark()
