"""Tests for the home assignment consumer."""

import json
from unittest.mock import MagicMock, patch

import pytest

from smart_home_devices.messaging import consumer as consumer_module
from smart_home_devices.messaging.consumer import (
    BatchResult,
    HomeAssignmentConsumer,
    lambda_handler,
    reset_consumer,
)
from smart_home_devices.registry.service import DeviceService
from smart_home_devices.registry.store import DeviceStore, DeviceStoreError


def _record(message_id, payload):
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return {"messageId": message_id, "body": body}


@pytest.fixture
def consumer(service):
    return HomeAssignmentConsumer(service)


@pytest.fixture
def seeded_store(store):
    for device_id in ("a", "b", "c"):
        store.put({
            "id": device_id, "mac": "m", "name": "n", "type": "t",
            "createdAt": 1, "modifiedAt": 1,
        })
    return store


class TestBatchResult:
    
    def test_to_dict(self):
        result = BatchResult(applied=["m1", "m3"], skipped=["m2"])
        
        assert result.total == 3
        assert result.to_dict() == {
            "applied": 2,
            "skipped": 1,
            "skipped_message_ids": ["m2"],
        }


class TestProcessRecords:
    
    def test_applies_every_message(self, consumer, seeded_store):
        result = consumer.process_records([
            _record("m1", {"id": "a", "homeId": "h1"}),
            _record("m2", {"id": "b", "homeId": "h2"}),
        ])
        
        assert result.applied == ["m1", "m2"]
        assert result.skipped == []
        assert seeded_store.get("a")["homeId"] == "h1"
        assert seeded_store.get("b")["homeId"] == "h2"
    
    def test_refreshes_modified_at(self, consumer, seeded_store, clock):
        consumer.process_records([_record("m1", {"id": "a", "homeId": "h1"})])
        
        record = seeded_store.get("a")
        assert record["modifiedAt"] == clock.now - 1
        assert record["createdAt"] == 1
    
    def test_malformed_message_does_not_abort_batch(self, consumer, seeded_store):
        result = consumer.process_records([
            _record("m1", {"id": "a", "homeId": "h1"}),
            _record("m2", "{not json"),
            _record("m3", {"id": "c", "homeId": "h3"}),
        ])
        
        assert result.applied == ["m1", "m3"]
        assert result.skipped == ["m2"]
        assert seeded_store.get("a")["homeId"] == "h1"
        assert "homeId" not in seeded_store.get("b")
        assert seeded_store.get("c")["homeId"] == "h3"
    
    def test_missing_home_id_clears_household(self, consumer, store, clock):
        store.put({
            "id": "a", "mac": "m", "name": "n", "type": "t", "homeId": "h0",
            "createdAt": 1, "modifiedAt": 1,
        })
        
        result = consumer.process_records([_record("m1", {"id": "a"})])
        
        assert result.applied == ["m1"]
        record = store.get("a")
        assert record["homeId"] == ""
        assert record["modifiedAt"] == clock.now - 1
        assert record["name"] == "n"
    
    @pytest.mark.parametrize("payload", [
        {"homeId": "h1"},
        {"id": 5, "homeId": "h1"},
        {"id": "", "homeId": "h1"},
        {"id": "a", "homeId": 7},
        [],
    ])
    def test_invalid_assignment_is_skipped(self, consumer, seeded_store, payload):
        result = consumer.process_records([_record("m1", payload)])
        
        assert result.skipped == ["m1"]
        assert "homeId" not in seeded_store.get("a")
    
    def test_record_without_body_is_skipped(self, consumer):
        result = consumer.process_records([{"messageId": "m1"}, "not-a-record"])
        
        assert result.skipped == ["m1", "record-1"]
    
    def test_storage_failure_is_skipped(self, clock):
        store = MagicMock(spec=DeviceStore)
        store.partial_update.side_effect = [
            None,
            DeviceStoreError("update_item", RuntimeError("throttled")),
            None,
        ]
        consumer = HomeAssignmentConsumer(DeviceService(store, clock=clock))
        
        result = consumer.process_records([
            _record("m1", {"id": "a", "homeId": "h1"}),
            _record("m2", {"id": "b", "homeId": "h2"}),
            _record("m3", {"id": "c", "homeId": "h3"}),
        ])
        
        assert result.applied == ["m1", "m3"]
        assert result.skipped == ["m2"]
        assert store.partial_update.call_count == 3
    
    def test_unexpected_error_is_skipped(self):
        service = MagicMock(spec=DeviceService)
        service.apply_home_assignment.side_effect = [RuntimeError("boom"), None]
        consumer = HomeAssignmentConsumer(service)
        
        result = consumer.process_records([
            _record("m1", {"id": "a", "homeId": "h1"}),
            _record("m2", {"id": "b", "homeId": "h2"}),
        ])
        
        assert result.applied == ["m2"]
        assert result.skipped == ["m1"]
    
    def test_empty_batch(self, consumer):
        assert consumer.process_records([]).total == 0


class TestLambdaHandler:
    
    @pytest.fixture(autouse=True)
    def _reset(self):
        reset_consumer()
        yield
        reset_consumer()
    
    def test_handles_sqs_event(self, service, store):
        with patch.object(consumer_module, "build_service", return_value=service):
            response = lambda_handler({
                "Records": [
                    _record("m1", {"id": "1", "homeId": "home-9"}),
                    _record("m2", "garbage"),
                ]
            })
        
        assert response == {"applied": 1, "skipped": 1, "skipped_message_ids": ["m2"]}
        assert store.get("1")["homeId"] == "home-9"
    
    def test_builds_service_once(self, service):
        with patch.object(consumer_module, "build_service", return_value=service) as build:
            lambda_handler({"Records": []})
            lambda_handler({"Records": []})
        
        build.assert_called_once()
    
    def test_event_without_records(self, service):
        with patch.object(consumer_module, "build_service", return_value=service):
            assert lambda_handler({}) == {
                "applied": 0, "skipped": 0, "skipped_message_ids": []
            }
