"""Tests for the device service.

These tests verify that:
1. Validation runs before any store interaction
2. Timestamps are stamped as documented
3. Partial updates write only the supplied fields
4. Store failures surface as StorageFailureError
"""

from unittest.mock import MagicMock

import pytest

from smart_home_devices.common.exceptions import (
    DeviceNotFoundError,
    MissingFieldsError,
    MissingIDError,
    StorageFailureError,
)
from smart_home_devices.data.schemas.device import DeviceUpdate, HomeAssignmentMessage
from smart_home_devices.registry.service import DeviceService, current_millis
from smart_home_devices.registry.store import DeviceStore, DeviceStoreError


@pytest.fixture
def mock_store():
    """Store double that records calls."""
    return MagicMock(spec=DeviceStore)


@pytest.fixture
def mock_service(mock_store, clock):
    return DeviceService(mock_store, clock=clock)


class TestCreate:
    """Tests for DeviceService.create."""
    
    def test_create_persists_all_fields(self, service, store, thermostat_payload):
        device = service.create(thermostat_payload)
        
        record = store.get("1")
        assert record["mac"] == "AA:BB:CC:DD:EE:FF"
        assert record["name"] == "Thermostat"
        assert record["type"] == "thermostat"
        assert record["homeId"] == "home-123"
        assert record["createdAt"] == device.created_at
    
    def test_create_sets_equal_timestamps(self, service, thermostat_payload):
        device = service.create(thermostat_payload)
        
        assert device.created_at == device.modified_at
    
    def test_create_without_home_id(self, service, store, thermostat_payload):
        del thermostat_payload["homeId"]
        
        device = service.create(thermostat_payload)
        
        assert device.home_id == ""
        assert store.get("1")["homeId"] == ""
    
    @pytest.mark.parametrize("missing", ["id", "mac", "name", "type"])
    def test_create_missing_required_field(self, mock_service, mock_store, thermostat_payload, missing):
        del thermostat_payload[missing]
        
        with pytest.raises(MissingFieldsError) as exc_info:
            mock_service.create(thermostat_payload)
        
        assert exc_info.value.details["missing_fields"] == [missing]
        mock_store.put.assert_not_called()
    
    def test_create_empty_required_field(self, service, store, thermostat_payload):
        thermostat_payload["name"] = ""
        
        with pytest.raises(MissingFieldsError):
            service.create(thermostat_payload)
        
        assert "1" not in store
    
    def test_create_lists_every_missing_field(self, service):
        with pytest.raises(MissingFieldsError) as exc_info:
            service.create({"id": "", "mac": "AA:BB:CC:DD:EE:FF"})
        
        assert exc_info.value.details["missing_fields"] == ["id", "name", "type"]
    
    def test_create_non_string_field_counts_as_missing(self, service, thermostat_payload):
        thermostat_payload["mac"] = 42
        
        with pytest.raises(MissingFieldsError):
            service.create(thermostat_payload)
    
    def test_create_overwrites_existing_record(self, service, store, thermostat_payload):
        first = service.create(thermostat_payload)
        thermostat_payload["name"] = "Hallway Thermostat"
        second = service.create(thermostat_payload)
        
        record = store.get("1")
        assert record["name"] == "Hallway Thermostat"
        assert record["createdAt"] == second.created_at
        assert second.created_at > first.created_at
    
    def test_create_store_failure(self, mock_service, mock_store, thermostat_payload):
        mock_store.put.side_effect = DeviceStoreError("put_item", RuntimeError("throttled"))
        
        with pytest.raises(StorageFailureError) as exc_info:
            mock_service.create(thermostat_payload)
        
        assert exc_info.value.code == "STORAGE_FAILURE"
        assert isinstance(exc_info.value.__cause__, DeviceStoreError)
        assert "throttled" not in exc_info.value.message


class TestGet:
    """Tests for DeviceService.get."""
    
    def test_get_returns_full_record(self, service, thermostat_payload):
        created = service.create(thermostat_payload)
        
        device = service.get("1")
        
        assert device == created
    
    def test_get_empty_id(self, mock_service, mock_store):
        with pytest.raises(MissingIDError):
            mock_service.get("")
        
        mock_store.get.assert_not_called()
    
    def test_get_absent_id(self, service):
        with pytest.raises(DeviceNotFoundError) as exc_info:
            service.get("non-existent")
        
        assert exc_info.value.details["device_id"] == "non-existent"
    
    def test_get_store_failure(self, mock_service, mock_store):
        mock_store.get.side_effect = DeviceStoreError("get_item")
        
        with pytest.raises(StorageFailureError):
            mock_service.get("1")
    
    def test_get_sparse_record_reads_zero_values(self, service, store):
        store.put({"id": "7", "homeId": "home-1", "modifiedAt": 5})
        
        device = service.get("7")
        
        assert device.mac == ""
        assert device.created_at == 0
        assert device.modified_at == 5
    
    def test_get_unreadable_record(self, service, store):
        store.put({"id": "7", "createdAt": "yesterday", "modifiedAt": 5})
        
        with pytest.raises(StorageFailureError) as exc_info:
            service.get("7")
        
        assert exc_info.value.details["operation"] == "decode"


class TestUpdate:
    """Tests for DeviceService.update."""
    
    def test_update_changes_only_supplied_fields(self, service, thermostat_payload):
        created = service.create(thermostat_payload)
        
        service.update({"id": "1", "name": "Bedroom"})
        device = service.get("1")
        
        assert device.name == "Bedroom"
        assert device.mac == created.mac
        assert device.type == created.type
        assert device.home_id == created.home_id
        assert device.created_at == created.created_at
        assert device.modified_at > created.modified_at
    
    def test_update_id_only_touches_modified_at(self, service, thermostat_payload):
        created = service.create(thermostat_payload)
        
        service.update({"id": "1"})
        device = service.get("1")
        
        assert device.model_dump(exclude={"modified_at"}) == created.model_dump(exclude={"modified_at"})
        assert device.modified_at > created.modified_at
    
    def test_update_sends_sparse_changes(self, mock_service, mock_store, clock):
        clock.now = 1000
        
        mock_service.update({"id": "1", "homeId": "home-456", "mac": "11:22:33:44:55:66"})
        
        mock_store.partial_update.assert_called_once_with(
            "1",
            {"mac": "11:22:33:44:55:66", "homeId": "home-456"},
            {"modifiedAt": 1000},
        )
    
    def test_update_empty_string_is_applied(self, service, store, thermostat_payload):
        service.create(thermostat_payload)
        
        service.update({"id": "1", "homeId": ""})
        
        assert store.get("1")["homeId"] == ""
    
    def test_update_ignores_unknown_fields(self, mock_service, mock_store):
        mock_service.update({"id": "1", "color": "blue", "createdAt": 1})
        
        _, changes, _ = mock_store.partial_update.call_args[0]
        assert changes == {}
    
    def test_update_skips_non_string_values(self, mock_service, mock_store):
        mock_service.update({"id": "1", "name": 5, "type": None, "mac": "AA"})
        
        _, changes, _ = mock_store.partial_update.call_args[0]
        assert changes == {"mac": "AA"}
    
    @pytest.mark.parametrize("payload", [{}, {"id": ""}, {"id": 12}, {"name": "x"}])
    def test_update_missing_id(self, mock_service, mock_store, payload):
        with pytest.raises(MissingIDError):
            mock_service.update(payload)
        
        mock_store.partial_update.assert_not_called()
    
    def test_update_accepts_update_model(self, mock_service, mock_store):
        mock_service.update(DeviceUpdate(id="1", type="sensor"))
        
        _, changes, _ = mock_store.partial_update.call_args[0]
        assert changes == {"type": "sensor"}
    
    def test_update_absent_device_follows_store(self, service, store):
        service.update({"id": "ghost", "homeId": "home-1"})
        
        assert store.get("ghost")["homeId"] == "home-1"
    
    def test_update_store_failure(self, mock_service, mock_store):
        mock_store.partial_update.side_effect = DeviceStoreError("update_item")
        
        with pytest.raises(StorageFailureError) as exc_info:
            mock_service.update({"id": "1", "name": "x"})
        
        assert exc_info.value.details == {"operation": "update", "device_id": "1"}


class TestHomeAssignment:
    """Tests for DeviceService.apply_home_assignment."""
    
    def test_assignment_sets_home_and_modified_at(self, mock_service, mock_store, clock):
        clock.now = 2000
        
        mock_service.apply_home_assignment(HomeAssignmentMessage(id="1", homeId="home-9"))
        
        mock_store.partial_update.assert_called_once_with(
            "1", {"homeId": "home-9"}, {"modifiedAt": 2000}
        )
    
    def test_assignment_without_id(self, mock_service, mock_store):
        with pytest.raises(MissingIDError):
            mock_service.apply_home_assignment(HomeAssignmentMessage(id="", homeId="home-9"))
        
        mock_store.partial_update.assert_not_called()


class TestDelete:
    """Tests for DeviceService.delete."""
    
    def test_delete_removes_record(self, service, thermostat_payload):
        service.create(thermostat_payload)
        
        service.delete("1")
        
        with pytest.raises(DeviceNotFoundError):
            service.get("1")
    
    def test_delete_absent_id_is_not_an_error(self, service):
        service.delete("never-existed")
        service.delete("never-existed")
    
    def test_delete_empty_id(self, mock_service, mock_store):
        with pytest.raises(MissingIDError):
            mock_service.delete("")
        
        mock_store.delete.assert_not_called()
    
    def test_delete_store_failure(self, mock_service, mock_store):
        mock_store.delete.side_effect = DeviceStoreError("delete_item")
        
        with pytest.raises(StorageFailureError):
            mock_service.delete("1")


def test_current_millis_is_epoch_milliseconds():
    # 2020-01-01T00:00:00Z in ms
    assert current_millis() > 1_577_836_800_000
