"""Device Service - Core business logic for device records.

Owns validation, timestamp stamping and partial-update field selection for
every entry point (HTTP handlers and the queue consumer), and translates
them into point operations on a DeviceStore.

Error Handling:
- Validation errors are raised before any store interaction
- Store failures are wrapped in StorageFailureError
- Nothing is retried here; retry policy belongs to the caller
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from smart_home_devices.common.constants import DeviceConstants
from smart_home_devices.common.exceptions import (
    DeviceNotFoundError,
    MissingFieldsError,
    MissingIDError,
    StorageFailureError,
)
from smart_home_devices.data.schemas.device import (
    Device,
    DeviceUpdate,
    HomeAssignmentMessage,
)
from smart_home_devices.registry.store import DeviceStore, DeviceStoreError


logger = logging.getLogger(__name__)


def current_millis() -> int:
    """Current time in milliseconds since the epoch."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and value != ""


class DeviceService:
    """Service for creating, reading, updating and deleting device records.
    
    Holds no mutable state of its own; all state lives in the store, which
    is bound to its table before being handed in.
    """
    
    def __init__(
        self,
        store: DeviceStore,
        clock: Optional[Callable[[], int]] = None,
    ):
        """Initialize the service.
        
        Args:
            store: Device store backend.
            clock: Millisecond clock. Defaults to the system clock.
        """
        self.store = store
        self._clock = clock or current_millis
    
    def create(self, payload: Mapping[str, Any]) -> Device:
        """Create a device, overwriting any existing record with the same id.
        
        Args:
            payload: Device-shaped mapping with id, mac, name, type and
                     optionally homeId
        
        Returns:
            The persisted Device, with createdAt == modifiedAt
        
        Raises:
            MissingFieldsError: If id, mac, name or type is empty or absent
            StorageFailureError: If the store write fails
        """
        missing = [
            attr for attr in DeviceConstants.REQUIRED_FIELDS
            if not _is_filled(payload.get(attr))
        ]
        if missing:
            logger.warning(f"Rejected device create, missing fields: {missing}")
            raise MissingFieldsError(missing)
        
        home_id = payload.get("homeId")
        now = self._clock()
        device = Device(
            id=payload["id"],
            mac=payload["mac"],
            name=payload["name"],
            type=payload["type"],
            home_id=home_id if isinstance(home_id, str) else "",
            created_at=now,
            modified_at=now,
        )
        
        try:
            self.store.put(device.to_record())
        except DeviceStoreError as e:
            logger.error(f"Failed to store device {device.id}: {e}")
            raise StorageFailureError("create", device.id) from e
        
        logger.info(f"Created device {device.id}")
        return device
    
    def get(self, device_id: str) -> Device:
        """Fetch a device by id.
        
        Raises:
            MissingIDError: If device_id is empty
            DeviceNotFoundError: If no record exists for device_id
            StorageFailureError: If the lookup fails or the record is unreadable
        """
        if not device_id:
            raise MissingIDError("get")
        
        try:
            record = self.store.get(device_id)
        except DeviceStoreError as e:
            logger.error(f"Failed to read device {device_id}: {e}")
            raise StorageFailureError("get", device_id) from e
        
        if record is None:
            raise DeviceNotFoundError(device_id)
        
        try:
            return Device.from_record(record)
        except ValidationError as e:
            logger.error(f"Stored record for device {device_id} is unreadable: {e}")
            raise StorageFailureError("decode", device_id) from e
    
    def update(self, update: Union[DeviceUpdate, Mapping[str, Any]]) -> None:
        """Apply a partial update.
        
        Only the fields present in the update are written; modifiedAt is
        always refreshed, so an update carrying just the id is a touch.
        Whether a missing record is created or rejected is up to the store.
        
        Raises:
            MissingIDError: If the update has no id
            StorageFailureError: If the store write fails
        """
        if not isinstance(update, DeviceUpdate):
            update = DeviceUpdate.from_payload(update)
        
        if not update.id:
            raise MissingIDError("update")
        
        changes = update.changes()
        always_set = {DeviceConstants.MODIFIED_AT: self._clock()}
        
        try:
            self.store.partial_update(update.id, changes, always_set)
        except DeviceStoreError as e:
            logger.error(f"Failed to update device {update.id}: {e}")
            raise StorageFailureError("update", update.id) from e
        
        logger.info(f"Updated device {update.id} (fields: {sorted(changes) or 'none'})")
    
    def apply_home_assignment(self, message: HomeAssignmentMessage) -> None:
        """Reassign a device to a household; same semantics as update()."""
        self.update(message.to_update())
    
    def delete(self, device_id: str) -> None:
        """Delete a device. Deleting an unknown id succeeds.
        
        Raises:
            MissingIDError: If device_id is empty
            StorageFailureError: If the store delete fails
        """
        if not device_id:
            raise MissingIDError("delete")
        
        try:
            self.store.delete(device_id)
        except DeviceStoreError as e:
            logger.error(f"Failed to delete device {device_id}: {e}")
            raise StorageFailureError("delete", device_id) from e
        
        logger.info(f"Deleted device {device_id}")
