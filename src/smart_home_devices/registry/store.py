"""Device Store - Abstraction for device record persistence.

This module provides the interface for device storage backends,
decoupling the device service from a specific key-value store.

Design principles:
- Every operation is a point operation keyed by device id
- Records are plain dicts in the persisted (camelCase) layout
- Backend failures surface as DeviceStoreError, never as backend types
"""

import copy
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from smart_home_devices.common.constants import DeviceConstants


class DeviceStoreError(Exception):
    """Raised by store implementations when a backend call fails."""
    
    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class DeviceStore(ABC):
    """Abstract base class for device storage backends.
    
    Implementations are responsible for per-key atomicity; concurrent writes
    to the same key resolve as last-write-wins.
    """
    
    @abstractmethod
    def get(self, device_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a record by device id.
        
        Returns:
            The stored record, or None if no record exists
            
        Raises:
            DeviceStoreError: If the backend call fails
        """
        pass
    
    @abstractmethod
    def put(self, record: Mapping[str, Any]) -> None:
        """Insert or fully overwrite the record stored under ``record['id']``.
        
        Raises:
            DeviceStoreError: If the backend call fails
        """
        pass
    
    @abstractmethod
    def partial_update(
        self,
        device_id: str,
        changes: Mapping[str, Any],
        always_set: Mapping[str, Any],
    ) -> None:
        """Set the given attributes on one record, leaving the rest untouched.
        
        Args:
            device_id: Key of the record to update
            changes: Attributes explicitly supplied by the caller
            always_set: Attributes written on every update (modifiedAt)
            
        Raises:
            DeviceStoreError: If the backend call fails
        """
        pass
    
    @abstractmethod
    def delete(self, device_id: str) -> None:
        """Remove a record. Removing an absent key is a no-op.
        
        Raises:
            DeviceStoreError: If the backend call fails
        """
        pass
    
    def health_check(self) -> bool:
        """Report whether the backend is reachable."""
        return True


class InMemoryDeviceStore(DeviceStore):
    """Dict-backed store for tests and local development.
    
    Mirrors DynamoDB semantics: partial_update on a missing key creates a
    record holding only the key and the written attributes.
    """
    
    def __init__(self, records: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._records: Dict[str, Dict[str, Any]] = {
            key: dict(value) for key, value in (records or {}).items()
        }
        self._lock = threading.Lock()
    
    def get(self, device_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._records.get(device_id)
            return copy.deepcopy(record) if record is not None else None
    
    def put(self, record: Mapping[str, Any]) -> None:
        device_id = record[DeviceConstants.KEY_ATTRIBUTE]
        with self._lock:
            self._records[device_id] = dict(record)
    
    def partial_update(
        self,
        device_id: str,
        changes: Mapping[str, Any],
        always_set: Mapping[str, Any],
    ) -> None:
        with self._lock:
            record = self._records.setdefault(
                device_id, {DeviceConstants.KEY_ATTRIBUTE: device_id}
            )
            record.update(always_set)
            record.update(changes)
    
    def delete(self, device_id: str) -> None:
        with self._lock:
            self._records.pop(device_id, None)
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
    
    def __contains__(self, device_id: object) -> bool:
        with self._lock:
            return device_id in self._records
