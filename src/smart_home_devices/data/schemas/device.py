"""Device schemas - canonical definitions of the device record and its updates."""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from smart_home_devices.common.constants import DeviceConstants
from smart_home_devices.common.exceptions import InvalidMessageError

logger = logging.getLogger(__name__)

# Attributes a sparse store record may lack (e.g. a record first written by a
# partial update); they read back as zero values.
_RECORD_DEFAULTS: Dict[str, Any] = {
    "mac": "",
    "name": "",
    "type": "",
    "homeId": "",
    DeviceConstants.CREATED_AT: 0,
    DeviceConstants.MODIFIED_AT: 0,
}


class Device(BaseModel):
    """Device entity schema.
    
    Represents a registered smart-home appliance. Serialized with camelCase
    keys (homeId, createdAt, modifiedAt), which is also the persisted layout.
    Timestamps are milliseconds since the epoch.
    """
    id: str = Field(..., description="Device identifier (primary key)")
    mac: str = Field(..., description="Hardware MAC address")
    name: str = Field(..., description="Display name")
    type: str = Field(..., description="Device category, e.g. 'thermostat'")
    home_id: str = Field(default="", alias="homeId", description="Owning household")
    created_at: int = Field(..., alias="createdAt", ge=0)
    modified_at: int = Field(..., alias="modifiedAt", ge=0)
    
    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "id": "1",
                "mac": "AA:BB:CC:DD:EE:FF",
                "name": "Thermostat",
                "type": "thermostat",
                "homeId": "home-123",
                "createdAt": 1234567890,
                "modifiedAt": 1234567890,
            }
        },
    }
    
    def to_record(self) -> Dict[str, Any]:
        """Persisted representation, every attribute included."""
        return self.model_dump(by_alias=True)
    
    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Device":
        return cls.model_validate({**_RECORD_DEFAULTS, **record})


class DeviceUpdate(BaseModel):
    """Sparse update of a device.
    
    Presence is tracked by pydantic's ``model_fields_set``: a field that was
    never supplied is left untouched in the store, while a field supplied as
    an empty string clears the stored value. ``id`` selects the record and is
    never itself updated.
    """
    id: str = Field(default="", description="Device to update")
    name: Optional[str] = None
    mac: Optional[str] = None
    type: Optional[str] = None
    home_id: Optional[str] = Field(default=None, alias="homeId")
    
    model_config = {"populate_by_name": True, "extra": "ignore"}
    
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DeviceUpdate":
        """Build an update from a decoded request body.
        
        Only string values are accepted for id and the mutable fields; any
        other value (number, null, object) is treated as if the key were
        absent. Unknown keys are ignored.
        """
        supplied: Dict[str, str] = {}
        for key in (DeviceConstants.KEY_ATTRIBUTE,) + DeviceConstants.MUTABLE_FIELDS:
            if key not in payload:
                continue
            value = payload[key]
            if isinstance(value, str):
                supplied[key] = value
            else:
                logger.warning(
                    "Ignoring non-string value for '%s' (%s)", key, type(value).__name__
                )
        return cls.model_validate(supplied)
    
    def changes(self) -> Dict[str, str]:
        """Explicitly supplied mutable fields, keyed by persisted attribute name."""
        supplied = self.model_fields_set - {"id"}
        dumped = self.model_dump(by_alias=True, include=supplied)
        return {attr: value for attr, value in dumped.items() if value is not None}


class HomeAssignmentMessage(BaseModel):
    """Queue message reassigning a device to a household."""
    id: str = Field(..., description="Device to reassign")
    home_id: str = Field(
        default="", alias="homeId", description="New owning household; absent clears it"
    )
    
    model_config = {"populate_by_name": True, "extra": "ignore"}
    
    @classmethod
    def from_body(cls, body: Union[str, bytes, None]) -> "HomeAssignmentMessage":
        """Decode a raw message body.
        
        Raises:
            InvalidMessageError: If the body is not JSON of the expected shape.
        """
        if not isinstance(body, (str, bytes)):
            raise InvalidMessageError(
                "Message body is missing",
                details={"body_type": type(body).__name__},
            )
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise InvalidMessageError(
                "Message body is not a valid home assignment",
                details={"error_count": e.error_count()},
            ) from e
    
    def to_update(self) -> DeviceUpdate:
        return DeviceUpdate(id=self.id, home_id=self.home_id)
