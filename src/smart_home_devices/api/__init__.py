"""API - device CRUD endpoints.

    POST   /devices
    GET    /devices/{device_id}
    PUT    /devices
    PATCH  /devices/{device_id}
    DELETE /devices/{device_id}
"""

from smart_home_devices.api.gateway import app
from smart_home_devices.api.schemas import ErrorResponse, MessageResponse

__all__ = [
    "app",
    "ErrorResponse",
    "MessageResponse",
]
