"""API Schemas - Response models for the device gateway.

Request bodies are taken as plain JSON objects so that field completeness is
judged by the device service (400 MissingFields / MissingID) rather than by
request-model validation.
"""

from typing import Optional
from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Acknowledgement for mutations that return no record."""
    message: str = Field(..., description="Outcome of the operation")

    model_config = {
        "json_schema_extra": {"example": {"message": "Device created"}}
    }


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    request_id: Optional[str] = Field(
        default=None, description="Request ID for debugging"
    )
