"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

Design Principles:
- Request models: Define input shape (required-field checks live in the service)
- Response models: Define output structure
- Wire names are camelCase (userAgent, totalVisits), Python names are snake_case
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VisitRecord(BaseModel):
    """One recorded visit, as stored in the visit and muted logs."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    ip: str = Field(..., description="Caller address")
    user_agent: Optional[str] = Field(None, alias="userAgent", description="User-Agent header, if sent")
    timestamp: str = Field(..., description="UTC time of the visit in ISO-8601")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class MuteRequest(BaseModel):
    """Request model for the mute endpoint. ip and timestamp are required."""
    model_config = ConfigDict(populate_by_name=True)

    ip: Optional[str] = None
    timestamp: Optional[str] = None
    user_agent: Optional[str] = Field(None, alias="userAgent")


class TrackResponse(BaseModel):
    """Response model for the track endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    total_visits: int = Field(..., alias="totalVisits", description="Size of the visit log after this visit")


class StatusResponse(BaseModel):
    """Generic status/message body used for acknowledgements and errors."""
    status: str
    message: str
