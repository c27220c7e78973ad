"""
Ulyngo Backend — Shared Response Schemas
==========================================

What:  Error, message and health response models shared by every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error body returned for every failed request.

    Example:
        {
            "error": "Failed to understand query",
            "code": "trip_planning_failed",
            "details": "Vertex AI returned HTTP 403",
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[str] = Field(default=None, description="Upstream or validation detail")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """
    Health check response.

    database is probed with SELECT 1; the external APIs are only reported as
    configured or not (probing them would spend quota).
    """

    status: str = Field(description="Overall status: healthy, degraded, unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    google_maps: str = Field(description="configured or not_configured")
    vertex_ai: str = Field(description="configured or not_configured")
    uptime_seconds: float
