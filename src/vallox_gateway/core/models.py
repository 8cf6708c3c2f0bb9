"""Data models for the Vallox gateway."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CommandResult(str, Enum):
    """Outcome of a fire-and-forget bus command."""

    QUEUED = "queued"
    INVALID_SPEED = "invalid_speed"
    DENIED = "denied"


class Event(BaseModel):
    """A decoded frame received from the bus."""

    time: datetime = Field(default_factory=datetime.now, description="Time the frame was parsed")
    source: int = Field(..., ge=0, le=0xFF, description="Originating bus address")
    destination: int = Field(..., ge=0, le=0xFF, description="Target bus address or group")
    register_id: int = Field(..., alias="register", ge=0, le=0xFF, description="Register id")
    raw_value: int = Field(..., ge=0, le=0xFF, serialization_alias="raw", description="Raw payload byte")
    value: int | float = Field(..., description="Value converted to physical units")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "time": "2026-10-19T10:30:00",
                "source": 0x11,
                "destination": 0x20,
                "register": 0x32,
                "raw": 0x70,
                "value": 1,
            }
        },
    )


# ============================================================================
# API Request/Response Models
# ============================================================================


class RegisterValue(BaseModel):
    """Latest known value of one register."""

    register_id: int = Field(..., alias="register", description="Register id")
    name: str = Field(..., description="Register name")
    type: str = Field(..., description="Conversion applied: speed, rh, temperature, percentage or raw")
    raw: int = Field(..., description="Raw payload byte")
    value: int | float = Field(..., description="Converted value")
    flags: list[str] = Field(default_factory=list, description="Set flags for bit-field registers")
    fault: str | None = Field(None, description="Active fault name for the fault code register")
    source: int = Field(..., description="Address that last reported the value")
    time: datetime = Field(..., description="Time the value was received")

    model_config = ConfigDict(populate_by_name=True)


class RegistersResponse(BaseModel):
    """Response model for GET /api/registers."""

    timestamp: datetime = Field(..., description="Time of the most recent update")
    registers: dict[str, RegisterValue] = Field(..., description="Registers keyed by name")


class FanSpeedRequest(BaseModel):
    """Request model for PUT /api/fan-speed."""

    speed: int = Field(..., description="Fan speed level 1-8")
    target: Literal["current", "default", "max"] = Field("current", description="Which speed register to set")


class CommandResponse(BaseModel):
    """Response model for queued bus commands."""

    result: CommandResult
    detail: str | None = None


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str


class HealthResponse(BaseModel):
    """Response model for GET /health."""

    status: Literal["healthy", "degraded", "unhealthy"]
    bus_running: bool
    registers_count: int
    last_update: datetime | None = None
    stats: dict[str, int] = Field(default_factory=dict)
