"""Pydantic schemas for queue messages and the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.records import TelemetryRecord


class TelemetryPayload(BaseModel):
    """Body of a single telemetry message as produced upstream."""

    model_config = ConfigDict(populate_by_name=True, strict=True)

    machine_id: str = Field(..., alias="machineId")
    sensor_type: str = Field(..., alias="sensorType")
    value: float

    @field_validator("value", mode="before")
    @classmethod
    def _reject_booleans(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("value must be a number, not a boolean")
        return value


class SQSMessage(BaseModel):
    """One record of an SQS-shaped batch event."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(..., alias="messageId")
    body: str


class SQSEvent(BaseModel):
    """Batch envelope delivered by the queue."""

    model_config = ConfigDict(populate_by_name=True)

    records: List[SQSMessage] = Field(default_factory=list, alias="Records")


class TelemetryItem(BaseModel):
    """Persisted telemetry item as exposed by the API."""

    model_config = ConfigDict(populate_by_name=True)

    machine_id: str = Field(..., alias="machineId")
    timestamp: str = Field(..., description="RFC 3339 UTC ingestion time.")
    sensor_type: str = Field(..., alias="sensorType")
    value: float
    is_incident: bool
    severity: Optional[str] = None

    @classmethod
    def from_record(cls, record: TelemetryRecord) -> "TelemetryItem":
        return cls(
            machine_id=record.machine_id,
            timestamp=record.timestamp,
            sensor_type=record.sensor_type,
            value=record.value,
            is_incident=record.is_incident,
            severity=record.severity or None,
        )


class BatchSummary(BaseModel):
    """Outcome of a fully processed batch."""

    processed_count: int = Field(..., ge=0)
    incident_count: int = Field(..., ge=0)
    processing_ms: int = Field(..., ge=0)
    records: List[TelemetryItem] = Field(default_factory=list)


class BatchFailure(BaseModel):
    """Details returned when a batch is aborted."""

    message_id: Optional[str] = None
    processed_count: int = Field(..., ge=0)
    reason: str
