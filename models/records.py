"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class RawTelemetry:
    """A single sensor reading decoded from a queue message."""

    machine_id: str
    sensor_type: str
    value: float


@dataclass(slots=True, frozen=True)
class TelemetryRecord:
    """A classified reading, ready to be written to the telemetry table."""

    machine_id: str
    timestamp: str
    sensor_type: str
    value: float
    is_incident: bool = False
    severity: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.machine_id, self.timestamp)
