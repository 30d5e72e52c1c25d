"""Mapping between telemetry records and table items."""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping

from models.records import TelemetryRecord
from services.errors import SerializationError

PARTITION_KEY = "machineId"
SORT_KEY = "timestamp"


def to_item(record: TelemetryRecord) -> Dict[str, Any]:
    """Build the attribute map stored for ``record``.

    ``severity`` is omitted when the reading is not an incident.
    """
    if not isinstance(record.machine_id, str) or not isinstance(record.sensor_type, str):
        raise SerializationError("machineId and sensorType must be strings")
    if not isinstance(record.timestamp, str) or not record.timestamp:
        raise SerializationError("timestamp must be a non-empty string")
    if isinstance(record.value, bool) or not isinstance(record.value, (int, float)):
        raise SerializationError(f"value must be numeric, got {type(record.value).__name__}")
    if not math.isfinite(record.value):
        raise SerializationError(f"value {record.value!r} is not a finite number")

    item: Dict[str, Any] = {
        PARTITION_KEY: record.machine_id,
        SORT_KEY: record.timestamp,
        "sensorType": record.sensor_type,
        "value": float(record.value),
        "is_incident": bool(record.is_incident),
    }
    if record.severity:
        item["severity"] = record.severity
    return item


def from_item(item: Mapping[str, Any]) -> TelemetryRecord:
    return TelemetryRecord(
        machine_id=str(item[PARTITION_KEY]),
        timestamp=str(item[SORT_KEY]),
        sensor_type=str(item["sensorType"]),
        value=float(item["value"]),
        is_incident=bool(item.get("is_incident", False)),
        severity=str(item.get("severity") or ""),
    )
