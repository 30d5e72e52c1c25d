"""Decoding and incident classification for raw telemetry messages."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence, Union

from pydantic import ValidationError

from app.schemas import TelemetryPayload
from models.records import RawTelemetry, TelemetryRecord
from services.errors import DecodeError

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass(frozen=True)
class IncidentRule:
    """Flags readings of one sensor type that exceed a threshold."""

    sensor_type: str
    threshold: float
    severity: str

    def matches(self, reading: RawTelemetry) -> bool:
        return reading.sensor_type == self.sensor_type and reading.value > self.threshold


# Evaluated in order; when several rules match, the last one wins.
INCIDENT_RULES: tuple[IncidentRule, ...] = (
    IncidentRule(sensor_type="temperature", threshold=90.0, severity="CRITICAL"),
    IncidentRule(sensor_type="vibration", threshold=80.0, severity="WARNING"),
)


def _reject_constant(token: str) -> float:
    raise ValueError(f"non-standard JSON constant {token!r}")


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as an RFC 3339 UTC string with second precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def decode_message(
    body: Union[str, bytes], message_id: Optional[str] = None
) -> RawTelemetry:
    """Parse a message body into a :class:`RawTelemetry` reading."""
    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("body is not valid UTF-8", message_id) from exc

    try:
        data = json.loads(body, parse_constant=_reject_constant)
    except ValueError as exc:
        raise DecodeError(f"body is not valid JSON: {exc}", message_id) from exc

    if not isinstance(data, dict):
        raise DecodeError("body must be a JSON object", message_id)

    try:
        payload = TelemetryPayload.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise DecodeError(f"invalid telemetry payload: {problems}", message_id) from exc

    return RawTelemetry(
        machine_id=payload.machine_id,
        sensor_type=payload.sensor_type,
        value=payload.value,
    )


class Classifier:
    """Pure classification component that can be unit tested in isolation."""

    def __init__(
        self,
        rules: Iterable[IncidentRule] = INCIDENT_RULES,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.rules: Sequence[IncidentRule] = tuple(rules)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def classify(
        self, reading: RawTelemetry, now: Optional[datetime] = None
    ) -> TelemetryRecord:
        is_incident = False
        severity = ""
        for rule in self.rules:
            if rule.matches(reading):
                is_incident = True
                severity = rule.severity

        stamped_at = now if now is not None else self._clock()
        return TelemetryRecord(
            machine_id=reading.machine_id,
            timestamp=format_timestamp(stamped_at),
            sensor_type=reading.sensor_type,
            value=reading.value,
            is_incident=is_incident,
            severity=severity,
        )
