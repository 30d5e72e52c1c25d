"""Unit tests for incident classification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models.records import RawTelemetry
from services.classifier import Classifier, IncidentRule, format_timestamp

FIXED_NOW = datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)


def _reading(sensor_type: str, value: float, machine_id: str = "M1") -> RawTelemetry:
    """Helper to build deterministic readings."""

    return RawTelemetry(machine_id=machine_id, sensor_type=sensor_type, value=value)


@pytest.fixture()
def classifier() -> Classifier:
    return Classifier(clock=lambda: FIXED_NOW)


@pytest.mark.parametrize("value", [90.0001, 95.5, 1000.0])
def test_hot_temperature_is_critical(classifier: Classifier, value: float) -> None:
    record = classifier.classify(_reading("temperature", value))

    assert record.is_incident is True
    assert record.severity == "CRITICAL"


@pytest.mark.parametrize("value", [90.0, 42.0, -10.0])
def test_temperature_at_or_below_threshold_is_normal(classifier: Classifier, value: float) -> None:
    record = classifier.classify(_reading("temperature", value))

    assert record.is_incident is False
    assert record.severity == ""


@pytest.mark.parametrize("value", [80.5, 81.0, 500.0])
def test_high_vibration_is_warning(classifier: Classifier, value: float) -> None:
    record = classifier.classify(_reading("vibration", value))

    assert record.is_incident is True
    assert record.severity == "WARNING"


@pytest.mark.parametrize("value", [80.0, 0.0])
def test_vibration_at_or_below_threshold_is_normal(classifier: Classifier, value: float) -> None:
    record = classifier.classify(_reading("vibration", value))

    assert record.is_incident is False
    assert record.severity == ""


@pytest.mark.parametrize("sensor_type", ["humidity", "Temperature", "", "pressure"])
def test_other_sensor_types_are_never_incidents(classifier: Classifier, sensor_type: str) -> None:
    record = classifier.classify(_reading(sensor_type, 999.0))

    assert record.is_incident is False
    assert record.severity == ""


def test_classify_copies_reading_and_stamps_utc_time(classifier: Classifier) -> None:
    record = classifier.classify(_reading("temperature", 95.5, machine_id="M1"))

    assert record.machine_id == "M1"
    assert record.sensor_type == "temperature"
    assert record.value == 95.5
    assert record.timestamp == "2024-01-15T10:30:00Z"
    assert record.key == ("M1", "2024-01-15T10:30:00Z")


def test_explicit_now_overrides_clock(classifier: Classifier) -> None:
    later = FIXED_NOW + timedelta(minutes=5)

    record = classifier.classify(_reading("vibration", 1.0), now=later)

    assert record.timestamp == "2024-01-15T10:35:00Z"


def test_default_clock_uses_current_utc_time() -> None:
    before = datetime.now(timezone.utc).replace(microsecond=0)
    record = Classifier().classify(_reading("temperature", 20.0))
    after = datetime.now(timezone.utc)

    stamped = datetime.strptime(record.timestamp, "%Y-%m-%dT%H:%M:%SZ").replace(
        tzinfo=timezone.utc
    )
    assert before <= stamped <= after


def test_last_matching_rule_wins() -> None:
    rules = [
        IncidentRule(sensor_type="temperature", threshold=50.0, severity="WARNING"),
        IncidentRule(sensor_type="temperature", threshold=90.0, severity="CRITICAL"),
        IncidentRule(sensor_type="temperature", threshold=70.0, severity="NOTICE"),
    ]
    classifier = Classifier(rules=rules, clock=lambda: FIXED_NOW)

    assert classifier.classify(_reading("temperature", 95.0)).severity == "NOTICE"
    assert classifier.classify(_reading("temperature", 60.0)).severity == "WARNING"


def test_severity_present_only_for_incidents(classifier: Classifier) -> None:
    readings = [
        _reading("temperature", 91.0),
        _reading("temperature", 89.0),
        _reading("vibration", 81.0),
        _reading("vibration", 79.0),
        _reading("humidity", 120.0),
    ]

    for reading in readings:
        record = classifier.classify(reading)
        assert bool(record.severity) is record.is_incident


def test_format_timestamp_converts_offsets_and_naive_values() -> None:
    offset = timezone(timedelta(hours=2))

    assert format_timestamp(datetime(2024, 3, 1, 12, 0, 0, tzinfo=offset)) == "2024-03-01T10:00:00Z"
    assert format_timestamp(datetime(2024, 3, 1, 12, 0, 0)) == "2024-03-01T12:00:00Z"
