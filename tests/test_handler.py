from __future__ import annotations

import json
import logging
from typing import Iterator

import pytest
from pydantic import ValidationError

from app.handler import handler
from datastore.mock_dynamodb import MockDynamoDBTable
from services.classifier import Classifier
from services.errors import BatchProcessingError
from services.processor import IngestionProcessor


@pytest.fixture()
def table(monkeypatch) -> Iterator[MockDynamoDBTable]:
    table = MockDynamoDBTable(name="handler-test")
    processor = IngestionProcessor(table=table, classifier=Classifier())
    monkeypatch.setattr("app.handler.build_default_processor", lambda: processor)
    yield table


def _event(*bodies: object) -> dict:
    return {
        "Records": [
            {
                "messageId": f"msg-{index}",
                "receiptHandle": "handle",
                "body": body if isinstance(body, str) else json.dumps(body),
                "eventSource": "aws:sqs",
            }
            for index, body in enumerate(bodies, start=1)
        ]
    }


def test_handler_processes_full_batch(table: MockDynamoDBTable) -> None:
    event = _event(
        {"machineId": "M1", "sensorType": "temperature", "value": 95.5},
        {"machineId": "M2", "sensorType": "humidity", "value": 999},
    )

    result = handler(event, context=None)

    assert result == {"processed_count": 2, "incident_count": 1}
    (critical,) = table.query("M1")
    assert critical.is_incident is True
    assert critical.severity == "CRITICAL"
    assert critical.timestamp.endswith("Z")
    (humidity,) = table.query("M2")
    assert humidity.is_incident is False
    assert humidity.severity == ""


def test_handler_raises_so_the_batch_is_redelivered(table: MockDynamoDBTable) -> None:
    event = _event(
        {"machineId": "M1", "sensorType": "temperature", "value": 20.0},
        "{broken",
        {"machineId": "M3", "sensorType": "temperature", "value": 20.0},
    )

    with pytest.raises(BatchProcessingError) as excinfo:
        handler(event, context=None)

    assert excinfo.value.message_id == "msg-2"
    assert [record.machine_id for record in table.scan()] == ["M1"]


def test_handler_accepts_empty_event(table: MockDynamoDBTable) -> None:
    assert handler({"Records": []}) == {"processed_count": 0, "incident_count": 0}
    assert table.scan() == []


def test_handler_logs_invalid_envelope(table: MockDynamoDBTable, caplog) -> None:
    event = {"Records": [{"body": "{}"}]}

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ValidationError):
            handler(event)

    records = [record for record in caplog.records if record.name == "app.handler"]
    assert [record.getMessage() for record in records] == ["Invalid batch envelope"]
    assert records[0].levelno == logging.ERROR
    assert records[0].reason.startswith("ValidationError")
    assert table.scan() == []
