from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional, Protocol, Union

from datastore.dynamodb import DynamoDBTable
from datastore.mock_dynamodb import MockDynamoDBTable
from models.records import TelemetryRecord
from settings import get_settings


class TelemetryTable(Protocol):
    name: str

    def put_item(self, record: TelemetryRecord) -> None: ...

    def get_item(self, machine_id: str, timestamp: str) -> Optional[TelemetryRecord]: ...

    def query(self, machine_id: str) -> list[TelemetryRecord]: ...

    def scan(self) -> list[TelemetryRecord]: ...


@lru_cache
def build_default_table(
    name: Optional[str] = None,
    backend: Optional[str] = None,
) -> Union[MockDynamoDBTable, DynamoDBTable]:
    """Build the process-wide telemetry table from settings."""
    settings = get_settings()
    table_name = settings.table_name if name is None else name
    table_backend = settings.table_backend if backend is None else backend

    if table_backend == "dynamodb":
        return DynamoDBTable(
            name=table_name,
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url,
        )

    table_path = settings.table_persistence_path
    persistence = Path(table_path) if table_path else None
    return MockDynamoDBTable(name=table_name, persistence_path=persistence)
