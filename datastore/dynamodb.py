"""Telemetry table backed by AWS DynamoDB."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterator, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from datastore.items import PARTITION_KEY, SORT_KEY, from_item, to_item
from models.records import TelemetryRecord
from services.errors import SerializationError, StoreWriteError


class DynamoDBTable:
    """Writes telemetry items with ``PutItem`` using the low-level client.

    The client is created once and shared; botocore clients are safe to use
    from several threads.
    """

    def __init__(
        self,
        name: str,
        client: Any = None,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self.name = name
        self._client = client or boto3.client(
            "dynamodb", region_name=region_name, endpoint_url=endpoint_url
        )
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def marshal(self, record: TelemetryRecord) -> Dict[str, Dict[str, Any]]:
        """Convert ``record`` into a DynamoDB attribute-value map."""
        item = to_item(record)
        item["value"] = Decimal(repr(item["value"]))
        try:
            return {key: self._serializer.serialize(value) for key, value in item.items()}
        except (TypeError, ArithmeticError) as exc:
            raise SerializationError(f"cannot marshal record for DynamoDB: {exc}") from exc

    def put_item(self, record: TelemetryRecord) -> None:
        attributes = self.marshal(record)
        try:
            self._client.put_item(TableName=self.name, Item=attributes)
        except (BotoCoreError, ClientError) as exc:
            raise StoreWriteError(
                f"PutItem on table {self.name!r} failed: {exc}"
            ) from exc

    def get_item(self, machine_id: str, timestamp: str) -> Optional[TelemetryRecord]:
        response = self._client.get_item(
            TableName=self.name,
            Key={PARTITION_KEY: {"S": machine_id}, SORT_KEY: {"S": timestamp}},
            ConsistentRead=True,
        )
        item = response.get("Item")
        if item is None:
            return None
        return from_item(self._unmarshal(item))

    def query(self, machine_id: str) -> list[TelemetryRecord]:
        pages = self._paginate(
            "query",
            TableName=self.name,
            KeyConditionExpression="#pk = :pk",
            ExpressionAttributeNames={"#pk": PARTITION_KEY},
            ExpressionAttributeValues={":pk": {"S": machine_id}},
            ScanIndexForward=True,
        )
        return [from_item(self._unmarshal(item)) for item in pages]

    def scan(self) -> list[TelemetryRecord]:
        return [
            from_item(self._unmarshal(item))
            for item in self._paginate("scan", TableName=self.name)
        ]

    def _paginate(self, operation: str, **kwargs: Any) -> Iterator[Dict[str, Any]]:
        call = getattr(self._client, operation)
        while True:
            response = call(**kwargs)
            yield from response.get("Items", [])
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return
            kwargs["ExclusiveStartKey"] = last_key

    def _unmarshal(self, item: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        return {key: self._deserializer.deserialize(value) for key, value in item.items()}
