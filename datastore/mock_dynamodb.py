from __future__ import annotations
import json
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Tuple

from datastore.items import PARTITION_KEY, SORT_KEY, from_item, to_item
from models.records import TelemetryRecord
from services.errors import StoreWriteError

Key = Tuple[str, str]

_REQUIRED_ATTRIBUTES = frozenset({PARTITION_KEY, SORT_KEY, "sensorType", "value"})


class MockDynamoDBTable:
    """In-process stand-in for the telemetry table keyed by machine and timestamp."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: Dict[Key, Dict[str, Any]] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_item(self, record: TelemetryRecord) -> None:
        item = to_item(record)
        key = (item[PARTITION_KEY], item[SORT_KEY])
        with self._lock:
            previous = self._items.get(key)
            self._items[key] = item
            try:
                self._persist()
            except (OSError, TypeError, ValueError) as exc:
                if previous is None:
                    self._items.pop(key, None)
                else:
                    self._items[key] = previous
                raise StoreWriteError(
                    f"failed to write item to table {self.name!r}: {exc}"
                ) from exc

    def get_item(self, machine_id: str, timestamp: str) -> Optional[TelemetryRecord]:
        with self._lock:
            item = self._items.get((machine_id, timestamp))
            if item is None:
                return None
            return from_item(item)

    def query(self, machine_id: str) -> list[TelemetryRecord]:
        """Return records for one machine ordered by timestamp."""

        with self._lock:
            items = [
                item for (partition, _), item in self._items.items() if partition == machine_id
            ]
        return [from_item(item) for item in sorted(items, key=lambda item: item[SORT_KEY])]

    def scan(self) -> list[TelemetryRecord]:
        with self._lock:
            return [from_item(item) for item in self._items.values()]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [self._items[key] for key in sorted(self._items)]
        self.persistence_path.write_text(
            json.dumps(payload, indent=2, sort_keys=True, allow_nan=False)
        )

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = []

        if not isinstance(data, list):
            data = []

        for item in data:
            if not isinstance(item, dict) or not _REQUIRED_ATTRIBUTES <= item.keys():
                continue
            self._items[(item[PARTITION_KEY], item[SORT_KEY])] = item
