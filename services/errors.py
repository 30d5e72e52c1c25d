"""Exception hierarchy for the ingestion pipeline."""

from __future__ import annotations

from typing import Optional


class IngestionError(Exception):
    """Base class for failures while ingesting a single message."""

    def __init__(self, reason: str, message_id: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.message_id = message_id

    def __str__(self) -> str:
        if self.message_id:
            return f"{self.reason} (message_id={self.message_id})"
        return self.reason


class DecodeError(IngestionError):
    """The message body is not a valid telemetry payload."""


class SerializationError(IngestionError):
    """A record could not be mapped onto the table's attribute format."""


class StoreWriteError(IngestionError):
    """The telemetry table rejected or failed a write."""


class BatchProcessingError(Exception):
    """Raised once per batch when any message fails.

    Records persisted before the failing message are left in place; the host
    is expected to redeliver the whole batch.
    """

    def __init__(self, cause: IngestionError, processed_count: int) -> None:
        super().__init__(
            f"Batch aborted after {processed_count} message(s): {cause}"
        )
        self.cause = cause
        self.message_id = cause.message_id
        self.processed_count = processed_count
