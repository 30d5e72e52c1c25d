"""Sequential batch orchestration: decode, classify, persist."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List

from app.schemas import SQSMessage
from datastore.items import to_item
from datastore.tables import TelemetryTable, build_default_table
from logging_config import record_context
from models.records import TelemetryRecord
from services.classifier import Classifier, decode_message
from services.errors import BatchProcessingError, IngestionError

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Summary of a batch whose messages were all persisted."""

    processed_count: int = 0
    incident_count: int = 0
    processing_ms: int = 0
    records: List[TelemetryRecord] = field(default_factory=list)


class IngestionProcessor:
    """Coordinates decoding, classification and persistence for each message."""

    def __init__(self, table: TelemetryTable, classifier: Classifier) -> None:
        self.table = table
        self.classifier = classifier

    def process_message(self, message: SQSMessage) -> TelemetryRecord:
        """Decode, classify and persist one message."""
        reading = decode_message(message.body, message.message_id)
        record = self.classifier.classify(reading)
        try:
            self.table.put_item(record)
        except IngestionError as exc:
            if exc.message_id is None:
                exc.message_id = message.message_id
            raise

        context = record_context(to_item(record))
        context["message_id"] = message.message_id
        if record.is_incident:
            logger.warning("Incident detected", extra=context)
        else:
            logger.info("Processed telemetry", extra=context)
        return record

    def process_batch(self, messages: Iterable[SQSMessage]) -> BatchResult:
        """Process ``messages`` in order, aborting on the first failure.

        Records written before the failing message stay in the table.
        """
        start_time = time.perf_counter()
        result = BatchResult()

        for message in messages:
            try:
                record = self.process_message(message)
            except IngestionError as exc:
                logger.error(
                    "Error processing message",
                    extra={
                        "message_id": message.message_id,
                        "reason": f"{type(exc).__name__}: {exc.reason}",
                        "record_count": result.processed_count,
                    },
                )
                raise BatchProcessingError(exc, result.processed_count) from exc

            result.records.append(record)
            result.processed_count += 1
            if record.is_incident:
                result.incident_count += 1

        result.processing_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Batch processed",
            extra={
                "record_count": result.processed_count,
                "incident_count": result.incident_count,
                "processing_ms": result.processing_ms,
            },
        )
        return result


@lru_cache
def build_default_processor() -> IngestionProcessor:
    """Factory that wires the processor with the configured table."""
    table = build_default_table()
    return IngestionProcessor(table=table, classifier=Classifier())
