"""Queue-triggered entry point."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from app.schemas import SQSEvent
from logging_config import configure_logging
from services.processor import build_default_processor

logger = logging.getLogger(__name__)


def handler(event: Mapping[str, Any], context: Any = None) -> dict[str, int]:
    """Process an SQS batch; raising signals the host to redeliver all of it.

    The processor and its table client are built on the first invocation and
    reused by every later one in the same process.
    """
    configure_logging()
    try:
        batch = SQSEvent.model_validate(event)
    except ValidationError as exc:
        logger.error(
            "Invalid batch envelope",
            extra={"reason": f"ValidationError: {exc.error_count()} error(s): {exc.errors()[0]['msg']}"},
        )
        raise
    result = build_default_processor().process_batch(batch.records)
    return {
        "processed_count": result.processed_count,
        "incident_count": result.incident_count,
    }
