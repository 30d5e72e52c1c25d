"""HTTP route definitions for the service."""

from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import (
    BatchFailure,
    BatchSummary,
    SQSEvent,
    SQSMessage,
    TelemetryItem,
    TelemetryPayload,
)
from datastore.tables import TelemetryTable
from services.errors import BatchProcessingError
from services.processor import IngestionProcessor, build_default_processor

router = APIRouter()


def get_processor() -> IngestionProcessor:
    return build_default_processor()


def get_table() -> TelemetryTable:
    return get_processor().table


def _batch_failure(exc: BatchProcessingError) -> HTTPException:
    failure = BatchFailure(
        message_id=exc.message_id,
        processed_count=exc.processed_count,
        reason=str(exc.cause),
    )
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=failure.model_dump(),
    )


@router.post(
    "/batches",
    response_model=BatchSummary,
    summary="Process an SQS-shaped batch of telemetry messages.",
)
def submit_batch(
    event: SQSEvent,
    processor: IngestionProcessor = Depends(get_processor),
) -> BatchSummary:
    try:
        result = processor.process_batch(event.records)
    except BatchProcessingError as exc:
        raise _batch_failure(exc) from exc
    return BatchSummary(
        processed_count=result.processed_count,
        incident_count=result.incident_count,
        processing_ms=result.processing_ms,
        records=[TelemetryItem.from_record(record) for record in result.records],
    )


@router.post(
    "/telemetry",
    status_code=status.HTTP_201_CREATED,
    response_model=TelemetryItem,
    response_model_exclude_none=True,
    summary="Ingest a single telemetry reading.",
)
def submit_reading(
    payload: TelemetryPayload,
    processor: IngestionProcessor = Depends(get_processor),
) -> TelemetryItem:
    message = SQSMessage(
        message_id=str(uuid4()),
        body=payload.model_dump_json(by_alias=True),
    )
    try:
        result = processor.process_batch([message])
    except BatchProcessingError as exc:
        raise _batch_failure(exc) from exc
    return TelemetryItem.from_record(result.records[0])


@router.get(
    "/machines/{machine_id}/telemetry",
    response_model=list[TelemetryItem],
    response_model_exclude_none=True,
    summary="List stored readings for a machine, oldest first.",
)
def list_machine_telemetry(
    machine_id: str,
    table: TelemetryTable = Depends(get_table),
) -> list[TelemetryItem]:
    return [TelemetryItem.from_record(record) for record in table.query(machine_id)]


@router.get(
    "/machines/{machine_id}/telemetry/{timestamp}",
    response_model=TelemetryItem,
    response_model_exclude_none=True,
    summary="Fetch a single stored reading by its key.",
)
def get_machine_reading(
    machine_id: str,
    timestamp: str,
    table: TelemetryTable = Depends(get_table),
) -> TelemetryItem:
    record = table.get_item(machine_id, timestamp)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No reading for machine {machine_id!r} at {timestamp!r}.",
        )
    return TelemetryItem.from_record(record)


@router.get(
    "/incidents",
    response_model=list[TelemetryItem],
    response_model_exclude_none=True,
    summary="List readings classified as incidents, newest first.",
)
def list_incidents(
    table: TelemetryTable = Depends(get_table),
) -> list[TelemetryItem]:
    incidents = [record for record in table.scan() if record.is_incident]
    incidents.sort(key=lambda record: (record.timestamp, record.machine_id), reverse=True)
    return [TelemetryItem.from_record(record) for record in incidents]


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
