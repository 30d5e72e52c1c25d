from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _record_line(record: Dict[str, Any]) -> str:
    line = (
        f"  - {record.get('timestamp')} {record.get('machineId')} "
        f"{record.get('sensorType')}={record.get('value')}"
    )
    if record.get("is_incident"):
        line += f" [{record.get('severity')}]"
    return line


def render_record(record: Dict[str, Any]) -> None:
    echo_heading("Telemetry Record")
    echo_key_values(
        [
            ("machineId", record.get("machineId")),
            ("timestamp", record.get("timestamp")),
            ("sensorType", record.get("sensorType")),
            ("value", record.get("value")),
            ("is_incident", record.get("is_incident")),
        ]
    )
    if record.get("is_incident"):
        typer.secho(f"severity: {record.get('severity')}", fg=typer.colors.RED)


def render_records(title: str, records: Iterable[Dict[str, Any]]) -> None:
    echo_heading(title)
    lines = [_record_line(record) for record in records]
    if not lines:
        typer.echo("No records found.")
        return
    for line in lines:
        typer.echo(line)


def render_batch(summary: Dict[str, Any]) -> None:
    echo_heading("Batch Result")
    echo_key_values(
        [
            ("processed_count", summary.get("processed_count")),
            ("incident_count", summary.get("incident_count")),
            ("processing_ms", summary.get("processing_ms")),
        ]
    )
    records = summary.get("records") or []
    if records:
        typer.echo()
        render_records("Records", records)
