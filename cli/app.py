from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient, load_batch_file
from cli.config import CLIConfig, load_config
from cli.render import render_batch, render_record, render_records


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the telemetry ingest service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Ingest API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, request_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    machine_id: str = typer.Argument(..., help="Machine identifier."),
    sensor_type: str = typer.Argument(..., help="Sensor type, e.g. temperature or vibration."),
    value: float = typer.Argument(..., help="Numeric sensor reading."),
) -> None:
    """Send a single reading and show the stored record."""
    state = _get_state(ctx)
    record = state.client.send_reading(machine_id, sensor_type, value)
    render_record(record)


@app.command("replay")
def replay_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON batch file."
    ),
) -> None:
    """Submit a batch file in one request."""
    state = _get_state(ctx)
    event = load_batch_file(file)
    typer.echo(f"Submitting {len(event['Records'])} message(s) to {state.config.base_url} ...")
    summary = state.client.send_batch(event)
    render_batch(summary)


@app.command("records")
def records_command(
    ctx: typer.Context,
    machine_id: str = typer.Argument(..., help="Machine identifier."),
) -> None:
    """List stored readings for a machine."""
    state = _get_state(ctx)
    render_records(f"Telemetry for {machine_id}", state.client.list_records(machine_id))


@app.command("incidents")
def incidents_command(ctx: typer.Context) -> None:
    """List readings classified as incidents."""
    state = _get_state(ctx)
    render_records("Incidents", state.client.list_incidents())
