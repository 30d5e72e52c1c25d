from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List
from uuid import uuid4

import httpx
import typer

from cli.config import CLIConfig


def load_batch_file(path: Path) -> Dict[str, Any]:
    """Read a batch file into an SQS-shaped event.

    The file holds either an event with a ``Records`` list or a plain list of
    readings, which is wrapped into one record per reading.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Could not read batch file {path}: {exc}") from exc

    if isinstance(data, dict) and isinstance(data.get("Records"), list):
        return data
    if isinstance(data, list):
        return {
            "Records": [
                {"messageId": str(uuid4()), "body": json.dumps(reading)}
                for reading in data
            ]
        }
    raise typer.BadParameter(
        f"Batch file {path} must contain a Records event or a list of readings."
    )


class ApiClient:
    """Minimal HTTP client for the ingest service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def send_reading(self, machine_id: str, sensor_type: str, value: float) -> Dict[str, Any]:
        payload = {"machineId": machine_id, "sensorType": sensor_type, "value": value}
        return self._request("POST", "/telemetry", json=payload)

    def send_batch(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/batches", json=event)

    def list_records(self, machine_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/machines/{machine_id}/telemetry")

    def list_incidents(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/incidents")

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        if isinstance(detail, dict):
            detail = detail.get("reason") or detail
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
