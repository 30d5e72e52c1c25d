from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_TABLE_NAME_ENV = "DYNAMODB_TABLE"
_TABLE_BACKEND_ENV = "TELEMETRY_TABLE_BACKEND"
_TABLE_PATH_ENV = "MOCK_DYNAMODB_PERSISTENCE_PATH"
_REGION_ENV = "AWS_REGION"
_ENDPOINT_URL_ENV = "DYNAMODB_ENDPOINT_URL"
_LOG_LEVEL_ENV = "LOG_LEVEL"

TABLE_BACKENDS = ("mock", "dynamodb")


@dataclass(frozen=True)
class Settings:
    table_name: str
    table_backend: str
    table_persistence_path: Optional[str]
    aws_region: Optional[str]
    dynamodb_endpoint_url: Optional[str]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_table_backend(default: str) -> str:
    candidate = _read_str_env(_TABLE_BACKEND_ENV, default).lower()
    return candidate if candidate in TABLE_BACKENDS else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        table_name=_read_str_env(_TABLE_NAME_ENV, "SentinelTelemetry"),
        table_backend=_read_table_backend("mock"),
        table_persistence_path=_read_optional_env(
            _TABLE_PATH_ENV, "./tmp/telemetry_db.json"
        ),
        aws_region=_read_optional_env(_REGION_ENV, None),
        dynamodb_endpoint_url=_read_optional_env(_ENDPOINT_URL_ENV, None),
        log_level=_read_log_level("INFO"),
    )
