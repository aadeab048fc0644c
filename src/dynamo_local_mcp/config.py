# DynamoDB Local Manager MCP
# File: config.py
# Version: v1

"""Configuration loading for the DynamoDB Local Manager MCP server.

The DynamoDB endpoint is deliberately *not* part of this configuration: it
lives in the persisted settings store (see settings.py) and is only changed
through the ``set_endpoint`` tool.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path


DEFAULT_ENDPOINT = "http://localhost:8000"

# DynamoDB Local ignores region and credentials, but the request envelope
# requires both.
DEFAULT_REGION = "us-east-1"
PLACEHOLDER_ACCESS_KEY_ID = "fake"
PLACEHOLDER_SECRET_ACCESS_KEY = "fake"

DEFAULT_SETTINGS_PATH = Path.home() / ".dynamodb-local-manager" / "settings.json"


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_env(
    name: str,
    default: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Parse an int environment variable with clamping and safe fallback."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        value = int(default)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            value = int(default)

    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value

    return value


@dataclass(frozen=True)
class ManagerConfig:
    """Process configuration for the manager and its transports."""

    settings_path: Path = DEFAULT_SETTINGS_PATH
    mock_mode: bool = False
    log_level: str = "INFO"
    ping_timeout_seconds: int = 5

    region: str = DEFAULT_REGION
    access_key_id: str = PLACEHOLDER_ACCESS_KEY_ID
    secret_access_key: str = PLACEHOLDER_SECRET_ACCESS_KEY

    # Provisioned throughput applied to new tables and their GSIs.
    read_capacity_units: int = 5
    write_capacity_units: int = 5

    http_host: str = "127.0.0.1"
    http_port: int = 8765

    @classmethod
    def from_env(cls) -> "ManagerConfig":
        """Create configuration from environment variables."""
        raw_path = os.getenv("DYNAMO_MANAGER_SETTINGS_PATH")
        settings_path = (
            Path(raw_path).expanduser()
            if raw_path and raw_path.strip()
            else DEFAULT_SETTINGS_PATH
        )

        log_level = (os.getenv("DYNAMO_MANAGER_LOG_LEVEL") or "INFO").strip().upper()

        return cls(
            settings_path=settings_path,
            mock_mode=_parse_bool_env("DYNAMO_MANAGER_MOCK_MODE", default=False),
            log_level=log_level or "INFO",
            ping_timeout_seconds=_parse_int_env(
                "DYNAMO_MANAGER_PING_TIMEOUT", default=5, min_value=1, max_value=60
            ),
            http_host=(os.getenv("DYNAMO_MANAGER_HTTP_HOST") or "127.0.0.1").strip(),
            http_port=_parse_int_env(
                "DYNAMO_MANAGER_HTTP_PORT", default=8765, min_value=1, max_value=65535
            ),
        )
