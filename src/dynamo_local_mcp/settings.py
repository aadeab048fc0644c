# DynamoDB Local Manager MCP
# File: settings.py
# Version: v1

"""Durable storage for the active DynamoDB endpoint.

A single JSON document with one key (``dynamodb_endpoint``). Reads never
fail: a missing, unreadable or malformed file yields the default endpoint.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_ENDPOINT

logger = logging.getLogger(__name__)

ENDPOINT_KEY = "dynamodb_endpoint"


@dataclass
class EndpointStore:
    """Read/write the persisted endpoint at ``path``."""

    path: Path
    default: str = DEFAULT_ENDPOINT

    def load(self) -> str:
        """Return the stored endpoint, or the default if none is usable."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return self.default
        except OSError as exc:
            logger.warning("Cannot read settings file '%s': %s", self.path, exc)
            return self.default

        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.warning("Ignoring malformed settings file '%s': %s", self.path, exc)
            return self.default

        value = data.get(ENDPOINT_KEY) if isinstance(data, dict) else None
        if not isinstance(value, str) or not value.strip():
            return self.default
        return value

    def save(self, endpoint: str) -> bool:
        """Persist ``endpoint``. Returns False if the file could not be written."""
        data = {}
        try:
            existing = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            existing = None
        except (OSError, ValueError) as exc:
            logger.warning(
                "Replacing unreadable settings file '%s': %s", self.path, exc
            )
            existing = None
        if isinstance(existing, dict):
            data = existing

        data[ENDPOINT_KEY] = endpoint

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot persist endpoint to '%s': %s", self.path, exc)
            return False
        return True
