# DynamoDB Local Manager MCP
# File: __init__.py
# Version: v1

"""Top-level package for the DynamoDB Local Manager MCP server."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]


def _resolve_version() -> str:
    """Resolve installed distribution version.

    Uses package metadata so __version__ stays aligned with pyproject.toml.
    Falls back to a default when running from a source tree.
    """
    try:
        return version("dynamodb-local-manager-mcp")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _resolve_version()
