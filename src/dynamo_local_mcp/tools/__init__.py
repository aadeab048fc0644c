# DynamoDB Local Manager MCP
# File: tools/__init__.py
# Version: v1

"""MCP tools exposed by the DynamoDB Local Manager server."""

from __future__ import annotations

from .tasks import register_tools

__all__ = ["register_tools"]
