# DynamoDB Local Manager MCP
# File: transports/http_server.py
# Version: v1

"""Streamable-HTTP entrypoint for the DynamoDB Local Manager MCP server.

Behind the ``dynamodb-local-mcp-http`` console command. Binds to
DYNAMO_MANAGER_HTTP_HOST / DYNAMO_MANAGER_HTTP_PORT (127.0.0.1:8765 by
default; 8000 is left to DynamoDB Local itself).
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from ..config import ManagerConfig
from ..tools import tasks
from .stdio_server import configure_logging


def main() -> None:
    cfg = ManagerConfig.from_env()
    configure_logging(cfg)

    mcp = FastMCP("dynamodb-local-manager", host=cfg.http_host, port=cfg.http_port)
    tasks.register_tools(mcp, tasks.make_manager(cfg))

    mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
