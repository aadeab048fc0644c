# DynamoDB Local Manager MCP
# File: transports/stdio_server.py
# Version: v1

"""STDIO entrypoint for the DynamoDB Local Manager MCP server.

This is the script behind the ``dynamodb-local-mcp`` console command.

It:

- configures logging to stderr (stdout carries the MCP protocol),
- creates a FastMCP server,
- registers the DynamoDB console tools, and
- runs the built-in stdio transport.
"""

from __future__ import annotations

import logging
import sys

from mcp.server.fastmcp import FastMCP

from ..config import ManagerConfig
from ..tools import tasks


def configure_logging(cfg: ManagerConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Synchronous entrypoint for console_scripts."""
    cfg = ManagerConfig.from_env()
    configure_logging(cfg)

    mcp = FastMCP("dynamodb-local-manager")
    tasks.register_tools(mcp, tasks.make_manager(cfg))

    # Let FastMCP handle stdio + event loop setup.
    mcp.run()


if __name__ == "__main__":
    main()
