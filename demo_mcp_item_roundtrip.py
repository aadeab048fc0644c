# demo_mcp_item_roundtrip.py
# Version: v1
#
# Demo: drive the MCP-layer tasks directly: create a table, put an item,
# scan it back, query it by key and clean up.
#
# Usage:
#
#   python demo_mcp_item_roundtrip.py
#
# Set DYNAMO_MANAGER_MOCK_MODE=1 to run against the in-memory mock instead
# of DynamoDB Local.

import asyncio
from typing import Any, Dict

from dynamo_local_mcp.tools import tasks

TABLE = "demo_roundtrip"


async def main() -> None:
    manager = tasks.make_manager()
    print("Endpoint:", (await tasks.get_endpoint(manager))["endpoint"])

    await tasks.create_table(manager, table_name=TABLE, partition_key="id")
    try:
        await tasks.put_item(manager, TABLE, {"id": "a", "val": 1, "tags": ["x", "y"]})

        scanned: Dict[str, Any] = await tasks.scan_items(manager, TABLE)
        print("Scan items:", scanned["items"])

        queried = await tasks.query_items(manager, TABLE, {"id": "a"})
        print("Query items:", queried["items"])

        await tasks.delete_item(manager, TABLE, queried["items"][0])
        print("After delete:", (await tasks.scan_items(manager, TABLE))["items"])
    finally:
        await tasks.delete_table(manager, TABLE)


if __name__ == "__main__":
    asyncio.run(main())
