# demo_list_tables.py
# Version: v1
#
# Demo: list tables on the persisted DynamoDB endpoint and describe the first.
#
# Usage:
#
#   docker run -p 8000:8000 amazon/dynamodb-local
#   python demo_list_tables.py

import asyncio

from dynamo_local_mcp.config import ManagerConfig
from dynamo_local_mcp.connection import ConnectionManager


async def main() -> None:
    manager = ConnectionManager(ManagerConfig.from_env())
    client = manager.client
    print("Endpoint:", client.endpoint)

    if not await client.ping():
        print("Nothing answered at the endpoint; is DynamoDB Local running?")
        return

    names = await client.list_tables()
    print("Tables returned:", len(names))
    for name in names:
        print("-", name)

    if not names:
        return

    table = await client.describe_table(names[0])
    ttl = await client.describe_ttl(names[0])
    print()
    print(f"{table['TableName']} ({table.get('TableStatus')})")
    for key in table.get("KeySchema", []):
        print(f"  key {key['AttributeName']} [{key['KeyType']}]")
    print("  items:", table.get("ItemCount"))
    print("  ttl:", ttl if ttl is not None else "not supported by this endpoint")


if __name__ == "__main__":
    asyncio.run(main())
