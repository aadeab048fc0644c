# DynamoDB Local Manager MCP
# File: tools/mock.py
# Version: v1

"""Small in-memory stand-in for DynamoClient.

Activated when DYNAMO_MANAGER_MOCK_MODE is truthy. Implements the dispatcher
interface used by tools.tasks so the tools work without a DynamoDB Local
instance. Each endpoint gets its own in-memory "instance"; failures are raised
as botocore ClientErrors with the codes the real service uses.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from botocore.exceptions import ClientError

from ..client import SCAN_LIMIT
from ..config import ManagerConfig
from ..models import HASH, ItemPage, KeyCondition
from ..query import coerce_key_value
from ..values import Item, to_jsonable


def _error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@dataclass
class _MockTable:
    description: Dict[str, Any]
    items: Dict[Tuple[Any, ...], Item] = field(default_factory=dict)
    ttl: Dict[str, Any] = field(
        default_factory=lambda: {"TimeToLiveStatus": "DISABLED"}
    )

    @property
    def key_names(self) -> List[str]:
        return [k["AttributeName"] for k in self.description["KeySchema"]]


@dataclass
class _MockInstance:
    tables: Dict[str, _MockTable] = field(default_factory=dict)


class MockDynamoClient:
    """In-memory dispatcher bound to one mock endpoint."""

    def __init__(self, config: ManagerConfig, endpoint: str, instance: _MockInstance) -> None:
        self.config = config
        self._endpoint = endpoint
        self._instance = instance

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _table(self, table_name: str, operation: str) -> _MockTable:
        table = self._instance.tables.get(table_name)
        if table is None:
            raise _error(
                "ResourceNotFoundException",
                "Cannot do operations on a non-existent table",
                operation,
            )
        return table

    async def ping(self) -> bool:
        return True

    # Tables ------------------------------------------------------------

    async def list_tables(self) -> List[str]:
        return sorted(self._instance.tables)

    async def describe_table(self, table_name: str) -> Dict[str, Any]:
        table = self._table(table_name, "DescribeTable")
        desc = copy.deepcopy(table.description)
        desc["ItemCount"] = len(table.items)
        desc["TableSizeBytes"] = sum(
            len(json.dumps(to_jsonable(i), sort_keys=True)) for i in table.items.values()
        )
        return desc

    async def create_table(
        self,
        table_name: str,
        key_schema: List[Dict[str, Any]],
        attribute_definitions: List[Dict[str, Any]],
        global_secondary_indexes: Optional[List[Dict[str, Any]]] = None,
        stream_specification: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not any(k.get("KeyType") == HASH for k in key_schema):
            raise ValueError(f"Table '{table_name}' needs a partition (HASH) key.")
        if table_name in self._instance.tables:
            raise _error(
                "ResourceInUseException",
                f"Cannot create preexisting table: {table_name}",
                "CreateTable",
            )

        throughput = {
            "ReadCapacityUnits": self.config.read_capacity_units,
            "WriteCapacityUnits": self.config.write_capacity_units,
        }
        desc: Dict[str, Any] = {
            "TableName": table_name,
            "TableStatus": "ACTIVE",
            "KeySchema": copy.deepcopy(key_schema),
            "AttributeDefinitions": copy.deepcopy(attribute_definitions),
            "ProvisionedThroughput": throughput,
            "CreationDateTime": datetime.now(timezone.utc),
            "TableArn": f"arn:aws:dynamodb:ddblocal:000000000000:table/{table_name}",
        }
        if global_secondary_indexes:
            desc["GlobalSecondaryIndexes"] = [
                {"ProvisionedThroughput": dict(throughput), "IndexStatus": "ACTIVE", **gsi}
                for gsi in copy.deepcopy(global_secondary_indexes)
            ]

        table = _MockTable(description=desc)
        self._instance.tables[table_name] = table
        if stream_specification is not None:
            self._apply_stream(table, stream_specification)

        return {"TableDescription": await self.describe_table(table_name)}

    async def delete_table(self, table_name: str) -> Dict[str, Any]:
        self._table(table_name, "DeleteTable")
        table = self._instance.tables.pop(table_name)
        desc = copy.deepcopy(table.description)
        desc["TableStatus"] = "DELETING"
        return {"TableDescription": desc}

    async def update_table_streams(
        self,
        table_name: str,
        stream_specification: Dict[str, Any],
    ) -> Dict[str, Any]:
        table = self._table(table_name, "UpdateTable")
        self._apply_stream(table, stream_specification)
        return {"TableDescription": await self.describe_table(table_name)}

    @staticmethod
    def _apply_stream(table: _MockTable, spec: Dict[str, Any]) -> None:
        desc = table.description
        if spec.get("StreamEnabled"):
            label = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]
            desc["StreamSpecification"] = dict(spec)
            desc["LatestStreamLabel"] = label
            desc["LatestStreamArn"] = f"{desc['TableArn']}/stream/{label}"
        else:
            desc.pop("StreamSpecification", None)

    # Time to live -----------------------------------------------------------

    async def describe_ttl(self, table_name: str) -> Optional[Dict[str, Any]]:
        return dict(self._table(table_name, "DescribeTimeToLive").ttl)

    async def update_ttl(
        self,
        table_name: str,
        enabled: bool,
        attribute_name: str,
    ) -> Dict[str, Any]:
        table = self._table(table_name, "UpdateTimeToLive")
        current = table.ttl
        if enabled and current["TimeToLiveStatus"] == "ENABLED":
            raise _error("ValidationException", "TimeToLive is already enabled", "UpdateTimeToLive")
        if not enabled:
            if current["TimeToLiveStatus"] != "ENABLED":
                raise _error("ValidationException", "TimeToLive is already disabled", "UpdateTimeToLive")
            if current.get("AttributeName") != attribute_name:
                raise _error(
                    "ValidationException",
                    "TimeToLive attribute name does not match the enabled attribute",
                    "UpdateTimeToLive",
                )

        status = "ENABLED" if enabled else "DISABLED"
        table.ttl = {"TimeToLiveStatus": status, "AttributeName": attribute_name}
        return {
            "TimeToLiveSpecification": {"Enabled": bool(enabled), "AttributeName": attribute_name}
        }

    # Items ------------------------------------------------------------------

    def _index_keys(self, table: _MockTable, index_name: Optional[str], operation: str) -> List[str]:
        if not index_name:
            return table.key_names
        for gsi in table.description.get("GlobalSecondaryIndexes") or []:
            if gsi["IndexName"] == index_name:
                return [k["AttributeName"] for k in gsi["KeySchema"]]
        raise _error(
            "ValidationException",
            f"The table does not have the specified index: {index_name}",
            operation,
        )

    @staticmethod
    def _select(
        items: Iterable[Item],
        required: List[str],
        match: Callable[[Item], bool] = lambda _item: True,
    ) -> List[Item]:
        return [
            copy.deepcopy(i)
            for i in items
            if all(k in i for k in required) and match(i)
        ]

    async def scan_items(self, table_name: str, index_name: Optional[str] = None) -> ItemPage:
        table = self._table(table_name, "Scan")
        keys = self._index_keys(table, index_name, "Scan")
        matched = self._select(table.items.values(), keys)
        page = [to_jsonable(i) for i in matched[:SCAN_LIMIT]]
        last_key = None
        if len(matched) > SCAN_LIMIT:
            last_key = {k: to_jsonable(page[-1][k]) for k in table.key_names}
        return ItemPage(
            items=page,
            count=len(page),
            scanned_count=len(page),
            last_evaluated_key=last_key,
            meta={
                "operation": "scan",
                "table_name": table_name,
                "index_name": index_name,
                "limit": SCAN_LIMIT,
                "mock": True,
            },
        )

    async def query_items(
        self,
        table_name: str,
        key_conditions: Iterable[KeyCondition],
        index_name: Optional[str] = None,
    ) -> ItemPage:
        conditions = list(key_conditions)
        meta: Dict[str, Any] = {
            "operation": "query",
            "table_name": table_name,
            "index_name": index_name,
            "conditions": len(conditions),
            "mock": True,
        }
        if not conditions:
            meta["skipped"] = True
            return ItemPage(items=[], meta=meta)

        table = self._table(table_name, "Query")
        keys = self._index_keys(table, index_name, "Query")
        wanted = {c.key: coerce_key_value(c.value) for c in conditions}

        matched = self._select(
            table.items.values(),
            keys,
            lambda i: all(i.get(k) == v for k, v in wanted.items()),
        )
        items = [to_jsonable(i) for i in matched]
        return ItemPage(items=items, count=len(items), scanned_count=len(items), meta=meta)

    async def put_item(self, table_name: str, item: Item) -> Dict[str, Any]:
        table = self._table(table_name, "PutItem")
        key = self._key_tuple(table, item, "PutItem")
        table.items[key] = copy.deepcopy(dict(item))
        return {}

    async def delete_item(self, table_name: str, key: Item) -> Dict[str, Any]:
        table = self._table(table_name, "DeleteItem")
        if set(key) != set(table.key_names):
            raise _error(
                "ValidationException",
                "The provided key element does not match the schema",
                "DeleteItem",
            )
        table.items.pop(self._key_tuple(table, key, "DeleteItem"), None)
        return {}

    @staticmethod
    def _key_tuple(table: _MockTable, item: Item, operation: str) -> Tuple[Any, ...]:
        types = {
            a["AttributeName"]: a["AttributeType"]
            for a in table.description["AttributeDefinitions"]
        }
        parts: List[Any] = []
        for name in table.key_names:
            if name not in item:
                raise _error(
                    "ValidationException",
                    f"One or more parameter values were invalid: Missing the key {name} in the item",
                    operation,
                )
            value = item[name]
            expected = types.get(name, "S")
            is_number = isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)
            is_binary = isinstance(value, (bytes, bytearray))
            if (
                (expected == "S" and not isinstance(value, str))
                or (expected == "N" and not is_number)
                or (expected == "B" and not is_binary)
            ):
                raise _error(
                    "ValidationException",
                    "One or more parameter values were invalid: Type mismatch for key "
                    f"{name} expected: {expected}",
                    operation,
                )
            parts.append(bytes(value) if is_binary else value)
        return tuple(parts)


def mock_client_factory() -> Callable[[ManagerConfig, str], MockDynamoClient]:
    """Factory for ConnectionManager; one in-memory instance per endpoint."""
    instances: Dict[str, _MockInstance] = {}

    def factory(config: ManagerConfig, endpoint: str) -> MockDynamoClient:
        instance = instances.setdefault(endpoint, _MockInstance())
        return MockDynamoClient(config, endpoint, instance)

    return factory
