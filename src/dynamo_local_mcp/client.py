# DynamoDB Local Manager MCP
# File: client.py
# Version: v1
"""Async dispatcher for the DynamoDB API of a local DynamoDB instance.

Implements:

- list_tables(), describe_table(), create_table(), delete_table()
- describe_ttl() / update_ttl() for time-to-live
- update_table_streams() for change streams
- scan_items() (hard-capped at 50 items) and query_items()
- put_item() / delete_item()
- ping() for endpoint reachability

Table-level calls go through the low-level boto3 client; item calls go
through the document-level resource so items stay plain Python values.
boto3 is blocking, so every call runs in the event loop's default executor.
Remote errors (``botocore.exceptions.ClientError`` and friends) propagate
unchanged.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

import boto3
import httpx
from botocore.exceptions import ClientError

from .config import ManagerConfig
from .models import HASH, ItemPage, KeyCondition
from .query import build_key_condition
from .values import Item, to_dynamo, to_jsonable

logger = logging.getLogger(__name__)

# Scans are a preview, not an export: one page, no pagination.
SCAN_LIMIT = 50

# Error codes meaning "this service does not know DescribeTimeToLive";
# older DynamoDB Local builds reply this way.
TTL_UNSUPPORTED_CODES = frozenset({"UnknownOperationException"})


@dataclass(frozen=True)
class ConnectionHandles:
    """Low-level and document-level DynamoDB handles for one endpoint.

    boto3 clients are thread-safe but resources are not, so every call made
    through ``resource`` holds ``resource_lock``.
    """

    endpoint: str
    client: Any
    resource: Any
    resource_lock: threading.Lock = field(
        default_factory=threading.Lock, compare=False, repr=False
    )

    @classmethod
    def build(cls, config: ManagerConfig, endpoint: str) -> "ConnectionHandles":
        """Create both handles from one session against the same endpoint."""
        session = boto3.session.Session(
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
        )
        client = session.client("dynamodb", endpoint_url=endpoint)
        resource = session.resource("dynamodb", endpoint_url=endpoint)
        return cls(endpoint=endpoint, client=client, resource=resource)


def _strip_metadata(response: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in response.items() if k != "ResponseMetadata"}


@dataclass(frozen=True)
class DynamoClient:
    """Wrapper around one DynamoDB endpoint's table and item APIs."""

    config: ManagerConfig
    handles: ConnectionHandles

    @classmethod
    def connect(cls, config: ManagerConfig, endpoint: str) -> "DynamoClient":
        return cls(config=config, handles=ConnectionHandles.build(config, endpoint))

    @property
    def endpoint(self) -> str:
        return self.handles.endpoint

    async def _run(self, fn: Callable[..., Any], **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, **kwargs))

    async def _run_item(self, table_name: str, method: str, **kwargs: Any) -> Any:
        """Call a Table method with the document-level resource held."""

        def call() -> Any:
            with self.handles.resource_lock:
                table = self.handles.resource.Table(table_name)
                return getattr(table, method)(**kwargs)

        return await self._run(call)

    # ------------------------------------------------------------------
    # Basic health
    # ------------------------------------------------------------------

    async def ping(self) -> bool:
        """Return True if anything answers HTTP at the endpoint.

        DynamoDB Local answers a bare GET with HTTP 400, which still proves
        the service is up, so the status code is not checked.
        """
        timeout = float(self.config.ping_timeout_seconds)
        async with httpx.AsyncClient(timeout=timeout) as http_client:
            try:
                await http_client.get(self.endpoint)
            except httpx.HTTPError as exc:
                logger.debug("Ping to %s failed: %s", self.endpoint, exc)
                return False
        return True

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def list_tables(self) -> List[str]:
        """Table names, in the order the service returns them."""
        response = await self._run(self.handles.client.list_tables)
        return list(response.get("TableNames") or [])

    async def describe_table(self, table_name: str) -> Dict[str, Any]:
        """The ``Table`` descriptor for ``table_name``."""
        response = await self._run(
            self.handles.client.describe_table, TableName=table_name
        )
        return response["Table"]

    async def create_table(
        self,
        table_name: str,
        key_schema: List[Dict[str, Any]],
        attribute_definitions: List[Dict[str, Any]],
        global_secondary_indexes: Optional[List[Dict[str, Any]]] = None,
        stream_specification: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a provisioned table.

        GSIs without their own throughput get the configured default.
        """
        if not any(k.get("KeyType") == HASH for k in key_schema):
            raise ValueError(
                f"Table '{table_name}' needs a partition (HASH) key."
            )

        throughput = {
            "ReadCapacityUnits": self.config.read_capacity_units,
            "WriteCapacityUnits": self.config.write_capacity_units,
        }
        params: Dict[str, Any] = {
            "TableName": table_name,
            "KeySchema": key_schema,
            "AttributeDefinitions": attribute_definitions,
            "ProvisionedThroughput": throughput,
        }
        if global_secondary_indexes:
            params["GlobalSecondaryIndexes"] = [
                {"ProvisionedThroughput": dict(throughput), **gsi}
                for gsi in global_secondary_indexes
            ]
        if stream_specification is not None:
            params["StreamSpecification"] = stream_specification

        logger.debug("CreateTable %s on %s", table_name, self.endpoint)
        response = await self._run(self.handles.client.create_table, **params)
        return _strip_metadata(response)

    async def delete_table(self, table_name: str) -> Dict[str, Any]:
        logger.debug("DeleteTable %s on %s", table_name, self.endpoint)
        response = await self._run(
            self.handles.client.delete_table, TableName=table_name
        )
        return _strip_metadata(response)

    async def update_table_streams(
        self,
        table_name: str,
        stream_specification: Dict[str, Any],
    ) -> Dict[str, Any]:
        response = await self._run(
            self.handles.client.update_table,
            TableName=table_name,
            StreamSpecification=stream_specification,
        )
        return _strip_metadata(response)

    # ------------------------------------------------------------------
    # Time to live
    # ------------------------------------------------------------------

    async def describe_ttl(self, table_name: str) -> Optional[Dict[str, Any]]:
        """The ``TimeToLiveDescription`` of a table.

        Returns None when the service does not implement the TTL API at all.
        """
        try:
            response = await self._run(
                self.handles.client.describe_time_to_live, TableName=table_name
            )
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code not in TTL_UNSUPPORTED_CODES:
                raise
            logger.warning(
                "DescribeTimeToLive not supported by %s (%s); treating TTL as absent.",
                self.endpoint,
                code,
            )
            return None
        return response.get("TimeToLiveDescription")

    async def update_ttl(
        self,
        table_name: str,
        enabled: bool,
        attribute_name: str,
    ) -> Dict[str, Any]:
        """Enable or disable TTL.

        The service wants the attribute name even when disabling.
        """
        response = await self._run(
            self.handles.client.update_time_to_live,
            TableName=table_name,
            TimeToLiveSpecification={
                "Enabled": bool(enabled),
                "AttributeName": attribute_name,
            },
        )
        return _strip_metadata(response)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def scan_items(
        self,
        table_name: str,
        index_name: Optional[str] = None,
    ) -> ItemPage:
        """First page of a scan, never more than SCAN_LIMIT items."""
        params: Dict[str, Any] = {"Limit": SCAN_LIMIT}
        if index_name:
            params["IndexName"] = index_name

        response = await self._run_item(table_name, "scan", **params)

        return self._page(
            response,
            limit=SCAN_LIMIT,
            meta={
                "operation": "scan",
                "table_name": table_name,
                "index_name": index_name,
                "limit": SCAN_LIMIT,
            },
        )

    async def query_items(
        self,
        table_name: str,
        key_conditions: Iterable[KeyCondition],
        index_name: Optional[str] = None,
    ) -> ItemPage:
        """Items matching equality conditions on key attributes.

        With no conditions there is nothing to query, so no call is made.
        """
        conditions = list(key_conditions)
        meta: Dict[str, Any] = {
            "operation": "query",
            "table_name": table_name,
            "index_name": index_name,
            "conditions": len(conditions),
        }

        expression = build_key_condition(conditions)
        if expression is None:
            meta["skipped"] = True
            return ItemPage(items=[], meta=meta)

        params: Dict[str, Any] = dict(expression)
        if index_name:
            params["IndexName"] = index_name
        meta["key_condition_expression"] = expression["KeyConditionExpression"]

        response = await self._run_item(table_name, "query", **params)
        return self._page(response, meta=meta)

    async def put_item(self, table_name: str, item: Item) -> Dict[str, Any]:
        response = await self._run_item(table_name, "put_item", Item=to_dynamo(item))
        return _strip_metadata(response)

    async def delete_item(self, table_name: str, key: Item) -> Dict[str, Any]:
        response = await self._run_item(table_name, "delete_item", Key=to_dynamo(key))
        return _strip_metadata(response)

    @staticmethod
    def _page(
        response: Dict[str, Any],
        meta: Dict[str, Any],
        limit: Optional[int] = None,
    ) -> ItemPage:
        raw_items = response.get("Items") or []
        if limit is not None:
            raw_items = raw_items[:limit]

        items = [to_jsonable(item) for item in raw_items]
        last_key = response.get("LastEvaluatedKey")

        return ItemPage(
            items=items,
            count=len(items),
            scanned_count=int(response.get("ScannedCount", len(items))),
            last_evaluated_key=to_jsonable(last_key) if last_key else None,
            meta=meta,
        )
