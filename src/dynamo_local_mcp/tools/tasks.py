# DynamoDB Local Manager MCP
# File: tools/tasks.py
# Version: v1
#
# NOTE: This module is the single place where console operations are exposed
# as MCP tools. The transports (stdio / http) call `register_tools(server)`
# to wire them up. Every task takes the ConnectionManager explicitly and
# reads `manager.client` exactly once, so an endpoint switch never affects a
# call that has already started.

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Union

from ..config import ManagerConfig
from ..connection import ConnectionManager
from ..forms import (
    FALLBACK_TTL_ATTRIBUTE,
    active_key_schema,
    build_table_definition,
    delete_key_for_item,
    item_template as _item_template,
    stream_specification,
)
from ..models import ItemPage, TableDescriptor
from ..query import conditions_from_inputs
from ..values import parse_item_json, to_jsonable
from .mock import mock_client_factory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _make_error(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Small, LLM-friendly error shape used by diagnostics."""
    err: Dict[str, Any] = {"code": code, "message": message}
    if details:
        err["details"] = details
    return err


def make_manager(cfg: Optional[ManagerConfig] = None) -> ConnectionManager:
    """Create a ConnectionManager from environment configuration.

    In mock mode the manager dispatches to in-memory tables instead of a
    DynamoDB Local instance.
    """
    cfg = cfg or ManagerConfig.from_env()
    if cfg.mock_mode:
        return ConnectionManager(cfg, client_factory=mock_client_factory())
    return ConnectionManager(cfg)


def _require_text(value: Optional[str], what: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{what} must not be empty.")
    return str(value).strip()


def _page_to_dict(page: ItemPage, endpoint: str) -> Dict[str, Any]:
    meta = dict(page.meta)
    meta["endpoint"] = endpoint
    return {
        "items": page.items,
        "count": page.count,
        "scanned_count": page.scanned_count,
        "truncated": page.truncated,
        "last_evaluated_key": page.last_evaluated_key,
        "meta": meta,
    }


def _table_summary(table: Dict[str, Any]) -> Dict[str, Any]:
    desc = TableDescriptor.from_description(table)
    return {
        "name": desc.name,
        "status": desc.status,
        "keys": [
            {"name": k["AttributeName"], "role": k["KeyType"]} for k in desc.key_schema
        ],
        "indexes": [g.get("IndexName") for g in desc.global_secondary_indexes],
        "stream_enabled": desc.stream_enabled,
        "stream_view_type": (desc.stream_specification or {}).get("StreamViewType"),
        "item_count": desc.item_count,
        "size_bytes": desc.size_bytes,
        "arn": desc.arn,
        "created_at": to_jsonable(desc.created_at),
    }


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


async def get_endpoint(manager: ConnectionManager) -> Dict[str, Any]:
    return {"endpoint": manager.endpoint}


async def set_endpoint(manager: ConnectionManager, endpoint: str) -> Dict[str, Any]:
    new_endpoint = _require_text(endpoint, "Endpoint")
    previous = manager.endpoint
    manager.set_endpoint(new_endpoint)
    return {"endpoint": manager.endpoint, "previous": previous}


async def ping(manager: ConnectionManager) -> Dict[str, Any]:
    client = manager.client
    ok = await client.ping()
    return {"ok": bool(ok), "endpoint": client.endpoint}


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


async def list_tables(manager: ConnectionManager) -> Dict[str, Any]:
    client = manager.client
    names = await client.list_tables()
    return {"endpoint": client.endpoint, "tables": names, "count": len(names)}


async def describe_table(manager: ConnectionManager, table_name: str) -> Dict[str, Any]:
    """Table descriptor plus its TTL settings (None if unsupported)."""
    client = manager.client
    table = await client.describe_table(table_name)
    ttl = await client.describe_ttl(table_name)

    return {
        "summary": _table_summary(table),
        "table": to_jsonable(table),
        "ttl": to_jsonable(ttl) if ttl is not None else None,
        "ttl_supported": ttl is not None,
        "meta": {"endpoint": client.endpoint},
    }


async def create_table(
    manager: ConnectionManager,
    table_name: str,
    partition_key: str = "id",
    partition_key_type: str = "S",
    sort_key: Optional[str] = None,
    sort_key_type: str = "S",
    stream_enabled: bool = False,
    stream_view_type: Optional[str] = None,
    global_secondary_indexes: Optional[List[Dict[str, Any]]] = None,
    extra_attribute_definitions: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Create a table from simple form input.

    ``extra_attribute_definitions`` declares attributes that only GSIs use
    as keys.
    """
    name = _require_text(table_name, "Table name")
    key_schema, attributes = build_table_definition(
        partition_key, partition_key_type, sort_key or None, sort_key_type
    )
    declared = {a["AttributeName"] for a in attributes}
    for extra in extra_attribute_definitions or []:
        if extra["AttributeName"] not in declared:
            attributes.append(dict(extra))
            declared.add(extra["AttributeName"])

    stream = stream_specification(True, stream_view_type) if stream_enabled else None

    client = manager.client
    response = await client.create_table(
        name,
        key_schema,
        attributes,
        list(global_secondary_indexes or []),
        stream,
    )
    return {
        "table_name": name,
        "response": to_jsonable(response),
        "meta": {"endpoint": client.endpoint},
    }


async def delete_table(manager: ConnectionManager, table_name: str) -> Dict[str, Any]:
    client = manager.client
    response = await client.delete_table(table_name)
    return {
        "table_name": table_name,
        "response": to_jsonable(response),
        "meta": {"endpoint": client.endpoint},
    }


async def enable_ttl(
    manager: ConnectionManager,
    table_name: str,
    attribute_name: str,
) -> Dict[str, Any]:
    attr = _require_text(attribute_name, "TTL attribute name")
    client = manager.client
    response = await client.update_ttl(table_name, True, attr)
    return {"table_name": table_name, "response": to_jsonable(response)}


async def disable_ttl(
    manager: ConnectionManager,
    table_name: str,
    attribute_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Disable TTL.

    The service still requires an attribute name here; when none is given
    the last known TTL attribute of the table is used.
    """
    client = manager.client
    attr = (attribute_name or "").strip()
    if not attr:
        ttl = await client.describe_ttl(table_name)
        attr = (ttl or {}).get("AttributeName") or FALLBACK_TTL_ATTRIBUTE

    response = await client.update_ttl(table_name, False, attr)
    return {
        "table_name": table_name,
        "attribute_name": attr,
        "response": to_jsonable(response),
    }


async def update_streams(
    manager: ConnectionManager,
    table_name: str,
    enabled: bool,
    view_type: Optional[str] = None,
) -> Dict[str, Any]:
    spec = stream_specification(enabled, view_type)
    client = manager.client
    response = await client.update_table_streams(table_name, spec)
    return {
        "table_name": table_name,
        "stream_specification": spec,
        "response": to_jsonable(response),
    }


async def toggle_stream(manager: ConnectionManager, table_name: str) -> Dict[str, Any]:
    """Flip the table's change stream on or off."""
    client = manager.client
    table = await client.describe_table(table_name)
    enabled = TableDescriptor.from_description(table).stream_enabled

    spec = stream_specification(not enabled)
    response = await client.update_table_streams(table_name, spec)
    return {
        "table_name": table_name,
        "stream_specification": spec,
        "response": to_jsonable(response),
    }


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


async def scan_items(
    manager: ConnectionManager,
    table_name: str,
    index_name: Optional[str] = None,
) -> Dict[str, Any]:
    client = manager.client
    page = await client.scan_items(table_name, index_name or None)
    return _page_to_dict(page, client.endpoint)


async def query_items(
    manager: ConnectionManager,
    table_name: str,
    key_values: Dict[str, Any],
    index_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Query by equality on the key attributes of the table or an index.

    ``key_values`` maps key attribute names to the values typed in; blank
    entries are ignored. Numeric-looking text is queried as a number.
    """
    client = manager.client
    table = await client.describe_table(table_name)
    schema = active_key_schema(table, index_name or None)
    conditions = conditions_from_inputs(schema, key_values or {})

    page = await client.query_items(table_name, conditions, index_name or None)
    return _page_to_dict(page, client.endpoint)


async def put_item(
    manager: ConnectionManager,
    table_name: str,
    item: Union[str, Dict[str, Any]],
) -> Dict[str, Any]:
    """Create or replace an item given as a JSON object or JSON text."""
    body = parse_item_json(item) if isinstance(item, str) else dict(item)

    client = manager.client
    response = await client.put_item(table_name, body)
    return {"table_name": table_name, "item": body, "response": to_jsonable(response)}


async def delete_item(
    manager: ConnectionManager,
    table_name: str,
    item: Dict[str, Any],
) -> Dict[str, Any]:
    """Delete ``item``, keyed by the base table's key schema.

    ``item`` may be a full item as returned by scan/query; only its key
    attributes are sent.
    """
    client = manager.client
    table = await client.describe_table(table_name)
    key = delete_key_for_item(table, item)

    response = await client.delete_item(table_name, key)
    return {"table_name": table_name, "key": key, "response": to_jsonable(response)}


async def item_template(manager: ConnectionManager, table_name: str) -> Dict[str, Any]:
    client = manager.client
    table = await client.describe_table(table_name)
    return {"table_name": table_name, "item": _item_template(table)}


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def _collect_config_info(manager: ConnectionManager) -> Dict[str, Any]:
    cfg = manager.config
    return {
        "endpoint": manager.endpoint,
        "settings_path": str(manager.store.path),
        "mock_mode": bool(cfg.mock_mode),
        "region": cfg.region,
        "ping_timeout_seconds": cfg.ping_timeout_seconds,
        "provisioned_throughput": {
            "read_capacity_units": cfg.read_capacity_units,
            "write_capacity_units": cfg.write_capacity_units,
        },
    }


async def diagnostics(manager: ConnectionManager) -> Dict[str, Any]:
    started = time.time()
    config_info = _collect_config_info(manager)
    checks: List[Dict[str, Any]] = []
    overall_ok = True

    client = manager.client
    checks.append({"name": "client_init", "ok": True, "error": None, "elapsed_ms": 0})

    # Ping
    t0 = time.time()
    try:
        ok_ping = await client.ping()
    except Exception as exc:  # noqa: BLE001
        ok_ping = False
        ping_error = _make_error("BACKEND_ERROR", str(exc))
    else:
        ping_error = None if ok_ping else _make_error(
            "UNREACHABLE", f"Nothing answered at {client.endpoint}."
        )
    overall_ok = overall_ok and bool(ok_ping)
    checks.append(
        {
            "name": "ping",
            "ok": bool(ok_ping),
            "error": ping_error,
            "elapsed_ms": int((time.time() - t0) * 1000),
        }
    )

    # List tables
    t0 = time.time()
    try:
        names = await client.list_tables()
        checks.append(
            {
                "name": "list_tables",
                "ok": True,
                "count": len(names),
                "error": None,
                "elapsed_ms": int((time.time() - t0) * 1000),
            }
        )
    except Exception as exc:
        overall_ok = False
        logger.warning("Diagnostics list_tables failed: %s", exc)
        checks.append(
            {
                "name": "list_tables",
                "ok": False,
                "error": _make_error("BACKEND_ERROR", str(exc)),
                "elapsed_ms": int((time.time() - t0) * 1000),
            }
        )

    return {
        "ok": overall_ok,
        "mock_mode": config_info["mock_mode"],
        "config": config_info,
        "checks": checks,
        "meta": {"elapsed_ms": int((time.time() - started) * 1000)},
    }


# ---------------------------------------------------------------------------
# MCP tool registration
# ---------------------------------------------------------------------------


def register_tools(server: Any, manager: Optional[ConnectionManager] = None) -> ConnectionManager:
    """Register MCP tools on an MCP Server-like instance.

    Returns the ConnectionManager the tools are bound to.
    """
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    manager = manager or make_manager()

    @server.tool(name="dynamodb_get_endpoint", description="Show the DynamoDB endpoint the console is connected to.")
    async def mcp_get_endpoint() -> Dict[str, Any]:
        return await get_endpoint(manager)

    @server.tool(
        name="dynamodb_set_endpoint",
        description="Point the console at another DynamoDB endpoint URL (persisted for later sessions).",
    )
    async def mcp_set_endpoint(endpoint: str) -> Dict[str, Any]:
        return await set_endpoint(manager, endpoint=endpoint)

    @server.tool(name="dynamodb_ping", description="Check whether the configured DynamoDB endpoint answers HTTP.")
    async def mcp_ping() -> Dict[str, Any]:
        return await ping(manager)

    @server.tool(name="dynamodb_list_tables", description="List tables on the configured DynamoDB endpoint.")
    async def mcp_list_tables() -> Dict[str, Any]:
        return await list_tables(manager)

    @server.tool(
        name="dynamodb_describe_table",
        description="Describe a table: keys, indexes, stream, size, item count and TTL settings.",
    )
    async def mcp_describe_table(table_name: str) -> Dict[str, Any]:
        return await describe_table(manager, table_name=table_name)

    @server.tool(
        name="dynamodb_create_table",
        description="Create a table with a partition key, optional sort key, optional GSIs and optional stream.",
    )
    async def mcp_create_table(
        table_name: str,
        partition_key: str = "id",
        partition_key_type: str = "S",
        sort_key: Optional[str] = None,
        sort_key_type: str = "S",
        stream_enabled: bool = False,
        stream_view_type: Optional[str] = None,
        global_secondary_indexes: Optional[List[Dict[str, Any]]] = None,
        extra_attribute_definitions: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        return await create_table(
            manager,
            table_name=table_name,
            partition_key=partition_key,
            partition_key_type=partition_key_type,
            sort_key=sort_key,
            sort_key_type=sort_key_type,
            stream_enabled=stream_enabled,
            stream_view_type=stream_view_type,
            global_secondary_indexes=global_secondary_indexes,
            extra_attribute_definitions=extra_attribute_definitions,
        )

    @server.tool(name="dynamodb_delete_table", description="Delete a table and all of its items.")
    async def mcp_delete_table(table_name: str) -> Dict[str, Any]:
        return await delete_table(manager, table_name=table_name)

    @server.tool(name="dynamodb_enable_ttl", description="Enable time-to-live on a table using the given attribute.")
    async def mcp_enable_ttl(table_name: str, attribute_name: str) -> Dict[str, Any]:
        return await enable_ttl(manager, table_name=table_name, attribute_name=attribute_name)

    @server.tool(
        name="dynamodb_disable_ttl",
        description="Disable time-to-live on a table (defaults to the currently configured TTL attribute).",
    )
    async def mcp_disable_ttl(table_name: str, attribute_name: Optional[str] = None) -> Dict[str, Any]:
        return await disable_ttl(manager, table_name=table_name, attribute_name=attribute_name)

    @server.tool(name="dynamodb_update_streams", description="Enable or disable a table's change stream.")
    async def mcp_update_streams(
        table_name: str,
        enabled: bool,
        view_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await update_streams(manager, table_name=table_name, enabled=enabled, view_type=view_type)

    @server.tool(name="dynamodb_toggle_stream", description="Turn a table's change stream on if off, off if on.")
    async def mcp_toggle_stream(table_name: str) -> Dict[str, Any]:
        return await toggle_stream(manager, table_name=table_name)

    @server.tool(
        name="dynamodb_scan_items",
        description="Scan up to 50 items from a table or one of its global secondary indexes.",
    )
    async def mcp_scan_items(table_name: str, index_name: Optional[str] = None) -> Dict[str, Any]:
        return await scan_items(manager, table_name=table_name, index_name=index_name)

    @server.tool(
        name="dynamodb_query_items",
        description="Query a table or index by key values (equality on partition and optional sort key).",
    )
    async def mcp_query_items(
        table_name: str,
        key_values: Dict[str, Any],
        index_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await query_items(manager, table_name=table_name, key_values=key_values, index_name=index_name)

    @server.tool(name="dynamodb_put_item", description="Create or replace an item (JSON object or JSON text).")
    async def mcp_put_item(table_name: str, item: Union[str, Dict[str, Any]]) -> Dict[str, Any]:
        return await put_item(manager, table_name=table_name, item=item)

    @server.tool(name="dynamodb_delete_item", description="Delete an item; only its primary-key attributes are used.")
    async def mcp_delete_item(table_name: str, item: Dict[str, Any]) -> Dict[str, Any]:
        return await delete_item(manager, table_name=table_name, item=item)

    @server.tool(name="dynamodb_item_template", description="Blank item with the table's key attributes filled in.")
    async def mcp_item_template(table_name: str) -> Dict[str, Any]:
        return await item_template(manager, table_name=table_name)

    @server.tool(name="dynamodb_diagnostics", description="Run health checks against the configured DynamoDB endpoint.")
    async def mcp_diagnostics() -> Dict[str, Any]:
        return await diagnostics(manager)

    return manager
