# DynamoDB Local Manager MCP
# File: tests/test_client.py
# Version: v1

"""Tests for the DynamoClient dispatcher.

The boto3 handles are replaced by small fakes that record every call, so
nothing here talks to a real DynamoDB endpoint.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

import pytest
from botocore.exceptions import ClientError

from dynamo_local_mcp.client import SCAN_LIMIT, ConnectionHandles, DynamoClient
from dynamo_local_mcp.config import ManagerConfig
from dynamo_local_mcp.models import KeyCondition


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class _FakeTable:
    def __init__(self, name: str, calls: List[Dict[str, Any]], items: List[Dict[str, Any]]):
        self.name = name
        self.calls = calls
        self.items = items

    def scan(self, **kwargs):
        self.calls.append({"op": "scan", "table": self.name, **kwargs})
        # Pretend the service ignored Limit, to prove the client caps anyway.
        return {
            "Items": list(self.items),
            "Count": len(self.items),
            "ScannedCount": len(self.items),
            "LastEvaluatedKey": {"id": Decimal("49")},
        }

    def query(self, **kwargs):
        self.calls.append({"op": "query", "table": self.name, **kwargs})
        return {"Items": [{"id": Decimal("42"), "price": Decimal("9.5")}], "Count": 1, "ScannedCount": 1}

    def put_item(self, **kwargs):
        self.calls.append({"op": "put_item", "table": self.name, **kwargs})
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}

    def delete_item(self, **kwargs):
        self.calls.append({"op": "delete_item", "table": self.name, **kwargs})
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}


class _FakeResource:
    def __init__(self, calls: List[Dict[str, Any]], items: List[Dict[str, Any]]):
        self.calls = calls
        self.items = items

    def Table(self, name: str) -> _FakeTable:  # noqa: N802 - mirrors boto3
        return _FakeTable(name, self.calls, self.items)


class _FakeLowLevel:
    def __init__(self, calls: List[Dict[str, Any]], ttl_error: str | None = None):
        self.calls = calls
        self.ttl_error = ttl_error

    def list_tables(self, **kwargs):
        self.calls.append({"op": "list_tables", **kwargs})
        return {"TableNames": ["alpha", "beta"], "ResponseMetadata": {}}

    def describe_table(self, **kwargs):
        self.calls.append({"op": "describe_table", **kwargs})
        return {"Table": {"TableName": kwargs["TableName"], "KeySchema": []}}

    def describe_time_to_live(self, **kwargs):
        self.calls.append({"op": "describe_time_to_live", **kwargs})
        if self.ttl_error:
            raise _client_error(self.ttl_error, "DescribeTimeToLive")
        return {"TimeToLiveDescription": {"TimeToLiveStatus": "ENABLED", "AttributeName": "expireAt"}}

    def create_table(self, **kwargs):
        self.calls.append({"op": "create_table", **kwargs})
        return {"TableDescription": {"TableName": kwargs["TableName"]}, "ResponseMetadata": {}}

    def delete_table(self, **kwargs):
        self.calls.append({"op": "delete_table", **kwargs})
        return {"TableDescription": {"TableName": kwargs["TableName"]}}

    def update_time_to_live(self, **kwargs):
        self.calls.append({"op": "update_time_to_live", **kwargs})
        return {"TimeToLiveSpecification": kwargs["TimeToLiveSpecification"]}

    def update_table(self, **kwargs):
        self.calls.append({"op": "update_table", **kwargs})
        return {"TableDescription": {"TableName": kwargs["TableName"]}}


def _make(
    items: List[Dict[str, Any]] | None = None,
    ttl_error: str | None = None,
) -> tuple[DynamoClient, List[Dict[str, Any]]]:
    calls: List[Dict[str, Any]] = []
    handles = ConnectionHandles(
        endpoint="http://localhost:8000",
        client=_FakeLowLevel(calls, ttl_error=ttl_error),
        resource=_FakeResource(calls, items or []),
    )
    return DynamoClient(config=ManagerConfig(), handles=handles), calls


# ---------------------------------------------------------------------------
# Handles
# ---------------------------------------------------------------------------


def test_handles_are_built_against_the_same_endpoint() -> None:
    handles = ConnectionHandles.build(ManagerConfig(), "http://localhost:8123")

    assert handles.endpoint == "http://localhost:8123"
    assert handles.client.meta.endpoint_url == "http://localhost:8123"
    assert handles.resource.meta.client.meta.endpoint_url == "http://localhost:8123"
    assert handles.client.meta.region_name == "us-east-1"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_tables_returns_names() -> None:
    client, calls = _make()
    assert await client.list_tables() == ["alpha", "beta"]
    assert calls == [{"op": "list_tables"}]


@pytest.mark.asyncio
async def test_create_table_defaults_and_omitted_fields() -> None:
    client, calls = _make()
    key_schema = [{"AttributeName": "id", "KeyType": "HASH"}]
    attrs = [{"AttributeName": "id", "AttributeType": "S"}]

    out = await client.create_table("things", key_schema, attrs, [], None)

    assert out == {"TableDescription": {"TableName": "things"}}
    call = calls[0]
    assert call["ProvisionedThroughput"] == {"ReadCapacityUnits": 5, "WriteCapacityUnits": 5}
    assert "GlobalSecondaryIndexes" not in call
    assert "StreamSpecification" not in call


@pytest.mark.asyncio
async def test_create_table_with_gsi_and_stream() -> None:
    client, calls = _make()
    gsi = {
        "IndexName": "by_status",
        "KeySchema": [{"AttributeName": "status", "KeyType": "HASH"}],
        "Projection": {"ProjectionType": "ALL"},
    }
    stream = {"StreamEnabled": True, "StreamViewType": "NEW_IMAGE"}

    await client.create_table(
        "things",
        [{"AttributeName": "id", "KeyType": "HASH"}],
        [{"AttributeName": "id", "AttributeType": "S"}],
        [gsi],
        stream,
    )

    call = calls[0]
    assert call["GlobalSecondaryIndexes"][0]["IndexName"] == "by_status"
    assert call["GlobalSecondaryIndexes"][0]["ProvisionedThroughput"] == {
        "ReadCapacityUnits": 5,
        "WriteCapacityUnits": 5,
    }
    assert call["StreamSpecification"] == stream


@pytest.mark.asyncio
async def test_create_table_requires_partition_key() -> None:
    client, calls = _make()
    with pytest.raises(ValueError):
        await client.create_table("things", [{"AttributeName": "sk", "KeyType": "RANGE"}], [])
    assert calls == []


@pytest.mark.asyncio
async def test_describe_ttl_returns_description() -> None:
    client, _ = _make()
    ttl = await client.describe_ttl("things")
    assert ttl == {"TimeToLiveStatus": "ENABLED", "AttributeName": "expireAt"}


@pytest.mark.asyncio
async def test_describe_ttl_unsupported_is_absent(caplog) -> None:
    client, _ = _make(ttl_error="UnknownOperationException")
    with caplog.at_level("WARNING"):
        assert await client.describe_ttl("things") is None
    assert "DescribeTimeToLive not supported" in caplog.text


@pytest.mark.asyncio
async def test_describe_ttl_other_errors_propagate() -> None:
    client, _ = _make(ttl_error="ResourceNotFoundException")
    with pytest.raises(ClientError):
        await client.describe_ttl("missing")


@pytest.mark.asyncio
async def test_update_ttl_and_streams_pass_through() -> None:
    client, calls = _make()
    await client.update_ttl("things", False, "expireAt")
    await client.update_table_streams("things", {"StreamEnabled": False})

    assert calls[0]["TimeToLiveSpecification"] == {"Enabled": False, "AttributeName": "expireAt"}
    assert calls[1] == {
        "op": "update_table",
        "TableName": "things",
        "StreamSpecification": {"StreamEnabled": False},
    }


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_scan_is_capped_at_fifty_items() -> None:
    items = [{"id": Decimal(i)} for i in range(80)]
    client, calls = _make(items=items)

    page = await client.scan_items("things", index_name="by_status")

    assert SCAN_LIMIT == 50
    assert len(page.items) == 50
    assert page.items[0] == {"id": 0}
    assert page.truncated is True
    assert calls == [{"op": "scan", "table": "things", "Limit": 50, "IndexName": "by_status"}]


@pytest.mark.asyncio
async def test_scan_without_index_omits_index_name() -> None:
    client, calls = _make(items=[{"id": "a", "val": Decimal("1")}])
    page = await client.scan_items("things")
    assert page.items == [{"id": "a", "val": 1}]
    assert "IndexName" not in calls[0]


@pytest.mark.asyncio
async def test_query_with_no_conditions_makes_no_call() -> None:
    client, calls = _make()
    page = await client.query_items("things", [])
    assert page.items == []
    assert page.meta["skipped"] is True
    assert calls == []


@pytest.mark.asyncio
async def test_query_builds_expression_and_coerces_numbers() -> None:
    client, calls = _make()
    page = await client.query_items(
        "things",
        [KeyCondition(key="id", value="42", role="HASH")],
        index_name="by_id",
    )

    call = calls[0]
    assert call["KeyConditionExpression"] == "#k0 = :v0"
    assert call["ExpressionAttributeNames"] == {"#k0": "id"}
    assert call["ExpressionAttributeValues"] == {":v0": 42}
    assert call["IndexName"] == "by_id"
    assert page.items == [{"id": 42, "price": 9.5}]


@pytest.mark.asyncio
async def test_query_sends_float_key_values_as_decimal() -> None:
    client, calls = _make()
    await client.query_items("Prices", [KeyCondition(key="price", value=9.5)])

    value = calls[0]["ExpressionAttributeValues"][":v0"]
    assert isinstance(value, Decimal)
    assert value == Decimal("9.5")


@pytest.mark.asyncio
async def test_item_calls_hold_the_resource_lock() -> None:
    seen: List[bool] = []

    class _LockCheckingResource:
        def Table(self, name: str):  # noqa: N802 - mirrors boto3
            seen.append(handles.resource_lock.locked())
            return _FakeTable(name, [], [])

    handles = ConnectionHandles(
        endpoint="http://localhost:8000",
        client=_FakeLowLevel([]),
        resource=_LockCheckingResource(),
    )
    client = DynamoClient(config=ManagerConfig(), handles=handles)

    await client.scan_items("things")
    await client.query_items("things", [KeyCondition(key="id", value="a")])
    await client.put_item("things", {"id": "a"})
    await client.delete_item("things", {"id": "a"})

    assert seen == [True, True, True, True]
    assert handles.resource_lock.locked() is False


@pytest.mark.asyncio
async def test_put_item_sends_decimals() -> None:
    client, calls = _make()
    await client.put_item("things", {"id": "a", "val": 1, "ratio": 0.25})
    assert calls[0]["Item"] == {"id": "a", "val": 1, "ratio": Decimal("0.25")}


@pytest.mark.asyncio
async def test_delete_item_sends_key() -> None:
    client, calls = _make()
    out = await client.delete_item("things", {"id": "a"})
    assert out == {}
    assert calls[0] == {"op": "delete_item", "table": "things", "Key": {"id": "a"}}


# ---------------------------------------------------------------------------
# Ping
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_ping_unreachable_endpoint_is_false() -> None:
    config = ManagerConfig(ping_timeout_seconds=1)
    handles = ConnectionHandles(endpoint="http://127.0.0.1:1", client=None, resource=None)
    client = DynamoClient(config=config, handles=handles)
    assert await client.ping() is False
