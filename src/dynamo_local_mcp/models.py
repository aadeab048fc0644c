# DynamoDB Local Manager MCP
# File: models.py
# Version: v1

"""Domain models used by the DynamoDB Local Manager MCP server."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

HASH = "HASH"
RANGE = "RANGE"


@dataclass(frozen=True)
class KeyCondition:
    """One equality predicate on a key attribute, used to build a query."""

    key: str
    value: Any
    # HASH (partition) or RANGE (sort)
    role: str = HASH


@dataclass
class ItemPage:
    """Items returned by a single scan or query call."""

    items: List[Dict[str, Any]]
    count: int = 0
    scanned_count: int = 0

    # Set when the service stopped early (limit reached, 1 MB page, ...).
    last_evaluated_key: Optional[Dict[str, Any]] = None

    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def truncated(self) -> bool:
        return self.last_evaluated_key is not None


@dataclass
class TableDescriptor:
    """Read model over a DescribeTable ``Table`` payload."""

    name: str
    status: Optional[str] = None
    key_schema: List[Dict[str, Any]] = field(default_factory=list)
    attribute_definitions: List[Dict[str, Any]] = field(default_factory=list)
    global_secondary_indexes: List[Dict[str, Any]] = field(default_factory=list)
    stream_specification: Optional[Dict[str, Any]] = None
    item_count: Optional[int] = None
    size_bytes: Optional[int] = None
    arn: Optional[str] = None
    created_at: Any = None

    # Raw JSON payload from the API, for debugging / advanced use.
    raw: Optional[Dict[str, Any]] = None

    @classmethod
    def from_description(cls, table: Dict[str, Any]) -> "TableDescriptor":
        return cls(
            name=str(table.get("TableName") or ""),
            status=table.get("TableStatus"),
            key_schema=list(table.get("KeySchema") or []),
            attribute_definitions=list(table.get("AttributeDefinitions") or []),
            global_secondary_indexes=list(table.get("GlobalSecondaryIndexes") or []),
            stream_specification=table.get("StreamSpecification"),
            item_count=table.get("ItemCount"),
            size_bytes=table.get("TableSizeBytes"),
            arn=table.get("TableArn"),
            created_at=table.get("CreationDateTime"),
            raw=table,
        )

    @property
    def stream_enabled(self) -> bool:
        return bool((self.stream_specification or {}).get("StreamEnabled"))
