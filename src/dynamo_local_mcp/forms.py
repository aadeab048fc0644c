# DynamoDB Local Manager MCP
# File: forms.py
# Version: v1

"""Helpers that turn console form input into request shapes.

These operate on the raw ``Table`` mapping returned by DescribeTable.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from .models import HASH, RANGE
from .values import Item, ItemKeyError, decode_binary

ATTRIBUTE_TYPES = {"S", "N", "B"}
STREAM_VIEW_TYPES = {"NEW_IMAGE", "OLD_IMAGE", "NEW_AND_OLD_IMAGES", "KEYS_ONLY"}
DEFAULT_STREAM_VIEW_TYPE = "NEW_AND_OLD_IMAGES"

# Attribute name sent when disabling TTL on a table whose TTL attribute is
# unknown.
FALLBACK_TTL_ATTRIBUTE = "ttl"


def active_key_schema(
    table: Mapping[str, Any],
    index_name: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Key schema for the base table, or for the named GSI.

    Returns an empty list if the index does not exist.
    """
    if not index_name:
        return list(table.get("KeySchema") or [])

    for gsi in table.get("GlobalSecondaryIndexes") or []:
        if gsi.get("IndexName") == index_name:
            return list(gsi.get("KeySchema") or [])
    return []


def delete_key_for_item(table: Mapping[str, Any], item: Mapping[str, Any]) -> Item:
    """Primary key of ``item`` for a DeleteItem call.

    Always built from the base table key schema; index key schemas do not
    identify an item. Binary (B) key attributes arrive as base64 text and
    are decoded back to bytes.
    """
    attr_types = {
        d["AttributeName"]: d.get("AttributeType")
        for d in table.get("AttributeDefinitions") or []
    }
    key: Item = {}
    for element in table.get("KeySchema") or []:
        name = element["AttributeName"]
        if name not in item or item[name] is None:
            raise ItemKeyError(
                f"Item is missing key attribute '{name}' required to delete it."
            )
        value = item[name]
        if attr_types.get(name) == "B":
            value = decode_binary(name, value)
        key[name] = value
    return key


def item_template(table: Mapping[str, Any]) -> Item:
    """Blank item with every base key attribute present."""
    return {k["AttributeName"]: "" for k in table.get("KeySchema") or []}


def build_table_definition(
    partition_key: str,
    partition_key_type: str = "S",
    sort_key: Optional[str] = None,
    sort_key_type: str = "S",
) -> Tuple[List[Dict[str, str]], List[Dict[str, str]]]:
    """Key schema and attribute definitions for a new table."""
    if not partition_key or not partition_key.strip():
        raise ValueError("A partition key attribute name is required.")

    for attr_type in (partition_key_type, sort_key_type):
        if attr_type not in ATTRIBUTE_TYPES:
            raise ValueError(
                f"Unsupported key attribute type '{attr_type}' (expected S, N or B)."
            )

    key_schema = [{"AttributeName": partition_key, "KeyType": HASH}]
    attributes = [{"AttributeName": partition_key, "AttributeType": partition_key_type}]

    if sort_key:
        key_schema.append({"AttributeName": sort_key, "KeyType": RANGE})
        attributes.append({"AttributeName": sort_key, "AttributeType": sort_key_type})

    return key_schema, attributes


def stream_specification(
    enabled: bool,
    view_type: Optional[str] = None,
) -> Dict[str, Any]:
    """StreamSpecification for enabling or disabling a table's stream."""
    if not enabled:
        return {"StreamEnabled": False}

    view = view_type or DEFAULT_STREAM_VIEW_TYPE
    if view not in STREAM_VIEW_TYPES:
        raise ValueError(f"Unsupported stream view type '{view}'.")
    return {"StreamEnabled": True, "StreamViewType": view}
