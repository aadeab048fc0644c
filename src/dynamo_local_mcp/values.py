# DynamoDB Local Manager MCP
# File: values.py
# Version: v1

"""Item value conversion at the SDK boundary.

The document handle (``boto3.resource``) speaks Python types but insists on
``Decimal`` for numbers, and hands back ``Decimal``, ``Binary`` and ``set``
values that JSON cannot carry. Everything crossing into the SDK goes through
``to_dynamo`` and everything coming back goes through ``to_jsonable``.

The trip back is lossy. String, number and binary sets (SS/NS/BS) become
sorted lists, and binary values become base64 text. An item read by a scan
and written again with ``put_item`` therefore stores lists (L) and strings
(S) in their place. Binary primary keys are decoded again by
``decode_binary`` when a delete key is built.
"""

from __future__ import annotations

import base64
import binascii
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Union

from boto3.dynamodb.types import Binary

# JSON-shaped item value as seen by the tool layer.
JsonValue = Union[str, int, float, bool, None, List["JsonValue"], Dict[str, "JsonValue"]]
Item = Dict[str, Any]


class ItemParseError(ValueError):
    """An item body could not be parsed into a JSON object."""


class ItemKeyError(ValueError):
    """An item lacks one of the table's primary-key attributes."""


def to_dynamo(value: Any) -> Any:
    """Convert a JSON-like value into something the document handle accepts."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, float):
        # str() keeps the shortest round-tripping repr (0.1 -> "0.1").
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dynamo(v) for v in value]
    return value


def to_jsonable(value: Any) -> JsonValue:
    """Convert an SDK response value into plain JSON-serialisable data."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, Binary):
        return base64.b64encode(value.value).decode("ascii")
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        converted = [to_jsonable(v) for v in value]
        try:
            return sorted(converted)
        except TypeError:
            return converted
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def decode_binary(name: str, value: Any) -> Any:
    """Turn base64 text produced by ``to_jsonable`` back into bytes.

    Non-string values are returned unchanged.
    """
    if not isinstance(value, str):
        return value
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise ItemKeyError(
            f"Binary key attribute '{name}' is not valid base64 text."
        ) from exc


def parse_item_json(text: str) -> Item:
    """Parse a JSON item body entered by a user.

    Raises ItemParseError for malformed JSON or a non-object document.
    """
    try:
        parsed = json.loads(text)
    except ValueError as exc:
        raise ItemParseError(f"Invalid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ItemParseError(
            f"Item must be a JSON object, got {type(parsed).__name__}."
        )
    return parsed
