# DynamoDB Local Manager MCP
# File: query.py
# Version: v1

"""Key-condition expression construction for Query calls."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .models import KeyCondition
from .values import to_dynamo


def coerce_key_value(value: Any) -> Any:
    """Guess the DynamoDB type of a key value typed into a form.

    Non-blank text that parses as a finite number becomes numeric (``int``
    when integral, ``Decimal`` otherwise); any other text stays a string.
    Non-string values are returned unchanged.
    """
    if not isinstance(value, str):
        return value

    text = value.strip()
    if not text:
        return value

    try:
        number = Decimal(text)
    except InvalidOperation:
        return value

    if not number.is_finite():
        return value
    if number == number.to_integral_value():
        return int(number)
    return number


def build_key_condition(
    conditions: Iterable[KeyCondition],
) -> Optional[Dict[str, Any]]:
    """Build Query parameters for a list of equality key conditions.

    Attribute names and values are always referenced through placeholders
    (``#k<i>`` / ``:v<i>``) so reserved words are safe. Values are converted
    with ``to_dynamo`` like item bodies. Returns None when there are no
    conditions.
    """
    names: Dict[str, str] = {}
    values: Dict[str, Any] = {}
    parts: List[str] = []

    for i, cond in enumerate(conditions):
        names[f"#k{i}"] = cond.key
        values[f":v{i}"] = to_dynamo(coerce_key_value(cond.value))
        parts.append(f"#k{i} = :v{i}")

    if not parts:
        return None

    return {
        "KeyConditionExpression": " AND ".join(parts),
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
    }


def conditions_from_inputs(
    key_schema: Iterable[Mapping[str, Any]],
    inputs: Mapping[str, Union[str, Any]],
) -> List[KeyCondition]:
    """Turn per-key form inputs into key conditions.

    Keys of ``key_schema`` with no input, or an empty-string input, are
    skipped.
    """
    conditions: List[KeyCondition] = []
    for element in key_schema:
        name = element["AttributeName"]
        raw = inputs.get(name)
        if raw is None or raw == "":
            continue
        conditions.append(
            KeyCondition(
                key=name,
                value=coerce_key_value(raw),
                role=element.get("KeyType", "HASH"),
            )
        )
    return conditions
