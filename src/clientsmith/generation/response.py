from __future__ import annotations

from enum import Enum
from typing import Collection, Sequence

from ..ir import ResponseIR
from ..openapi import SchemaObject

DEFAULT_NO_CONTENT_STATUSES = frozenset({"204"})
DEFAULT_SUCCESS_PREFERENCE = ("200", "201", "202")


class ResponseShape(str, Enum):
    EMPTY = "empty"
    SINGLE_OBJECT = "singleObject"
    COLLECTION_OF_OBJECTS = "collectionOfObjects"


def classify_response(
    responses: Sequence[ResponseIR] | None,
    no_content_statuses: Collection[str] = DEFAULT_NO_CONTENT_STATUSES,
    success_preference: Sequence[str] = DEFAULT_SUCCESS_PREFERENCE,
) -> ResponseShape:
    """Classify the success response of an operation.

    A declared no-content status anywhere in ``responses`` wins over any
    success body. Missing information falls back to ``SINGLE_OBJECT``.
    """
    if responses is None:
        return ResponseShape.SINGLE_OBJECT
    if any(response.status in no_content_statuses for response in responses):
        return ResponseShape.EMPTY
    primary = _primary_response(responses, success_preference)
    if primary is None:
        return ResponseShape.SINGLE_OBJECT
    if not primary.content:
        return ResponseShape.EMPTY
    schema = primary.content[0].schema
    if isinstance(schema, dict) and schema.get("type") == "array":
        return ResponseShape.COLLECTION_OF_OBJECTS
    return ResponseShape.SINGLE_OBJECT


def success_schema(
    responses: Sequence[ResponseIR] | None,
    no_content_statuses: Collection[str] = DEFAULT_NO_CONTENT_STATUSES,
    success_preference: Sequence[str] = DEFAULT_SUCCESS_PREFERENCE,
) -> SchemaObject | None:
    """Return the object schema a response model is bound to, if any."""
    shape = classify_response(responses, no_content_statuses, success_preference)
    if shape is ResponseShape.EMPTY or responses is None:
        return None
    primary = _primary_response(responses, success_preference)
    if primary is None or not primary.content:
        return None
    schema = primary.content[0].schema
    if shape is ResponseShape.COLLECTION_OF_OBJECTS and isinstance(schema, dict):
        items = schema.get("items")
        return items if isinstance(items, dict) else None
    return schema


def _primary_response(responses: Sequence[ResponseIR], preference: Sequence[str]) -> ResponseIR | None:
    by_status = {response.status: response for response in responses}
    for status in preference:
        if status in by_status:
            return by_status[status]
    return None
