from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ..ir import OperationIR, RequestBodyIR
from ..openapi import SchemaObject
from .report import GenerationWarning, WarningKind

DEFAULT_CONTENT_TYPE_PRIORITY = (
    "multipart/form-data",
    "application/x-www-form-urlencoded",
    "application/json",
    "text/plain",
    "text/html",
    "application/xml",
)

BODYLESS_METHODS = frozenset({"get", "delete", "head"})


class BodyEncoding(str, Enum):
    NONE = "none"
    STRUCTURED = "structured"
    PRIMITIVE_STRING = "primitiveString"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class BodySelection:
    """The request body media type chosen for an operation.

    ``content_type`` and ``schema`` are ``None`` unless the encoding is
    ``STRUCTURED`` or ``PRIMITIVE_STRING``.
    """

    encoding: BodyEncoding
    content_type: str | None = None
    schema: SchemaObject | None = None
    required: bool = False


NO_BODY = BodySelection(BodyEncoding.NONE)


def media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def content_type_rank(content_type: str, priority: Sequence[str] = DEFAULT_CONTENT_TYPE_PRIORITY) -> int:
    """Return the priority index of a content type; unknown types rank last."""
    try:
        return list(priority).index(media_type(content_type))
    except ValueError:
        return len(priority)


def select_request_body(
    request_body: RequestBodyIR | None,
    priority: Sequence[str] = DEFAULT_CONTENT_TYPE_PRIORITY,
) -> BodySelection:
    """Pick the best declared media type for a request body.

    Ties between equally ranked types keep declaration order.
    """
    if request_body is None:
        return NO_BODY
    if not request_body.content:
        return BodySelection(BodyEncoding.UNSUPPORTED, required=request_body.required)

    _, _, best = min(
        (content_type_rank(media.content_type, priority), index, media)
        for index, media in enumerate(request_body.content)
    )
    schema = best.schema
    is_string = isinstance(schema, dict) and schema.get("type") == "string"
    return BodySelection(
        encoding=BodyEncoding.PRIMITIVE_STRING if is_string else BodyEncoding.STRUCTURED,
        content_type=best.content_type,
        schema=schema,
        required=request_body.required,
    )


def resolve_request_body(
    operation: OperationIR,
    priority: Sequence[str] = DEFAULT_CONTENT_TYPE_PRIORITY,
) -> tuple[BodySelection, tuple[GenerationWarning, ...]]:
    """Select the body of an operation, reporting bodies that are dropped."""
    if operation.request_body is None:
        return NO_BODY, ()

    if operation.method in BODYLESS_METHODS:
        message = f"request body is not supported on {operation.method.upper()} and was dropped"
        selection = BodySelection(BodyEncoding.UNSUPPORTED, required=operation.request_body.required)
    else:
        selection = select_request_body(operation.request_body, priority)
        if selection.encoding is not BodyEncoding.UNSUPPORTED:
            return selection, ()
        message = "request body declares no usable content type and was dropped"

    warning = GenerationWarning(
        WarningKind.UNSUPPORTED_REQUEST_BODY,
        operation.method,
        operation.path,
        message,
        excluded=False,
    )
    return selection, (warning,)
