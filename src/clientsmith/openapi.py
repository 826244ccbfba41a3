"""Typed views of the parts of an OpenAPI/Swagger document the generator reads.

Only keys that the IR builder or the method synthesis look at are declared;
anything else in a document is carried through untouched.
"""

from __future__ import annotations

from typing import TypedDict

SchemaObject = TypedDict(
    "SchemaObject",
    {
        "type": str,
        "items": "SchemaObject",
        "properties": dict[str, "SchemaObject"],
        "required": list[str],
        "title": str,
        "$ref": str,
        "x-clientsmith-schema-name": str,
    },
    total=False,
)

MediaTypeObject = TypedDict("MediaTypeObject", {"schema": SchemaObject}, total=False)

ResponseObject = TypedDict(
    "ResponseObject",
    {
        "description": str,
        "content": dict[str, MediaTypeObject],
        # swagger 2.0
        "schema": SchemaObject,
    },
    total=False,
)

RequestBodyObject = TypedDict(
    "RequestBodyObject",
    {
        "content": dict[str, MediaTypeObject],
        "required": bool,
    },
    total=False,
)

ParameterObject = TypedDict(
    "ParameterObject",
    {
        "name": str,
        "in": str,
        "required": bool,
        "schema": SchemaObject,
        # swagger 2.0 non-body parameters
        "type": str,
    },
    total=False,
)

OperationObject = TypedDict(
    "OperationObject",
    {
        "operationId": str,
        "summary": str,
        "description": str,
        "tags": list[str],
        "deprecated": bool,
        "parameters": list[ParameterObject],
        "requestBody": RequestBodyObject,
        "consumes": list[str],
        "produces": list[str],
        "responses": dict[str, ResponseObject],
        "security": list[dict[str, list[str]]],
    },
    total=False,
)

PathItemObject = TypedDict(
    "PathItemObject",
    {
        "parameters": list[ParameterObject],
        "get": OperationObject,
        "put": OperationObject,
        "post": OperationObject,
        "delete": OperationObject,
        "options": OperationObject,
        "head": OperationObject,
        "patch": OperationObject,
        "trace": OperationObject,
    },
    total=False,
)

SecuritySchemeObject = TypedDict(
    "SecuritySchemeObject",
    {"type": str, "name": str, "in": str, "scheme": str},
    total=False,
)

OpenAPIDocument = TypedDict(
    "OpenAPIDocument",
    {
        "openapi": str,
        "swagger": str,
        "info": dict[str, str],
        "paths": dict[str, PathItemObject],
        "components": dict[str, dict[str, object]],
        "definitions": dict[str, SchemaObject],
        "securityDefinitions": dict[str, SecuritySchemeObject],
        "security": list[dict[str, list[str]]],
        "consumes": list[str],
    },
    total=False,
)
