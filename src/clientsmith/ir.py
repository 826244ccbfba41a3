"""Intermediate Representation (IR) for OpenAPI documents.

This module defines the IR data structures that represent an OpenAPI 3.x or
Swagger 2.0 document in a simplified, generation-friendly format. The IR is
read-only: every collection is a tuple and every node is a frozen dataclass,
so the generation pipeline can share it between operations without copying.

Key classes:
- IRDocument: Root container for schemas, operations and security schemes
- OperationIR: One HTTP verb bound to one path
- ParameterIR: A request parameter, as declared
- RequestBodyIR: A request body and its media types
- ResponseIR: A declared response
- MediaTypeIR: A media type with schema
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, cast

from .errors import SpecError
from .openapi import (
    OpenAPIDocument,
    OperationObject,
    ParameterObject,
    PathItemObject,
    RequestBodyObject,
    ResponseObject,
    SchemaObject,
    SecuritySchemeObject,
)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

SecurityRequirementObject = Mapping[str, list[str]]


@dataclass(frozen=True)
class SchemaIR:
    """A named schema from ``components/schemas`` (or ``definitions``)."""

    name: str
    schema: SchemaObject


@dataclass(frozen=True)
class MediaTypeIR:
    """A media type entry.

    Attributes:
        content_type: The MIME type (e.g., "application/json")
        schema: The schema for the content, if specified
    """

    content_type: str
    schema: SchemaObject | None


@dataclass(frozen=True)
class ResponseIR:
    """A declared response.

    Attributes:
        status: The status key as written in the document ("200", "default")
        description: Human-readable description of the response
        content: Media types in declaration order; ``None`` when the
            response declares no content object at all
    """

    status: str
    description: str | None
    content: tuple[MediaTypeIR, ...] | None


@dataclass(frozen=True)
class RequestBodyIR:
    """A declared request body.

    Attributes:
        required: Whether the request body is required
        content: Media types in declaration order
    """

    required: bool
    content: tuple[MediaTypeIR, ...]


@dataclass(frozen=True)
class ParameterIR:
    """A parameter exactly as declared, before any merging.

    Attributes:
        name: The parameter name
        location: Where the parameter is sent ("path", "query", "header", "cookie")
        required: Whether the parameter is declared required
        schema: The parameter's schema; Swagger 2.0 inline types are lifted
            into a schema
    """

    name: str
    location: str
    required: bool
    schema: SchemaObject | None


@dataclass(frozen=True)
class OperationIR:
    """One HTTP verb bound to one path.

    Attributes:
        method: The HTTP method (lowercase)
        path: The URL path template (e.g., "/users/{id}")
        operation_id: The declared operationId, if any
        path_parameters: Parameters declared on the enclosing path item
        parameters: Parameters declared on the operation itself
        request_body: The request body, if declared
        responses: Declared responses, or ``None`` when ``responses`` is
            missing or is not a mapping
        tags: Declared tags
        summary: Declared summary
        deprecated: Whether the operation is deprecated
        security: Operation-level security requirements; ``None`` means the
            document-level requirements apply
    """

    method: str
    path: str
    operation_id: str | None
    path_parameters: tuple[ParameterIR, ...]
    parameters: tuple[ParameterIR, ...]
    request_body: RequestBodyIR | None
    responses: tuple[ResponseIR, ...] | None
    tags: tuple[str, ...] = ()
    summary: str | None = None
    deprecated: bool = False
    security: tuple[SecurityRequirementObject, ...] | None = None


@dataclass(frozen=True)
class IRDocument:
    """Root container produced by build_ir().

    Attributes:
        title: ``info.title``, used to name the generated client
        schemas: Named schema definitions
        operations: All operations, in document order
        security_schemes: Declared security schemes by name
        security: Document-level security requirements
    """

    title: str
    schemas: tuple[SchemaIR, ...]
    operations: tuple[OperationIR, ...]
    security_schemes: Mapping[str, SecuritySchemeObject]
    security: tuple[SecurityRequirementObject, ...] = ()


def build_ir(document: OpenAPIDocument) -> IRDocument:
    """Build an intermediate representation from a parsed document.

    Both OpenAPI 3.x and Swagger 2.0 documents are accepted. The function is
    pure: it never performs I/O and never mutates ``document``.

    Raises:
        SpecError: If the document has no ``paths`` object
    """
    paths = document.get("paths")
    if not isinstance(paths, dict):
        raise SpecError("Document must contain a 'paths' object")

    swagger = "swagger" in document and "openapi" not in document
    components = document.get("components", {})
    if swagger:
        raw_schemas = document.get("definitions", {})
        raw_schemes = document.get("securityDefinitions", {})
    else:
        raw_schemas = components.get("schemas", {}) if isinstance(components, dict) else {}
        raw_schemes = components.get("securitySchemes", {}) if isinstance(components, dict) else {}

    schemas = tuple(
        SchemaIR(name=name, schema=schema) for name, schema in raw_schemas.items() if isinstance(schema, dict)
    )
    schemes = {name: scheme for name, scheme in raw_schemes.items() if isinstance(scheme, dict)}

    default_consumes = tuple(document.get("consumes", ())) or ("application/json",)
    operations: list[OperationIR] = []
    for path, item in cast(dict[str, PathItemObject], paths).items():
        if not isinstance(path, str) or not isinstance(item, dict):
            continue
        operations.extend(_build_path_operations(path, item, swagger, default_consumes))

    info = document.get("info", {})
    title = info.get("title", "") if isinstance(info, dict) else ""
    return IRDocument(
        title=title if isinstance(title, str) else "",
        schemas=schemas,
        operations=tuple(operations),
        security_schemes=schemes,
        security=_build_security(document.get("security")) or (),
    )


def _build_path_operations(
    path: str,
    item: PathItemObject,
    swagger: bool,
    default_consumes: tuple[str, ...],
) -> Iterable[OperationIR]:
    common = cast(list[ParameterObject], item.get("parameters", []))
    path_parameters = tuple(_build_parameters(common))
    for method in HTTP_METHODS:
        operation = cast(OperationObject | None, item.get(method))
        if not isinstance(operation, dict):
            continue
        raw_params = cast(list[ParameterObject], operation.get("parameters", []))
        if swagger:
            consumes = tuple(operation.get("consumes", ())) or default_consumes
            request_body = _build_swagger_body(list(common) + list(raw_params), consumes)
        else:
            request_body = _build_request_body(operation.get("requestBody"))
        tags = operation.get("tags", [])
        yield OperationIR(
            method=method,
            path=path,
            operation_id=operation.get("operationId"),
            path_parameters=path_parameters,
            parameters=tuple(_build_parameters(raw_params)),
            request_body=request_body,
            responses=_build_responses(operation.get("responses"), operation.get("produces", ())),
            tags=tuple(tag for tag in tags if isinstance(tag, str)) if isinstance(tags, list) else (),
            summary=operation.get("summary"),
            deprecated=bool(operation.get("deprecated", False)),
            security=_build_security(operation.get("security")),
        )


def _build_parameters(raw: object) -> Iterable[ParameterIR]:
    if not isinstance(raw, list):
        return
    for param in raw:
        if not isinstance(param, dict):
            continue
        name = param.get("name")
        location = param.get("in")
        if not isinstance(name, str) or not isinstance(location, str):
            continue
        if location in {"body", "formData"}:
            continue
        schema = param.get("schema")
        if not isinstance(schema, dict) and isinstance(param.get("type"), str):
            schema = {"type": param["type"]}
        yield ParameterIR(
            name=name,
            location=location,
            required=bool(param.get("required", False)),
            schema=schema if isinstance(schema, dict) else None,
        )


def _build_request_body(request_body: RequestBodyObject | None) -> RequestBodyIR | None:
    if not isinstance(request_body, dict):
        return None
    return RequestBodyIR(
        required=bool(request_body.get("required", False)),
        content=_build_media_types(request_body.get("content")) or (),
    )


def _build_swagger_body(params: list[ParameterObject], consumes: tuple[str, ...]) -> RequestBodyIR | None:
    """Lift Swagger 2.0 ``body``/``formData`` parameters into a request body."""
    body = next((p for p in params if isinstance(p, dict) and p.get("in") == "body"), None)
    if body is not None:
        return RequestBodyIR(
            required=bool(body.get("required", False)),
            content=tuple(MediaTypeIR(content_type=ct, schema=body.get("schema")) for ct in consumes),
        )
    form = [p for p in params if isinstance(p, dict) and p.get("in") == "formData"]
    if not form:
        return None
    properties: dict[str, SchemaObject] = {}
    for param in form:
        properties[param.get("name", "")] = cast(SchemaObject, {"type": param.get("type", "string")})
    schema: SchemaObject = {"type": "object", "properties": properties}
    form_types = [ct for ct in consumes if ct in {"multipart/form-data", "application/x-www-form-urlencoded"}]
    return RequestBodyIR(
        required=any(p.get("required", False) for p in form),
        content=tuple(MediaTypeIR(content_type=ct, schema=schema) for ct in form_types or ["multipart/form-data"]),
    )


def _build_responses(responses: object, produces: object) -> tuple[ResponseIR, ...] | None:
    if not isinstance(responses, dict):
        return None
    result: list[ResponseIR] = []
    for status, response in cast(dict[object, ResponseObject], responses).items():
        if not isinstance(response, dict):
            response = {}
        content = _build_media_types(response.get("content"))
        if content is None and isinstance(response.get("schema"), dict):
            media = produces[0] if isinstance(produces, list) and produces else "application/json"
            content = (MediaTypeIR(content_type=media, schema=response["schema"]),)
        result.append(
            ResponseIR(
                status=str(status),
                description=response.get("description"),
                content=content,
            )
        )
    return tuple(result)


def _build_media_types(content: object) -> tuple[MediaTypeIR, ...] | None:
    if not isinstance(content, dict):
        return None
    result: list[MediaTypeIR] = []
    for content_type, media_type in content.items():
        schema = media_type.get("schema") if isinstance(media_type, dict) else None
        result.append(
            MediaTypeIR(
                content_type=str(content_type),
                schema=schema if isinstance(schema, dict) else None,
            )
        )
    return tuple(result)


def _build_security(raw: object) -> tuple[SecurityRequirementObject, ...] | None:
    if not isinstance(raw, list):
        return None
    return tuple(item for item in raw if isinstance(item, dict))
