"""Method synthesis: turns IR operations into ``MethodDescriptor`` values.

Each operation is resolved independently by ``synthesize_operation``, which
is a pure function of the operation, the document's security schemes and the
models resolver. ``synthesize_methods`` fans the operations out (optionally on
an executor), then restores a deterministic order before de-duplicating names
and reporting warnings.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Collection, Mapping, Sequence

from ..ir import HTTP_METHODS, IRDocument, OperationIR, SecurityRequirementObject
from ..openapi import SchemaObject, SecuritySchemeObject
from .content import DEFAULT_CONTENT_TYPE_PRIORITY, BodyEncoding, resolve_request_body
from .models import ModelBinding, ModelsResolver, NoOpModelsResolver, schema_ref
from .naming import avoid_keyword, has_alnum, snake_case
from .params import ParameterDescriptor, format_primitive, resolve_parameters
from .report import GenerationWarning, WarningCollector, WarningKind, WarningSink
from .response import (
    DEFAULT_NO_CONTENT_STATUSES,
    DEFAULT_SUCCESS_PREFERENCE,
    ResponseShape,
    classify_response,
    success_schema,
)

logger = logging.getLogger(__name__)

SUPPORTED_VERBS = ("get", "post", "put", "delete", "patch")
DEFAULT_GROUP = "default"

_VERB_ORDER = {method: index for index, method in enumerate(HTTP_METHODS)}
_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


@dataclass(frozen=True)
class SecurityRequirement:
    """Where a credential is attached at call time. Never holds the secret.

    Attributes:
        scheme: The security scheme name from the document
        kind: The scheme type ("apiKey", "http", "oauth2", "openIdConnect")
        location: "query", "header" or "cookie", when known
        parameter: The query or header name that carries the credential
    """

    scheme: str
    kind: str
    location: str | None = None
    parameter: str | None = None


@dataclass(frozen=True)
class RequestBodyDescriptor:
    encoding: BodyEncoding
    content_type: str | None = None
    required: bool = False
    model: ModelBinding | None = None


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    http_method: str
    path_template: str
    path_params: tuple[ParameterDescriptor, ...] = ()
    query_params: tuple[ParameterDescriptor, ...] = ()
    body: RequestBodyDescriptor | None = None
    response_shape: ResponseShape = ResponseShape.SINGLE_OBJECT
    model: ModelBinding | None = None
    returns_text: bool = False
    group: str = DEFAULT_GROUP
    auth: tuple[SecurityRequirement, ...] = ()
    summary: str | None = None
    deprecated: bool = False

    @property
    def body_encoding(self) -> BodyEncoding:
        return self.body.encoding if self.body is not None else BodyEncoding.NONE

    @property
    def parameters(self) -> tuple[ParameterDescriptor, ...]:
        return self.path_params + self.query_params

    def render_path(self, values: Mapping[str, object]) -> str:
        """Substitute path parameter values, keyed by wire name, into the template.

        Raises:
            KeyError: If a placeholder has no value
        """
        return interpolate_path(self.path_template, values)


@dataclass(frozen=True)
class SynthesisResult:
    methods: tuple[MethodDescriptor, ...]
    warnings: tuple[GenerationWarning, ...]


@dataclass(frozen=True)
class _Outcome:
    method: MethodDescriptor | None
    warnings: tuple[GenerationWarning, ...]


def sanitize_method_name(operation_id: str | None) -> str | None:
    """Derive a method name from an operationId, or ``None`` if it cannot be.

    Example:
        >>> sanitize_method_name("getUsers")
        'get_users'
        >>> sanitize_method_name("123-list")
        'm123_list'
        >>> sanitize_method_name("---") is None
        True
    """
    if not operation_id or not has_alnum(operation_id):
        return None
    name = snake_case(operation_id)
    if name[0].isdigit():
        name = f"m{name}"
    return avoid_keyword(name)


def interpolate_path(template: str, values: Mapping[str, object], *, strict: bool = True) -> str:
    """Fill each ``{name}`` placeholder of ``template`` in a single pass.

    Substituted values are never scanned again. Without ``strict``, placeholders
    that have no value are left as written; with it they raise ``KeyError``.
    """

    def fill(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in values and not strict:
            return match.group(0)
        return format_primitive(values[name])

    return _PLACEHOLDER.sub(fill, template)


def path_placeholders(path: str) -> list[str]:
    return _PLACEHOLDER.findall(path)


def group_name(tags: Sequence[str]) -> str:
    if not tags:
        return DEFAULT_GROUP
    name = snake_case(tags[0])
    if not name:
        return DEFAULT_GROUP
    if name[0].isdigit():
        name = f"g{name}"
    return avoid_keyword(name)


def resolve_security(
    requirements: Sequence[SecurityRequirementObject],
    schemes: Mapping[str, SecuritySchemeObject],
) -> tuple[SecurityRequirement, ...]:
    result: list[SecurityRequirement] = []
    for requirement in requirements:
        for scheme_name in requirement:
            scheme = schemes.get(scheme_name)
            if not isinstance(scheme, dict):
                continue
            kind = str(scheme.get("type", ""))
            if kind == "apiKey":
                item = SecurityRequirement(scheme_name, kind, scheme.get("in"), scheme.get("name"))
            elif kind == "basic" or (kind == "http" and str(scheme.get("scheme", "")).lower() == "basic"):
                item = SecurityRequirement(scheme_name, "http", "header", "Authorization")
            elif kind in {"http", "oauth2", "openIdConnect"}:
                item = SecurityRequirement(scheme_name, kind, "header", "Authorization")
            else:
                item = SecurityRequirement(scheme_name, kind)
            if item not in result:
                result.append(item)
    return tuple(result)


def synthesize_operation(
    operation: OperationIR,
    document: IRDocument,
    resolver: ModelsResolver,
    content_type_priority: Sequence[str] = DEFAULT_CONTENT_TYPE_PRIORITY,
    no_content_statuses: Collection[str] = DEFAULT_NO_CONTENT_STATUSES,
    success_preference: Sequence[str] = DEFAULT_SUCCESS_PREFERENCE,
) -> _Outcome:
    warnings: list[GenerationWarning] = []

    def exclude(kind: WarningKind, message: str) -> _Outcome:
        warnings.append(GenerationWarning(kind, operation.method, operation.path, message))
        return _Outcome(None, tuple(warnings))

    if not operation.operation_id:
        return exclude(WarningKind.MISSING_OPERATION_ID, "operation has no operationId")
    name = sanitize_method_name(operation.operation_id)
    if name is None:
        return exclude(
            WarningKind.INVALID_OPERATION_ID,
            f"operationId '{operation.operation_id}' cannot be turned into a method name",
        )

    params = resolve_parameters(operation)
    warnings.extend(params.warnings)
    if params.excluded:
        return _Outcome(None, tuple(warnings))

    placeholders = set(path_placeholders(operation.path))
    declared = {param.name for param in params.path_params}
    if placeholders != declared:
        missing = sorted(placeholders - declared)
        extra = sorted(declared - placeholders)
        details = []
        if missing:
            details.append(f"placeholders without parameters: {', '.join(missing)}")
        if extra:
            details.append(f"path parameters without placeholders: {', '.join(extra)}")
        return exclude(WarningKind.PATH_TEMPLATE_MISMATCH, "; ".join(details))

    selection, body_warnings = resolve_request_body(operation, content_type_priority)
    warnings.extend(body_warnings)
    body: RequestBodyDescriptor | None = None
    if selection.encoding is not BodyEncoding.NONE:
        body_model = None
        if selection.encoding is BodyEncoding.STRUCTURED:
            body_model = _bind(selection.schema, resolver)
        body = RequestBodyDescriptor(
            encoding=selection.encoding,
            content_type=selection.content_type,
            required=selection.required,
            model=body_model,
        )

    shape = classify_response(operation.responses, no_content_statuses, success_preference)
    model = None
    returns_text = False
    if shape is not ResponseShape.EMPTY:
        schema = success_schema(operation.responses, no_content_statuses, success_preference)
        returns_text = (
            shape is ResponseShape.SINGLE_OBJECT and isinstance(schema, dict) and schema.get("type") == "string"
        )
        model = None if returns_text else _bind(schema, resolver)

    security = operation.security if operation.security is not None else document.security
    method = MethodDescriptor(
        name=name,
        http_method=operation.method.upper(),
        path_template=operation.path,
        path_params=params.path_params,
        query_params=params.query_params,
        body=body,
        response_shape=shape,
        model=model,
        returns_text=returns_text,
        group=group_name(operation.tags),
        auth=resolve_security(security, document.security_schemes),
        summary=operation.summary,
        deprecated=operation.deprecated,
    )
    return _Outcome(method, tuple(warnings))


def synthesize_methods(
    document: IRDocument,
    resolver: ModelsResolver | None = None,
    sink: WarningSink | None = None,
    *,
    executor: Executor | None = None,
    content_type_priority: Sequence[str] = DEFAULT_CONTENT_TYPE_PRIORITY,
    no_content_statuses: Collection[str] = DEFAULT_NO_CONTENT_STATUSES,
    success_preference: Sequence[str] = DEFAULT_SUCCESS_PREFERENCE,
) -> SynthesisResult:
    """Synthesize one method per eligible operation of ``document``.

    The result does not depend on the order of operations in the document:
    operations are processed in ``(path, verb)`` order and the methods are
    returned sorted by ``(group, name)``.
    """
    resolver = resolver or NoOpModelsResolver()
    collector = WarningCollector(sink)
    operations = sorted(
        (op for op in document.operations if op.method in SUPPORTED_VERBS),
        key=lambda op: (op.path, _VERB_ORDER[op.method]),
    )

    def run(operation: OperationIR) -> _Outcome:
        return synthesize_operation(
            operation,
            document,
            resolver,
            content_type_priority,
            no_content_statuses,
            success_preference,
        )

    if executor is None:
        outcomes = [run(operation) for operation in operations]
    else:
        outcomes = list(executor.map(run, operations))

    methods: list[MethodDescriptor] = []
    seen: set[tuple[str, str]] = set()
    for operation, outcome in zip(operations, outcomes):
        for warning in outcome.warnings:
            if warning.excluded:
                logger.debug("Excluding %s %s: %s", operation.method.upper(), operation.path, warning.message)
            collector(warning)
        method = outcome.method
        if method is None:
            continue
        key = (method.group, method.name)
        if key in seen:
            warning = GenerationWarning(
                WarningKind.DUPLICATE_METHOD_NAME,
                operation.method,
                operation.path,
                f"method '{method.name}' already exists in group '{method.group}'",
            )
            logger.debug("Excluding %s %s: %s", operation.method.upper(), operation.path, warning.message)
            collector(warning)
            continue
        seen.add(key)
        methods.append(method)

    methods.sort(key=lambda method: (method.group, method.name))
    return SynthesisResult(methods=tuple(methods), warnings=tuple(collector.warnings))


def _bind(schema: SchemaObject | None, resolver: ModelsResolver) -> ModelBinding | None:
    ref = schema_ref(schema)
    if ref is None:
        return None
    return resolver.resolve(ref)
