from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ..ir import OperationIR, ParameterIR
from ..openapi import SchemaObject
from .naming import avoid_keyword, snake_case
from .report import GenerationWarning, WarningKind

SUPPORTED_LOCATIONS = ("path", "query")

# names the generated method signature already uses
RESERVED_PARAMETER_NAMES = frozenset({"self", "body"})


class PrimitiveType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"

    @property
    def python_type(self) -> str:
        return _PYTHON_TYPES[self]


_PYTHON_TYPES = {
    PrimitiveType.STRING: "str",
    PrimitiveType.NUMBER: "float",
    PrimitiveType.BOOLEAN: "bool",
}

_SCHEMA_TYPES = {
    "string": PrimitiveType.STRING,
    "integer": PrimitiveType.NUMBER,
    "number": PrimitiveType.NUMBER,
    "boolean": PrimitiveType.BOOLEAN,
}


@dataclass(frozen=True)
class ParameterDescriptor:
    """A path or query parameter of a synthesized method.

    Attributes:
        name: The wire name, as declared in the document
        location: "path" or "query"
        required: Whether callers must supply a value
        primitive_type: The resolved primitive type
        python_name: The keyword argument name in the generated signature
    """

    name: str
    location: str
    required: bool
    primitive_type: PrimitiveType
    python_name: str


@dataclass(frozen=True)
class ParameterResolution:
    path_params: tuple[ParameterDescriptor, ...]
    query_params: tuple[ParameterDescriptor, ...]
    warnings: tuple[GenerationWarning, ...]

    @property
    def excluded(self) -> bool:
        return any(warning.excluded for warning in self.warnings)


def format_primitive(value: object) -> str:
    """Render a primitive the way it travels in a path or query string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def primitive_type(schema: SchemaObject | None) -> PrimitiveType | None:
    if not isinstance(schema, dict):
        return None
    return _SCHEMA_TYPES.get(str(schema.get("type", "")))


def python_parameter_name(name: str) -> str:
    candidate = snake_case(name) or "param"
    if candidate[0].isdigit():
        candidate = f"p_{candidate}"
    return avoid_keyword(candidate, RESERVED_PARAMETER_NAMES)


def merge_parameters(
    path_level: Iterable[ParameterIR],
    operation_level: Iterable[ParameterIR],
) -> list[ParameterIR]:
    """Merge parameters keyed by ``(name, location)``.

    An operation-level parameter replaces the path-level one with the same
    key as a whole; fields are never combined.
    """
    merged: dict[tuple[str, str], ParameterIR] = {}
    for param in path_level:
        merged[(param.name, param.location)] = param
    for param in operation_level:
        merged[(param.name, param.location)] = param
    return list(merged.values())


def resolve_parameters(operation: OperationIR) -> ParameterResolution:
    """Resolve the path and query parameters of an operation.

    Header and cookie parameters are skipped with a non-excluding warning.
    The first unsupported path or query parameter excludes the operation and
    stops resolution, so an excluded operation carries exactly one excluding
    warning.
    """
    warnings: list[GenerationWarning] = []
    path_params: list[ParameterDescriptor] = []
    query_params: list[ParameterDescriptor] = []
    seen_names: dict[str, str] = {}

    def warn(kind: WarningKind, message: str, excluded: bool = True) -> None:
        warnings.append(GenerationWarning(kind, operation.method, operation.path, message, excluded))

    for param in merge_parameters(operation.path_parameters, operation.parameters):
        if param.location not in SUPPORTED_LOCATIONS:
            warn(
                WarningKind.IGNORED_PARAMETER,
                f"{param.location} parameter '{param.name}' is not supported and was ignored",
                excluded=False,
            )
            continue

        resolved = primitive_type(param.schema)
        if param.location == "path":
            if not param.required:
                warn(WarningKind.UNSUPPORTED_PATH_PARAMETER, f"path parameter '{param.name}' must be required")
                break
            if resolved is None:
                warn(
                    WarningKind.UNSUPPORTED_PATH_PARAMETER,
                    f"path parameter '{param.name}' has no primitive type",
                )
                break
        elif resolved is None:
            warn(
                WarningKind.UNSUPPORTED_QUERY_PARAMETER,
                f"query parameter '{param.name}' has no primitive type",
            )
            break

        python_name = python_parameter_name(param.name)
        if python_name in seen_names:
            warn(
                WarningKind.DUPLICATE_PARAMETER_NAME,
                f"parameters '{seen_names[python_name]}' and '{param.name}' both map to '{python_name}'",
            )
            break
        seen_names[python_name] = param.name

        descriptor = ParameterDescriptor(
            name=param.name,
            location=param.location,
            required=param.location == "path" or param.required,
            primitive_type=resolved,
            python_name=python_name,
        )
        (path_params if param.location == "path" else query_params).append(descriptor)

    return ParameterResolution(
        path_params=tuple(path_params),
        query_params=tuple(query_params),
        warnings=tuple(warnings),
    )
