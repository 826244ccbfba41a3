from __future__ import annotations

import json
from dataclasses import dataclass, field

from .assembler import ClientSurface, ResourceGroup
from .content import BodyEncoding
from .methods import MethodDescriptor
from .models import ModelBinding
from .params import ParameterDescriptor
from .profile import GenerationProfile
from .response import ResponseShape

_RUNTIME_NAMES = frozenset(
    {"ApiClient", "ResourceClient", "Mapping", "Dict", "List", "Optional", "annotations", "body", "self"}
)


@dataclass
class RenderContext:
    profile: GenerationProfile
    reserved: set[str]
    model_imports: dict[tuple[str, str], str] = field(default_factory=dict)
    annotations: list[str] = field(default_factory=list)
    uses_mapping: bool = False

    def model_name(self, binding: ModelBinding | None) -> str | None:
        """Return the local name of a bound model type, importing it if needed."""
        if binding is None or binding.type_name is None or binding.import_location is None:
            return None
        key = (binding.import_location, binding.type_name)
        if key in self.model_imports:
            return self.model_imports[key]
        taken = self.reserved | set(self.model_imports.values())
        local = binding.type_name
        counter = 1
        while local in taken:
            local = f"{binding.type_name}_{counter}"
            counter += 1
        self.model_imports[key] = local
        return local

    def track(self, annotation: str) -> str:
        self.annotations.append(annotation)
        return annotation


def render_client(surface: ClientSurface, profile: GenerationProfile) -> str:
    """Render the source code of a generated ``client.py`` module."""
    reserved = set(_RUNTIME_NAMES) | {surface.class_name} | {group.class_name for group in surface.groups}
    # a model name must not be shadowed by a keyword argument
    reserved |= {param.python_name for method in surface.methods for param in method.parameters}
    ctx = RenderContext(profile=profile, reserved=reserved)

    body: list[str] = []
    for group in surface.groups:
        body.extend(_emit_group(group, ctx))
    body.extend(_emit_root(surface))

    lines: list[str] = []
    title = " ".join(surface.title.split())
    if title:
        lines.append(f"# Generated by clientsmith from {title}. Do not edit.")
    else:
        lines.append("# Generated by clientsmith. Do not edit.")
    lines.append("# ruff: noqa")
    if profile.use_future_annotations:
        lines.append("from __future__ import annotations")
        lines.append("")

    stdlib: list[str] = []
    if ctx.uses_mapping and profile.use_builtin_generics:
        stdlib.append("from collections.abc import Mapping")
    typing_names = profile.typing_imports(ctx.annotations)
    if ctx.uses_mapping and not profile.use_builtin_generics:
        typing_names = sorted({*typing_names, "Mapping"})
    if typing_names:
        stdlib.append(f"from typing import {', '.join(typing_names)}")
    if stdlib:
        lines.extend(stdlib)
        lines.append("")
    lines.append("from clientsmith.runtime import ApiClient, ResourceClient")
    for (location, type_name), local in sorted(ctx.model_imports.items()):
        if local == type_name:
            lines.append(f"from {location} import {type_name}")
        else:
            lines.append(f"from {location} import {type_name} as {local}")
    lines.append("")
    lines.append("")
    lines.extend(body)

    exports = [group.class_name for group in surface.groups] + [surface.class_name]
    lines.append("__all__ = [")
    for name in exports:
        lines.append(f"    {json.dumps(name)},")
    lines.append("]")
    return "\n".join(lines) + "\n"


def render_package_init(surface: ClientSurface) -> str:
    return "\n".join(
        [
            f"from .client import {surface.class_name}",
            "",
            f"__all__ = [{json.dumps(surface.class_name)}]",
            "",
        ]
    )


def _emit_group(group: ResourceGroup, ctx: RenderContext) -> list[str]:
    lines = [f"class {group.class_name}(ResourceClient):"]
    if not group.methods:
        lines.append("    pass")
        lines.append("")
    for method in group.methods:
        lines.extend(_emit_method(method, ctx))
    lines.append("")
    return lines


def _emit_root(surface: ClientSurface) -> list[str]:
    lines = [f"class {surface.class_name}(ApiClient):"]
    title = _oneline(surface.title)
    lines.append(f'    """Client for {title}."""' if title else '    """Generated API client."""')
    if surface.groups:
        lines.append("")
        for group in surface.groups:
            lines.append(f"    {group.attribute}: {group.class_name}")
        lines.append("")
        lines.append("    resources = {")
        for group in surface.groups:
            lines.append(f"        {json.dumps(group.attribute)}: {group.class_name},")
        lines.append("    }")
    lines.append("")
    lines.append("")
    return lines


def _emit_method(method: MethodDescriptor, ctx: RenderContext) -> list[str]:
    profile = ctx.profile
    required: list[str] = []
    optional: list[str] = []
    for param in method.path_params:
        required.append(f"{param.python_name}: {param.primitive_type.python_type}")
    for param in method.query_params:
        annotation = param.primitive_type.python_type
        if param.required:
            required.append(f"{param.python_name}: {annotation}")
        else:
            optional.append(f"{param.python_name}: {ctx.track(profile.optional(annotation))} = None")

    body_annotation = _body_annotation(method, ctx)
    if body_annotation is not None and method.body is not None:
        if method.body.required:
            required.append(f"body: {body_annotation}")
        else:
            optional.append(f"body: {ctx.track(profile.optional(body_annotation))} = None")

    return_annotation = ctx.track(_return_annotation(method, ctx))
    arguments = required + optional
    lines: list[str] = []
    if arguments:
        lines.append(f"    async def {method.name}(")
        lines.append("        self,")
        lines.append("        *,")
        for argument in arguments:
            lines.append(f"        {argument},")
        lines.append(f"    ) -> {return_annotation}:")
    else:
        lines.append(f"    async def {method.name}(self) -> {return_annotation}:")
    lines.extend(_emit_docstring(method))

    lines.append("        return await self._call(")
    lines.append(f"            {json.dumps(method.http_method)},")
    lines.append(f"            {json.dumps(method.path_template)},")
    if method.path_params:
        lines.append(f"            path_params={_dict_literal(method.path_params)},")
    if method.query_params:
        lines.append(f"            query_params={_dict_literal(method.query_params)},")
    if body_annotation is not None and method.body is not None:
        lines.append("            body=body,")
        if method.body.content_type is not None:
            lines.append(f"            content_type={json.dumps(method.body.content_type)},")
        lines.append(f"            body_encoding={json.dumps(method.body_encoding.value)},")
    lines.append(f"            response_shape={json.dumps(method.response_shape.value)},")
    model_name = ctx.model_name(method.model) if method.response_shape is not ResponseShape.EMPTY else None
    if model_name is not None:
        lines.append(f"            model={model_name},")
    lines.append("        )")
    lines.append("")
    return lines


def _emit_docstring(method: MethodDescriptor) -> list[str]:
    lines = ['        """']
    if method.summary:
        lines[0] += _oneline(method.summary)
        lines.append("")
        lines.append(f"        {method.http_method} {_oneline(method.path_template)}")
    else:
        lines[0] += f"{method.http_method} {_oneline(method.path_template)}"
    if method.deprecated:
        lines.append("")
        lines.append("        Deprecated.")
    if method.auth:
        lines.append("")
        lines.append(f"        Security: {', '.join(_oneline(item.scheme) for item in method.auth)}")
    if len(lines) == 1:
        lines[0] += '"""'
    else:
        lines.append('        """')
    return lines


def _body_annotation(method: MethodDescriptor, ctx: RenderContext) -> str | None:
    body = method.body
    if body is None:
        return None
    if body.encoding is BodyEncoding.PRIMITIVE_STRING:
        return "str"
    if body.encoding is BodyEncoding.STRUCTURED:
        model_name = ctx.model_name(body.model)
        if model_name is not None:
            return model_name
        ctx.uses_mapping = True
        return "Mapping[str, object]"
    return None


def _return_annotation(method: MethodDescriptor, ctx: RenderContext) -> str:
    if method.response_shape is ResponseShape.EMPTY:
        return "None"
    if method.returns_text:
        return "str"
    item = ctx.model_name(method.model) or ctx.profile.generic_object()
    if method.response_shape is ResponseShape.COLLECTION_OF_OBJECTS:
        return ctx.profile.list_of(item)
    return item


def _dict_literal(params: tuple[ParameterDescriptor, ...]) -> str:
    items = ", ".join(f"{json.dumps(param.name)}: {param.python_name}" for param in params)
    return f"{{{items}}}"


def _oneline(text: str) -> str:
    return " ".join(text.split()).replace("\\", "\\\\").replace('"', '\\"')
