from .assembler import ClientSurface, ResourceGroup, assemble_client
from .client import ClientOutput, generate_client
from .content import DEFAULT_CONTENT_TYPE_PRIORITY, BodyEncoding, select_request_body
from .emitter import render_client
from .methods import (
    MethodDescriptor,
    RequestBodyDescriptor,
    SecurityRequirement,
    SynthesisResult,
    synthesize_methods,
)
from .models import IndexModelsResolver, ModelBinding, ModelEntry, ModelIndex, ModelsResolver, NoOpModelsResolver
from .params import ParameterDescriptor, PrimitiveType, resolve_parameters
from .profile import GenerationProfile
from .report import GenerationWarning, WarningKind, WarningSink
from .response import ResponseShape, classify_response

__all__ = [
    "DEFAULT_CONTENT_TYPE_PRIORITY",
    "BodyEncoding",
    "ClientOutput",
    "ClientSurface",
    "GenerationProfile",
    "GenerationWarning",
    "IndexModelsResolver",
    "MethodDescriptor",
    "ModelBinding",
    "ModelEntry",
    "ModelIndex",
    "ModelsResolver",
    "NoOpModelsResolver",
    "ParameterDescriptor",
    "PrimitiveType",
    "RequestBodyDescriptor",
    "ResourceGroup",
    "ResponseShape",
    "SecurityRequirement",
    "SynthesisResult",
    "WarningKind",
    "WarningSink",
    "assemble_client",
    "classify_response",
    "generate_client",
    "render_client",
    "resolve_parameters",
    "select_request_body",
    "synthesize_methods",
]
