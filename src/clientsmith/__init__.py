from .errors import (
    ApiError,
    AuthError,
    CircuitOpenError,
    ClientError,
    ClientsmithError,
    ConfigValidationError,
    DecodeError,
    ModelIndexError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    SpecError,
    TransportError,
)
from .generation import (
    GenerationProfile,
    GenerationWarning,
    IndexModelsResolver,
    MethodDescriptor,
    ModelIndex,
    NoOpModelsResolver,
    generate_client,
    synthesize_methods,
)
from .generator import PackageSpec, generate_package
from .ir import IRDocument, build_ir
from .loader import load_openapi
from .runtime import ApiClient, AuthConfig, ClientConfig, Interceptor, InterceptorChain, ResourceClient

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthConfig",
    "AuthError",
    "CircuitOpenError",
    "ClientConfig",
    "ClientError",
    "ClientsmithError",
    "ConfigValidationError",
    "DecodeError",
    "GenerationProfile",
    "GenerationWarning",
    "IRDocument",
    "IndexModelsResolver",
    "Interceptor",
    "InterceptorChain",
    "MethodDescriptor",
    "ModelIndex",
    "ModelIndexError",
    "NoOpModelsResolver",
    "PackageSpec",
    "RateLimitError",
    "RequestTimeoutError",
    "ResourceClient",
    "ServerError",
    "SpecError",
    "TransportError",
    "build_ir",
    "generate_client",
    "generate_package",
    "load_openapi",
    "synthesize_methods",
]
