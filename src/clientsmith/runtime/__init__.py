from .chain import Interceptor, InterceptorChain, RetrySignal
from .client import ApiClient, ResourceClient
from .config import AuthConfig, ClientConfig, validate_config
from .transport import HttpRequest, HttpResponse, TransportAdapter

__all__ = [
    "ApiClient",
    "AuthConfig",
    "ClientConfig",
    "HttpRequest",
    "HttpResponse",
    "Interceptor",
    "InterceptorChain",
    "ResourceClient",
    "RetrySignal",
    "TransportAdapter",
    "validate_config",
]
