from .circuit_breaker import CircuitBreakerInterceptor, CircuitSnapshot, CircuitState
from .log import LoggingInterceptor
from .rate_limit import RateLimitInterceptor
from .retry import RetryInterceptor
from .transformer import RequestTransformers, ResponseTransformers, TransformerInterceptor, chain_transforms

__all__ = [
    "CircuitBreakerInterceptor",
    "CircuitSnapshot",
    "CircuitState",
    "LoggingInterceptor",
    "RateLimitInterceptor",
    "RequestTransformers",
    "ResponseTransformers",
    "RetryInterceptor",
    "TransformerInterceptor",
    "chain_transforms",
]
