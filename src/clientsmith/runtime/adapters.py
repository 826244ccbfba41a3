from __future__ import annotations

from ..errors import ConfigValidationError
from .config import ClientConfig
from .transport import TransportAdapter


def create_adapter(config: ClientConfig) -> TransportAdapter:
    """Return the transport adapter a validated config asks for."""
    name = config.adapter_name
    if name == "custom":
        if config.transport is None:
            raise ConfigValidationError(["the custom adapter requires a transport"])
        return config.transport
    if name == "httpx":
        from ..backends.httpx_backend import HttpxAdapter

        return HttpxAdapter()
    if name == "aiohttp":
        from ..backends.aiohttp_backend import AiohttpAdapter

        return AiohttpAdapter()
    if name == "requests":
        from ..backends.requests_backend import RequestsAdapter

        return RequestsAdapter()
    raise ConfigValidationError([f"unsupported adapter: {name!r}"])
