from .aiohttp_backend import AiohttpAdapter
from .httpx_backend import HttpxAdapter
from .requests_backend import RequestsAdapter

__all__ = [
    "AiohttpAdapter",
    "HttpxAdapter",
    "RequestsAdapter",
]
