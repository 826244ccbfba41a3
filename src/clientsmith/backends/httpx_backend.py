from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

import httpx

from ..errors import RequestTimeoutError, TransportError
from ..runtime.transport import HttpRequest, HttpResponse, split_form


class HttpxResponseProtocol(Protocol):
    status_code: int
    headers: Mapping[str, str]
    content: bytes


class HttpxAsyncClientProtocol(Protocol):
    async def request(self, method: str, url: str, **kwargs: object) -> HttpxResponseProtocol: ...

    async def aclose(self) -> None: ...


class HttpxAdapter:
    """Transport adapter over ``httpx.AsyncClient``.

    A client passed in stays owned by the caller; otherwise the adapter creates
    one and closes it in ``close()``.
    """

    def __init__(self, client: HttpxAsyncClientProtocol | None = None) -> None:
        self._owns_client = client is None
        self._client: HttpxAsyncClientProtocol = client if client is not None else httpx.AsyncClient()

    async def send(self, request: HttpRequest) -> HttpResponse:
        kwargs: dict[str, object] = {"headers": dict(request.headers)}
        if request.form is not None:
            data, files = split_form(request.form)
            kwargs["data"] = data
            if files:
                kwargs["files"] = files
        elif request.body is not None:
            kwargs["content"] = request.body
        if request.timeout is not None:
            kwargs["timeout"] = request.timeout
        try:
            response = await self._client.request(request.method, request.url, **kwargs)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(
                f"Request timed out: {exc}",
                context={"method": request.method, "url": request.url},
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Transport failure: {exc}",
                context={"method": request.method, "url": request.url},
            ) from exc
        return HttpResponse(
            status_code=response.status_code,
            headers={str(k): str(v) for k, v in response.headers.items()},
            body=response.content,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
