from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Protocol

import aiohttp

from ..errors import RequestTimeoutError, TransportError
from ..runtime.transport import HttpRequest, HttpResponse, split_form


class AiohttpResponseProtocol(Protocol):
    status: int
    headers: Mapping[str, str]

    async def read(self) -> bytes: ...

    async def __aenter__(self) -> "AiohttpResponseProtocol": ...

    async def __aexit__(self, *_: object) -> None: ...


class AiohttpSessionProtocol(Protocol):
    def request(self, method: str, url: str, **kwargs: object) -> AiohttpResponseProtocol: ...

    async def close(self) -> None: ...


class AiohttpAdapter:
    """Transport adapter over ``aiohttp.ClientSession``.

    Without an injected session, one is created on first use (a session must
    be created inside a running event loop) and closed by ``close()``.
    """

    def __init__(self, session: AiohttpSessionProtocol | None = None) -> None:
        self._session = session
        self._owns_session = session is None

    def _ensure_session(self) -> AiohttpSessionProtocol:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(self, request: HttpRequest) -> HttpResponse:
        session = self._ensure_session()
        kwargs: dict[str, object] = {"headers": dict(request.headers)}
        if request.form is not None:
            kwargs["data"] = _form_data(request.form)
        elif request.body is not None:
            kwargs["data"] = request.body
        if request.timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=request.timeout)
        try:
            async with session.request(request.method, request.url, **kwargs) as response:
                body = await response.read()
                return HttpResponse(
                    status_code=response.status,
                    headers={str(k): str(v) for k, v in response.headers.items()},
                    body=body,
                )
        except asyncio.TimeoutError as exc:
            raise RequestTimeoutError(
                "Request timed out",
                context={"method": request.method, "url": request.url},
            ) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(
                f"Transport failure: {exc}",
                context={"method": request.method, "url": request.url},
            ) from exc

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None


def _form_data(form: Mapping[str, object]) -> aiohttp.FormData:
    data, files = split_form(form)
    payload = aiohttp.FormData()
    for name, value in data.items():
        payload.add_field(name, value)
    for name, part in files.items():
        filename, content = part[0], part[1]
        content_type = part[2] if len(part) > 2 else None
        payload.add_field(name, content, filename=filename, content_type=content_type)
    return payload
