from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Protocol

import anyio.to_thread
import requests

from ..errors import RequestTimeoutError, TransportError
from ..runtime.transport import HttpRequest, HttpResponse, split_form


class RequestsResponseProtocol(Protocol):
    status_code: int
    headers: Mapping[str, str]
    content: bytes


class RequestsSessionProtocol(Protocol):
    def request(self, method: str, url: str, **kwargs: object) -> RequestsResponseProtocol: ...

    def close(self) -> None: ...


class RequestsAdapter:
    """Transport adapter over a blocking ``requests.Session``.

    Each send runs in a worker thread. A cancelled send is abandoned: the
    thread finishes on its own and its result is discarded.
    """

    def __init__(self, session: RequestsSessionProtocol | None = None) -> None:
        self._owns_session = session is None
        self._session: RequestsSessionProtocol = session if session is not None else requests.Session()

    async def send(self, request: HttpRequest) -> HttpResponse:
        kwargs: dict[str, object] = {"headers": dict(request.headers), "timeout": request.timeout}
        if request.form is not None:
            data, files = split_form(request.form)
            kwargs["data"] = data
            if files:
                kwargs["files"] = files
        elif request.body is not None:
            kwargs["data"] = request.body
        call = functools.partial(self._session.request, request.method, request.url, **kwargs)
        try:
            response = await anyio.to_thread.run_sync(call, abandon_on_cancel=True)
        except requests.Timeout as exc:
            raise RequestTimeoutError(
                f"Request timed out: {exc}",
                context={"method": request.method, "url": request.url},
            ) from exc
        except requests.RequestException as exc:
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
        if self._owns_session:
            self._session.close()
