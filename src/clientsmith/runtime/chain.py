"""Ordered interceptor chain around a transport adapter.

Request hooks run in declaration order. Responses and errors unwind through
the interceptors in reverse order. Any interceptor may raise ``RetrySignal``
while the call unwinds; the chain then re-sends the request, re-running only
the request hooks of interceptors marked ``replay_on_retry``.
"""

from __future__ import annotations

import logging
from typing import Sequence

import anyio

from ..errors import RequestTimeoutError, TransportError
from .transport import HttpRequest, HttpResponse, TransportAdapter

logger = logging.getLogger(__name__)

DEFAULT_MAX_REPLAYS = 32


class RetrySignal(Exception):
    """Asks the chain to re-issue the current call. Never reaches callers."""

    def __init__(
        self,
        reason: str = "retry requested",
        *,
        response: HttpResponse | None = None,
        error: BaseException | None = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.response = response
        self.error = error


class Interceptor:
    """Base class for request/response middleware.

    Subclasses override any of the three hooks. ``on_error`` either re-raises
    (the default), raises a different error, or returns a response to recover.

    ``replay_on_retry`` marks interceptors whose ``on_request`` is safe to run
    again when the chain re-issues a call.
    """

    replay_on_retry: bool = False

    async def on_request(self, request: HttpRequest) -> HttpRequest:
        return request

    async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
        return response

    async def on_error(self, error: Exception, request: HttpRequest) -> HttpResponse:
        raise error


class InterceptorChain:
    def __init__(
        self,
        adapter: TransportAdapter,
        interceptors: Sequence[Interceptor] = (),
        *,
        max_replays: int = DEFAULT_MAX_REPLAYS,
    ) -> None:
        self._adapter = adapter
        self._interceptors = tuple(interceptors)
        self._max_replays = max_replays

    @property
    def adapter(self) -> TransportAdapter:
        return self._adapter

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._interceptors

    async def send(self, request: HttpRequest) -> HttpResponse:
        prepared = request
        replays = 0
        while True:
            try:
                prepared = await self._prepare(prepared, replay=replays > 0)
                return await self._dispatch(prepared)
            except RetrySignal as signal:
                if replays >= self._max_replays:
                    logger.warning(
                        "Giving up on %s %s after %d replays: %s",
                        prepared.method,
                        prepared.url,
                        replays,
                        signal.reason,
                    )
                    if signal.error is not None:
                        raise signal.error
                    if signal.response is not None:
                        return signal.response
                    raise TransportError(
                        f"Retry budget exhausted: {signal.reason}",
                        context={"method": prepared.method, "url": prepared.url},
                    ) from None
                replays += 1
                logger.debug("Replaying %s %s (%s)", prepared.method, prepared.url, signal.reason)
                prepared = prepared.replace(attempt=prepared.attempt + 1)

    async def _prepare(self, request: HttpRequest, *, replay: bool) -> HttpRequest:
        for interceptor in self._interceptors:
            if replay and not interceptor.replay_on_retry:
                continue
            request = await interceptor.on_request(request)
        return request

    async def _dispatch(self, request: HttpRequest) -> HttpResponse:
        try:
            with anyio.fail_after(request.timeout):
                response = await self._adapter.send(request)
        except TimeoutError as exc:
            error = RequestTimeoutError(
                f"Request timed out after {request.timeout}s",
                context={"method": request.method, "url": request.url},
            )
            error.__cause__ = exc
            return await self._unwind(request, error=error)
        except RetrySignal:
            raise
        except Exception as exc:
            return await self._unwind(request, error=exc)
        return await self._unwind(request, response=response)

    async def _unwind(
        self,
        request: HttpRequest,
        *,
        response: HttpResponse | None = None,
        error: Exception | None = None,
    ) -> HttpResponse:
        for interceptor in reversed(self._interceptors):
            try:
                if error is not None:
                    response = await interceptor.on_error(error, request)
                    error = None
                else:
                    assert response is not None
                    response = await interceptor.on_response(response, request)
            except RetrySignal:
                raise
            except Exception as exc:
                error = exc
                response = None
        if error is not None:
            raise error
        assert response is not None
        return response
