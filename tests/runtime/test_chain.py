from __future__ import annotations

import anyio
import pytest

from clientsmith.errors import RequestTimeoutError, ServerError, TransportError
from clientsmith.runtime.chain import Interceptor, InterceptorChain, RetrySignal
from clientsmith.runtime.transport import HttpRequest, HttpResponse


class ScriptedTransport:
    """Returns (or raises) the scripted outcomes in order."""

    def __init__(self, *outcomes: HttpResponse | Exception) -> None:
        self.outcomes = list(outcomes)
        self.requests: list[HttpRequest] = []
        self.closed = False

    async def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


class SlowTransport:
    async def send(self, request: HttpRequest) -> HttpResponse:
        await anyio.sleep(5)
        return HttpResponse(200)

    async def close(self) -> None:
        pass


class Recorder(Interceptor):
    def __init__(self, name: str, events: list[str], *, replay_on_retry: bool = False) -> None:
        self.name = name
        self.events = events
        self.replay_on_retry = replay_on_retry

    async def on_request(self, request: HttpRequest) -> HttpRequest:
        self.events.append(f"{self.name}:request")
        return request.with_headers({f"X-{self.name}": "1"})

    async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
        self.events.append(f"{self.name}:response")
        return response

    async def on_error(self, error: Exception, request: HttpRequest) -> HttpResponse:
        self.events.append(f"{self.name}:error:{type(error).__name__}")
        raise error


class Recover(Interceptor):
    async def on_error(self, error: Exception, request: HttpRequest) -> HttpResponse:
        return HttpResponse(200, body=b"recovered")


class RetryOnce(Interceptor):
    def __init__(self) -> None:
        self.signals = 0

    async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
        if response.status_code >= 500 and request.attempt == 0:
            self.signals += 1
            raise RetrySignal("server error", response=response)
        return response


class AlwaysRetry(Interceptor):
    async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
        raise RetrySignal("again", response=response)

    async def on_error(self, error: Exception, request: HttpRequest) -> HttpResponse:
        raise RetrySignal("again", error=error)


def _request(timeout: float | None = None) -> HttpRequest:
    return HttpRequest(method="GET", url="https://api.example.com/items", timeout=timeout)


@pytest.mark.anyio
class TestInterceptorChain:
    async def test_without_interceptors(self) -> None:
        transport = ScriptedTransport(HttpResponse(200, body=b"ok"))
        response = await InterceptorChain(transport).send(_request())
        assert response.body == b"ok"
        assert len(transport.requests) == 1

    async def test_request_in_order_response_in_reverse(self) -> None:
        events: list[str] = []
        transport = ScriptedTransport(HttpResponse(200))
        chain = InterceptorChain(transport, [Recorder("a", events), Recorder("b", events)])
        await chain.send(_request())
        assert events == ["a:request", "b:request", "b:response", "a:response"]
        assert transport.requests[0].headers == {"X-a": "1", "X-b": "1"}

    async def test_errors_unwind_in_reverse(self) -> None:
        events: list[str] = []
        transport = ScriptedTransport(ConnectionError("refused"))
        chain = InterceptorChain(transport, [Recorder("a", events), Recorder("b", events)])
        with pytest.raises(ConnectionError):
            await chain.send(_request())
        assert events[2:] == ["b:error:ConnectionError", "a:error:ConnectionError"]

    async def test_on_error_can_recover(self) -> None:
        events: list[str] = []
        transport = ScriptedTransport(ConnectionError("refused"))
        chain = InterceptorChain(transport, [Recorder("outer", events), Recover()])
        response = await chain.send(_request())
        assert response.body == b"recovered"
        assert events[-1] == "outer:response"

    async def test_hook_error_becomes_the_error(self) -> None:
        class Explode(Interceptor):
            async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
                raise ServerError("bad payload", status_code=response.status_code)

        events: list[str] = []
        chain = InterceptorChain(ScriptedTransport(HttpResponse(200)), [Recorder("a", events), Explode()])
        with pytest.raises(ServerError):
            await chain.send(_request())
        assert events[-1] == "a:error:ServerError"

    async def test_retry_signal_reissues_call(self) -> None:
        events: list[str] = []
        retry = RetryOnce()
        transport = ScriptedTransport(HttpResponse(503), HttpResponse(200, body=b"ok"))
        chain = InterceptorChain(
            transport,
            [Recorder("once", events), Recorder("replayed", events, replay_on_retry=True), retry],
        )
        response = await chain.send(_request())
        assert response.body == b"ok"
        assert retry.signals == 1
        assert [r.attempt for r in transport.requests] == [0, 1]
        assert events.count("once:request") == 1
        assert events.count("replayed:request") == 2

    async def test_retry_signal_never_escapes(self) -> None:
        transport = ScriptedTransport(HttpResponse(500))
        chain = InterceptorChain(transport, [AlwaysRetry()], max_replays=3)
        response = await chain.send(_request())
        assert response.status_code == 500
        assert len(transport.requests) == 4

    async def test_exhausted_retry_raises_last_error(self) -> None:
        transport = ScriptedTransport(ConnectionError("refused"))
        chain = InterceptorChain(transport, [AlwaysRetry()], max_replays=2)
        with pytest.raises(ConnectionError):
            await chain.send(_request())
        assert len(transport.requests) == 3

    async def test_exhausted_retry_without_outcome(self) -> None:
        class Bare(Interceptor):
            async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
                raise RetrySignal("no outcome")

        chain = InterceptorChain(ScriptedTransport(HttpResponse(200)), [Bare()], max_replays=0)
        with pytest.raises(TransportError, match="Retry budget exhausted"):
            await chain.send(_request())

    async def test_timeout_unwinds_through_on_error(self) -> None:
        events: list[str] = []
        chain = InterceptorChain(SlowTransport(), [Recorder("a", events)])
        with pytest.raises(RequestTimeoutError) as exc_info:
            await chain.send(_request(timeout=0.05))
        assert events == ["a:request", "a:error:RequestTimeoutError"]
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    async def test_exposes_adapter_and_interceptors(self) -> None:
        transport = ScriptedTransport(HttpResponse(200))
        recover = Recover()
        chain = InterceptorChain(transport, [recover])
        assert chain.adapter is transport
        assert chain.interceptors == (recover,)
