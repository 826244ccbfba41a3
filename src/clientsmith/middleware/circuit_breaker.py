from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..errors import CircuitOpenError
from ..runtime.chain import Interceptor
from ..runtime.transport import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitSnapshot:
    state: CircuitState
    failure_count: int
    last_transition: float


def _server_failure(response: HttpResponse) -> bool:
    return response.status_code >= 500


class CircuitBreakerInterceptor(Interceptor):
    """Fails fast once consecutive failures reach ``failure_threshold``.

    State is shared by every call going through this instance. All reads and
    transitions happen under a lock that is never held across an await.

    After ``reset_timeout`` seconds in ``open``, one probe call is let through
    (``half_open``). Replays of the probe call, such as retries issued by an
    inner interceptor, pass through as part of the same probe. A probe whose
    outcome is never recorded, e.g. because a later interceptor rejected it,
    is given up after another ``reset_timeout``.
    """

    replay_on_retry = True

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 30.0,
        *,
        is_failure: Callable[[HttpResponse], bool] = _server_failure,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if reset_timeout < 0:
            raise ValueError("reset_timeout must not be negative")
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._is_failure = is_failure
        self._clock = clock
        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_transition = clock()
        self._probe_started: float | None = None
        self._probe_token: object | None = None
        self._probe_key = f"clientsmith.circuit_probe.{id(self)}"

    @property
    def state(self) -> CircuitState:
        return self.snapshot().state

    @property
    def failure_count(self) -> int:
        return self.snapshot().failure_count

    def snapshot(self) -> CircuitSnapshot:
        with self._lock:
            return CircuitSnapshot(self._state, self._failure_count, self._last_transition)

    def reset(self) -> None:
        with self._lock:
            self._transition(CircuitState.CLOSED)
            self._failure_count = 0

    async def on_request(self, request: HttpRequest) -> HttpRequest:
        with self._lock:
            now = self._clock()
            if self._state is CircuitState.OPEN and now - self._last_transition >= self.reset_timeout:
                self._transition(CircuitState.HALF_OPEN)
            if self._state is CircuitState.OPEN:
                rejection = "circuit is open"
            elif self._state is CircuitState.HALF_OPEN and self._holds_probe(request):
                return request
            elif self._state is CircuitState.HALF_OPEN and self._probe_in_flight(now):
                rejection = "circuit is half-open and a probe is in flight"
            elif self._state is CircuitState.HALF_OPEN:
                self._probe_started = now
                self._probe_token = object()
                return request.replace(extensions={**request.extensions, self._probe_key: self._probe_token})
            else:
                return request
        raise CircuitOpenError(rejection, context={"method": request.method, "url": request.url})

    async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
        self._record(failed=self._is_failure(response))
        return response

    async def on_error(self, error: Exception, request: HttpRequest) -> HttpResponse:
        if not isinstance(error, CircuitOpenError):
            self._record(failed=True)
        raise error

    def _holds_probe(self, request: HttpRequest) -> bool:
        return self._probe_token is not None and request.extensions.get(self._probe_key) is self._probe_token

    def _probe_in_flight(self, now: float) -> bool:
        return self._probe_started is not None and now - self._probe_started < self.reset_timeout

    def _record(self, *, failed: bool) -> None:
        with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                if failed:
                    self._failure_count += 1
                    self._transition(CircuitState.OPEN)
                else:
                    self._failure_count = 0
                    self._transition(CircuitState.CLOSED)
            elif self._state is CircuitState.CLOSED:
                if not failed:
                    self._failure_count = 0
                    return
                self._failure_count += 1
                if self._failure_count >= self.failure_threshold:
                    self._transition(CircuitState.OPEN)
            elif failed:
                # a call admitted before the circuit opened
                self._failure_count += 1

    def _transition(self, state: CircuitState) -> None:
        previous = self._state
        self._state = state
        self._last_transition = self._clock()
        self._probe_started = None
        self._probe_token = None
        if state is CircuitState.OPEN:
            logger.warning("Circuit breaker %s -> open after %d failures", previous.value, self._failure_count)
        elif previous is not state:
            logger.info("Circuit breaker %s -> %s", previous.value, state.value)
