from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Awaitable, Callable, Literal

import anyio

from ..errors import RateLimitError
from ..runtime.chain import Interceptor
from ..runtime.transport import HttpRequest

logger = logging.getLogger(__name__)

RateLimitPolicy = Literal["delay", "reject"]


class RateLimitInterceptor(Interceptor):
    """Allows at most ``max_requests`` sends per sliding ``window`` of seconds.

    With the "delay" policy a call over the budget waits for the oldest slot
    to expire; with "reject" it fails with ``RateLimitError``. Retried sends
    count against the budget too.
    """

    replay_on_retry = True

    def __init__(
        self,
        max_requests: int,
        window: float,
        *,
        policy: RateLimitPolicy = "delay",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] | None = None,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        if policy not in ("delay", "reject"):
            raise ValueError(f"unknown rate limit policy: {policy!r}")
        self.max_requests = max_requests
        self.window = window
        self.policy = policy
        self._clock = clock
        self._sleep = sleep or anyio.sleep
        self._lock = threading.Lock()
        self._sent: deque[float] = deque()

    @property
    def remaining(self) -> int:
        with self._lock:
            self._expire(self._clock())
            return self.max_requests - len(self._sent)

    async def on_request(self, request: HttpRequest) -> HttpRequest:
        while True:
            wait = self._reserve()
            if wait <= 0:
                return request
            if self.policy == "reject":
                raise RateLimitError(
                    f"Rate limit of {self.max_requests} requests per {self.window}s exceeded",
                    context={"method": request.method, "url": request.url, "retry_after": wait},
                )
            logger.debug("Rate limit reached, delaying %s %s by %.3fs", request.method, request.url, wait)
            await self._sleep(wait)

    def _reserve(self) -> float:
        """Take a slot and return 0, or return how long until one frees up."""
        with self._lock:
            now = self._clock()
            self._expire(now)
            if len(self._sent) < self.max_requests:
                self._sent.append(now)
                return 0.0
            return self._sent[0] + self.window - now

    def _expire(self, now: float) -> None:
        cutoff = now - self.window
        while self._sent and self._sent[0] <= cutoff:
            self._sent.popleft()
