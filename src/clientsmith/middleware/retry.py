from __future__ import annotations

import logging
import random
from typing import Awaitable, Callable, Collection

import anyio

from ..errors import RequestTimeoutError
from ..runtime.chain import Interceptor, RetrySignal
from ..runtime.transport import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({500, 502, 503, 504})
DEFAULT_RETRYABLE_ERRORS: tuple[type[Exception], ...] = (RequestTimeoutError,)


class RetryInterceptor(Interceptor):
    """Re-issues calls that end in a retryable status or error.

    The attempt number comes from the request, so every logical call starts
    from zero. Backoff doubles from ``base_delay_ms`` up to ``max_delay_ms``,
    plus up to ``jitter_ms`` of random jitter. Once ``max_retries`` is used up
    the last response or error is passed on unchanged.
    """

    def __init__(
        self,
        max_retries: int = 3,
        *,
        retryable_status_codes: Collection[int] = DEFAULT_RETRYABLE_STATUS_CODES,
        retryable_errors: tuple[type[Exception], ...] = DEFAULT_RETRYABLE_ERRORS,
        base_delay_ms: float = 1000,
        max_delay_ms: float = 10000,
        jitter_ms: float = 200,
        sleep: Callable[[float], Awaitable[object]] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must not be negative")
        self.max_retries = max_retries
        self.retryable_status_codes = frozenset(retryable_status_codes)
        self.retryable_errors = retryable_errors
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.jitter_ms = jitter_ms
        self._sleep = sleep or anyio.sleep
        self._rng = rng or random.Random()

    def delay_for(self, attempt: int) -> float:
        """Return the backoff before ``attempt`` (1-based), in seconds."""
        backoff = min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)
        jitter = self._rng.uniform(0, self.jitter_ms) if self.jitter_ms > 0 else 0.0
        return (backoff + jitter) / 1000

    async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
        if response.status_code in self.retryable_status_codes:
            await self._retry(request, f"status {response.status_code}", response=response)
        return response

    async def on_error(self, error: Exception, request: HttpRequest) -> HttpResponse:
        if isinstance(error, self.retryable_errors):
            await self._retry(request, type(error).__name__, error=error)
        raise error

    async def _retry(
        self,
        request: HttpRequest,
        reason: str,
        *,
        response: HttpResponse | None = None,
        error: Exception | None = None,
    ) -> None:
        attempt = request.attempt + 1
        if attempt > self.max_retries:
            logger.debug("Not retrying %s %s: %d retries used", request.method, request.url, self.max_retries)
            return
        delay = self.delay_for(attempt)
        logger.info(
            "Retrying %s %s after %s (retry %d/%d in %.3fs)",
            request.method,
            request.url,
            reason,
            attempt,
            self.max_retries,
            delay,
        )
        await self._sleep(delay)
        raise RetrySignal(reason, response=response, error=error)
